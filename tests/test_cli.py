from __future__ import annotations

import imageio.v2 as imageio
import numpy as np
import pytest

from tofvis.cli import main, process_main
from tofvis.config import PipelineConfig
from tofvis.constants import CHANNELS
from tofvis.io import write_depth16_frames
from tofvis.profile import synthetic_depth16
from tofvis.stream import process_depth16_file

W, H = 16, 12


@pytest.fixture
def dump(tmp_path):
    path = tmp_path / "capture.raw"
    write_depth16_frames(synthetic_depth16(W, H, 3, seed=2), path)
    return path


def test_process_png(dump, tmp_path, capsys):
    out_dir = tmp_path / "out"
    main(["process", str(dump), str(out_dir), "--width", str(W), "--height", str(H)])

    for name in CHANNELS:
        files = sorted(out_dir.glob(f"{name}_*.png"))
        assert [f.name for f in files] == [f"{name}_{i:05d}.png" for i in range(3)]

    img = imageio.imread(out_dir / "raw_00000.png")
    assert img.shape == (H, W, 3)
    assert not img[..., 0].any()
    assert not img[..., 2].any()
    assert "Frames=3/3" in capsys.readouterr().out


def test_process_mp4_uses_one_writer_per_output(dump, tmp_path, monkeypatch):
    written: dict[str, list[np.ndarray]] = {}
    closed: list[str] = []

    class FakeWriter:
        def __init__(self, path):
            self.path = path
            written[path] = []

        def append_data(self, frame):
            written[self.path].append(frame.copy())

        def close(self):
            closed.append(self.path)

    writer_kwargs: list[dict] = []

    def fake_get_writer(path, **kwargs):
        writer_kwargs.append(kwargs)
        return FakeWriter(path)

    monkeypatch.setattr("tofvis.sinks.imageio.get_writer", fake_get_writer)

    out_dir = tmp_path / "video"
    process_main([str(dump), str(out_dir), "--width", str(W), "--height", str(H), "--format", "mp4", "--max-frames", "2"])

    assert sorted(written) == sorted(str(out_dir / f"{name}.mp4") for name in CHANNELS)
    assert sorted(closed) == sorted(written)
    for frames in written.values():
        assert len(frames) == 2
        assert frames[0].shape == (H, W, 3)
    assert all(kw.get("macro_block_size") == 1 for kw in writer_kwargs)


def test_dump_smaller_than_one_frame(dump, tmp_path, capsys):
    with pytest.warns(UserWarning, match="trailing bytes"):
        main(["process", str(dump), str(tmp_path / "o"), "--width", "100", "--height", "100"])
    assert "Frames=0" in capsys.readouterr().out


def test_invalid_configuration_exits(dump, tmp_path):
    with pytest.raises(SystemExit) as exc:
        main(["process", str(dump), str(tmp_path / "o"), "--range-min", "900", "--range-max", "100"])
    assert exc.value.code == 2


def test_version_flag(capsys):
    with pytest.raises(SystemExit) as exc:
        main(["--version"])
    assert exc.value.code == 0
    assert capsys.readouterr().out.startswith("tofvis ")


def test_library_entry_is_silent_and_returns_stats(dump, tmp_path, capsys):
    stats = process_depth16_file(dump, tmp_path / "o", config=PipelineConfig(width=W, height=H), max_frames=2)
    assert stats.processed == 2
    assert stats.dropped == 0
    assert capsys.readouterr().out == ""


def test_summary_reports_frames_out_of_available(dump, tmp_path, capsys):
    main(["process", str(dump), str(tmp_path / "o"), "--width", str(W), "--height", str(H), "--max-frames", "1"])
    assert "Frames=1/3" in capsys.readouterr().out
