from __future__ import annotations

import numpy as np
import pytest

from tofvis import (
    CHANNELS,
    CollectingSink,
    ConfigurationError,
    FramePipeline,
    PipelineConfig,
    PreconditionError,
    run_stream,
)
from tofvis.blur import box_blur
from tofvis.profile import synthetic_depth16

W, H = 8, 6


def small_pipeline(sink=None, **overrides) -> FramePipeline:
    # range 0..255 maps a confident sample's range straight to its intensity
    params = dict(width=W, height=H, range_min=0.0, range_max=255.0)
    params.update(overrides)
    return FramePipeline(sink=sink, **params)


def constant_frame(value: int) -> np.ndarray:
    return np.full(W * H, value, dtype=np.uint16)


@pytest.mark.parametrize(
    "overrides",
    [
        {"width": 0},
        {"height": -3},
        {"noise_reduce_radius": 0},
        {"average_blur_radius": -1},
        {"range_min": 500.0, "range_max": 500.0},
        {"range_min": 900.0, "range_max": 200.0},
        {"confidence_threshold": float("nan")},
        {"width": 2.5},
    ],
)
def test_invalid_configuration_rejected(overrides):
    with pytest.raises(ConfigurationError):
        FramePipeline(**overrides)


def test_default_configuration():
    cfg = PipelineConfig()
    assert (cfg.width, cfg.height) == (240, 180)
    assert cfg.shape == (180, 240)
    assert cfg.confidence_threshold == 0.1
    assert (cfg.range_min, cfg.range_max) == (200.0, 1600.0)
    assert cfg.noise_reduce_radius == cfg.average_blur_radius == 1
    pipeline = FramePipeline()
    assert pipeline.state.averaged_mask.shape == (180, 240)
    assert not pipeline.state.averaged_mask.any()
    assert not pipeline.state.averaged_mask_p2.any()


def test_config_override_on_existing_config():
    cfg = PipelineConfig(width=W, height=H)
    pipeline = FramePipeline(cfg, average_blur_radius=2)
    assert pipeline.config.average_blur_radius == 2
    assert pipeline.config.width == W


@pytest.mark.parametrize(
    "bad",
    [
        np.zeros(W * H - 1, dtype=np.uint16),
        np.zeros((W, H), dtype=np.uint16),
        np.zeros((H, W, 1), dtype=np.uint16),
        np.zeros(W * H, dtype=np.float32),
        np.full(W * H, 70000, dtype=np.int64),
        b"\x00" * (W * H * 2 - 2),
        # strided view with the right byte count
        memoryview(np.zeros(W * H * 2, dtype=np.uint16))[::2],
    ],
)
def test_malformed_frame_rejected_before_processing(bad):
    sink = CollectingSink()
    pipeline = small_pipeline(sink)
    pipeline.process_frame(constant_frame(90))
    avg_before = pipeline.state.averaged_mask.copy()
    p2_before = pipeline.state.averaged_mask_p2.copy()
    calls_before = list(sink.calls)

    with pytest.raises(PreconditionError):
        pipeline.process_frame(bad)

    assert sink.calls == calls_before
    assert pipeline.frame_index == 1
    assert np.array_equal(pipeline.state.averaged_mask, avg_before)
    assert np.array_equal(pipeline.state.averaged_mask_p2, p2_before)


def test_sink_receives_four_outputs_in_order():
    sink = CollectingSink()
    pipeline = small_pipeline(sink)
    pipeline.process_frame(constant_frame(90))
    pipeline.process_frame(constant_frame(120))
    assert sink.calls == list(CHANNELS) * 2
    for name in CHANNELS:
        assert len(sink.frames[name]) == 2
        assert sink.frames[name][0].shape == (H, W)
        assert sink.frames[name][0].dtype == np.uint8


def test_moving_average_warm_up_transients():
    pipeline = small_pipeline()
    f1 = pipeline.process_frame(constant_frame(90))
    assert np.all(f1.moving_average == 30)
    f2 = pipeline.process_frame(constant_frame(150))
    assert np.all(f2.moving_average == (150 + 30) // 3)
    f3 = pipeline.process_frame(constant_frame(210))
    assert np.all(f3.moving_average == (210 + 60 + 30) // 3)
    assert np.all(pipeline.state.averaged_mask_p2 == 60)


def test_moving_average_truncates():
    pipeline = small_pipeline()
    out = pipeline.process_frame(constant_frame(2))
    assert np.all(out.moving_average == 0)


def test_moving_average_settles_on_constant_input():
    pipeline = small_pipeline()
    for _ in range(40):
        out = pipeline.process_frame(constant_frame(99))
    assert np.all(out.moving_average == 97)
    # a history already at the input value is a fixed point
    pipeline.state.averaged_mask[:] = 99
    pipeline.state.averaged_mask_p2[:] = 99
    out = pipeline.process_frame(constant_frame(99))
    assert np.all(out.moving_average == 99)


def test_history_is_a_shift_register():
    frames = synthetic_depth16(W, H, 6, seed=11)
    pipeline = FramePipeline(width=W, height=H)
    previous = pipeline.state.averaged_mask.copy()
    for frame in frames:
        out = pipeline.process_frame(frame)
        assert np.array_equal(pipeline.state.averaged_mask_p2, previous)
        assert np.array_equal(pipeline.state.averaged_mask, out.moving_average)
        previous = pipeline.state.averaged_mask.copy()


def test_outputs_are_blurs_of_raw_and_average():
    frames = synthetic_depth16(W, H, 3, seed=12)
    pipeline = FramePipeline(width=W, height=H, noise_reduce_radius=1, average_blur_radius=2)
    for frame in frames:
        out = pipeline.process_frame(frame)
        assert np.array_equal(out.noise_reduced, box_blur(out.raw, 1))
        assert np.array_equal(out.blurred_average, box_blur(out.moving_average, 2))
        for grid in out:
            assert grid.dtype == np.uint8
            assert grid.shape == (H, W)


def test_sink_gets_read_only_views():
    class MutatingSink(CollectingSink):
        def on_moving_average(self, frame):
            frame[0, 0] = 255

    pipeline = small_pipeline(MutatingSink())
    with pytest.raises(ValueError):
        pipeline.process_frame(constant_frame(90))


def test_buffer_encodings_are_equivalent():
    frame = synthetic_depth16(W, H, 1, seed=13)[0]
    reference = FramePipeline(width=W, height=H).process_frame(frame)

    for variant in (frame.ravel(), frame.view(np.int16), frame.astype("<u2").tobytes(), frame.ravel().tolist()):
        out = FramePipeline(width=W, height=H).process_frame(variant)
        for got, want in zip(out, reference):
            assert np.array_equal(got, want)


def test_reset_clears_history():
    pipeline = small_pipeline()
    pipeline.process_frame(constant_frame(90))
    pipeline.reset()
    assert pipeline.frame_index == 0
    assert not pipeline.state.averaged_mask.any()
    assert not pipeline.state.averaged_mask_p2.any()


def test_run_stream_drops_bad_frames_and_keeps_going():
    sink = CollectingSink()
    pipeline = small_pipeline(sink)
    frames = [constant_frame(90), constant_frame(90)[:-1], constant_frame(150)]

    with pytest.warns(UserWarning, match="Dropping frame 1"):
        stats = run_stream(pipeline, frames)

    assert stats.processed == 2
    assert stats.dropped == 1
    assert stats.dropped_indices == [1]
    assert pipeline.frame_index == 2
    assert np.all(sink.latest("moving_average") == (150 + 30) // 3)


def test_run_stream_max_frames():
    pipeline = small_pipeline()
    stats = run_stream(pipeline, (constant_frame(v) for v in range(10)), max_frames=4)
    assert stats.processed == 4
    assert pipeline.frame_index == 4


def test_run_stream_drops_non_contiguous_buffer():
    pipeline = small_pipeline()
    strided = memoryview(constant_frame(90).repeat(2))[::2]
    with pytest.warns(UserWarning, match="C-contiguous"):
        stats = run_stream(pipeline, [strided, constant_frame(90)])
    assert stats.dropped_indices == [0]
    assert stats.processed == 1
