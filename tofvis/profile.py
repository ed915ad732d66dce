from __future__ import annotations

import argparse
import json
import sys
import time
import tracemalloc
from pathlib import Path
from typing import Optional

import numpy as np
import psutil

from .config import PipelineConfig
from .constants import CONFIDENCE_SHIFT, DEFAULT_HEIGHT, DEFAULT_WIDTH
from .pipeline import FramePipeline
from .version import get_build_meta


def current_rss_mb() -> float:
    return psutil.Process().memory_info().rss / (1024 * 1024)


def synthetic_depth16(width: int, height: int, num_frames: int, seed: int = 0) -> np.ndarray:
    """
    (T, H, W) uint16 frames: a tilted plane of ranges 0..2000 plus noise, with random
    confidence bits so every decode path is exercised.
    """
    rng = np.random.default_rng(seed)
    ramp = np.linspace(0.0, 2000.0, width)[None, :] + np.linspace(0.0, 400.0, height)[:, None]
    noise = rng.normal(0.0, 25.0, size=(num_frames, height, width))
    ranges = np.clip(ramp[None] + noise, 0, 0x1FFF).astype(np.uint16)
    conf = rng.integers(0, 8, size=(num_frames, height, width), dtype=np.uint16)
    return ranges | (conf << CONFIDENCE_SHIFT)


def run_profile(config: PipelineConfig, num_frames: int, out_dir: Optional[Path] = None) -> dict:
    frames = synthetic_depth16(config.width, config.height, num_frames)
    pipeline = FramePipeline(config)

    tracemalloc.start()
    rss_start = current_rss_mb()
    t0 = time.perf_counter()
    for frame in frames:
        pipeline.process_frame(frame)
    elapsed = time.perf_counter() - t0
    rss_end = current_rss_mb()
    _, peak_size = tracemalloc.get_traced_memory()
    tracemalloc.stop()

    result = {
        "config": config.to_dict(),
        "frames": num_frames,
        "total_time_sec": elapsed,
        "frames_per_sec": num_frames / elapsed if elapsed > 0 else 0.0,
        "ms_per_frame": 1000.0 * elapsed / num_frames if num_frames else 0.0,
        "rss_start_mb": rss_start,
        "rss_end_mb": rss_end,
        "tracemalloc_peak_bytes": peak_size,
    }
    result["env"] = {
        "python": sys.version,
        "platform": sys.platform,
        "numpy": np.__version__,
        "git": get_build_meta()["git_hash"],
    }

    if out_dir is not None:
        out_dir.mkdir(parents=True, exist_ok=True)
        with open(out_dir / "profile.json", "w", encoding="utf-8") as f:
            json.dump(result, f, indent=2)
    return result


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Profile tofvis frame processing")
    parser.add_argument("--width", type=int, default=DEFAULT_WIDTH)
    parser.add_argument("--height", type=int, default=DEFAULT_HEIGHT)
    parser.add_argument("--frames", type=int, default=200, help="Number of synthetic frames")
    parser.add_argument("--out", type=Path, default=None, help="Output directory for profile.json")
    args = parser.parse_args(argv)

    res = run_profile(PipelineConfig(width=args.width, height=args.height), args.frames, args.out)
    print(json.dumps(res, indent=2))


if __name__ == "__main__":
    main()
