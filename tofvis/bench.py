from __future__ import annotations

import argparse
import json
import sys
import time
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Callable, List, Optional

import matplotlib.pyplot as plt
import numpy as np

from .blur import box_blur, gaussian_approx
from .config import PipelineConfig
from .decoder import decode_frame
from .pipeline import FramePipeline
from .profile import synthetic_depth16
from .version import get_version_string


@dataclass
class BenchResult:
    stage: str
    width: int
    height: int
    frames: int
    total_time: float
    ms_per_frame: float
    fps: float


def parse_resolution(text: str) -> tuple[int, int]:
    w, _, h = text.lower().partition("x")
    if not w or not h:
        raise ValueError(f"Resolution must look like 240x180, got {text!r}")
    return int(w), int(h)


def time_stage(name: str, fn: Callable[[np.ndarray], object], frames: np.ndarray) -> BenchResult:
    t, h, w = frames.shape
    start = time.perf_counter()
    for frame in frames:
        fn(frame)
    elapsed = time.perf_counter() - start
    return BenchResult(
        stage=name,
        width=w,
        height=h,
        frames=t,
        total_time=elapsed,
        ms_per_frame=1000.0 * elapsed / t if t else 0.0,
        fps=t / elapsed if elapsed > 0 else 0.0,
    )


def bench_resolution(width: int, height: int, num_frames: int, sigma: float) -> list[BenchResult]:
    frames = synthetic_depth16(width, height, num_frames)
    decoded = np.stack([decode_frame(f) for f in frames])
    pipeline = FramePipeline(PipelineConfig(width=width, height=height))
    return [
        time_stage("decode", decode_frame, frames),
        time_stage("box_blur_r1", lambda g: box_blur(g, 1), decoded),
        time_stage(f"gaussian_s{sigma:g}", lambda g: gaussian_approx(g, sigma), decoded),
        time_stage("process_frame", pipeline.process_frame, frames),
    ]


def write_results(out_dir: Path, results: List[BenchResult], env: dict) -> None:
    out_dir.mkdir(parents=True, exist_ok=True)
    with open(out_dir / "results.json", "w", encoding="utf-8") as f:
        json.dump({"env": env, "results": [asdict(r) for r in results]}, f, indent=2)

    lines = []
    lines.append("# tofvis Benchmark Report\n")
    lines.append(f"Env: {env}\n")
    lines.append("| stage | size | frames | total (s) | ms/frame | fps |")
    lines.append("|---|---|---|---|---|---|")
    for r in results:
        lines.append(
            f"| {r.stage} | {r.width}x{r.height} | {r.frames} | {r.total_time:.3f} | "
            f"{r.ms_per_frame:.2f} | {r.fps:.1f} |"
        )
    (out_dir / "report.md").write_text("\n".join(lines), encoding="utf-8")

    (out_dir / "plots").mkdir(parents=True, exist_ok=True)
    if not results:
        return
    stages = list(dict.fromkeys(r.stage for r in results))
    sizes = list(dict.fromkeys(f"{r.width}x{r.height}" for r in results))
    x = np.arange(len(sizes))
    width = 0.8 / len(stages)
    plt.figure()
    for i, stage in enumerate(stages):
        by_size = {f"{r.width}x{r.height}": r.ms_per_frame for r in results if r.stage == stage}
        plt.bar(x + i * width, [by_size.get(s, np.nan) for s in sizes], width, label=stage)
    plt.xticks(x + width * (len(stages) - 1) / 2, sizes)
    plt.ylabel("ms / frame")
    plt.legend()
    plt.tight_layout()
    plt.savefig(out_dir / "plots" / "stage_time.png")
    plt.close()


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Benchmark tofvis pipeline stages")
    parser.add_argument("--out", type=Path, required=True, help="Output directory for results")
    parser.add_argument(
        "--resolutions", type=str, default="240x180,320x240,640x480", help="Comma separated WxH list"
    )
    parser.add_argument("--frames", type=int, default=50, help="Synthetic frames per resolution")
    parser.add_argument("--sigma", type=float, default=2.0, help="Sigma for the gaussian stage")
    args = parser.parse_args(argv)

    resolutions = [parse_resolution(r.strip()) for r in args.resolutions.split(",") if r.strip()]
    if not resolutions:
        raise SystemExit("No resolutions given")

    results: list[BenchResult] = []
    for w, h in resolutions:
        results.extend(bench_resolution(w, h, args.frames, args.sigma))

    env = {"python": sys.version, "platform": sys.platform, "tofvis": get_version_string()}
    write_results(args.out, results, env)
    print(f"Wrote results to {args.out}")


if __name__ == "__main__":
    main()
