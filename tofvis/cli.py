"""Command-line entrypoints for tofvis."""
from __future__ import annotations

import argparse

from .config import PipelineConfig
from .constants import (
    DEFAULT_AVERAGE_BLUR_RADIUS,
    DEFAULT_CONFIDENCE_THRESHOLD,
    DEFAULT_HEIGHT,
    DEFAULT_NOISE_REDUCE_RADIUS,
    DEFAULT_RANGE_MAX,
    DEFAULT_RANGE_MIN,
    DEFAULT_WIDTH,
)
from .errors import ConfigurationError
from .io import count_depth16_frames
from .stream import process_depth16_file
from .version import get_version_string


def _add_process_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("input", help="Raw DEPTH16 dump (headerless, little-endian, frames concatenated)")
    parser.add_argument("output", help="Output directory")
    parser.add_argument("--width", type=int, default=DEFAULT_WIDTH, help="Frame width in pixels")
    parser.add_argument("--height", type=int, default=DEFAULT_HEIGHT, help="Frame height in pixels")
    parser.add_argument(
        "--confidence-threshold",
        type=float,
        default=DEFAULT_CONFIDENCE_THRESHOLD,
        help="Samples with confidence at or below this fraction decode to 0",
    )
    parser.add_argument("--range-min", type=float, default=DEFAULT_RANGE_MIN, help="Range mapped to intensity 0")
    parser.add_argument("--range-max", type=float, default=DEFAULT_RANGE_MAX, help="Range mapped to intensity 255")
    parser.add_argument("--noise-reduce-radius", type=int, default=DEFAULT_NOISE_REDUCE_RADIUS)
    parser.add_argument("--average-blur-radius", type=int, default=DEFAULT_AVERAGE_BLUR_RADIUS)
    parser.add_argument("--max-frames", type=int, default=None, help="Limit number of frames processed")
    parser.add_argument("--format", dest="output_format", default="png", choices=["png", "mp4"])
    parser.add_argument("--fps", type=int, default=30, help="Frames per second for mp4 output")


def _run_process(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    try:
        config = PipelineConfig(
            width=args.width,
            height=args.height,
            confidence_threshold=args.confidence_threshold,
            range_min=args.range_min,
            range_max=args.range_max,
            noise_reduce_radius=args.noise_reduce_radius,
            average_blur_radius=args.average_blur_radius,
        )
    except ConfigurationError as exc:
        parser.error(str(exc))
    available = count_depth16_frames(args.input, config.width, config.height)
    stats = process_depth16_file(
        args.input,
        args.output,
        config=config,
        output_format=args.output_format,
        fps=args.fps,
        max_frames=args.max_frames,
    )
    print(
        f"Processed {args.input} -> {args.output}. Frames={stats.processed}/{available}, "
        f"Dropped={stats.dropped}, Size={config.width}x{config.height}, Format={args.output_format}"
    )


def process_main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Render DEPTH16 dumps to raw/denoised/averaged visualizations")
    _add_process_args(parser)
    args = parser.parse_args(argv)
    _run_process(parser, args)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog="tofvis", description="Time-of-flight depth frame visualizer")
    parser.add_argument("--version", action="version", version=get_version_string())
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_proc = sub.add_parser("process", help="Process a DEPTH16 dump")
    _add_process_args(p_proc)

    args = parser.parse_args(argv)

    if args.cmd == "process":
        _run_process(p_proc, args)
    else:
        parser.error("Unknown command")


if __name__ == "__main__":
    main()
