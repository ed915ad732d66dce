"""Reading headerless DEPTH16 dumps (little-endian 16-bit samples, row-major)."""
from __future__ import annotations

import warnings
from pathlib import Path
from typing import Iterator

import numpy as np

from .errors import PreconditionError

SAMPLE_DTYPE = np.dtype("<u2")


def read_depth16_frame(path: str | Path, width: int, height: int) -> np.ndarray:
    """
    Load exactly one frame from `path` as a (height, width) uint16 array.
    """
    data = np.fromfile(str(path), dtype=SAMPLE_DTYPE)
    if data.size != width * height:
        raise PreconditionError(
            f"{path}: expected {width * height} samples for {width}x{height}, got {data.size}"
        )
    return data.reshape(height, width).astype(np.uint16)


def count_depth16_frames(path: str | Path, width: int, height: int) -> int:
    frame_bytes = width * height * SAMPLE_DTYPE.itemsize
    return Path(path).stat().st_size // frame_bytes


def iter_depth16_frames(
    path: str | Path, width: int, height: int, max_frames: int | None = None
) -> Iterator[np.ndarray]:
    """
    Yield (height, width) uint16 frames from a file of concatenated frames.

    The file is memory-mapped so long recordings are never loaded at once. A trailing
    partial frame is skipped with a warning.
    """
    path = Path(path)
    frame_bytes = width * height * SAMPLE_DTYPE.itemsize
    total_bytes = path.stat().st_size
    num_frames, leftover = divmod(total_bytes, frame_bytes)
    if leftover:
        warnings.warn(
            f"{path}: ignoring {leftover} trailing bytes (partial {width}x{height} frame)"
        )
    if num_frames == 0:
        return
    if max_frames is not None:
        num_frames = min(num_frames, max_frames)

    mm = np.memmap(str(path), dtype=SAMPLE_DTYPE, mode="r", shape=(num_frames, height, width))
    try:
        for idx in range(num_frames):
            yield np.array(mm[idx], dtype=np.uint16)
    finally:
        del mm


def write_depth16_frames(frames: np.ndarray, path: str | Path) -> None:
    """Write (T, H, W) or (H, W) 16-bit samples as a headerless little-endian dump."""
    arr = np.asarray(frames)
    if arr.dtype.kind not in "iu":
        raise ValueError(f"frames must be integer samples, got dtype {arr.dtype}")
    arr.astype(np.uint16).astype(SAMPLE_DTYPE).tofile(str(path))
