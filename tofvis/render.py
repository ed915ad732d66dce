"""Single-channel visualization and image/video writing helpers."""
from __future__ import annotations

from pathlib import Path

import imageio.v2 as imageio
import numpy as np


def mask_to_rgb(mask: np.ndarray) -> np.ndarray:
    """
    Map an intensity grid (H, W) to an opaque uint8 RGB image with the intensity in the
    green channel and red/blue at zero.
    """
    arr = np.asarray(mask)
    if arr.ndim != 2:
        raise ValueError(f"mask must have shape (H, W), got {arr.shape}")
    rgb = np.zeros(arr.shape + (3,), dtype=np.uint8)
    rgb[..., 1] = np.clip(arr, 0, 255).astype(np.uint8)
    return rgb


def save_frame_png(mask: np.ndarray, path: str | Path) -> None:
    imageio.imwrite(str(path), mask_to_rgb(mask))

