"""Separable box blur and the three-pass box approximation of a Gaussian blur."""
from __future__ import annotations

import math

import numpy as np

from .constants import DEFAULT_GAUSS_PASSES


def boxes_for_gauss(sigma: float, n: int = DEFAULT_GAUSS_PASSES) -> list[int]:
    """
    Widths of `n` box filters whose composition approximates a Gaussian of std `sigma`.

    The ideal common width is sqrt(12 sigma^2 / n + 1). Widths must be odd, so the first
    m boxes use the odd width wl just below it and the remaining boxes use wl + 2, with m
    chosen so that the summed variance matches sigma^2 as closely as possible.
    """
    if n < 1:
        raise ValueError("n must be >= 1")
    if sigma < 0:
        raise ValueError("sigma must be non-negative")
    s2 = float(sigma) * float(sigma)
    w_ideal = math.sqrt(12.0 * s2 / n + 1.0)
    wl = int(math.floor(w_ideal))
    if wl % 2 == 0:
        wl -= 1
    wu = wl + 2
    m_ideal = (12.0 * s2 - n * wl * wl - 4 * n * wl - 3 * n) / (-4 * wl - 4)
    m = int(math.floor(m_ideal + 0.5))
    return [wl if i < m else wu for i in range(n)]


def _divide_round(sums: np.ndarray, count: int) -> np.ndarray:
    """sums / count rounded half away from zero."""
    if sums.dtype.kind in "iu":
        mag = (2 * np.abs(sums) + count) // (2 * count)
        return np.where(sums < 0, -mag, mag)
    return np.sign(sums) * np.floor(np.abs(sums) / count + 0.5)


def _box_blur_axis(grid: np.ndarray, radius: int, axis: int) -> np.ndarray:
    arr = np.asarray(grid)
    if arr.ndim != 2:
        raise ValueError(f"grid must be 2-D (height, width), got shape {arr.shape}")
    if radius < 0:
        raise ValueError("radius must be non-negative")
    if radius == 0 or arr.size == 0:
        return arr.copy()

    is_int = arr.dtype.kind in "iub"
    src = arr.astype(np.int64 if is_int else np.float64)
    pad = [(0, 0), (0, 0)]
    pad[axis] = (radius, radius)
    # edge replication: the window sees `radius` copies of the first/last pixel
    padded = np.pad(src, pad, mode="edge")

    window = 2 * radius + 1
    csum = np.cumsum(padded, axis=axis)
    zero_shape = list(csum.shape)
    zero_shape[axis] = 1
    csum = np.concatenate([np.zeros(zero_shape, dtype=csum.dtype), csum], axis=axis)
    n = csum.shape[axis]
    hi = np.take(csum, np.arange(window, n), axis=axis)
    lo = np.take(csum, np.arange(0, n - window), axis=axis)

    out = _divide_round(hi - lo, window)
    if is_int:
        return out.astype(arr.dtype)
    return out


def box_blur_horizontal(grid: np.ndarray, radius: int) -> np.ndarray:
    """Box blur each row with a running window sum; O(width) per row for any radius."""
    return _box_blur_axis(grid, radius, axis=1)


def box_blur_vertical(grid: np.ndarray, radius: int) -> np.ndarray:
    """Box blur each column; see box_blur_horizontal."""
    return _box_blur_axis(grid, radius, axis=0)


def box_blur(grid: np.ndarray, radius: int) -> np.ndarray:
    """Single separable box blur pass: horizontal, then vertical. Input is left untouched."""
    return box_blur_vertical(box_blur_horizontal(grid, radius), radius)


def gaussian_approx(grid: np.ndarray, sigma: float, passes: int = DEFAULT_GAUSS_PASSES) -> np.ndarray:
    """
    Approximate a Gaussian blur of std `sigma` with `passes` chained box blurs.

    Every pass is a weighted average with non-negative weights, so the output never
    leaves the [min, max] interval of the input.
    """
    out = np.asarray(grid)
    for width in boxes_for_gauss(sigma, passes):
        out = box_blur(out, (width - 1) // 2)
    return out
