"""DEPTH16 sample decoding: confidence filter and range normalization."""
from __future__ import annotations

import math

import numpy as np

from .constants import (
    CONFIDENCE_LEVELS,
    CONFIDENCE_MASK,
    CONFIDENCE_SHIFT,
    DEFAULT_CONFIDENCE_THRESHOLD,
    DEFAULT_RANGE_MAX,
    DEFAULT_RANGE_MIN,
    INTENSITY_MAX,
    RANGE_MASK,
    STATUS_ABOVE_MAX,
    STATUS_BELOW_MIN,
    STATUS_IN_RANGE,
    STATUS_LOW_CONFIDENCE,
)


def split_sample(sample: int) -> tuple[int, int]:
    """Return (range, confidence3) of one packed sample. Signed shorts are taken bit-for-bit."""
    bits = int(sample) & 0xFFFF
    return bits & RANGE_MASK, (bits >> CONFIDENCE_SHIFT) & CONFIDENCE_MASK


def confidence_fraction(sample: int) -> float:
    """
    Map the 3-bit confidence field to [0, 1].

    A zero field means the sensor did not report confidence; it is treated as fully
    confident, not as "no confidence". Other values map to (c - 1) / 7.
    """
    _, conf = split_sample(sample)
    if conf == 0:
        return 1.0
    return (conf - 1) / CONFIDENCE_LEVELS


def normalize_range(
    depth_range: float,
    range_min: float = DEFAULT_RANGE_MIN,
    range_max: float = DEFAULT_RANGE_MAX,
) -> int:
    """Clamp to [range_min, range_max] and scale linearly to 0..255, rounding half up."""
    clamped = min(max(float(depth_range), range_min), range_max)
    scaled = (clamped - range_min) / (range_max - range_min) * INTENSITY_MAX
    return int(math.floor(scaled + 0.5))


def classify_sample(
    sample: int,
    confidence_threshold: float = DEFAULT_CONFIDENCE_THRESHOLD,
    range_min: float = DEFAULT_RANGE_MIN,
    range_max: float = DEFAULT_RANGE_MAX,
) -> int:
    """Return the STATUS_* code describing how decode_sample treats `sample`."""
    if confidence_fraction(sample) <= confidence_threshold:
        return STATUS_LOW_CONFIDENCE
    depth_range, _ = split_sample(sample)
    if depth_range < range_min:
        return STATUS_BELOW_MIN
    if depth_range > range_max:
        return STATUS_ABOVE_MAX
    return STATUS_IN_RANGE


def decode_sample(
    sample: int,
    confidence_threshold: float = DEFAULT_CONFIDENCE_THRESHOLD,
    range_min: float = DEFAULT_RANGE_MIN,
    range_max: float = DEFAULT_RANGE_MAX,
) -> int:
    """
    Decode one packed sample into an intensity in [0, 255].

    Samples at or below the confidence threshold decode to 0, which is the same value a
    valid reading at or below range_min produces. Use classify_sample to tell them apart.
    """
    if confidence_fraction(sample) <= confidence_threshold:
        return 0
    depth_range, _ = split_sample(sample)
    return normalize_range(depth_range, range_min, range_max)


def _as_bits(samples: np.ndarray) -> np.ndarray:
    arr = np.asarray(samples)
    if arr.dtype.kind not in "iu":
        raise ValueError(f"samples must be an integer array, got dtype {arr.dtype}")
    # int16 buffers (Java/Android shorts) reinterpret to the same 16 bits
    return arr.astype(np.uint16, copy=False)


def confidence_fractions(samples: np.ndarray) -> np.ndarray:
    bits = _as_bits(samples)
    conf = (bits >> CONFIDENCE_SHIFT) & CONFIDENCE_MASK
    return np.where(conf == 0, 1.0, (conf.astype(np.float64) - 1.0) / CONFIDENCE_LEVELS)


def decode_frame(
    samples: np.ndarray,
    confidence_threshold: float = DEFAULT_CONFIDENCE_THRESHOLD,
    range_min: float = DEFAULT_RANGE_MIN,
    range_max: float = DEFAULT_RANGE_MAX,
) -> np.ndarray:
    """Vectorized decode_sample over a whole buffer; output keeps the input shape, uint8."""
    bits = _as_bits(samples)
    depth_range = (bits & RANGE_MASK).astype(np.float64)
    clamped = np.clip(depth_range, range_min, range_max)
    scaled = (clamped - range_min) / (range_max - range_min) * INTENSITY_MAX
    intensity = np.floor(scaled + 0.5).astype(np.uint8)
    accepted = confidence_fractions(bits) > confidence_threshold
    return np.where(accepted, intensity, np.uint8(0)).astype(np.uint8, copy=False)


def classify_frame(
    samples: np.ndarray,
    confidence_threshold: float = DEFAULT_CONFIDENCE_THRESHOLD,
    range_min: float = DEFAULT_RANGE_MIN,
    range_max: float = DEFAULT_RANGE_MAX,
) -> np.ndarray:
    """Vectorized classify_sample; returns a uint8 array of STATUS_* codes."""
    bits = _as_bits(samples)
    depth_range = bits & RANGE_MASK
    status = np.full(bits.shape, STATUS_IN_RANGE, dtype=np.uint8)
    status[depth_range < range_min] = STATUS_BELOW_MIN
    status[depth_range > range_max] = STATUS_ABOVE_MAX
    status[confidence_fractions(bits) <= confidence_threshold] = STATUS_LOW_CONFIDENCE
    return status
