"""Pipeline configuration."""
from __future__ import annotations

import math
import numbers
from dataclasses import asdict, dataclass, replace
from typing import Any, Dict

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


@dataclass(frozen=True)
class PipelineConfig:
    """Constructor-time settings of a FramePipeline. Validated on creation."""

    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    confidence_threshold: float = DEFAULT_CONFIDENCE_THRESHOLD
    range_min: float = DEFAULT_RANGE_MIN
    range_max: float = DEFAULT_RANGE_MAX
    noise_reduce_radius: int = DEFAULT_NOISE_REDUCE_RADIUS
    average_blur_radius: int = DEFAULT_AVERAGE_BLUR_RADIUS

    def __post_init__(self) -> None:
        for name in ("width", "height", "noise_reduce_radius", "average_blur_radius"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, numbers.Integral):
                raise ConfigurationError(f"{name} must be an integer, got {value!r}")
            if value <= 0:
                raise ConfigurationError(f"{name} must be positive, got {value}")
        for name in ("confidence_threshold", "range_min", "range_max"):
            value = getattr(self, name)
            if not math.isfinite(value):
                raise ConfigurationError(f"{name} must be finite, got {value!r}")
        if self.range_max <= self.range_min:
            raise ConfigurationError(
                f"range_max ({self.range_max}) must be greater than range_min ({self.range_min})"
            )

    @property
    def size(self) -> int:
        return self.width * self.height

    @property
    def shape(self) -> tuple[int, int]:
        return (self.height, self.width)

    def replace(self, **changes: Any) -> "PipelineConfig":
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
