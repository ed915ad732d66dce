"""Time-of-flight DEPTH16 frame decoding, temporal averaging and blur visualization."""
from .constants import (
    DEFAULT_WIDTH,
    DEFAULT_HEIGHT,
    DEFAULT_CONFIDENCE_THRESHOLD,
    DEFAULT_RANGE_MIN,
    DEFAULT_RANGE_MAX,
    STATUS_IN_RANGE,
    STATUS_BELOW_MIN,
    STATUS_ABOVE_MAX,
    STATUS_LOW_CONFIDENCE,
    CHANNELS,
)
from .errors import ConfigurationError, PreconditionError
from .config import PipelineConfig
from .decoder import classify_frame, classify_sample, decode_frame, decode_sample
from .blur import box_blur, boxes_for_gauss, gaussian_approx
from .pipeline import FramePipeline, FrameSet, PipelineState
from .sinks import CollectingSink, FrameSink, ImageDirectorySink, VideoSink
from .stream import process_depth16_file, run_stream
from .version import __version__, get_version_string, get_build_meta

__all__ = [
    "DEFAULT_WIDTH",
    "DEFAULT_HEIGHT",
    "DEFAULT_CONFIDENCE_THRESHOLD",
    "DEFAULT_RANGE_MIN",
    "DEFAULT_RANGE_MAX",
    "STATUS_IN_RANGE",
    "STATUS_BELOW_MIN",
    "STATUS_ABOVE_MAX",
    "STATUS_LOW_CONFIDENCE",
    "CHANNELS",
    "ConfigurationError",
    "PreconditionError",
    "PipelineConfig",
    "classify_frame",
    "classify_sample",
    "decode_frame",
    "decode_sample",
    "box_blur",
    "boxes_for_gauss",
    "gaussian_approx",
    "FramePipeline",
    "FrameSet",
    "PipelineState",
    "CollectingSink",
    "FrameSink",
    "ImageDirectorySink",
    "VideoSink",
    "process_depth16_file",
    "run_stream",
    "get_version_string",
    "get_build_meta",
    "__version__",
]
