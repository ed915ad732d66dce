"""Constants for tofvis DEPTH16 decoding and visualization."""

# DEPTH16 sample layout
RANGE_MASK = 0x1FFF        # bits 0-12: range
CONFIDENCE_SHIFT = 13
CONFIDENCE_MASK = 0x7      # bits 13-15: confidence
CONFIDENCE_LEVELS = 7.0

DEFAULT_WIDTH = 240
DEFAULT_HEIGHT = 180
DEFAULT_CONFIDENCE_THRESHOLD = 0.1
DEFAULT_RANGE_MIN = 200.0
DEFAULT_RANGE_MAX = 1600.0
DEFAULT_NOISE_REDUCE_RADIUS = 1
DEFAULT_AVERAGE_BLUR_RADIUS = 1
DEFAULT_GAUSS_PASSES = 3

INTENSITY_MAX = 255

# Decode status, per sample
STATUS_IN_RANGE = 0
STATUS_BELOW_MIN = 1        # accepted, clamped up to range_min
STATUS_ABOVE_MAX = 2        # accepted, clamped down to range_max
STATUS_LOW_CONFIDENCE = 3   # rejected by the confidence filter

# Output channel names, in emission order
CHANNEL_RAW = "raw"
CHANNEL_NOISE_REDUCED = "noise_reduced"
CHANNEL_MOVING_AVERAGE = "moving_average"
CHANNEL_BLURRED_AVERAGE = "blurred_average"
CHANNELS = (
    CHANNEL_RAW,
    CHANNEL_NOISE_REDUCED,
    CHANNEL_MOVING_AVERAGE,
    CHANNEL_BLURRED_AVERAGE,
)
