"""Per-frame DEPTH16 processing: decode, noise reduction, moving average, blur."""
from __future__ import annotations

from typing import NamedTuple, Optional

import numpy as np

from .blur import box_blur
from .config import PipelineConfig
from .decoder import decode_frame
from .errors import PreconditionError
from .sinks import FrameSink


class FrameSet(NamedTuple):
    raw: np.ndarray
    noise_reduced: np.ndarray
    moving_average: np.ndarray
    blurred_average: np.ndarray


def _readonly(arr: np.ndarray) -> np.ndarray:
    view = arr.view()
    view.flags.writeable = False
    return view


class PipelineState:
    """
    Two-frame history for the moving average.

    averaged_mask holds the latest average; averaged_mask_p2 holds the one before it.
    Both start at zero and keep the configured shape for the lifetime of the state.
    """

    def __init__(self, shape: tuple[int, int]):
        self.shape = shape
        self.averaged_mask = np.zeros(shape, dtype=np.uint8)
        self.averaged_mask_p2 = np.zeros(shape, dtype=np.uint8)

    def moving_average(self, raw: np.ndarray) -> np.ndarray:
        total = (
            raw.astype(np.uint16)
            + self.averaged_mask.astype(np.uint16)
            + self.averaged_mask_p2.astype(np.uint16)
        )
        return (total // 3).astype(np.uint8)

    def advance(self, new_average: np.ndarray) -> None:
        if new_average.shape != self.shape:
            raise ValueError(f"average shape {new_average.shape} != state shape {self.shape}")
        # move, not copy: the previous p2 buffer is dropped
        self.averaged_mask_p2 = self.averaged_mask
        self.averaged_mask = new_average

    def reset(self) -> None:
        self.averaged_mask = np.zeros(self.shape, dtype=np.uint8)
        self.averaged_mask_p2 = np.zeros(self.shape, dtype=np.uint8)


class FramePipeline:
    """
    Synchronous DEPTH16 frame processor.

    Each process_frame call decodes one raw buffer and emits four uint8 grids to the
    sink (raw, noise-reduced, moving-average, blurred moving-average). Calls on one
    instance must be serialized by the caller; there is no internal queue.
    """

    def __init__(
        self,
        config: Optional[PipelineConfig] = None,
        sink: Optional[FrameSink] = None,
        **overrides,
    ):
        if config is None:
            config = PipelineConfig(**overrides)
        elif overrides:
            config = config.replace(**overrides)
        self.config = config
        self.sink = sink
        self.state = PipelineState(config.shape)
        self.frame_index = 0

    def check_frame(self, samples) -> np.ndarray:
        """Validate a raw buffer and return it as a (height, width) array of 16-bit samples."""
        cfg = self.config
        if isinstance(samples, (bytes, bytearray, memoryview)):
            view = memoryview(samples)
            if not view.c_contiguous:
                raise PreconditionError("sample buffer must be C-contiguous")
            nbytes = view.nbytes
            if nbytes != cfg.size * 2:
                raise PreconditionError(
                    f"expected {cfg.size * 2} bytes for a {cfg.width}x{cfg.height} frame, got {nbytes}"
                )
            arr = np.frombuffer(view, dtype="<u2")
        else:
            arr = np.asarray(samples)

        if arr.dtype.kind not in "iu":
            raise PreconditionError(f"samples must be integers, got dtype {arr.dtype}")
        if arr.ndim == 1:
            if arr.size != cfg.size:
                raise PreconditionError(
                    f"expected {cfg.size} samples for a {cfg.width}x{cfg.height} frame, got {arr.size}"
                )
            arr = arr.reshape(cfg.shape)
        elif arr.shape != cfg.shape:
            raise PreconditionError(f"expected frame shape {cfg.shape}, got {arr.shape}")
        if arr.dtype.itemsize > 2 and arr.size:
            lo, hi = int(arr.min()), int(arr.max())
            if lo < -0x8000 or hi > 0xFFFF:
                raise PreconditionError(f"sample values [{lo}, {hi}] do not fit in 16 bits")
        return arr

    def process_frame(self, samples) -> FrameSet:
        cfg = self.config
        arr = self.check_frame(samples)

        raw = decode_frame(
            arr,
            confidence_threshold=cfg.confidence_threshold,
            range_min=cfg.range_min,
            range_max=cfg.range_max,
        )
        noise_reduced = box_blur(raw, cfg.noise_reduce_radius)

        self.state.advance(self.state.moving_average(raw))
        blurred_average = box_blur(self.state.averaged_mask, cfg.average_blur_radius)

        frames = FrameSet(
            _readonly(raw),
            _readonly(noise_reduced),
            _readonly(self.state.averaged_mask),
            _readonly(blurred_average),
        )
        self.frame_index += 1
        self._emit(frames)
        return frames

    def _emit(self, frames: FrameSet) -> None:
        if self.sink is None:
            return
        self.sink.on_raw_data(frames.raw)
        self.sink.on_noise_reduction(frames.noise_reduced)
        self.sink.on_moving_average(frames.moving_average)
        self.sink.on_blurred_moving_average(frames.blurred_average)

    def reset(self) -> None:
        self.state.reset()
        self.frame_index = 0
