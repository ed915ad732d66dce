"""Frame sinks: consumers of the four per-frame outputs of a FramePipeline."""
from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Protocol, runtime_checkable

import imageio.v2 as imageio
import numpy as np

from .constants import (
    CHANNEL_BLURRED_AVERAGE,
    CHANNEL_MOVING_AVERAGE,
    CHANNEL_NOISE_REDUCED,
    CHANNEL_RAW,
    CHANNELS,
)
from .render import mask_to_rgb, save_frame_png


@runtime_checkable
class FrameSink(Protocol):
    """
    Receives the outputs of one frame, always in the order raw, noise-reduced,
    moving-average, blurred-average.

    Arrays are read-only views valid for the duration of the call; copy them to keep them.
    """

    def on_raw_data(self, frame: np.ndarray) -> None: ...

    def on_noise_reduction(self, frame: np.ndarray) -> None: ...

    def on_moving_average(self, frame: np.ndarray) -> None: ...

    def on_blurred_moving_average(self, frame: np.ndarray) -> None: ...


class ChannelSink(ABC):
    """Base for sinks that treat the four callbacks uniformly by channel name."""

    @abstractmethod
    def write(self, channel: str, frame: np.ndarray) -> None: ...

    def on_raw_data(self, frame: np.ndarray) -> None:
        self.write(CHANNEL_RAW, frame)

    def on_noise_reduction(self, frame: np.ndarray) -> None:
        self.write(CHANNEL_NOISE_REDUCED, frame)

    def on_moving_average(self, frame: np.ndarray) -> None:
        self.write(CHANNEL_MOVING_AVERAGE, frame)

    def on_blurred_moving_average(self, frame: np.ndarray) -> None:
        self.write(CHANNEL_BLURRED_AVERAGE, frame)

    def close(self) -> None:
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class CollectingSink(ChannelSink):
    """Keeps a copy of every emitted frame, plus the order channels arrived in."""

    def __init__(self) -> None:
        self.frames: Dict[str, List[np.ndarray]] = {name: [] for name in CHANNELS}
        self.calls: List[str] = []

    def write(self, channel: str, frame: np.ndarray) -> None:
        self.calls.append(channel)
        self.frames[channel].append(np.array(frame, copy=True))

    def latest(self, channel: str) -> np.ndarray:
        return self.frames[channel][-1]


class ImageDirectorySink(ChannelSink):
    """Writes every output as <channel>_<index>.png, one index per processed frame."""

    def __init__(self, out_dir: str | Path) -> None:
        self.out_dir = Path(out_dir)
        self.out_dir.mkdir(parents=True, exist_ok=True)
        self.counts: Dict[str, int] = {name: 0 for name in CHANNELS}

    def write(self, channel: str, frame: np.ndarray) -> None:
        idx = self.counts[channel]
        save_frame_png(frame, self.out_dir / f"{channel}_{idx:05d}.png")
        self.counts[channel] = idx + 1

    @property
    def frames_written(self) -> int:
        return min(self.counts.values())


class VideoSink(ChannelSink):
    """One video per channel (<channel>.mp4). Writers open lazily on the first frame."""

    def __init__(self, out_dir: str | Path, fps: int = 30) -> None:
        self.out_dir = Path(out_dir)
        self.out_dir.mkdir(parents=True, exist_ok=True)
        self.fps = fps
        self._writers: Dict[str, object] = {}
        self.frames_written = 0

    def write(self, channel: str, frame: np.ndarray) -> None:
        writer = self._writers.get(channel)
        if writer is None:
            # macro_block_size=1 keeps ffmpeg from resizing frames to multiples of 16
            writer = imageio.get_writer(
                str(self.out_dir / f"{channel}.mp4"), fps=self.fps, macro_block_size=1
            )
            self._writers[channel] = writer
        writer.append_data(mask_to_rgb(frame))
        if channel == CHANNEL_BLURRED_AVERAGE:
            self.frames_written += 1

    def close(self) -> None:
        for writer in self._writers.values():
            writer.close()
        self._writers.clear()
