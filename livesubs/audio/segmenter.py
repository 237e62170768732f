"""Split PCM buffers into recognizer windows (fixed-length or silence-delimited)."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Iterator

import numpy as np

from ..errors import SegmentationFailed
from .types import Window

LOGGER = logging.getLogger("livesubs.segmenter")

# 1/10th of a second at 16 kHz
DEFAULT_MIN_SILENCE = 1600


class SegmentationPolicy(str, Enum):
    FIXED = "fixed"
    SILENCE = "silence"


def segment(buffer: np.ndarray, window_len: int) -> Iterator[Window]:
    """Yield ``ceil(len(buffer) / window_len)`` windows of exactly ``window_len`` samples.

    The last window is right-padded with zeros when the buffer length is not a
    multiple of ``window_len``.
    """
    if window_len <= 0:
        raise ValueError("window_len must be positive")
    samples = _ensure_mono(buffer)
    total = len(samples)
    for index, start in enumerate(range(0, total, window_len)):
        chunk = samples[start : start + window_len]
        valid = len(chunk)
        if valid < window_len:
            padded = np.zeros(window_len, dtype=np.int16)
            padded[:valid] = chunk
            chunk = padded
        if len(chunk) != window_len or valid <= 0:
            raise SegmentationFailed(
                f"window {index} at {start} has {len(chunk)} samples, expected {window_len}"
            )
        yield Window(index=index, start=start, samples=chunk, valid=valid)


def find_silences(buffer: np.ndarray, min_silence: int = DEFAULT_MIN_SILENCE) -> list[int]:
    """Return the start offset of every zero-amplitude run of at least ``min_silence`` samples."""
    if min_silence <= 0:
        raise ValueError("min_silence must be positive")
    samples = _ensure_mono(buffer)
    if samples.size == 0:
        return []
    silent = np.concatenate(([False], samples == 0, [False])).astype(np.int8)
    edges = np.diff(silent)
    starts = np.flatnonzero(edges == 1)
    ends = np.flatnonzero(edges == -1)
    return [int(start) for start, end in zip(starts, ends) if end - start >= min_silence]


def segment_on_silence(buffer: np.ndarray, min_silence: int = DEFAULT_MIN_SILENCE) -> Iterator[Window]:
    """Cut the buffer at the start of every long silence; windows are not padded."""
    samples = _ensure_mono(buffer)
    total = len(samples)
    if total == 0:
        return
    cuts = [cut for cut in find_silences(samples, min_silence) if 0 < cut < total]
    bounds = [0, *cuts, total]
    for index, (start, end) in enumerate(zip(bounds, bounds[1:])):
        chunk = samples[start:end]
        if chunk.size == 0 or chunk.size != end - start:
            raise SegmentationFailed(f"empty window {index} between {start} and {end}")
        yield Window(index=index, start=start, samples=chunk, valid=len(chunk))


class WindowSegmenter:
    """Selects a segmentation policy; fixed-length windows unless told otherwise."""

    def __init__(
        self,
        window_len: int,
        *,
        policy: SegmentationPolicy | str = SegmentationPolicy.FIXED,
        min_silence: int = DEFAULT_MIN_SILENCE,
    ) -> None:
        if window_len <= 0:
            raise ValueError("window_len must be positive")
        self.window_len = window_len
        self.policy = SegmentationPolicy(policy)
        self.min_silence = min_silence

    def split(self, buffer: np.ndarray) -> Iterator[Window]:
        LOGGER.debug("Segmenting %d samples (%s policy)", len(buffer), self.policy.value)
        if self.policy is SegmentationPolicy.SILENCE:
            return segment_on_silence(buffer, self.min_silence)
        return segment(buffer, self.window_len)

    def count(self, buffer: np.ndarray) -> int:
        """Number of windows ``split`` will produce, without materialising them."""
        total = len(buffer)
        if self.policy is SegmentationPolicy.SILENCE:
            cuts = [cut for cut in find_silences(buffer, self.min_silence) if 0 < cut < total]
            return len(cuts) + 1 if total else 0
        return -(-total // self.window_len)


def _ensure_mono(pcm: np.ndarray) -> np.ndarray:
    data = np.asarray(pcm)
    if data.ndim == 1:
        return data.astype(np.int16, copy=False)
    return data[:, 0].astype(np.int16, copy=False)


__all__ = [
    "DEFAULT_MIN_SILENCE",
    "SegmentationPolicy",
    "WindowSegmenter",
    "find_silences",
    "segment",
    "segment_on_silence",
]
