"""Recognizer boundary: the only shapes the pipelines rely on."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

import numpy as np


@runtime_checkable
class Recognizer(Protocol):
    def recognize(self, samples: np.ndarray) -> str:
        """Transcribe one window of int16 mono samples."""
        ...


@runtime_checkable
class StreamingRecognizer(Protocol):
    def feed(self, samples: np.ndarray) -> None:
        ...

    def decode_partial(self) -> str:
        """Transcript of everything fed since the last reset."""
        ...

    def reset(self) -> None:
        ...


__all__ = ["Recognizer", "StreamingRecognizer"]
