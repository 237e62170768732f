"""Recognizer that replays canned transcripts (dry runs and tests)."""

from __future__ import annotations

import threading
import time
from typing import Iterable

import numpy as np


class ScriptedRecognizer:
    """Returns queued texts in order; repeats the last one when the script runs out.

    Works both as a window recognizer and as a streaming one.
    """

    def __init__(self, texts: Iterable[str | BaseException] = (), *, delay: float = 0.0) -> None:
        self._texts = list(texts)
        self._cursor = 0
        self._last = ""
        self.delay = delay
        self.calls: list[int] = []
        self.fed = 0
        self._release = threading.Event()
        self._release.set()

    def hold(self) -> None:
        """Block subsequent calls until ``release`` (simulates a slow decode)."""
        self._release.clear()

    def release(self) -> None:
        self._release.set()

    def recognize(self, samples: np.ndarray) -> str:
        self.calls.append(len(samples))
        return self._next()

    def feed(self, samples: np.ndarray) -> None:
        self.fed += len(samples)

    def decode_partial(self) -> str:
        self.calls.append(self.fed)
        return self._next()

    def reset(self) -> None:
        self.fed = 0

    def _next(self) -> str:
        self._release.wait()
        if self.delay:
            time.sleep(self.delay)
        if self._cursor < len(self._texts):
            item = self._texts[self._cursor]
            self._cursor += 1
            if isinstance(item, BaseException):
                raise item
            self._last = item
        return self._last


__all__ = ["ScriptedRecognizer"]
