"""Dataclasses shared across audio helpers."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass(slots=True)
class Window:
    """A slice of the source buffer handed to the recognizer as one unit.

    ``samples`` may be right-padded with silence; ``valid`` counts the
    samples that came from the source.
    """

    index: int
    start: int
    samples: np.ndarray
    valid: int

    @property
    def payload(self) -> np.ndarray:
        return self.samples[: self.valid]

    @property
    def padded(self) -> int:
        return len(self.samples) - self.valid

    def start_ms(self, sample_rate: int) -> int:
        return self.start * 1000 // sample_rate

    def end_ms(self, sample_rate: int) -> int:
        return (self.start + self.valid) * 1000 // sample_rate

    def duration_ms(self, sample_rate: int) -> int:
        return len(self.samples) * 1000 // sample_rate


__all__ = ["Window"]
