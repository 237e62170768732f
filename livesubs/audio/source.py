"""Read prerecorded audio into a flat int16 sample buffer."""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
import soundfile as sf

from ..errors import ReadFailed

LOGGER = logging.getLogger("livesubs.source")


def read_samples(path: str | Path, sample_rate: int = 16000) -> np.ndarray:
    """Return the first channel of ``path`` as int16.

    The file must already be at ``sample_rate``; resampling is left to the caller.
    """
    try:
        data, rate = sf.read(str(path), dtype="int16", always_2d=False)
    except (OSError, RuntimeError) as exc:
        raise ReadFailed(f"Cannot read audio from {path}: {exc}") from exc
    if rate != sample_rate:
        raise ReadFailed(f"{path} is sampled at {rate} Hz, expected {sample_rate} Hz")
    samples = np.asarray(data)
    if samples.ndim > 1:
        LOGGER.warning("%s has %d channels; using the first", path, samples.shape[1])
        samples = samples[:, 0]
    LOGGER.info("Loaded %d samples (%.1fs) from %s", len(samples), len(samples) / rate, path)
    return samples.astype(np.int16, copy=False)


def write_samples(path: str | Path, samples: np.ndarray, sample_rate: int = 16000) -> None:
    sf.write(str(path), np.asarray(samples, dtype=np.int16), sample_rate, subtype="PCM_16")


__all__ = ["read_samples", "write_samples"]
