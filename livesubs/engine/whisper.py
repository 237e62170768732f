"""faster-whisper recognizer for caption windows and streamed post-record sessions."""

from __future__ import annotations

import logging
import threading
from typing import Iterable

import numpy as np

try:  # pragma: no cover - optional extra
    import faster_whisper
except ImportError:  # pragma: no cover
    faster_whisper = None  # type: ignore[assignment]

from ..errors import EngineUnavailable
from ..settings import CaptionSettings

LOGGER = logging.getLogger("livesubs.whisper")


def _use_mock(settings: CaptionSettings) -> bool:
    if settings.engine_mock:
        LOGGER.warning("LIVESUBS_ENGINE_MOCK is set; captions will carry placeholder text")
        return True
    if faster_whisper is None:
        LOGGER.warning("faster-whisper is not installed (pip install 'livesubs[whisper]'); using placeholder text")
        return True
    return False


class WhisperRecognizer:
    """Window and streaming recognizer backed by faster-whisper.

    Streaming keeps the fed samples of one session and re-decodes them on
    ``decode_partial``, which yields the cumulative transcript the reconciler
    expects. Callers bound a session by calling ``reset``.
    """

    def __init__(self, settings: CaptionSettings) -> None:
        self.settings = settings
        self.mock = _use_mock(settings)
        self._model_lock = threading.Lock()
        self._model = None
        self._session: list[np.ndarray] = []

    @property
    def model(self):
        """The loaded ``WhisperModel``; the first access loads it."""
        with self._model_lock:
            if self._model is None:
                self._model = self._build_model()
            return self._model

    def _build_model(self):
        name = self.settings.whisper_model
        LOGGER.info("Loading Whisper model %s on %s", name, self.settings.whisper_device)
        try:
            return faster_whisper.WhisperModel(
                name,
                device=self.settings.whisper_device,
                compute_type=self.settings.whisper_compute_type,
            )
        except Exception as exc:
            raise EngineUnavailable(f"Whisper model {name!r} could not be loaded: {exc}") from exc

    def warm_up(self) -> None:
        """Load the model now so the first decode does not pay for it."""
        if not self.mock:
            LOGGER.debug("Whisper model ready: %r", self.model)

    def recognize(self, samples: np.ndarray) -> str:
        if self.mock:
            return f"[mock-{len(samples) / float(self.settings.sample_rate):.1f}s]"
        segments, _info = self.model.transcribe(
            _to_float(samples),
            language=self.settings.whisper_language,
            beam_size=5,
            vad_filter=False,
        )
        return _join_segments(segments)

    def feed(self, samples: np.ndarray) -> None:
        self._session.append(np.asarray(samples, dtype=np.int16).copy())

    def decode_partial(self) -> str:
        if not self._session:
            return ""
        if self.mock:
            return " ".join(f"[mock-{i}]" for i in range(len(self._session)))
        return self.recognize(np.concatenate(self._session))

    def reset(self) -> None:
        self._session = []


def _to_float(samples: np.ndarray) -> np.ndarray:
    return np.asarray(samples, dtype=np.int16).astype(np.float32) / 32768.0


def _join_segments(segments: Iterable) -> str:
    return " ".join(text for text in (segment.text.strip() for segment in segments) if text)


__all__ = ["WhisperRecognizer"]
