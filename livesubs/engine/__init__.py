"""Speech recognizer adapters."""

from __future__ import annotations

from ..settings import CaptionSettings
from .base import Recognizer, StreamingRecognizer
from .scripted import ScriptedRecognizer
from .whisper import WhisperRecognizer


def build_recognizer(settings: CaptionSettings) -> WhisperRecognizer:
    return WhisperRecognizer(settings)


__all__ = [
    "Recognizer",
    "ScriptedRecognizer",
    "StreamingRecognizer",
    "WhisperRecognizer",
    "build_recognizer",
]
