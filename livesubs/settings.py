"""Captioning settings resolved from the environment."""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _env(name: str, default: str) -> str:
    return os.getenv(name, default)


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


class CaptionSettings(BaseModel):
    model_config = ConfigDict(validate_default=True)

    sample_rate: int = Field(default_factory=lambda: int(_env("LIVESUBS_SAMPLE_RATE", "16000")))
    window_seconds: float = Field(
        default_factory=lambda: float(_env("LIVESUBS_WINDOW_SECONDS", "4"))
    )
    segmentation: Literal["fixed", "silence"] = Field(
        default_factory=lambda: _env("LIVESUBS_SEGMENTATION", "fixed").lower()
    )
    min_silence: int = Field(default_factory=lambda: int(_env("LIVESUBS_MIN_SILENCE", "1600")))
    reconcile_mode: Literal["cumulative", "per_window"] = Field(
        default_factory=lambda: _env("LIVESUBS_RECONCILE_MODE", "cumulative").lower()
    )
    recording_path: str | None = Field(
        default_factory=lambda: os.getenv("LIVESUBS_RECORDING_PATH", "recording.wav") or None
    )
    realtime_subtitles_path: str = Field(
        default_factory=lambda: _env("LIVESUBS_REALTIME_SUBTITLES", "recording.srt")
    )
    decode_workers: int = Field(default_factory=lambda: int(_env("LIVESUBS_DECODE_WORKERS", "2")))
    log_level: str = Field(default_factory=lambda: _env("LIVESUBS_LOG_LEVEL", "INFO").upper())
    whisper_model: str = Field(default_factory=lambda: _env("WHISPER_MODEL", "tiny"))
    whisper_device: str = Field(default_factory=lambda: _env("WHISPER_DEVICE", "cpu"))
    whisper_compute_type: str = Field(default_factory=lambda: _env("WHISPER_COMPUTE_TYPE", "int8"))
    whisper_language: str | None = Field(default_factory=lambda: os.getenv("WHISPER_LANGUAGE") or None)
    engine_mock: bool = Field(default_factory=lambda: _env_flag("LIVESUBS_ENGINE_MOCK"))

    @field_validator("sample_rate", "min_silence", "decode_workers")
    @classmethod
    def _positive_int(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("must be positive")
        return value

    @field_validator("window_seconds")
    @classmethod
    def _positive_window(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("window_seconds must be positive")
        return value

    @property
    def window_len(self) -> int:
        """Window size in samples (64 000 for 4 s at 16 kHz)."""
        return int(round(self.window_seconds * self.sample_rate))

    @property
    def window_ms(self) -> int:
        return int(round(self.window_seconds * 1000))


@lru_cache()
def get_settings() -> CaptionSettings:
    return CaptionSettings()
