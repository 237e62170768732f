import pytest
from pydantic import ValidationError

from livesubs.settings import CaptionSettings, get_settings


def test_settings_defaults(monkeypatch):
    for name in ("LIVESUBS_WINDOW_SECONDS", "LIVESUBS_SEGMENTATION", "LIVESUBS_RECONCILE_MODE", "LIVESUBS_SAMPLE_RATE"):
        monkeypatch.delenv(name, raising=False)
    settings = CaptionSettings()
    assert settings.sample_rate == 16000
    assert settings.window_len == 64_000
    assert settings.window_ms == 4000
    assert settings.segmentation == "fixed"
    assert settings.reconcile_mode == "cumulative"


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("LIVESUBS_WINDOW_SECONDS", "5")
    monkeypatch.setenv("LIVESUBS_SEGMENTATION", "SILENCE")
    monkeypatch.setenv("LIVESUBS_ENGINE_MOCK", "yes")
    monkeypatch.setenv("LIVESUBS_RECORDING_PATH", "")
    settings = CaptionSettings()
    assert settings.window_len == 80_000
    assert settings.segmentation == "silence"
    assert settings.engine_mock is True
    assert settings.recording_path is None


def test_settings_reject_invalid_values(monkeypatch):
    with pytest.raises(ValidationError):
        CaptionSettings(window_seconds=0)
    monkeypatch.setenv("LIVESUBS_RECONCILE_MODE", "guess")
    with pytest.raises(ValidationError):
        CaptionSettings()


def test_get_settings_is_cached():
    get_settings.cache_clear()
    assert get_settings() is get_settings()
    get_settings.cache_clear()
