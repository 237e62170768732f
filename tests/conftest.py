"""Pytest configuration helpers."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest


def _ensure_repo_on_path() -> None:
    """Allow tests to import from repo modules without installing the package."""
    repo_root = Path(__file__).resolve().parents[1]
    path_str = str(repo_root)
    if path_str not in sys.path:
        sys.path.insert(0, path_str)


_ensure_repo_on_path()


@pytest.fixture()
def settings(monkeypatch):
    from livesubs.settings import CaptionSettings

    for name in ("LIVESUBS_RECORDING_PATH", "LIVESUBS_SEGMENTATION", "LIVESUBS_RECONCILE_MODE"):
        monkeypatch.delenv(name, raising=False)
    return CaptionSettings(
        sample_rate=16000,
        window_seconds=4,
        segmentation="fixed",
        reconcile_mode="cumulative",
        recording_path=None,
        engine_mock=True,
    )
