import numpy as np
import pytest

from livesubs import cli
from livesubs.audio.source import write_samples
from livesubs.settings import get_settings


@pytest.fixture(autouse=True)
def _mock_engine(monkeypatch):
    monkeypatch.setenv("LIVESUBS_ENGINE_MOCK", "1")
    monkeypatch.setenv("LIVESUBS_WINDOW_SECONDS", "4")
    monkeypatch.delenv("LIVESUBS_RECONCILE_MODE", raising=False)
    monkeypatch.delenv("LIVESUBS_SEGMENTATION", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_postrecord_writes_subtitles(tmp_path):
    audio = tmp_path / "memo.wav"
    write_samples(audio, np.full(80_000, 700, dtype=np.int16), 16_000)

    assert cli.main(["pr", str(audio)]) == 0

    content = (tmp_path / "memo.srt").read_text(encoding="utf-8")
    assert content.startswith("1\n00:00:04,000 --> 00:00:05,000\n")
    assert "[mock-0] [mock-1]" in content


def test_postrecord_custom_output_and_overrides(tmp_path):
    audio = tmp_path / "memo.wav"
    out = tmp_path / "captions" / "memo.srt"
    write_samples(audio, np.full(40_000, 700, dtype=np.int16), 16_000)

    assert cli.main(["--window-seconds", "1", "postrecord", str(audio), str(out)]) == 0

    blocks = out.read_text(encoding="utf-8").strip().split("\n\n")
    assert blocks == [
        "1\n00:00:01,000 --> 00:00:02,000\n[mock-0]",
        "2\n00:00:02,000 --> 00:00:02,500\n[mock-1] [mock-2]",
    ]


def test_missing_audio_is_a_usage_error():
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["postrecord"])
    assert excinfo.value.code == 2


def test_unknown_command_is_a_usage_error():
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["transcribe"])
    assert excinfo.value.code == 2


def test_unreadable_audio_exits_non_zero(tmp_path):
    assert cli.main(["pr", str(tmp_path / "nope.wav")]) == 1


def test_resolve_settings_applies_overrides():
    args = cli.build_parser().parse_args(["--segmentation", "silence", "--mock", "rt"])
    settings = cli.resolve_settings(args)
    assert settings.segmentation == "silence"
    assert settings.engine_mock is True
    assert args.subtitle_path is None
