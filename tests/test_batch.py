import numpy as np
import pytest

from livesubs.audio.source import write_samples
from livesubs.engine.scripted import ScriptedRecognizer
from livesubs.errors import ReadFailed, WriteSubtitlesFailed
from livesubs.pipeline.batch import BatchTranscriber, default_subtitle_path, transcribe_file
from livesubs.subtitles.sink import SubtitleSink


def _tone(length: int) -> np.ndarray:
    t = np.arange(length)
    return (np.sin(2 * np.pi * 440 * t / 16000) * 3000 + 4000).astype(np.int16)


def test_nine_seconds_produce_three_ordered_captions(tmp_path, settings):
    recognizer = ScriptedRecognizer(["hi there", "hi there how", "hi there how are you"])
    sink = SubtitleSink(tmp_path / "out.srt")

    result = BatchTranscriber(recognizer, settings).run(_tone(144_000), sink)

    assert result.windows == 3
    assert recognizer.calls == [64_000, 128_000, 144_000]
    assert [c.text for c in result.captions] == ["hi", "there", "how are you"]
    assert [(c.begin_ms, c.end_ms) for c in result.captions] == [(0, 4000), (4000, 8000), (8000, 9000)]
    words = " ".join(c.text for c in result.captions).split()
    assert words == "hi there how are you".split()
    content = sink.path.read_text(encoding="utf-8")
    assert content.startswith("1\n00:00:00,000 --> 00:00:04,000\nhi\n\n")
    assert "3\n00:00:08,000 --> 00:00:09,000\nhow are you\n" in content


def test_per_window_mode_feeds_padded_windows(tmp_path, settings):
    settings = settings.model_copy(update={"reconcile_mode": "per_window"})
    recognizer = ScriptedRecognizer(["one two", "two three", "four"])
    sink = SubtitleSink(tmp_path / "out.srt")

    result = BatchTranscriber(recognizer, settings).run(_tone(144_000), sink)

    assert recognizer.calls == [64_000, 64_000, 64_000]
    assert [c.text for c in result.captions] == ["one two", "three", "four"]


def test_failed_window_is_skipped_and_run_continues(tmp_path, settings):
    recognizer = ScriptedRecognizer(["a b c", RuntimeError("engine hiccup"), "a b c d e"])
    sink = SubtitleSink(tmp_path / "out.srt")

    result = BatchTranscriber(recognizer, settings).run(_tone(144_000), sink)

    assert result.failed == 1
    assert [(c.index, c.text) for c in result.captions] == [(1, "a b"), (2, "c d e")]


def test_failed_final_window_still_releases_held_words(tmp_path, settings):
    recognizer = ScriptedRecognizer(["hi there", "hi there how", RuntimeError("engine hiccup")])
    sink = SubtitleSink(tmp_path / "out.srt")

    result = BatchTranscriber(recognizer, settings).run(_tone(144_000), sink)

    assert result.failed == 1
    assert [(c.index, c.text) for c in result.captions] == [(1, "hi"), (2, "there"), (3, "how")]
    assert (result.captions[-1].begin_ms, result.captions[-1].end_ms) == (8000, 9000)
    assert "3\n00:00:08,000 --> 00:00:09,000\nhow\n" in sink.path.read_text(encoding="utf-8")


def test_empty_transcripts_emit_nothing(tmp_path, settings):
    recognizer = ScriptedRecognizer([""])
    sink = SubtitleSink(tmp_path / "out.srt")
    result = BatchTranscriber(recognizer, settings).run(_tone(100_000), sink)
    assert result.captions == []
    assert not sink.path.exists()


def test_write_failure_aborts_run(tmp_path, settings):
    blocker = tmp_path / "file"
    blocker.write_text("x", encoding="utf-8")
    recognizer = ScriptedRecognizer(["a b", "a b c d"])
    with pytest.raises(WriteSubtitlesFailed):
        BatchTranscriber(recognizer, settings).run(_tone(128_000), SubtitleSink(blocker / "out.srt"))
    assert len(recognizer.calls) == 1


def test_silence_policy_uses_real_window_spans(tmp_path, settings):
    settings = settings.model_copy(update={"segmentation": "silence", "reconcile_mode": "per_window"})
    audio = np.concatenate([_tone(16_000), np.zeros(3_200, dtype=np.int16), _tone(16_000)])
    recognizer = ScriptedRecognizer(["one two", "three"])
    sink = SubtitleSink(tmp_path / "out.srt")

    result = BatchTranscriber(recognizer, settings).run(audio, sink)

    assert recognizer.calls == [16_000, 19_200]
    assert [(c.begin_ms, c.end_ms, c.text) for c in result.captions] == [
        (0, 1000, "one two"),
        (1000, 2200, "three"),
    ]


def test_window_recognizer_without_streaming_falls_back(tmp_path, settings):
    class WindowOnly:
        def __init__(self):
            self.seen = []

        def recognize(self, samples):
            self.seen.append(len(samples))
            return f"w{len(self.seen)}"

    recognizer = WindowOnly()
    transcriber = BatchTranscriber(recognizer, settings)
    assert not transcriber.streaming
    result = transcriber.run(_tone(70_000), SubtitleSink(tmp_path / "out.srt"))
    assert recognizer.seen == [64_000, 64_000]
    assert [c.text for c in result.captions] == ["w1", "w2"]


def test_transcribe_file_writes_default_srt(tmp_path, settings):
    audio_path = tmp_path / "talk.wav"
    write_samples(audio_path, _tone(80_000), 16_000)
    stale = default_subtitle_path(audio_path)
    stale.write_text("99\n00:00:00,000 --> 00:00:01,000\nold\n\n", encoding="utf-8")

    result = transcribe_file(audio_path, ScriptedRecognizer(["hello world", "hello world again"]), settings)

    assert stale == tmp_path / "talk.srt"
    content = stale.read_text(encoding="utf-8")
    assert "old" not in content
    assert content.startswith("1\n")
    assert [c.text for c in result.captions] == ["hello", "world again"]


def test_transcribe_file_rejects_unreadable_or_wrong_rate(tmp_path, settings):
    with pytest.raises(ReadFailed):
        transcribe_file(tmp_path / "missing.wav", ScriptedRecognizer(), settings)
    eight_k = tmp_path / "low.wav"
    write_samples(eight_k, _tone(8_000), 8_000)
    with pytest.raises(ReadFailed):
        transcribe_file(eight_k, ScriptedRecognizer(), settings)
