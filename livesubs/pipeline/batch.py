"""Post-record captioning: windows → recognizer → reconciler → clock → sink."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path

import numpy as np

from ..audio.segmenter import WindowSegmenter
from ..audio.source import read_samples
from ..audio.types import Window
from ..engine.base import Recognizer, StreamingRecognizer
from ..errors import TranscriptionFailed
from ..metrics import DECODE_LATENCY, WINDOW_COUNTER
from ..settings import CaptionSettings
from ..subtitles.clock import SubtitleClock
from ..subtitles.sink import SubtitleSink
from ..subtitles.types import CaptionEntry
from ..transcript.reconciler import ReconcileMode, TranscriptReconciler

LOGGER = logging.getLogger("livesubs.batch")


@dataclass(slots=True)
class BatchResult:
    windows: int = 0
    failed: int = 0
    captions: list[CaptionEntry] = field(default_factory=list)


class BatchTranscriber:
    """Caption a finished recording, one window at a time on the calling thread."""

    def __init__(
        self,
        recognizer: Recognizer | StreamingRecognizer,
        settings: CaptionSettings,
        *,
        segmenter: WindowSegmenter | None = None,
    ) -> None:
        self.recognizer = recognizer
        self.settings = settings
        self.segmenter = segmenter or WindowSegmenter(
            settings.window_len,
            policy=settings.segmentation,
            min_silence=settings.min_silence,
        )
        self.mode = ReconcileMode(settings.reconcile_mode)
        if self.mode is ReconcileMode.CUMULATIVE and not isinstance(recognizer, StreamingRecognizer):
            LOGGER.warning("Recognizer cannot stream; reconciling per window instead")
            self.mode = ReconcileMode.PER_WINDOW

    @property
    def streaming(self) -> bool:
        return self.mode is ReconcileMode.CUMULATIVE

    def run(self, samples: np.ndarray, sink: SubtitleSink) -> BatchResult:
        """Caption ``samples`` into ``sink``.

        A failed window is logged and skipped; ``WriteSubtitlesFailed`` aborts the run.
        """
        reconciler = TranscriptReconciler(self.mode)
        clock = SubtitleClock(self.settings.window_ms)
        result = BatchResult()
        total = self.segmenter.count(samples)
        if self.streaming:
            self.recognizer.reset()  # type: ignore[union-attr]
        LOGGER.info("Captioning %d samples in %d windows (%s)", len(samples), total, self.mode.value)

        failed_last: Window | None = None
        for window in self.segmenter.split(samples):
            result.windows += 1
            try:
                text = self._decode(window)
            except TranscriptionFailed as exc:
                result.failed += 1
                WINDOW_COUNTER.labels(mode="batch", status="failed").inc()
                LOGGER.warning("Window %d skipped: %s", window.index, exc)
                failed_last = window
                continue
            failed_last = None

            last = window.index == total - 1
            confirmed = reconciler.finish(text) if last else reconciler.push(text)
            if not confirmed:
                WINDOW_COUNTER.labels(mode="batch", status="empty").inc()
                continue
            WINDOW_COUNTER.labels(mode="batch", status="ok").inc()
            self._emit(confirmed, window, clock, sink, result)
            LOGGER.info("Processed caption %d (window %d of %d)", result.captions[-1].index, window.index + 1, total)

        if failed_last is not None:
            # Nothing after the failed final window can settle the held-back words.
            held = reconciler.finish(reconciler.state.previous)
            if held:
                self._emit(held, failed_last, clock, sink, result)
                LOGGER.info("Released held-back words after failed window %d", failed_last.index)

        LOGGER.info(
            "Finished: %d captions from %d windows (%d failed)",
            len(result.captions),
            result.windows,
            result.failed,
        )
        return result

    def _emit(
        self,
        text: str,
        window: Window,
        clock: SubtitleClock,
        sink: SubtitleSink,
        result: BatchResult,
    ) -> None:
        rate = self.settings.sample_rate
        begin, end = clock.stamp(window.end_ms(rate), begin_ms=window.start_ms(rate))
        entry = CaptionEntry(index=sink.next_index, begin_ms=begin, end_ms=end, text=text)
        sink.append(entry)
        result.captions.append(entry)

    def _decode(self, window: Window) -> str:
        started = time.perf_counter()
        try:
            if self.streaming:
                self.recognizer.feed(window.payload)  # type: ignore[union-attr]
                text = self.recognizer.decode_partial()  # type: ignore[union-attr]
            else:
                text = self.recognizer.recognize(window.samples)  # type: ignore[union-attr]
        except Exception as exc:
            raise TranscriptionFailed(f"recognizer error on window {window.index}: {exc}") from exc
        finally:
            DECODE_LATENCY.labels(mode="batch").observe(time.perf_counter() - started)
        return text or ""


def default_subtitle_path(audio_path: str | Path) -> Path:
    return Path(audio_path).with_suffix(".srt")


def transcribe_file(
    audio_path: str | Path,
    recognizer: Recognizer | StreamingRecognizer,
    settings: CaptionSettings,
    subtitle_path: str | Path | None = None,
) -> BatchResult:
    """Read ``audio_path`` and write a fresh SRT next to it (or to ``subtitle_path``)."""
    samples = read_samples(audio_path, settings.sample_rate)
    sink = SubtitleSink(subtitle_path or default_subtitle_path(audio_path))
    sink.reset()
    return BatchTranscriber(recognizer, settings).run(samples, sink)


__all__ = ["BatchResult", "BatchTranscriber", "default_subtitle_path", "transcribe_file"]
