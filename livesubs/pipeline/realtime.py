"""Real-time captioning: periodic decodes of the newest audio while capture runs."""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from enum import Enum
from typing import Callable, Protocol

import numpy as np

from ..audio.capture import CaptureBuffer, MicrophoneCapture
from ..engine.base import Recognizer
from ..errors import EngineUnavailable, TranscriptionFailed
from ..metrics import DECODE_LATENCY, WINDOW_COUNTER
from ..settings import CaptionSettings
from ..subtitles.clock import SubtitleClock
from ..subtitles.sink import OrderedCaptionWriter, SubtitleSink
from ..subtitles.types import CaptionEntry
from ..transcript.reconciler import ReconcileMode, TranscriptReconciler

LOGGER = logging.getLogger("livesubs.realtime")


class CoordinatorState(str, Enum):
    IDLE = "idle"
    CAPTURING = "capturing"
    DECODING = "decoding"
    STOPPED = "stopped"


class AudioCapture(Protocol):
    buffer: CaptureBuffer

    @property
    def failed(self) -> bool: ...

    def start(self) -> None: ...

    def stop(self) -> None: ...


class RealtimeCoordinator:
    """Drive capture, timed decodes and ordered caption output.

    Every tick decodes the newest ``window_len`` samples, so the cost of a
    decode does not grow with the session. Decode tasks share one recognizer:
    a task that cannot take it immediately gives up its tick, and the next
    tick retries with fresher audio. Window texts are merged by word overlap.
    """

    def __init__(
        self,
        recognizer: Recognizer,
        capture: AudioCapture,
        sink: SubtitleSink,
        settings: CaptionSettings,
        *,
        clock: Callable[[], float] = time.monotonic,
        on_entry: Callable[[CaptionEntry], None] | None = None,
    ) -> None:
        self.recognizer = recognizer
        self.capture = capture
        self.sink = sink
        self.settings = settings
        self.window_len = settings.window_len
        self.period = settings.window_seconds
        if settings.reconcile_mode != ReconcileMode.PER_WINDOW.value:
            LOGGER.info("Real-time ticks decode one window each; reconciling per window")
        self.writer = OrderedCaptionWriter(
            sink,
            TranscriptReconciler(ReconcileMode.PER_WINDOW),
            SubtitleClock(settings.window_ms),
            on_entry=on_entry,
        )
        self._clock = clock
        self._started_at = 0.0
        self._recognizer_lock = threading.Lock()
        self._state_lock = threading.Lock()
        self._state = CoordinatorState.IDLE
        self._decoding = 0
        self._ticked_to = 0
        self._stop = threading.Event()
        self._timer: threading.Thread | None = None
        self._executor: ThreadPoolExecutor | None = None

    @property
    def state(self) -> CoordinatorState:
        with self._state_lock:
            return self._state

    def elapsed_ms(self) -> int:
        return max(0, int((self._clock() - self._started_at) * 1000))

    def start(self, *, timer: bool = True) -> None:
        if self.state is not CoordinatorState.IDLE:
            raise RuntimeError(f"coordinator cannot start from {self.state.value}")
        self.capture.start()
        self._started_at = self._clock()
        self._executor = ThreadPoolExecutor(
            max_workers=self.settings.decode_workers,
            thread_name_prefix="livesubs-decode",
        )
        self._set_state(CoordinatorState.CAPTURING)
        if timer:
            self._stop.clear()
            self._timer = threading.Thread(target=self._run_timer, name="livesubs-timer", daemon=True)
            self._timer.start()
        LOGGER.info("Real-time captioning started (every %.1fs)", self.period)

    def tick(self) -> Future | None:
        """Dispatch one decode of the newest window; returns its future."""
        if self._executor is None or self.state is CoordinatorState.STOPPED:
            return None
        end_ms = self.elapsed_ms()
        block, self._ticked_to = self.capture.buffer.since(0, limit=self.window_len)
        seq = self.writer.reserve(end_ms)
        return self._executor.submit(self._decode, seq, self._pad(block))

    def stop(self, *, flush: bool = True) -> None:
        """Stop capture and wait for outstanding decodes.

        With ``flush`` the audio captured after the last tick is decoded too.
        """
        if self.state in (CoordinatorState.IDLE, CoordinatorState.STOPPED):
            self._set_state(CoordinatorState.STOPPED)
            return
        self._stop.set()
        if self._timer and self._timer is not threading.current_thread():
            self._timer.join(timeout=self.period + 1)
        self.capture.stop()
        if self._executor is not None:
            self._executor.shutdown(wait=True)
        if flush:
            self._decode_remainder()
        self._set_state(CoordinatorState.STOPPED)
        LOGGER.info("Real-time captioning stopped; %d captions written", self.writer.count)

    def run_forever(self) -> None:
        """Block until interrupted or the capture stream fails."""
        self.start()
        try:
            while not self._stop.wait(0.5):
                if self.capture.failed:
                    LOGGER.error("Capture stream failed; stopping")
                    break
        except KeyboardInterrupt:
            LOGGER.info("Interrupted; finishing outstanding decodes")
        finally:
            self.stop()

    def _run_timer(self) -> None:
        while not self._stop.wait(self.period):
            if self.capture.failed:
                LOGGER.error("Capture stream failed; timer exiting")
                self._stop.set()
                break
            self.tick()

    def _decode_remainder(self) -> None:
        block, self._ticked_to = self.capture.buffer.since(self._ticked_to, limit=self.window_len)
        if not len(block):
            return
        LOGGER.debug("Decoding %d samples captured after the last tick", len(block))
        # The pool is drained, so the recognizer lock is free.
        self._decode(self.writer.reserve(self.elapsed_ms()), self._pad(block))

    def _pad(self, block: np.ndarray) -> np.ndarray:
        if len(block) >= self.window_len:
            return block
        padded = np.zeros(self.window_len, dtype=np.int16)
        padded[: len(block)] = block
        return padded

    def _decode(self, seq: int, window: np.ndarray) -> None:
        try:
            self._acquire(seq)
        except EngineUnavailable as exc:
            LOGGER.warning("%s", exc)
            WINDOW_COUNTER.labels(mode="realtime", status="skipped").inc()
            self.writer.skip(seq)
            return
        self._track_decoding(1)
        started = time.perf_counter()
        try:
            text = self._recognize(seq, window)
        except TranscriptionFailed as exc:
            LOGGER.warning("Tick %d produced no caption: %s", seq, exc)
            WINDOW_COUNTER.labels(mode="realtime", status="failed").inc()
            self.writer.skip(seq)
            return
        finally:
            DECODE_LATENCY.labels(mode="realtime").observe(time.perf_counter() - started)
            self._recognizer_lock.release()
            self._track_decoding(-1)
        WINDOW_COUNTER.labels(mode="realtime", status="ok" if text else "empty").inc()
        self.writer.complete(seq, text)

    def _acquire(self, seq: int) -> None:
        if not self._recognizer_lock.acquire(blocking=False):
            raise EngineUnavailable(f"Recognizer busy; skipping tick {seq}")

    def _recognize(self, seq: int, window: np.ndarray) -> str:
        try:
            return self.recognizer.recognize(window) or ""
        except Exception as exc:
            raise TranscriptionFailed(f"recognizer error on tick {seq}: {exc}") from exc

    def _track_decoding(self, delta: int) -> None:
        with self._state_lock:
            self._decoding += delta
            if self._state is CoordinatorState.STOPPED:
                return
            self._state = CoordinatorState.DECODING if self._decoding else CoordinatorState.CAPTURING

    def _set_state(self, state: CoordinatorState) -> None:
        with self._state_lock:
            self._state = state


def build_coordinator(
    recognizer: Recognizer,
    settings: CaptionSettings,
    subtitle_path: str | None = None,
) -> RealtimeCoordinator:
    """Wire microphone capture, a fresh subtitle file and the recognizer."""
    capture = MicrophoneCapture(
        CaptureBuffer(initial_capacity=settings.window_len * 2, max_samples=settings.window_len * 2),
        sample_rate=settings.sample_rate,
        recording_path=settings.recording_path,
    )
    sink = SubtitleSink(subtitle_path or settings.realtime_subtitles_path)
    sink.reset()
    return RealtimeCoordinator(recognizer, capture, sink, settings)


__all__ = ["AudioCapture", "CoordinatorState", "RealtimeCoordinator", "build_coordinator"]
