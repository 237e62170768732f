"""Microphone capture into a growing, thread-safe sample buffer."""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any

import numpy as np
import soundfile as sf

from ..errors import CreateRecordingFailed, NoInputDevice, NoInputStream

LOGGER = logging.getLogger("livesubs.capture")


class CaptureBuffer:
    """Single-writer, multi-reader int16 buffer; readers always get copies.

    Offsets are absolute sample counts since capture started. With
    ``max_samples`` older audio is discarded once twice that many samples
    are held, so at least the newest ``max_samples`` stay readable.
    """

    def __init__(self, initial_capacity: int = 16000 * 60, *, max_samples: int | None = None) -> None:
        self.max_samples = max_samples
        self._lock = threading.Lock()
        self._data = np.zeros(max(1, initial_capacity), dtype=np.int16)
        self._size = 0
        self._dropped = 0

    def extend(self, block: np.ndarray) -> None:
        samples = np.asarray(block).reshape(-1).astype(np.int16, copy=False)
        if samples.size == 0:
            return
        with self._lock:
            needed = self._size + samples.size
            if needed > len(self._data):
                grown = np.zeros(max(needed, len(self._data) * 2), dtype=np.int16)
                grown[: self._size] = self._data[: self._size]
                self._data = grown
            self._data[self._size : needed] = samples
            self._size = needed
            if self.max_samples and self._size > 2 * self.max_samples:
                excess = self._size - self.max_samples
                self._data[: self.max_samples] = self._data[excess : self._size].copy()
                self._size = self.max_samples
                self._dropped += excess

    def tail(self, count: int) -> np.ndarray:
        """Newest ``count`` samples (fewer if less has been captured)."""
        return self.since(0, limit=count)[0]

    def since(self, offset: int, *, limit: int | None = None) -> tuple[np.ndarray, int]:
        """Samples captured after absolute ``offset`` and the new end offset.

        With ``limit`` only the newest ``limit`` of those samples are returned.
        """
        with self._lock:
            start = min(max(0, offset - self._dropped), self._size)
            if limit is not None:
                start = max(start, self._size - limit)
            return self._data[start : self._size].copy(), self._dropped + self._size

    def __len__(self) -> int:
        with self._lock:
            return self._dropped + self._size


class MicrophoneCapture:
    """Feeds a ``CaptureBuffer`` from the default input device.

    The stream callback only appends to the buffer (and optionally a WAV
    recording); it never waits on recognition.
    """

    def __init__(
        self,
        buffer: CaptureBuffer,
        *,
        sample_rate: int = 16000,
        recording_path: str | Path | None = None,
        blocksize: int = 1024,
    ) -> None:
        self.buffer = buffer
        self.sample_rate = sample_rate
        self.recording_path = Path(recording_path) if recording_path else None
        self.blocksize = blocksize
        self._sd = self._try_import_sounddevice()
        self._stream: Any = None
        self._recording: sf.SoundFile | None = None
        self._failed = threading.Event()

    def _try_import_sounddevice(self):
        try:
            import sounddevice as sd  # type: ignore

            return sd
        except (ImportError, OSError):
            return None

    @property
    def failed(self) -> bool:
        return self._failed.is_set()

    @property
    def active(self) -> bool:
        return self._stream is not None and bool(getattr(self._stream, "active", False))

    def start(self) -> None:
        if self._stream is not None:
            return
        if self._sd is None:
            raise NoInputDevice("sounddevice/PortAudio is not available")
        try:
            self._sd.query_devices(kind="input")
        except Exception as exc:
            raise NoInputDevice(f"No default input device: {exc}") from exc
        if self.recording_path:
            try:
                self.recording_path.parent.mkdir(parents=True, exist_ok=True)
                self._recording = sf.SoundFile(
                    str(self.recording_path),
                    mode="w",
                    samplerate=self.sample_rate,
                    channels=1,
                    subtype="PCM_16",
                )
            except (OSError, RuntimeError) as exc:
                raise CreateRecordingFailed(f"Cannot create {self.recording_path}: {exc}") from exc
        try:
            self._stream = self._sd.InputStream(
                samplerate=self.sample_rate,
                channels=1,
                dtype="int16",
                blocksize=self.blocksize,
                callback=self._on_audio,
                finished_callback=self._on_finished,
            )
            self._stream.start()
        except Exception as exc:
            self._stream = None
            self._close_recording()
            raise NoInputStream(f"Cannot open input stream: {exc}") from exc
        LOGGER.info("Capture started at %d Hz", self.sample_rate)

    def stop(self) -> None:
        stream, self._stream = self._stream, None
        if stream is not None:
            try:
                stream.stop()
                stream.close()
            except Exception as exc:  # pragma: no cover - driver dependent
                LOGGER.warning("Error closing input stream: %s", exc)
        self._close_recording()
        LOGGER.info("Capture stopped after %d samples", len(self.buffer))

    def _on_audio(self, indata, frames, time_info, status) -> None:  # noqa: ARG002
        if status:
            LOGGER.warning("Input stream status: %s", status)
        mono = self._to_mono_array(np.asarray(indata, dtype=np.int16))
        self.buffer.extend(mono)
        if self._recording is not None:
            try:
                self._recording.write(mono)
            except (OSError, RuntimeError) as exc:
                LOGGER.error("Recording write failed, recording disabled: %s", exc)
                self._close_recording()

    def _on_finished(self) -> None:
        if self._stream is not None:
            LOGGER.error("Input stream finished unexpectedly")
            self._failed.set()

    def _close_recording(self) -> None:
        recording, self._recording = self._recording, None
        if recording is not None:
            recording.close()

    def _to_mono_array(self, data: np.ndarray) -> np.ndarray:
        if data.ndim == 1:
            return data
        return data[:, 0]


__all__ = ["CaptureBuffer", "MicrophoneCapture"]
