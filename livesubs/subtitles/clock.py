"""Caption timing and SubRip timestamp rendering."""

from __future__ import annotations

import threading


def format_timestamp(ms: int) -> str:
    """Render milliseconds as ``HH:MM:SS,mmm`` (truncating, never rounding)."""
    if ms < 0:
        raise ValueError("timestamp cannot be negative")
    ms = int(ms)
    hours, rem = divmod(ms, 3_600_000)
    minutes, rem = divmod(rem, 60_000)
    seconds, millis = divmod(rem, 1000)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d},{millis:03d}"


def timestamp_for(end_ms: int, fixed_window_ms: int) -> tuple[int, int]:
    """Span of a caption looking back one window from ``end_ms``."""
    return max(0, end_ms - fixed_window_ms), end_ms


def samples_to_ms(count: int, sample_rate: int) -> int:
    return count * 1000 // sample_rate


class SubtitleClock:
    """Stamps consecutive captions so that no span starts before the previous one ended."""

    def __init__(self, window_ms: int) -> None:
        if window_ms <= 0:
            raise ValueError("window_ms must be positive")
        self.window_ms = window_ms
        self._last_end = 0
        self._lock = threading.Lock()

    @property
    def last_end(self) -> int:
        return self._last_end

    def stamp(self, end_ms: int, begin_ms: int | None = None) -> tuple[int, int]:
        """Return (begin, end); begin defaults to one window before ``end_ms``."""
        with self._lock:
            begin, end = timestamp_for(end_ms, self.window_ms)
            if begin_ms is not None:
                begin = max(0, begin_ms)
            begin = max(begin, self._last_end)
            end = max(end, begin + 1)
            self._last_end = end
            return begin, end


__all__ = ["SubtitleClock", "format_timestamp", "samples_to_ms", "timestamp_for"]
