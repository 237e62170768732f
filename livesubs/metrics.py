"""Prometheus counters for the captioning pipelines."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

WINDOW_COUNTER = Counter(
    "livesubs_windows_total",
    "Audio windows handed to the recognizer, by outcome",
    labelnames=("mode", "status"),
)

CAPTION_COUNTER = Counter(
    "livesubs_captions_written_total",
    "Caption entries appended to subtitle files",
)

WRITE_FAILURE_COUNTER = Counter(
    "livesubs_subtitle_write_failures_total",
    "Failed subtitle file writes",
)

DECODE_LATENCY = Histogram(
    "livesubs_decode_seconds",
    "Time spent inside the recognizer per window",
    labelnames=("mode",),
)
