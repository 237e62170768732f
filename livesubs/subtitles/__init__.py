"""SubRip timing, entries and output."""

from .clock import SubtitleClock, format_timestamp, timestamp_for
from .sink import OrderedCaptionWriter, SubtitleSink
from .types import CaptionEntry

__all__ = [
    "CaptionEntry",
    "OrderedCaptionWriter",
    "SubtitleClock",
    "SubtitleSink",
    "format_timestamp",
    "timestamp_for",
]
