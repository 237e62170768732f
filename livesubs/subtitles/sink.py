"""Append-only SubRip writer and the ordered hand-off used by concurrent decoders."""

from __future__ import annotations

import logging
import re
import threading
from collections import deque
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable

from ..errors import WriteSubtitlesFailed
from ..metrics import CAPTION_COUNTER, WRITE_FAILURE_COUNTER
from ..transcript.reconciler import TranscriptReconciler
from .clock import SubtitleClock
from .types import CaptionEntry

LOGGER = logging.getLogger("livesubs.sink")

_INDEX_LINE = re.compile(r"^(\d+)\s*$")


class SubtitleSink:
    """Persist caption entries to an SRT file, never rewriting what is there."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()
        self._last_index = self._scan_last_index()

    @property
    def next_index(self) -> int:
        return self._last_index + 1

    def append(self, entry: CaptionEntry) -> None:
        self.append_many([entry])

    def append_many(self, entries: Iterable[CaptionEntry]) -> None:
        batch = list(entries)
        if not batch:
            return
        with self._lock:
            last = self._last_index
            for entry in batch:
                if entry.index <= last:
                    raise ValueError(f"caption index {entry.index} does not follow {last}")
                last = entry.index
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                with self.path.open("a", encoding="utf-8", newline="\n") as handle:
                    handle.write("".join(entry.to_srt() for entry in batch))
                    handle.flush()
            except OSError as exc:
                WRITE_FAILURE_COUNTER.inc()
                raise WriteSubtitlesFailed(f"Cannot write subtitles to {self.path}: {exc}") from exc
            self._last_index = last
        CAPTION_COUNTER.inc(len(batch))

    def reset(self) -> None:
        """Start a fresh file; used when a run owns its output from the first entry."""
        with self._lock:
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                self.path.write_text("", encoding="utf-8")
            except OSError as exc:
                raise WriteSubtitlesFailed(f"Cannot create {self.path}: {exc}") from exc
            self._last_index = 0

    def _scan_last_index(self) -> int:
        if not self.path.exists():
            return 0
        try:
            blocks = self.path.read_text(encoding="utf-8").strip().split("\n\n")
        except (OSError, UnicodeDecodeError):
            return 0
        for block in reversed(blocks):
            first = block.strip().split("\n", 1)[0]
            match = _INDEX_LINE.match(first)
            if match:
                return int(match.group(1))
        return 0


@dataclass(slots=True)
class _Slot:
    end_ms: int
    done: bool = False
    text: str | None = None


class OrderedCaptionWriter:
    """Release decode results to the sink strictly in dispatch order.

    Each tick reserves a sequence number and its end timestamp up front;
    results may then arrive in any order. Reconciliation, indexing and the
    file append all happen in sequence order under one lock.
    """

    def __init__(
        self,
        sink: SubtitleSink,
        reconciler: TranscriptReconciler,
        clock: SubtitleClock,
        *,
        on_entry: Callable[[CaptionEntry], None] | None = None,
        recent_limit: int = 100,
    ) -> None:
        self.sink = sink
        self.reconciler = reconciler
        self.clock = clock
        self.on_entry = on_entry
        self._lock = threading.Lock()
        self._slots: dict[int, _Slot] = {}
        self._next_seq = 0
        self._released = 0
        self.count = 0
        self.recent: deque[CaptionEntry] = deque(maxlen=recent_limit)

    def reserve(self, end_ms: int) -> int:
        with self._lock:
            seq = self._next_seq
            self._next_seq += 1
            self._slots[seq] = _Slot(end_ms=end_ms)
            return seq

    def complete(self, seq: int, text: str) -> None:
        self._settle(seq, text)

    def skip(self, seq: int) -> None:
        self._settle(seq, None)

    @property
    def pending(self) -> int:
        with self._lock:
            return self._next_seq - self._released

    @property
    def last(self) -> CaptionEntry | None:
        return self.recent[-1] if self.recent else None

    def _settle(self, seq: int, text: str | None) -> None:
        with self._lock:
            slot = self._slots.get(seq)
            if slot is None or slot.done:
                raise ValueError(f"sequence {seq} was not reserved or is already settled")
            slot.done = True
            slot.text = text
            while self._released in self._slots and self._slots[self._released].done:
                ready = self._slots.pop(self._released)
                self._released += 1
                if ready.text is None:
                    continue
                confirmed = self.reconciler.push(ready.text)
                if confirmed:
                    self._write(confirmed, ready.end_ms)

    def _write(self, text: str, end_ms: int) -> CaptionEntry | None:
        begin, end = self.clock.stamp(end_ms)
        entry = CaptionEntry(index=self.sink.next_index, begin_ms=begin, end_ms=end, text=text)
        try:
            self.sink.append(entry)
        except WriteSubtitlesFailed as exc:
            LOGGER.error("Caption %d dropped: %s", entry.index, exc)
            return None
        self.count += 1
        self.recent.append(entry)
        if self.on_entry:
            self.on_entry(entry)
        return entry


__all__ = ["OrderedCaptionWriter", "SubtitleSink"]
