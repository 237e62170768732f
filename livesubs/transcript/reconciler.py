"""Reduce evolving recognizer output to newly confirmed caption text.

Recognizers revise the last, partially heard word as more audio arrives, so
each step only confirms text up to the last word boundary and keeps the rest
as an unstable tail until a later step (or the end of the stream) settles it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

LOGGER = logging.getLogger("livesubs.reconciler")


class ReconcileMode(str, Enum):
    CUMULATIVE = "cumulative"
    PER_WINDOW = "per_window"


@dataclass(slots=True)
class TranscriptState:
    """Full text seen on the previous step of one recognition session."""

    previous: str = " "


def _last_boundary(text: str) -> int:
    idx = text.rfind(" ")
    return idx if idx >= 0 else 0


def reconcile(state: TranscriptState, new_full_text: str) -> str:
    """Return the confirmed new suffix of a cumulative transcript.

    An empty string means nothing new is stable yet.
    """
    boundary = _last_boundary(state.previous)
    state.previous = new_full_text
    candidate = new_full_text[boundary:]
    candidate = candidate[: _last_boundary(candidate)]
    return candidate.strip()


def flush(state: TranscriptState, new_full_text: str) -> str:
    """Like ``reconcile`` but keeps the trailing word; use for the last step of a stream."""
    boundary = _last_boundary(state.previous)
    state.previous = new_full_text
    return new_full_text[boundary:].strip()


def merge_window(state: TranscriptState, window_text: str) -> str:
    """Drop the words of ``window_text`` already heard at the end of the previous window."""
    previous_words = state.previous.split()
    words = window_text.split()
    state.previous = window_text
    overlap = _word_overlap(previous_words, words)
    return " ".join(words[overlap:])


def _word_overlap(previous: list[str], current: list[str]) -> int:
    folded_prev = [word.casefold() for word in previous]
    folded_cur = [word.casefold() for word in current]
    for size in range(min(len(folded_prev), len(folded_cur)), 0, -1):
        if folded_prev[-size:] == folded_cur[:size]:
            return size
    return 0


class TranscriptReconciler:
    """Per-session reconciler; one instance must never be shared between sessions."""

    def __init__(self, mode: ReconcileMode | str = ReconcileMode.CUMULATIVE) -> None:
        self.mode = ReconcileMode(mode)
        self.state = TranscriptState()

    def push(self, text: str) -> str:
        if self.mode is ReconcileMode.PER_WINDOW:
            confirmed = merge_window(self.state, text)
        else:
            confirmed = reconcile(self.state, text)
        LOGGER.debug("Confirmed %r from %r", confirmed, text)
        return confirmed

    def finish(self, text: str) -> str:
        if self.mode is ReconcileMode.PER_WINDOW:
            return merge_window(self.state, text)
        confirmed = flush(self.state, text)
        LOGGER.debug("Flushed %r from %r", confirmed, text)
        return confirmed

    def reset(self) -> None:
        self.state = TranscriptState()


__all__ = [
    "ReconcileMode",
    "TranscriptReconciler",
    "TranscriptState",
    "flush",
    "merge_window",
    "reconcile",
]
