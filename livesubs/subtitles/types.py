"""Caption entry shared by the clock, sink and pipelines."""

from __future__ import annotations

from dataclasses import dataclass

from .clock import format_timestamp


@dataclass(frozen=True, slots=True)
class CaptionEntry:
    index: int
    begin_ms: int
    end_ms: int
    text: str

    def __post_init__(self) -> None:
        if self.index < 1:
            raise ValueError(f"caption index must start at 1, got {self.index}")
        if self.begin_ms < 0:
            raise ValueError(f"caption {self.index} begins before zero")
        if self.end_ms <= self.begin_ms:
            raise ValueError(
                f"caption {self.index} ends at {self.end_ms} ms, not after {self.begin_ms} ms"
            )

    def to_srt(self) -> str:
        lines = [
            str(self.index),
            f"{format_timestamp(self.begin_ms)} --> {format_timestamp(self.end_ms)}",
            self.text,
            "",
        ]
        return "\n".join(lines) + "\n"


__all__ = ["CaptionEntry"]
