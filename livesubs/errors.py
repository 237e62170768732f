"""Error kinds raised by the captioning pipeline."""

from __future__ import annotations


class CaptionError(Exception):
    """Base class; ``kind`` names the failure for logs and metrics."""

    kind = "caption_error"


class SegmentationFailed(CaptionError):
    kind = "segmentation_failed"


class ReadFailed(CaptionError):
    kind = "read_failed"


class EngineUnavailable(CaptionError):
    """The shared recognizer was busy with a previous decode."""

    kind = "engine_unavailable"


class TranscriptionFailed(CaptionError):
    kind = "transcription_failed"


class WriteSubtitlesFailed(CaptionError):
    kind = "write_subtitles_failed"


class NoInputDevice(CaptionError):
    kind = "no_input_device"


class NoInputStream(CaptionError):
    kind = "no_input_stream"


class CreateRecordingFailed(CaptionError):
    kind = "create_recording_failed"


__all__ = [
    "CaptionError",
    "SegmentationFailed",
    "ReadFailed",
    "EngineUnavailable",
    "TranscriptionFailed",
    "WriteSubtitlesFailed",
    "NoInputDevice",
    "NoInputStream",
    "CreateRecordingFailed",
]
