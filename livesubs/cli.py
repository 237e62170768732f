"""Command-line entry point: ``livesubs {rt|realtime}`` / ``livesubs {pr|postrecord} AUDIO``."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Sequence

from .engine import build_recognizer
from .errors import CaptionError
from .pipeline.batch import default_subtitle_path, transcribe_file
from .pipeline.realtime import build_coordinator
from .settings import CaptionSettings, get_settings

LOGGER = logging.getLogger("livesubs.cli")

REALTIME_COMMANDS = ("realtime", "rt")
POSTRECORD_COMMANDS = ("postrecord", "pr")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="livesubs",
        description="Write SubRip captions for live or prerecorded 16 kHz mono speech.",
    )
    parser.add_argument("--window-seconds", type=float, help="Audio per recognition window.")
    parser.add_argument(
        "--segmentation",
        choices=("fixed", "silence"),
        help="Window policy for prerecorded audio (default: fixed).",
    )
    parser.add_argument(
        "--mode",
        choices=("cumulative", "per_window"),
        help="How recognizer output is reconciled (default: cumulative).",
    )
    parser.add_argument("--mock", action="store_true", help="Use the mock recognizer.")
    parser.add_argument("--log-level", help="Logging level (default: INFO).")

    commands = parser.add_subparsers(dest="command", required=True, metavar="{realtime,rt,postrecord,pr}")
    realtime = commands.add_parser("realtime", aliases=["rt"], help="Caption the default microphone.")
    realtime.add_argument("subtitle_path", nargs="?", type=Path, help="Subtitle file to write.")
    postrecord = commands.add_parser("postrecord", aliases=["pr"], help="Caption an audio file.")
    postrecord.add_argument("audio_path", type=Path, help="Mono 16 kHz audio file.")
    postrecord.add_argument(
        "subtitle_path",
        nargs="?",
        type=Path,
        help="Subtitle file to write (default: audio path with .srt).",
    )
    return parser


def resolve_settings(args: argparse.Namespace, base: CaptionSettings | None = None) -> CaptionSettings:
    base = base or get_settings()
    overrides = {}
    if args.window_seconds is not None:
        overrides["window_seconds"] = args.window_seconds
    if args.segmentation:
        overrides["segmentation"] = args.segmentation
    if args.mode:
        overrides["reconcile_mode"] = args.mode
    if args.mock:
        overrides["engine_mock"] = True
    if args.log_level:
        overrides["log_level"] = args.log_level.upper()
    if not overrides:
        return base
    return CaptionSettings.model_validate({**base.model_dump(), **overrides})


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        settings = resolve_settings(args)
    except ValueError as exc:
        parser.error(str(exc))
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        recognizer = build_recognizer(settings)
        if args.command in POSTRECORD_COMMANDS:
            subtitle_path = args.subtitle_path or default_subtitle_path(args.audio_path)
            result = transcribe_file(args.audio_path, recognizer, settings, subtitle_path)
            LOGGER.info("Subtitles written to %s (%d captions)", subtitle_path, len(result.captions))
        else:
            subtitle_path = args.subtitle_path or Path(settings.realtime_subtitles_path)
            recognizer.warm_up()
            coordinator = build_coordinator(recognizer, settings, str(subtitle_path))
            coordinator.run_forever()
    except CaptionError as exc:
        LOGGER.error("%s: %s", exc.kind, exc)
        return 1
    return 0


__all__ = ["build_parser", "main", "resolve_settings"]
