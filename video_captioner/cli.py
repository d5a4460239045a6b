"""Command-line interface for the video captioner.

WHY: Editors want captions for a clip without running the HTTP service.
The CLI wires together the same pipeline as the service — optional
transcription, segment adaptation, caption processing, and subtitle
export — behind a single command.

HOW: Uses argparse to accept an input file, processing options, output
format selection, and output directory. A .json input is read as raw
segments (or a saved transcription response); a media file is first
transcribed through the hosted Whisper API via asyncio.run(). Status
messages go to stderr; output files are saved next to the input (or to
--output-dir).

RULES:
- Positional argument: .json segments file or a supported media file
- --formats: comma-separated formatter keys (default: all registered)
- Output naming: {stem}{suffix}, numeric suffix for conflicts (clip-2.json)
- Status output goes to stderr (not stdout)
- Exit code 1 with a message when no captions are produced
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import List, NoReturn, Optional

from video_captioner.adapters.whisper_adapter import parse_raw_segments, segments_from_whisper
from video_captioner.api.client import WhisperAPIError, transcribe_file
from video_captioner.config import (
    DEFAULT_MAX_LINE_DURATION,
    DEFAULT_MAX_WORDS_PER_LINE,
    DEFAULT_MIN_LINE_DURATION,
    DEFAULT_SPLIT_LONG_SEGMENTS,
    SUPPORTED_MEDIA_FORMATS,
)
from video_captioner.core.ir import ProcessingOptions, RawSegment
from video_captioner.core.processor import process_raw_captions
from video_captioner.formatters import FORMATTERS
from video_captioner.formatters.base import FormatterOutput


def _status(msg: str) -> None:
    """Print a status message to stderr so stdout stays pipeable."""
    print(msg, file=sys.stderr, flush=True)


def _fail(msg: str) -> NoReturn:
    print("Error: {}".format(msg), file=sys.stderr)
    sys.exit(1)


def _resolve_output_path(stem: str, suffix: str, output_dir: Path) -> Path:
    """Resolve the output file path, adding a numeric suffix on conflict.

    RULES:
    - First attempt: {stem}{suffix} (e.g. interview.srt)
    - Conflict: counter inserted before the extension (interview-2.srt)
    - Counter starts at 2 and increments
    """
    base_path = output_dir / "{}{}".format(stem, suffix)
    if not base_path.exists():
        return base_path

    dot_idx = suffix.rfind(".")
    if dot_idx >= 0:
        suffix_name = suffix[:dot_idx]
        suffix_ext = suffix[dot_idx:]
    else:
        suffix_name = suffix
        suffix_ext = ""

    counter = 2
    while True:
        candidate = output_dir / "{}{}-{}{}".format(stem, suffix_name, counter, suffix_ext)
        if not candidate.exists():
            return candidate
        counter += 1


def _save_output(output: FormatterOutput, stem: str, output_dir: Path) -> Path:
    path = _resolve_output_path(stem, output.suffix, output_dir)
    path.write_text(output.content, encoding="utf-8")
    return path


def _load_segments(input_path: Path) -> List[RawSegment]:
    """Read raw segments from a JSON file or by transcribing a media file."""
    ext = input_path.suffix.lower()

    if ext == ".json":
        _status("Reading segments from {}...".format(input_path.name))
        try:
            data = json.loads(input_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            _fail("Invalid JSON in {}: {}".format(input_path.name, e))
        return parse_raw_segments(data)

    if ext not in SUPPORTED_MEDIA_FORMATS:
        _fail("Unsupported file type '{}'. Supported formats: .json, {}".format(
            ext, ", ".join(sorted(SUPPORTED_MEDIA_FORMATS))
        ))

    try:
        response = asyncio.run(transcribe_file(input_path, on_status=_status))
    except (ValueError, WhisperAPIError, TimeoutError) as e:
        # Config errors (missing API key) and service errors
        _fail(str(e))
    return segments_from_whisper(response)


def _parse_format_keys(formats: Optional[str]) -> List[str]:
    if not formats:
        return list(FORMATTERS.keys())

    format_keys = [f.strip() for f in formats.split(",") if f.strip()]
    for key in format_keys:
        if key not in FORMATTERS:
            _fail("Unknown format '{}'. Available formats: {}".format(
                key, ", ".join(sorted(FORMATTERS.keys()))
            ))
    return format_keys


def run(args: argparse.Namespace) -> List[Path]:
    """Execute the caption pipeline for parsed arguments.

    Returns:
        Paths of the saved output files.
    """
    input_path = Path(args.input_file).resolve()
    if not input_path.is_file():
        _fail("File not found: {}".format(input_path))

    output_dir = Path(args.output_dir).resolve() if args.output_dir else input_path.parent
    if not output_dir.is_dir():
        _fail("Output directory does not exist: {}".format(output_dir))

    format_keys = _parse_format_keys(args.formats)

    segments = _load_segments(input_path)
    _status("  {} raw segments".format(len(segments)))

    options = ProcessingOptions(
        max_words_per_line=args.max_words,
        max_line_duration=args.max_duration,
        min_line_duration=args.min_duration,
        split_long_segments=args.split,
    )
    _status("Processing captions...")
    captions = process_raw_captions(segments, options)
    if not captions:
        _fail("No captions were generated from {}".format(input_path.name))
    _status("  {} captions".format(len(captions)))

    saved_files: List[Path] = []
    for key in format_keys:
        formatter = FORMATTERS[key]()
        for output in formatter.format(captions):
            saved_path = _save_output(output, input_path.stem, output_dir)
            saved_files.append(saved_path)
            _status("  Saved: {}".format(saved_path.name))

    _status("")
    _status("Done! Saved {} file(s) to {}".format(len(saved_files), output_dir))
    return saved_files


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="video_captioner",
        description="Turn speech-recognition segments (or a video to transcribe) "
                    "into timed captions and export them as SRT, WebVTT, or JSON.",
    )

    parser.add_argument(
        "input_file",
        help="Path to a JSON segments file or an audio/video file to transcribe.",
    )

    parser.add_argument(
        "--formats",
        default=None,
        help="Comma-separated list of output formats. "
             "Available: {}. Default: all.".format(", ".join(sorted(FORMATTERS.keys()))),
    )

    parser.add_argument(
        "--output-dir",
        default=None,
        help="Directory to save output files (default: same as input file).",
    )

    parser.add_argument(
        "--max-words",
        type=int,
        default=DEFAULT_MAX_WORDS_PER_LINE,
        help="Maximum words per caption (default: %(default)s).",
    )

    parser.add_argument(
        "--max-duration",
        type=float,
        default=DEFAULT_MAX_LINE_DURATION,
        help="Maximum caption duration in seconds (default: %(default)s).",
    )

    parser.add_argument(
        "--min-duration",
        type=float,
        default=DEFAULT_MIN_LINE_DURATION,
        help="Minimum caption duration in seconds (default: %(default)s).",
    )

    parser.add_argument(
        "--split",
        action=argparse.BooleanOptionalAction,
        default=DEFAULT_SPLIT_LONG_SEGMENTS,
        help="Split captions that exceed the word or duration ceiling "
             "(default: %(default)s).",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for ``python -m video_captioner``.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    run(args)


if __name__ == "__main__":
    main()
