"""WebVTT caption export.

WHY: Browsers play WebVTT natively through <track>, so the web preview
and any HTML5 player use this format.

HOW: A ``WEBVTT`` header followed by one cue per caption: a
``HH:MM:SS.mmm --> HH:MM:SS.mmm`` line and the caption text. Cues are
joined with a blank line. No cue identifiers are written.

RULES:
- Period millisecond separator
- Timestamps are byte-identical to SRT apart from the separator
- Empty caption list produces just the header
"""

from __future__ import annotations

from collections.abc import Sequence

from video_captioner.core.ir import ProcessedCaption
from video_captioner.formatters.base import BaseFormatter, FormatterOutput, format_timestamp

VTT_HEADER = "WEBVTT\n\n"


def format_vtt_time(seconds: float) -> str:
    return format_timestamp(seconds, ".")


def export_to_vtt(captions: Sequence[ProcessedCaption]) -> str:
    cues = [
        "{} --> {}\n{}\n".format(
            format_vtt_time(caption.start_time),
            format_vtt_time(caption.end_time),
            caption.text,
        )
        for caption in captions
    ]
    return VTT_HEADER + "\n".join(cues)


class VTTFormatter(BaseFormatter):
    """Formatter that produces a single .vtt file."""

    @property
    def name(self) -> str:
        return "WebVTT"

    def format(self, captions: Sequence[ProcessedCaption]) -> list[FormatterOutput]:
        return [
            FormatterOutput(
                suffix=".vtt",
                content=export_to_vtt(captions),
                media_type="text/vtt",
            )
        ]
