"""SubRip (SRT) caption export.

WHY: SRT is the most widely accepted sidecar subtitle format — every
editor, player, and upload form takes it.

HOW: One block per caption: 1-based sequence number, a
``HH:MM:SS,mmm --> HH:MM:SS,mmm`` line, the caption text, and a trailing
newline. Blocks are joined with a blank line.

RULES:
- Comma millisecond separator
- Captions are written in the order given; no re-timing, no overlap fixing
- Empty caption list produces ""
"""

from __future__ import annotations

from collections.abc import Sequence

from video_captioner.core.ir import ProcessedCaption
from video_captioner.formatters.base import BaseFormatter, FormatterOutput, format_timestamp


def format_srt_time(seconds: float) -> str:
    return format_timestamp(seconds, ",")


def export_to_srt(captions: Sequence[ProcessedCaption]) -> str:
    blocks = []
    for index, caption in enumerate(captions, 1):
        blocks.append("{}\n{} --> {}\n{}\n".format(
            index,
            format_srt_time(caption.start_time),
            format_srt_time(caption.end_time),
            caption.text,
        ))
    return "\n".join(blocks)


class SRTFormatter(BaseFormatter):
    """Formatter that produces a single .srt file."""

    @property
    def name(self) -> str:
        return "SubRip (SRT)"

    def format(self, captions: Sequence[ProcessedCaption]) -> list[FormatterOutput]:
        return [
            FormatterOutput(
                suffix=".srt",
                content=export_to_srt(captions),
                media_type="application/x-subrip",
            )
        ]
