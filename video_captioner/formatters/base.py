"""Abstract base formatter, output container, and shared timestamp rendering.

WHY: Every export format consumes the same ProcessedCaption list but
produces different file content. This base class enforces a consistent
interface so the CLI and the HTTP API can work with any formatter
generically. Subtitle formats also share one timestamp routine so the
same seconds value renders identically in every file.

HOW: BaseFormatter is an ABC with two requirements — a ``name`` property
and a ``format()`` method. FormatterOutput is a plain dataclass that
bundles a file suffix with its content and MIME type. format_timestamp()
is the single HH:MM:SS<sep>mmm renderer.

RULES:
- Subclasses MUST implement ``name`` (human-readable) and ``format()``
- ``format()`` returns a list of FormatterOutput (one item for every
  built-in format)
- ``suffix`` starts with a hyphen or dot, e.g. ``".srt"``
- Formatters never mutate or reorder the caption list
- Milliseconds are floored, never rounded
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass

from video_captioner.core.ir import ProcessedCaption


def format_timestamp(seconds: float, separator: str) -> str:
    """Render seconds as HH:MM:SS<separator>mmm.

    Hours, minutes, and seconds come from floor division; milliseconds are
    floor((seconds mod 1) * 1000). Each field is zero padded.
    """
    hours = math.floor(seconds / 3600)
    minutes = math.floor((seconds % 3600) / 60)
    secs = math.floor(seconds % 60)
    millis = math.floor((seconds % 1) * 1000)
    return "{:02d}:{:02d}:{:02d}{}{:03d}".format(hours, minutes, secs, separator, millis)


@dataclass
class FormatterOutput:
    """One output file produced by a formatter.

    Attributes:
        suffix: File suffix appended to the source stem,
                e.g. ``".srt"`` → ``"interview.srt"``.
        content: The file content.
        media_type: MIME type for the content, e.g. ``"application/x-subrip"``.
    """

    suffix: str
    content: str
    media_type: str


class BaseFormatter(ABC):
    """Abstract base for all caption export formatters.

    To add a new export format:
    1. Create a new file in formatters/
    2. Subclass BaseFormatter
    3. Implement format() and name
    4. Register in FORMATTERS dict in formatters/__init__.py
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable format name, e.g. 'SubRip (SRT)'."""

    @abstractmethod
    def format(self, captions: Sequence[ProcessedCaption]) -> list[FormatterOutput]:
        """Serialize captions into one or more output files.

        Args:
            captions: Processed captions in display order.

        Returns:
            List of FormatterOutput objects.
        """
