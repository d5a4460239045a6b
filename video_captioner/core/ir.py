"""Intermediate representation dataclasses for caption processing.

WHY: Recognition services hand back loosely shaped JSON segments, the
persistence layer stores caption records, and the render pipeline and
subtitle exporters read cues. A single set of typed dataclasses keeps
all of those seams speaking the same shape.

HOW: Three dataclasses and one enum:
  RawSegment        — one recognition segment as received (no guarantees)
  ProcessedCaption  — one display-ready cue (the output unit)
  ProcessingOptions — pure parameters for splitting and timing
  CaptionLanguage   — closed set of script classes a cue can carry

RULES:
- All times are float seconds
- ProcessedCaption.to_dict() is the wire shape (camelCase keys) used by
  the JSON export, the HTTP API, and the render props
- confidence is optional and omitted from the wire shape when absent
- ProcessingOptions is frozen; defaults apply when a field is omitted
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any


class CaptionLanguage(str, enum.Enum):
    """Script class of a caption's text.

    RULES:
    - PRIMARY: Latin-script text only (or no recognizable script)
    - SECONDARY: Devanagari text only
    - MIXED: both scripts present
    - Values are the locale tags stored on caption records
    """

    PRIMARY = "en-US"
    SECONDARY = "hi-IN"
    MIXED = "mixed"


@dataclass
class RawSegment:
    """One timed segment from the speech-recognition source.

    Nothing is guaranteed: text may be None, blank, or noisy, and times may
    be out of order or degenerate. The processor filters all of that.
    """

    start: float
    end: float
    text: str | None
    confidence: float | None = None

    @classmethod
    def from_dict(cls, data: dict) -> RawSegment:
        """Build a RawSegment from a recognition JSON object.

        RULES:
        - start defaults to 0, end defaults to start
        - Raises TypeError/ValueError when a time is not numeric; callers
          that ingest untrusted lists skip such items
        """
        start = float(data.get("start", 0))
        end = float(data.get("end", start))
        confidence = data.get("confidence")
        return cls(
            start=start,
            end=end,
            text=data.get("text"),
            confidence=float(confidence) if confidence is not None else None,
        )


@dataclass
class ProcessedCaption:
    """A validated, display-ready caption cue.

    RULES:
    - start_time >= 0 and end_time > start_time once validated
    - text is cleaned, non-empty, and UTF-8 encodable
    - word_count uses the mixed-script approximation from core.text
    """

    start_time: float
    end_time: float
    text: str
    language: CaptionLanguage
    word_count: int
    confidence: float | None = None

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "startTime": self.start_time,
            "endTime": self.end_time,
            "text": self.text,
            "language": self.language.value,
            "wordCount": self.word_count,
        }
        if self.confidence is not None:
            data["confidence"] = self.confidence
        return data

    @classmethod
    def from_dict(cls, data: dict) -> ProcessedCaption:
        """Parse the wire shape produced by to_dict()."""
        return cls(
            start_time=float(data["startTime"]),
            end_time=float(data["endTime"]),
            text=data["text"],
            language=CaptionLanguage(data.get("language", CaptionLanguage.PRIMARY.value)),
            word_count=int(data.get("wordCount", 0)),
            confidence=data.get("confidence"),
        )


@dataclass(frozen=True)
class ProcessingOptions:
    """Parameters for splitting and timing adjustment.

    Contradictory values (min_line_duration > max_line_duration) are not
    validated; the caller owns that contract.
    """

    max_words_per_line: int = 10
    max_line_duration: float = 7.0
    min_line_duration: float = 1.5
    split_long_segments: bool = True

    @classmethod
    def from_env(cls) -> ProcessingOptions:
        """Options seeded from the CAPTION_* environment overrides."""
        from video_captioner import config

        return cls(
            max_words_per_line=config.DEFAULT_MAX_WORDS_PER_LINE,
            max_line_duration=config.DEFAULT_MAX_LINE_DURATION,
            min_line_duration=config.DEFAULT_MIN_LINE_DURATION,
            split_long_segments=config.DEFAULT_SPLIT_LONG_SEGMENTS,
        )
