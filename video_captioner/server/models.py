"""Pydantic request/response models for the HTTP API.

WHY: The FastAPI endpoints need typed schemas for request validation,
response serialization, and automatic OpenAPI documentation. Pydantic
enforces field types at runtime and generates the JSON Schema shown in
the /docs UI.

HOW: Request and response bodies each get a model. Field names use the
camelCase wire shape (startTime, wordCount, ...) the UI already speaks.
Conversion to and from the core dataclasses lives on the models.

RULES:
- All models use Field(description=...) for OpenAPI documentation
- Caption bodies mirror ProcessedCaption.to_dict() exactly
- Response models never expose temp paths or other internals
- Python 3.9+ compatible (no PEP 604 unions, use Optional from typing)
"""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from video_captioner.config import (
    DEFAULT_MAX_LINE_DURATION,
    DEFAULT_MAX_WORDS_PER_LINE,
    DEFAULT_MIN_LINE_DURATION,
    DEFAULT_SPLIT_LONG_SEGMENTS,
)
from video_captioner.core.ir import (
    CaptionLanguage,
    ProcessedCaption,
    ProcessingOptions,
    RawSegment,
)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class ExportFormatName(str, Enum):
    """Export format identifiers; values match formatters.FORMATTERS keys."""

    srt = "srt"
    vtt = "vtt"
    json = "json"


# ---------------------------------------------------------------------------
# Shared bodies
# ---------------------------------------------------------------------------


class RawSegmentIn(BaseModel):
    """One recognition segment as submitted by a client."""

    start: float = Field(allow_inf_nan=False, description="Segment start in seconds.")
    end: float = Field(allow_inf_nan=False, description="Segment end in seconds.")
    text: Optional[str] = Field(default=None, description="Recognized text, possibly noisy.")
    confidence: Optional[float] = Field(default=None, description="Recognition confidence.")

    def to_raw_segment(self) -> RawSegment:
        return RawSegment(
            start=self.start,
            end=self.end,
            text=self.text,
            confidence=self.confidence,
        )


class ProcessingOptionsIn(BaseModel):
    """Caption processing options; omitted fields use the configured defaults."""

    maxWordsPerLine: int = Field(
        default=DEFAULT_MAX_WORDS_PER_LINE,
        ge=1,
        description="Word ceiling per caption.",
    )
    maxLineDuration: float = Field(
        default=DEFAULT_MAX_LINE_DURATION,
        gt=0,
        description="Duration ceiling in seconds.",
    )
    minLineDuration: float = Field(
        default=DEFAULT_MIN_LINE_DURATION,
        ge=0,
        description="Duration floor in seconds.",
    )
    splitLongSegments: bool = Field(
        default=DEFAULT_SPLIT_LONG_SEGMENTS,
        description="Split captions over a ceiling.",
    )

    def to_options(self) -> ProcessingOptions:
        return ProcessingOptions(
            max_words_per_line=self.maxWordsPerLine,
            max_line_duration=self.maxLineDuration,
            min_line_duration=self.minLineDuration,
            split_long_segments=self.splitLongSegments,
        )


class CaptionBody(BaseModel):
    """A processed caption in wire shape."""

    startTime: float = Field(ge=0, allow_inf_nan=False, description="Cue start in seconds.")
    endTime: float = Field(ge=0, allow_inf_nan=False, description="Cue end in seconds.")
    text: str = Field(min_length=1, description="Cleaned caption text.")
    language: CaptionLanguage = Field(description="Script class: en-US, hi-IN, or mixed.")
    wordCount: int = Field(ge=0, description="Approximate word count.")
    confidence: Optional[float] = Field(default=None, description="Recognition confidence.")

    @classmethod
    def from_caption(cls, caption: ProcessedCaption) -> CaptionBody:
        return cls(**caption.to_dict())

    def to_caption(self) -> ProcessedCaption:
        return ProcessedCaption(
            start_time=self.startTime,
            end_time=self.endTime,
            text=self.text,
            language=self.language,
            word_count=self.wordCount,
            confidence=self.confidence,
        )


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class ProcessRequest(BaseModel):
    """Raw segments to turn into captions."""

    segments: List[RawSegmentIn] = Field(description="Recognition segments in source order.")
    options: Optional[ProcessingOptionsIn] = Field(
        default=None,
        description="Processing options. Defaults apply when omitted.",
    )


class ExportRequest(BaseModel):
    """Captions to serialize."""

    captions: List[CaptionBody] = Field(description="Processed captions in display order.")


class ValidateTextRequest(BaseModel):
    """Caption text to check before saving an edit."""

    text: str = Field(description="User-edited caption text.")


class RenderPropsRequest(BaseModel):
    """Captions and composition settings to hand to the video renderer."""

    videoPath: str = Field(min_length=1, description="Source video location as the renderer sees it.")
    captions: List[CaptionBody] = Field(description="Processed captions, in any order.")
    style: str = Field(default="default", description="Caption style: default, newsbar, or karaoke.")
    width: int = Field(default=1920, gt=0, description="Output width in pixels.")
    height: int = Field(default=1080, gt=0, description="Output height in pixels.")
    fps: int = Field(default=30, gt=0, description="Output frame rate.")


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class CaptionListResponse(BaseModel):
    """Processed captions and their count."""

    captions: List[CaptionBody] = Field(description="Captions sorted by start time.")
    count: int = Field(description="Number of captions.")


class ValidateTextResponse(BaseModel):
    """Result of a caption text check."""

    valid: bool = Field(description="True if the text can be stored as a caption.")
    cleaned: str = Field(description="Text after cleaning.")
    language: CaptionLanguage = Field(description="Detected script class.")
    wordCount: int = Field(description="Approximate word count of the cleaned text.")


class JobCreatedResponse(BaseModel):
    """Response returned when a caption-generation job is submitted."""

    id: str = Field(description="Unique job identifier for polling status.")
    status: str = Field(description="Initial job status (always 'pending').")
    filename: str = Field(description="Uploaded filename.")


class JobResponse(BaseModel):
    """Caption-generation job status."""

    id: str = Field(description="Unique job identifier.")
    status: str = Field(description="Current job status.")
    filename: str = Field(description="Uploaded filename.")
    created_at: float = Field(description="Job creation timestamp (Unix epoch seconds).")
    options: ProcessingOptionsIn = Field(description="Processing options used for this job.")
    error: Optional[str] = Field(
        default=None,
        description="Error message, only present when status is 'failed'.",
    )
    caption_count: Optional[int] = Field(
        default=None,
        description="Number of captions, only present when status is 'completed'.",
    )


class StyleInfo(BaseModel):
    """A caption presentation style."""

    value: str = Field(description="Style identifier used in render requests.")
    label: str = Field(description="Human-readable style name.")
    description: str = Field(description="What the style looks like.")


class FormatInfo(BaseModel):
    """Description of an available export format."""

    key: str = Field(description="Format identifier used in API requests.")
    name: str = Field(description="Human-readable format name.")
    suffix: str = Field(description="File suffix produced (e.g. '.srt').")
    media_type: str = Field(description="MIME type of the exported content.")


class ErrorResponse(BaseModel):
    """Standard error response body."""

    detail: str = Field(description="Human-readable error description.")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(description="Service health status.", json_schema_extra={"example": "ok"})
    version: str = Field(description="API version string.", json_schema_extra={"example": "0.1.0"})
