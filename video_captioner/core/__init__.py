"""Core caption processing — IR types, text heuristics, splitting, validation."""

from video_captioner.core.ir import (
    CaptionLanguage,
    ProcessedCaption,
    ProcessingOptions,
    RawSegment,
)
from video_captioner.core.processor import process_raw_captions, validate_and_sort_captions
from video_captioner.core.styles import CaptionStyle, parse_caption_style
from video_captioner.core.text import (
    clean_caption_text,
    count_words,
    detect_language,
    validate_caption_text,
)
from video_captioner.core.timeline import build_render_props

__all__ = [
    "CaptionLanguage",
    "CaptionStyle",
    "ProcessedCaption",
    "ProcessingOptions",
    "RawSegment",
    "build_render_props",
    "clean_caption_text",
    "count_words",
    "detect_language",
    "parse_caption_style",
    "process_raw_captions",
    "validate_and_sort_captions",
    "validate_caption_text",
]
