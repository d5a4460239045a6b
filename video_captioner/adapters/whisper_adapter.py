"""Adapter from recognition-service JSON to RawSegment lists.

WHY: The recognition source is a black box that returns a verbose JSON
transcription (segments with start/end/text) — or, from older files and
other tools, a bare list of segment objects. The processor wants a clean
list of RawSegment. This module is the only place that knows those
shapes.

HOW: segments_from_whisper() reads a verbose transcription response,
dropping silence/music markers, and falls back to one segment spanning
the whole clip when the response has no segment list. parse_raw_segments()
accepts either a response dict or a plain list.

RULES:
- Non-dict items and items with non-numeric times are skipped, not raised
- Silence markers ("[silence]", "[music]") never become segments
- Fallback segment: [0, duration] with the top-level text
- Segment confidence comes from "confidence" when present, otherwise
  exp(avg_logprob) when the service reports it
"""

from __future__ import annotations

import logging
import math
from typing import Any

from video_captioner.core.ir import RawSegment

logger = logging.getLogger(__name__)

SILENCE_MARKERS = frozenset({"[silence]", "[music]"})


def _segment_from_item(item: Any) -> RawSegment | None:
    if not isinstance(item, dict):
        return None

    text = item.get("text")
    if isinstance(text, str) and text.strip().lower() in SILENCE_MARKERS:
        return None

    try:
        segment = RawSegment.from_dict(item)
    except (TypeError, ValueError):
        logger.debug("Skipping segment with non-numeric times: %r", item)
        return None

    if segment.confidence is None and item.get("avg_logprob") is not None:
        try:
            segment.confidence = round(math.exp(float(item["avg_logprob"])), 4)
        except (TypeError, ValueError, OverflowError):
            pass
    return segment


def segments_from_whisper(response: dict[str, Any]) -> list[RawSegment]:
    """Extract raw segments from a verbose transcription response.

    Args:
        response: Parsed JSON with "segments", "text", and "duration" keys.

    Returns:
        Segments in response order (possibly empty).
    """
    items = response.get("segments")
    if isinstance(items, list) and items:
        segments = []
        for item in items:
            segment = _segment_from_item(item)
            if segment is not None:
                segments.append(segment)
        return segments

    text = response.get("text")
    if isinstance(text, str) and text.strip():
        try:
            duration = float(response.get("duration") or 0)
        except (TypeError, ValueError):
            duration = 0.0
        return [RawSegment(start=0.0, end=duration, text=text.strip())]

    return []


def parse_raw_segments(data: Any) -> list[RawSegment]:
    """Parse a segment list or a transcription response into RawSegments."""
    if isinstance(data, dict):
        return segments_from_whisper(data)

    segments = []
    if isinstance(data, list):
        for item in data:
            segment = _segment_from_item(item)
            if segment is not None:
                segments.append(segment)
    return segments
