"""Caption processing pipeline: raw recognition segments to display-ready cues.

WHY: This is the single entry point the caption-generation path calls
after the recognition source returns. It turns noisy, unsorted segments
into the validated cue list that is persisted, exported, and rendered.

HOW: One pass over the input in order — clean, classify, count, then
either split (too long) or extend (too short) — followed by exactly one
validate-and-sort over everything accumulated.

RULES:
- Pure and stateless: no I/O, safe to call repeatedly and concurrently
- Malformed segments are dropped, never raised
- Segments with infinite or NaN times are skipped before rounding
- An empty result is returned as []; treating it as a failure is the
  caller's decision
- validate_and_sort_captions() is the only gate before persistence/export
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable

from video_captioner.core.ir import ProcessedCaption, ProcessingOptions, RawSegment
from video_captioner.core.segmenter import (
    adjust_caption_timing,
    round_time,
    should_split,
    split_caption,
)
from video_captioner.core.text import (
    clean_caption_text,
    count_words,
    detect_language,
    is_utf8_encodable,
)

logger = logging.getLogger(__name__)


def _is_valid(caption: ProcessedCaption) -> bool:
    if not caption.text or not caption.text.strip():
        return False
    if caption.start_time < 0 or caption.end_time < 0:
        return False
    if caption.end_time <= caption.start_time:
        return False
    return is_utf8_encodable(caption.text)


def validate_and_sort_captions(
    captions: Iterable[ProcessedCaption],
) -> list[ProcessedCaption]:
    """Drop invalid captions and sort the rest by start time.

    RULES:
    - Dropped: blank text, negative start or end, end <= start, text that
      fails a UTF-8 encode
    - Sort is stable: equal start times keep their input order
    - Returns a new list; the input is not modified
    """
    valid = [caption for caption in captions if _is_valid(caption)]
    return sorted(valid, key=lambda caption: caption.start_time)


def process_raw_captions(
    raw_segments: Iterable[RawSegment],
    options: ProcessingOptions | None = None,
) -> list[ProcessedCaption]:
    """Process raw recognition segments into validated caption cues.

    Args:
        raw_segments: Segments in recognition order.
        options: Processing options; defaults apply when None.

    Returns:
        Captions sorted by start time.
    """
    opts = options or ProcessingOptions()
    processed: list[ProcessedCaption] = []
    skipped = 0

    for segment in raw_segments:
        if not math.isfinite(segment.start) or not math.isfinite(segment.end):
            skipped += 1
            continue

        if not segment.text or not str(segment.text).strip():
            skipped += 1
            continue

        cleaned = clean_caption_text(segment.text)
        if not cleaned:
            skipped += 1
            continue

        base = ProcessedCaption(
            start_time=round_time(segment.start),
            end_time=round_time(segment.end),
            text=cleaned,
            language=detect_language(cleaned),
            word_count=count_words(cleaned),
            confidence=segment.confidence,
        )

        if opts.split_long_segments and should_split(base, opts):
            processed.extend(split_caption(base, opts))
        else:
            processed.append(adjust_caption_timing(base, opts))

    result = validate_and_sort_captions(processed)
    logger.debug(
        "Processed captions: %d kept, %d empty or non-finite segments skipped, %d invalid dropped",
        len(result), skipped, len(processed) - len(result),
    )
    return result
