"""Segment splitting and duration enforcement for caption cues.

WHY: Recognition segments are often too long to read as a single caption
(a 20-word run-on, a 12-second block) or too short to read at all (a
half-second "hi"). Captions need a word ceiling, a duration ceiling, and a
duration floor.

HOW: should_split() checks the ceilings. split_caption() partitions the
whitespace tokens into groups of at most max_words_per_line and spreads
the caption's duration across groups proportionally to token count.
adjust_caption_timing() extends short cues symmetrically.

RULES:
- Split chunks tile the original interval: chunk[0].start == original.start,
  chunk[i].end == chunk[i+1].start, chunk[-1].end == original.end
- Per-word timing is an approximation (uniform word duration); there are
  no word-level timestamps at this stage
- Intermediate chunk ends are rounded to 2 decimals; the last chunk's end is
  forced to the original end to absorb drift
- adjust_caption_timing() clamps start at 0 but never clamps end against
  the next cue, so adjacent cues may overlap slightly
- Inputs are never mutated; new ProcessedCaption objects are returned
"""

from __future__ import annotations

import dataclasses
import math

from video_captioner.core.ir import ProcessedCaption, ProcessingOptions


def round_time(seconds: float) -> float:
    """Round seconds to 2 decimals, halves rounding up."""
    return math.floor(seconds * 100 + 0.5) / 100


def should_split(caption: ProcessedCaption, options: ProcessingOptions) -> bool:
    """True if the caption exceeds the word or duration ceiling."""
    return (
        caption.word_count > options.max_words_per_line
        or caption.duration > options.max_line_duration
    )


def split_caption(
    caption: ProcessedCaption,
    options: ProcessingOptions,
) -> list[ProcessedCaption]:
    """Split a long caption into consecutive chunks.

    WHY: Long captions cover too much of the frame and outrun the viewer.
    Chunking by word count with proportional timing keeps each cue short
    without word-level timestamps.

    HOW: avg_word_duration = duration / token_count. Each chunk ends at
    round_time(chunk_start + n_words * avg_word_duration) and that end
    becomes the next chunk's start. The final chunk ends at the original end.

    RULES:
    - Every chunk holds at most max_words_per_line tokens
    - Chunks inherit language and confidence from the original
    - word_count on a chunk is its token count
    - A caption split only for duration, with few enough words, comes back
      as a single chunk spanning the original interval

    Args:
        caption: The caption to split.
        options: Processing options (max_words_per_line is used).

    Returns:
        The chunks in time order.
    """
    words = caption.text.split()
    if not words:
        return []

    avg_word_duration = caption.duration / len(words)
    max_words = max(1, options.max_words_per_line)

    chunks: list[ProcessedCaption] = []
    chunk_start = caption.start_time

    for offset in range(0, len(words), max_words):
        group = words[offset:offset + max_words]
        is_last = offset + max_words >= len(words)
        if is_last:
            chunk_end = caption.end_time
        else:
            chunk_end = round_time(chunk_start + len(group) * avg_word_duration)

        chunks.append(ProcessedCaption(
            start_time=chunk_start,
            end_time=chunk_end,
            text=" ".join(group),
            language=caption.language,
            word_count=len(group),
            confidence=caption.confidence,
        ))
        chunk_start = chunk_end

    return chunks


def adjust_caption_timing(
    caption: ProcessedCaption,
    options: ProcessingOptions,
) -> ProcessedCaption:
    """Extend a too-short caption to the minimum display duration.

    The shortfall is split evenly before and after the cue. The start is
    clamped at 0; the end is not clamped.
    """
    duration = caption.duration
    if duration >= options.min_line_duration:
        return caption

    extension = (options.min_line_duration - duration) / 2
    return dataclasses.replace(
        caption,
        start_time=max(0.0, caption.start_time - extension),
        end_time=caption.end_time + extension,
    )
