"""Text cleaning, script detection, and word counting for caption text.

WHY: Recognition output carries transcription artifacts (stray periods
after initials, "!!!", uneven spacing) and mixes Latin and Devanagari
script freely (Hinglish). Every downstream decision — splitting by word
count, font choice in the render, the language tag on the record — needs
clean text and a cheap, deterministic read on which scripts it contains.

HOW: Compiled regexes applied in a fixed order. Script detection and the
Latin word pattern use ASCII word boundaries so a Latin word touching a
Devanagari character still counts as a word.

RULES:
- clean_caption_text() returns "" for None, non-str, or blank input;
  callers treat "" as "drop this segment"
- detect_language() is a heuristic, not a language model
- count_words() approximates Devanagari words as ceil(chars / 6); anything
  that is not a Latin letter or whitespace (including punctuation and
  digits) counts toward that remainder
"""

from __future__ import annotations

import math
import re

from video_captioner.core.ir import CaptionLanguage

# =============================================================================
# Patterns
# =============================================================================

DEVANAGARI_RE = re.compile(r"[\u0900-\u097F]")
LATIN_WORD_RE = re.compile(r"\b[a-zA-Z]+\b", re.ASCII)

_WHITESPACE_RE = re.compile(r"\s+")
_INITIAL_PERIOD_RE = re.compile(r"\b([A-Z])\.", re.ASCII)
_REPEATED_PUNCT_RE = re.compile(r"([.!?])\1+")
_PUNCT_SPACING_RE = re.compile(r"\s*([,.!?\u0964])\s*")
_LATIN_OR_SPACE_RE = re.compile(r"[a-zA-Z\s]")

AVG_SECONDARY_WORD_CHARS = 6


# =============================================================================
# Cleaning
# =============================================================================

def clean_caption_text(text: str | None) -> str:
    """Clean and normalize raw caption text.

    Steps, in order: trim, collapse whitespace, drop the period after a
    single uppercase letter ("U.S." -> "US"), collapse repeated sentence
    punctuation, normalize spacing around , . ! ? and the Devanagari danda
    to "punctuation + single space", trim again.

    Args:
        text: Raw segment text.

    Returns:
        Cleaned text, or "" when nothing meaningful remains.
    """
    if not text or not isinstance(text, str):
        return ""

    cleaned = _WHITESPACE_RE.sub(" ", text.strip())
    cleaned = _INITIAL_PERIOD_RE.sub(r"\1", cleaned)
    cleaned = _WHITESPACE_RE.sub(" ", cleaned)
    cleaned = _REPEATED_PUNCT_RE.sub(r"\1", cleaned)
    cleaned = _PUNCT_SPACING_RE.sub(r"\1 ", cleaned)
    return cleaned.strip()


def is_utf8_encodable(text: str) -> bool:
    """True if text survives a UTF-8 encode (no lone surrogates)."""
    try:
        text.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


def validate_caption_text(text: str | None) -> bool:
    """Check that user-supplied caption text is worth storing.

    WHY: The caption edit path replaces records wholesale with user text.
    It needs the same gate the processor applies to recognition output.

    RULES:
    - False for None, non-str, or text that cleans to ""
    - False when the cleaned text is not UTF-8 encodable
    """
    if not text or not isinstance(text, str):
        return False
    cleaned = clean_caption_text(text)
    if len(cleaned) < 1:
        return False
    return is_utf8_encodable(cleaned)


# =============================================================================
# Script detection and word counting
# =============================================================================

def detect_language(text: str) -> CaptionLanguage:
    """Classify caption text as primary, secondary, or mixed script.

    RULES:
    - Devanagari and a Latin word both present -> MIXED
    - Devanagari only -> SECONDARY
    - Anything else, including "" -> PRIMARY
    """
    has_secondary = bool(DEVANAGARI_RE.search(text or ""))
    has_primary = bool(LATIN_WORD_RE.search(text or ""))

    if has_secondary and has_primary:
        return CaptionLanguage.MIXED
    if has_secondary:
        return CaptionLanguage.SECONDARY
    return CaptionLanguage.PRIMARY


def count_words(text: str) -> int:
    """Count words across Latin and Devanagari script.

    Latin words are matched by pattern. Devanagari has no reliable word
    boundaries in short clips, so the rest of the text (minus Latin letters
    and whitespace) is divided by AVG_SECONDARY_WORD_CHARS, rounded up.
    """
    if not text:
        return 0

    latin_words = LATIN_WORD_RE.findall(text)
    remainder = _LATIN_OR_SPACE_RE.sub("", text)
    secondary_words = (
        math.ceil(len(remainder) / AVG_SECONDARY_WORD_CHARS) if remainder else 0
    )
    return len(latin_words) + secondary_words
