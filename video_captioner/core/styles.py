"""Caption presentation styles and overlay text helpers.

WHY: The render pipeline draws captions in one of a small, closed set of
presentation styles. The API must reject unknown style names before a
render is queued, and the overlay needs wrapped lines and a script class
for each cue. Keeping those rules here lets the service and the render
props builder agree on them.

HOW: CaptionStyle is a str enum so values serialize cleanly to JSON.
Labels and descriptions are plain dicts keyed by style. wrap_caption_text()
is a greedy word wrap.

RULES:
- Styles: default, newsbar, karaoke — no others
- parse_caption_style() raises ValueError listing the valid styles
- classify_script() is character-level (any ASCII letter counts), unlike
  core.text.detect_language() which needs a whole Latin word
"""

from __future__ import annotations

import enum
import re


class CaptionStyle(str, enum.Enum):
    """Presentation styles understood by the render pipeline."""

    DEFAULT = "default"
    NEWSBAR = "newsbar"
    KARAOKE = "karaoke"


STYLE_LABELS: dict[CaptionStyle, str] = {
    CaptionStyle.DEFAULT: "Default",
    CaptionStyle.NEWSBAR: "News Bar",
    CaptionStyle.KARAOKE: "Karaoke",
}

STYLE_DESCRIPTIONS: dict[CaptionStyle, str] = {
    CaptionStyle.DEFAULT: "Classic bottom-centered captions",
    CaptionStyle.NEWSBAR: "Ticker-style scrolling captions",
    CaptionStyle.KARAOKE: "Highlighted text that follows speech",
}

# Characters per overlay line. Newsbar scrolls and karaoke highlights word
# by word, so neither wraps.
STYLE_LINE_WIDTHS: dict[CaptionStyle, int | None] = {
    CaptionStyle.DEFAULT: 50,
    CaptionStyle.NEWSBAR: None,
    CaptionStyle.KARAOKE: None,
}

_DEVANAGARI_CHAR_RE = re.compile(r"[\u0900-\u097F]")
_LATIN_CHAR_RE = re.compile(r"[a-zA-Z]")


def is_valid_caption_style(value: str) -> bool:
    return value in {style.value for style in CaptionStyle}


def parse_caption_style(value: str) -> CaptionStyle:
    """Resolve a style name, raising ValueError for anything unknown."""
    if not is_valid_caption_style(value):
        raise ValueError(
            "Invalid caption style '{}'. Must be one of: {}".format(
                value, ", ".join(style.value for style in CaptionStyle)
            )
        )
    return CaptionStyle(value)


def classify_script(text: str) -> str:
    """Return "hindi", "english", or "mixed" for overlay font selection."""
    has_hindi = bool(_DEVANAGARI_CHAR_RE.search(text))
    has_english = bool(_LATIN_CHAR_RE.search(text))

    if has_hindi and has_english:
        return "mixed"
    if has_hindi:
        return "hindi"
    return "english"


def wrap_caption_text(text: str, max_chars_per_line: int = 40) -> list[str]:
    """Greedy word wrap for overlay lines.

    RULES:
    - Words are separated by single spaces (cleaned caption text)
    - A line never exceeds max_chars_per_line unless it holds one word
      that is longer on its own
    """
    lines: list[str] = []
    current = ""

    for word in text.split(" "):
        if len(current + " " + word) <= max_chars_per_line:
            current = current + " " + word if current else word
        elif current:
            lines.append(current)
            current = word
        else:
            lines.append(word)

    if current:
        lines.append(current)
    return lines


def overlay_lines(text: str, style: CaptionStyle) -> list[str]:
    """Lines the overlay draws for a cue in the given style."""
    width = STYLE_LINE_WIDTHS[style]
    if width is None:
        return [text]
    return wrap_caption_text(text, width)
