"""Shared test fixtures for the video_captioner test suite.

WHY: Several test modules need the same recognition response and the
same processed caption list. Centralizing them here keeps expected
timestamps and texts consistent across the processor, formatter, API,
and CLI tests.

HOW: Pytest fixtures provide a verbose transcription response (as the
hosted Whisper API returns it), the raw segments it adapts to, and a
hand-built list of processed captions with known export output.

RULES:
- Caption times are chosen so timestamps render exactly (no float drift
  in the millisecond field)
- The mixed-script caption exercises Devanagari in every export format
"""

from typing import Any, Dict, List

import pytest

from video_captioner.core.ir import CaptionLanguage, ProcessedCaption, RawSegment


# ---------------------------------------------------------------------------
# Recognition response
# ---------------------------------------------------------------------------

WHISPER_RESPONSE: Dict[str, Any] = {
    "task": "transcribe",
    "language": "english",
    "duration": 9.5,
    "text": "Hello everyone. [music] Welcome to the show.",
    "segments": [
        {"id": 0, "start": 0.0, "end": 2.0, "text": " Hello everyone.", "avg_logprob": -0.1},
        {"id": 1, "start": 2.0, "end": 4.0, "text": " [music]", "avg_logprob": -0.5},
        {"id": 2, "start": 4.5, "end": 5.0, "text": " Welcome to the show.", "avg_logprob": -0.2},
    ],
}


def make_caption(
    start: float,
    end: float,
    text: str,
    language: CaptionLanguage = CaptionLanguage.PRIMARY,
    word_count: int = 0,
    confidence: float = None,
) -> ProcessedCaption:
    """Build a ProcessedCaption with a sensible default word count."""
    return ProcessedCaption(
        start_time=start,
        end_time=end,
        text=text,
        language=language,
        word_count=word_count or len(text.split()),
        confidence=confidence,
    )


@pytest.fixture(name="make_caption")
def make_caption_fixture():
    """The make_caption factory, for tests that build their own captions."""
    return make_caption


@pytest.fixture
def whisper_response():
    """A verbose transcription response with one silence marker."""
    return {
        **WHISPER_RESPONSE,
        "segments": [dict(s) for s in WHISPER_RESPONSE["segments"]],
    }


@pytest.fixture
def raw_segments():
    """Raw segments in recognition order, including noise the processor drops."""
    return [
        RawSegment(start=0.0, end=2.0, text="Hello   everyone!!"),
        RawSegment(start=3.0, end=4.0, text="   "),
        RawSegment(start=4.0, end=6.0, text=None),
        RawSegment(start=6.0, end=8.5, text="नमस्ते दोस्तों"),
    ]


@pytest.fixture
def sample_captions():
    """Three processed captions with exact, drift-free timestamps."""
    return [
        make_caption(0.0, 2.5, "Hello everyone.", confidence=0.9),
        make_caption(2.5, 5.25, "Welcome to the show."),
        make_caption(
            65.0, 3725.125, "आज hum baat karenge",
            language=CaptionLanguage.MIXED, word_count=5,
        ),
    ]
