"""Tests for adapting recognition-service JSON to RawSegment lists."""

import pytest

from video_captioner.adapters.whisper_adapter import parse_raw_segments, segments_from_whisper
from video_captioner.core.ir import RawSegment
from video_captioner.core.processor import process_raw_captions


class TestSegmentsFromWhisper:

    def test_silence_markers_are_dropped(self, whisper_response):
        segments = segments_from_whisper(whisper_response)
        assert [s.text for s in segments] == [" Hello everyone.", " Welcome to the show."]

    def test_confidence_from_avg_logprob(self, whisper_response):
        segments = segments_from_whisper(whisper_response)
        assert segments[0].confidence == pytest.approx(0.9048)

    def test_explicit_confidence_wins(self):
        response = {"segments": [
            {"start": 0, "end": 1, "text": "hi", "confidence": 0.8, "avg_logprob": -2.0},
        ]}
        assert segments_from_whisper(response)[0].confidence == 0.8

    def test_marker_match_ignores_case_and_space(self):
        response = {"segments": [{"start": 0, "end": 1, "text": "  [MUSIC] "}]}
        assert segments_from_whisper(response) == []

    def test_falls_back_to_whole_clip(self):
        response = {"text": "  just one line  ", "duration": 3.2}
        assert segments_from_whisper(response) == [
            RawSegment(start=0.0, end=3.2, text="just one line"),
        ]

    def test_empty_segment_list_falls_back(self):
        response = {"text": "fallback", "duration": 2.0, "segments": []}
        assert segments_from_whisper(response)[0].text == "fallback"

    def test_nothing_usable_returns_empty_list(self):
        assert segments_from_whisper({}) == []
        assert segments_from_whisper({"text": "   ", "duration": 4.0}) == []

    def test_processed_end_to_end(self, whisper_response):
        captions = process_raw_captions(segments_from_whisper(whisper_response))

        assert [c.text for c in captions] == ["Hello everyone.", "Welcome to the show."]
        # 0.5s segment extended to the 1.5s minimum
        assert (captions[1].start_time, captions[1].end_time) == (4.0, 5.5)


class TestParseRawSegments:

    def test_plain_list_skips_malformed_items(self):
        data = [
            "not a dict",
            {"start": "abc", "end": 1, "text": "bad start"},
            {"start": None, "end": 1, "text": "null start"},
            {"start": 1, "end": 2, "text": "ok"},
        ]
        assert parse_raw_segments(data) == [RawSegment(start=1.0, end=2.0, text="ok")]

    def test_end_defaults_to_start(self):
        segment = parse_raw_segments([{"start": 4, "text": "no end"}])[0]
        assert (segment.start, segment.end) == (4.0, 4.0)

    def test_response_dict_is_accepted(self, whisper_response):
        assert parse_raw_segments(whisper_response) == segments_from_whisper(whisper_response)

    def test_other_types_return_empty_list(self):
        assert parse_raw_segments("segments") == []
        assert parse_raw_segments(None) == []
