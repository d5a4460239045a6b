"""Adapters between recognition-service output and the core IR."""

from video_captioner.adapters.whisper_adapter import parse_raw_segments, segments_from_whisper

__all__ = ["parse_raw_segments", "segments_from_whisper"]
