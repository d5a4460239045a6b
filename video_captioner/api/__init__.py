"""Speech-recognition API client package.

WHY: Caption generation needs one call to a hosted speech-to-text
service. This package keeps all HTTP details behind an async client
class so the CLI and the HTTP service never touch httpx directly.

RULES:
- All recognition HTTP calls go through WhisperClient
- Authentication is via Bearer token from config
- The client returns raw JSON; adapters turn it into RawSegments
"""

from video_captioner.api.client import (
    InvalidAPIKeyError,
    QuotaExceededError,
    TranscriptionTimeoutError,
    WhisperAPIError,
    WhisperClient,
    transcribe_file,
)

__all__ = [
    "InvalidAPIKeyError",
    "QuotaExceededError",
    "TranscriptionTimeoutError",
    "WhisperAPIError",
    "WhisperClient",
    "transcribe_file",
]
