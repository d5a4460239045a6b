"""Configuration constants, processing defaults, and .env loading.

WHY: Centralizes all configurable values so they are easy to find,
update, and override. Caption processing defaults, accepted media
formats, and recognition API settings are plain data — not buried in
logic — so the CLI, the HTTP service, and tests read the same values.

HOW: python-dotenv loads the .env file on import. Constants are defined
as module-level values with os.getenv overrides. load_api_key() provides
a clear error when the key is missing.

RULES:
- API key is loaded from .env via python-dotenv, never hardcoded
- All defaults can be overridden via environment variables
- Processing defaults match ProcessingOptions (10 words, 7.0s, 1.5s, split on)
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

# Load .env from the project root (where the script is run from)
load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# ---------------------------------------------------------------------------
# Caption processing defaults
# ---------------------------------------------------------------------------

DEFAULT_MAX_WORDS_PER_LINE = int(os.getenv("CAPTION_MAX_WORDS_PER_LINE", "10"))
DEFAULT_MAX_LINE_DURATION = float(os.getenv("CAPTION_MAX_LINE_DURATION", "7.0"))
DEFAULT_MIN_LINE_DURATION = float(os.getenv("CAPTION_MIN_LINE_DURATION", "1.5"))
DEFAULT_SPLIT_LONG_SEGMENTS = _env_bool("CAPTION_SPLIT_LONG_SEGMENTS", True)

# ---------------------------------------------------------------------------
# Supported media files
# ---------------------------------------------------------------------------

SUPPORTED_MEDIA_FORMATS: set[str] = {
    ".mp4", ".mov", ".webm", ".mpeg", ".mpg", ".m4a", ".mp3", ".wav",
}
"""Media file extensions accepted for transcription (lowercase, with dot)."""

MAX_UPLOAD_BYTES = int(os.getenv("MAX_UPLOAD_BYTES", str(500 * 1024 * 1024)))

# ---------------------------------------------------------------------------
# Recognition API configuration
# ---------------------------------------------------------------------------

OPENAI_BASE_URL = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")
WHISPER_MODEL = os.getenv("WHISPER_MODEL", "whisper-1")
WHISPER_LANGUAGE = os.getenv("WHISPER_LANGUAGE", "en")

_PLACEHOLDER_MARKERS = ("REPLACE_WITH", "your_new_openai_api_key_here")


def load_api_key() -> str:
    """Load the OpenAI API key from the environment.

    WHY: The key is required for every transcription call. Loading it from
    the environment (via .env) keeps it out of source code.

    RULES:
    - Raises ValueError if the key is missing, empty, or a template placeholder
    - Never returns a default/placeholder value
    """
    key = os.getenv("OPENAI_API_KEY", "").strip()
    if not key or any(marker in key for marker in _PLACEHOLDER_MARKERS):
        raise ValueError(
            "OpenAI API key not configured. "
            "Add a valid OPENAI_API_KEY to the .env file."
        )
    return key
