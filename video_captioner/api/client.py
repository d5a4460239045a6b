"""Async HTTP client for an OpenAI-compatible speech-to-text endpoint.

WHY: Caption generation starts by sending the uploaded video to a hosted
Whisper model and getting back timed segments. This module wraps that
single request so callers (CLI, HTTP service, tests) don't need to know
multipart details, auth headers, or how the service reports errors.

HOW: Uses httpx.AsyncClient for non-blocking HTTP. WhisperClient is an
async context manager — enter it to get an authenticated client, exit to
close the connection pool. transcribe() posts the file with
response_format=verbose_json and returns the parsed JSON.

RULES:
- Always use the async context manager (async with WhisperClient() as client:)
- temperature is 0 for repeatable output
- 401 -> InvalidAPIKeyError; 429 or an insufficient_quota body ->
  QuotaExceededError; other non-2xx -> WhisperAPIError
- httpx timeouts surface as TranscriptionTimeoutError
- No retries; the caller decides whether to resubmit
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import httpx

from video_captioner.config import (
    OPENAI_BASE_URL,
    WHISPER_LANGUAGE,
    WHISPER_MODEL,
    load_api_key,
)


class WhisperAPIError(Exception):
    """Raised when the transcription API returns an error response.

    RULES:
    - Always include status_code and message
    - message is the response body text or a summary
    """

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(f"Transcription API error {status_code}: {message}")


class InvalidAPIKeyError(WhisperAPIError):
    """The API rejected the configured key."""


class QuotaExceededError(WhisperAPIError):
    """The account has no remaining quota."""


class TranscriptionTimeoutError(TimeoutError):
    """The transcription request timed out."""


class WhisperClient:
    """Async client for the hosted transcription endpoint.

    RULES:
    - Use as: async with WhisperClient() as client: ...
    - api_key defaults to load_api_key() from .env
    - base_url, model, and language default to config values
    - transport is for tests (httpx.MockTransport)
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str | None = None,
        language: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key or load_api_key()
        self._base_url = (base_url or OPENAI_BASE_URL).rstrip("/")
        self._model = model or WHISPER_MODEL
        self._language = language or WHISPER_LANGUAGE
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> WhisperClient:
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={"Authorization": f"Bearer {self._api_key}"},
            timeout=httpx.Timeout(600.0, connect=30.0),
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        if self._client:
            await self._client.aclose()
            self._client = None

    def _ensure_client(self) -> httpx.AsyncClient:
        """Return the active httpx client, raising if not in context manager."""
        if self._client is None:
            raise RuntimeError(
                "WhisperClient must be used as an async context manager: "
                "async with WhisperClient() as client: ..."
            )
        return self._client

    async def transcribe(
        self,
        file_path: Path,
        on_status: Callable[[str], None] | None = None,
    ) -> dict[str, Any]:
        """Transcribe a media file and return the verbose JSON response.

        Args:
            file_path: Path to the audio/video file.
            on_status: Optional callback for status updates.

        Returns:
            The parsed response with "text", "duration", and "segments".

        Raises:
            InvalidAPIKeyError, QuotaExceededError, WhisperAPIError,
            TranscriptionTimeoutError.
        """
        client = self._ensure_client()
        file_path = Path(file_path)
        if on_status:
            on_status("Transcribing {}...".format(file_path.name))

        data = {
            "model": self._model,
            "language": self._language,
            "response_format": "verbose_json",
            "timestamp_granularities[]": "segment",
            "temperature": "0",
        }

        try:
            with open(file_path, "rb") as f:
                resp = await client.post(
                    "/audio/transcriptions",
                    data=data,
                    files={"file": (file_path.name, f)},
                )
        except httpx.TimeoutException as exc:
            raise TranscriptionTimeoutError(
                "Transcription of {} timed out. Please try again.".format(file_path.name)
            ) from exc

        if resp.status_code == 401:
            raise InvalidAPIKeyError(resp.status_code, "Invalid API key")
        if resp.status_code != 200:
            if resp.status_code == 429 or "insufficient_quota" in resp.text:
                raise QuotaExceededError(resp.status_code, "API quota exceeded")
            raise WhisperAPIError(resp.status_code, resp.text)

        if on_status:
            on_status("Transcription complete.")
        return resp.json()


async def transcribe_file(
    file_path: Path,
    on_status: Callable[[str], None] | None = None,
) -> dict[str, Any]:
    """Transcribe one file with a short-lived client using config defaults."""
    async with WhisperClient() as client:
        return await client.transcribe(file_path, on_status=on_status)
