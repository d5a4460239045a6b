"""FastAPI application for caption processing, export, and generation jobs.

WHY: The CRUD layer (upload, persistence, editing UI) and other tools
need caption processing over HTTP: turn recognition segments into
captions, export captions to subtitle files, check edited text, and run
the whole transcribe-then-process flow for an uploaded video.

HOW: create_app() builds a FastAPI app around an injected JobStore and
transcriber. Synchronous endpoints call the pure core directly. POST
/transcriptions saves the upload, creates a job, and runs
transcribe → adapt → process as a background task; clients poll the job
and fetch or export the captions when it completes.

RULES:
- All endpoints have OpenAPI descriptions and a consistent ErrorResponse
- The job store is owned by the app instance, never a module global
  that routes reach for implicitly
- A job that yields zero captions is failed with a clear message
- Recognition errors are mapped to user-facing messages on the job
- Uploaded filenames are reduced to their basename
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Annotated, Any, Dict, List, Optional

from fastapi import BackgroundTasks, FastAPI, File, Form, HTTPException, UploadFile
from fastapi.responses import Response
from pydantic import ValidationError

from video_captioner import __version__
from video_captioner.adapters.whisper_adapter import segments_from_whisper
from video_captioner.api.client import (
    InvalidAPIKeyError,
    QuotaExceededError,
    TranscriptionTimeoutError,
    transcribe_file,
)
from video_captioner.config import (
    DEFAULT_MAX_LINE_DURATION,
    DEFAULT_MAX_WORDS_PER_LINE,
    DEFAULT_MIN_LINE_DURATION,
    DEFAULT_SPLIT_LONG_SEGMENTS,
    MAX_UPLOAD_BYTES,
    SUPPORTED_MEDIA_FORMATS,
)
from video_captioner.core.ir import ProcessedCaption, ProcessingOptions
from video_captioner.core.processor import process_raw_captions
from video_captioner.core.styles import (
    STYLE_DESCRIPTIONS,
    STYLE_LABELS,
    CaptionStyle,
    parse_caption_style,
)
from video_captioner.core.text import (
    clean_caption_text,
    count_words,
    detect_language,
    validate_caption_text,
)
from video_captioner.core.timeline import build_render_props
from video_captioner.formatters import FORMATTERS
from video_captioner.server.jobs import Job, JobStatus, JobStore
from video_captioner.server.models import (
    CaptionBody,
    CaptionListResponse,
    ErrorResponse,
    ExportFormatName,
    ExportRequest,
    FormatInfo,
    HealthResponse,
    JobCreatedResponse,
    JobResponse,
    ProcessingOptionsIn,
    ProcessRequest,
    RenderPropsRequest,
    StyleInfo,
    ValidateTextRequest,
    ValidateTextResponse,
)

logger = logging.getLogger(__name__)

Transcriber = Callable[[Path], Awaitable[Dict[str, Any]]]

NO_CAPTIONS_ERROR = "No captions were generated from the audio"
CLEANUP_INTERVAL_SECONDS = 300


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _caption_list(captions: List[ProcessedCaption]) -> CaptionListResponse:
    return CaptionListResponse(
        captions=[CaptionBody.from_caption(c) for c in captions],
        count=len(captions),
    )


def _job_to_response(job: Job) -> JobResponse:
    """Convert an internal Job dataclass to a JobResponse Pydantic model."""
    return JobResponse(
        id=job.id,
        status=job.status.value,
        filename=job.filename,
        created_at=job.created_at,
        options=ProcessingOptionsIn(**job.options),
        error=job.error,
        caption_count=len(job.captions) if job.status == JobStatus.COMPLETED else None,
    )


def _validate_file_extension(filename: str) -> None:
    """Raise HTTPException if the file extension is not supported."""
    ext = Path(filename).suffix.lower()
    if ext not in SUPPORTED_MEDIA_FORMATS:
        raise HTTPException(
            status_code=400,
            detail="Unsupported file type '{}'. Supported formats: {}".format(
                ext, ", ".join(sorted(SUPPORTED_MEDIA_FORMATS))
            ),
        )


def _export_response(captions: List[ProcessedCaption], fmt: str, stem: str) -> Response:
    output = FORMATTERS[fmt]().format(captions)[0]
    filename = "{}{}".format(stem, output.suffix)
    return Response(
        content=output.content,
        media_type=output.media_type,
        headers={"Content-Disposition": 'attachment; filename="{}"'.format(filename)},
    )


def _describe_failure(exc: Exception) -> str:
    """User-facing message for a failed generation job."""
    if isinstance(exc, InvalidAPIKeyError):
        return "Invalid OpenAI API key"
    if isinstance(exc, QuotaExceededError):
        return "OpenAI API quota exceeded"
    if isinstance(exc, TranscriptionTimeoutError):
        return "Caption generation timed out. Please try again."
    return str(exc) or exc.__class__.__name__


async def run_caption_pipeline(
    job_id: str,
    store: JobStore,
    transcriber: Transcriber,
) -> None:
    """Transcribe a job's upload and process the result into captions.

    RULES:
    - Updates job status at each stage
    - Catches all exceptions, logs them, and marks the job failed
    - Zero captions after processing marks the job failed
    """
    job = store.get_job(job_id)
    if job is None:
        return

    try:
        store.update_job(job_id, status=JobStatus.TRANSCRIBING)
        response = await transcriber(job.input_path)

        store.update_job(job_id, status=JobStatus.PROCESSING)
        segments = segments_from_whisper(response)
        options = ProcessingOptionsIn(**job.options).to_options()
        captions = process_raw_captions(segments, options)

        if not captions:
            logger.warning("Job %s produced no captions", job_id)
            store.update_job(job_id, status=JobStatus.FAILED, error=NO_CAPTIONS_ERROR)
            return

        store.update_job(job_id, status=JobStatus.COMPLETED, captions=captions)
        logger.info("Job %s completed with %d captions", job_id, len(captions))

    except Exception as exc:
        logger.exception("Caption pipeline failed for job %s", job_id)
        store.update_job(job_id, status=JobStatus.FAILED, error=_describe_failure(exc))


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------


def create_app(
    store: Optional[JobStore] = None,
    transcriber: Optional[Transcriber] = None,
) -> FastAPI:
    """Build the API around an explicit job store and transcriber.

    Args:
        store: Job store for generation jobs. A fresh one is created if None.
        transcriber: Async callable taking a media path and returning a
            verbose transcription response. Defaults to the hosted Whisper API.
    """
    job_store = store if store is not None else JobStore()
    run_transcription = transcriber or transcribe_file

    async def _periodic_cleanup() -> None:
        while True:
            await asyncio.sleep(CLEANUP_INTERVAL_SECONDS)
            job_store.cleanup_expired()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        task = asyncio.create_task(_periodic_cleanup())
        yield
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    app = FastAPI(
        lifespan=lifespan,
        title="Video Captioner API",
        description=(
            "Caption processing for uploaded videos: turn speech-recognition "
            "segments into timed, display-ready captions, export them as SRT, "
            "WebVTT, or JSON, and run transcription jobs in the background."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.job_store = job_store

    # -----------------------------------------------------------------------
    # Endpoints: Captions
    # -----------------------------------------------------------------------

    @app.post(
        "/captions/process",
        response_model=CaptionListResponse,
        tags=["captions"],
        summary="Process raw recognition segments",
        description=(
            "Clean, classify, split, and time-adjust raw segments. Malformed "
            "segments are dropped. Returns captions sorted by start time."
        ),
    )
    async def process_captions(body: ProcessRequest) -> CaptionListResponse:
        options = body.options.to_options() if body.options else ProcessingOptions.from_env()
        captions = process_raw_captions(
            [segment.to_raw_segment() for segment in body.segments],
            options,
        )
        return _caption_list(captions)

    @app.post(
        "/captions/export",
        tags=["captions"],
        summary="Export captions to a subtitle file",
        description="Serialize captions as SRT, WebVTT, or JSON without re-timing them.",
    )
    async def export_captions(
        body: ExportRequest,
        format: ExportFormatName = ExportFormatName.srt,
    ) -> Response:
        captions = [caption.to_caption() for caption in body.captions]
        return _export_response(captions, format.value, "captions")

    @app.post(
        "/captions/validate",
        response_model=ValidateTextResponse,
        tags=["captions"],
        summary="Check edited caption text",
        description="Clean edited text and report whether it can be stored as a caption.",
    )
    async def validate_text(body: ValidateTextRequest) -> ValidateTextResponse:
        cleaned = clean_caption_text(body.text)
        return ValidateTextResponse(
            valid=validate_caption_text(body.text),
            cleaned=cleaned,
            language=detect_language(cleaned),
            wordCount=count_words(cleaned),
        )

    @app.post(
        "/captions/render-props",
        tags=["captions"],
        summary="Build video renderer input",
        description=(
            "Validate the caption style and build the renderer's input: "
            "captions sorted by start time with overlay lines, the style, "
            "and the composition size, frame rate, and length in frames."
        ),
        responses={422: {"model": ErrorResponse, "description": "Invalid caption style"}},
    )
    async def render_props(body: RenderPropsRequest) -> Dict[str, Any]:
        try:
            style = parse_caption_style(body.style)
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc))

        return build_render_props(
            body.videoPath,
            [caption.to_caption() for caption in body.captions],
            style,
            width=body.width,
            height=body.height,
            fps=body.fps,
        )

    # -----------------------------------------------------------------------
    # Endpoints: Transcription jobs
    # -----------------------------------------------------------------------

    def _get_job_or_404(job_id: str) -> Job:
        job = job_store.get_job(job_id)
        if job is None:
            raise HTTPException(status_code=404, detail="Job not found: {}".format(job_id))
        return job

    def _get_completed_job(job_id: str) -> Job:
        job = _get_job_or_404(job_id)
        if job.status != JobStatus.COMPLETED:
            raise HTTPException(
                status_code=409,
                detail="Job is not completed (current status: {}).".format(job.status.value),
            )
        return job

    @app.post(
        "/transcriptions",
        response_model=JobCreatedResponse,
        status_code=201,
        tags=["transcriptions"],
        summary="Submit a caption-generation job",
        description=(
            "Upload a video or audio file. Returns a job ID immediately; "
            "transcription and processing run in the background. Poll "
            "GET /transcriptions/{id} for status."
        ),
        responses={
            400: {"model": ErrorResponse, "description": "Invalid file type"},
            413: {"model": ErrorResponse, "description": "File too large"},
            422: {"model": ErrorResponse, "description": "Invalid processing options"},
            429: {"model": ErrorResponse, "description": "Too many concurrent jobs"},
        },
    )
    async def create_transcription(
        background_tasks: BackgroundTasks,
        file: Annotated[UploadFile, File(description="Video or audio file to caption")],
        max_words_per_line: Annotated[
            int, Form(description="Maximum words per caption.")
        ] = DEFAULT_MAX_WORDS_PER_LINE,
        max_line_duration: Annotated[
            float, Form(description="Maximum caption duration in seconds.")
        ] = DEFAULT_MAX_LINE_DURATION,
        min_line_duration: Annotated[
            float, Form(description="Minimum caption duration in seconds.")
        ] = DEFAULT_MIN_LINE_DURATION,
        split_long_segments: Annotated[
            bool, Form(description="Split captions that exceed a ceiling.")
        ] = DEFAULT_SPLIT_LONG_SEGMENTS,
    ) -> JobCreatedResponse:
        # Sanitize filename to prevent path traversal
        filename = Path(file.filename or "upload").name
        _validate_file_extension(filename)

        try:
            options = ProcessingOptionsIn(
                maxWordsPerLine=max_words_per_line,
                maxLineDuration=max_line_duration,
                minLineDuration=min_line_duration,
                splitLongSegments=split_long_segments,
            )
        except ValidationError as exc:
            raise HTTPException(status_code=422, detail=str(exc))

        content = await file.read()
        if len(content) > MAX_UPLOAD_BYTES:
            raise HTTPException(
                status_code=413,
                detail="File too large ({} bytes, max {}).".format(len(content), MAX_UPLOAD_BYTES),
            )

        try:
            job = job_store.create_job(filename=filename, options=options.model_dump())
        except ValueError as exc:
            raise HTTPException(status_code=429, detail=str(exc))

        job.input_path.write_bytes(content)
        background_tasks.add_task(run_caption_pipeline, job.id, job_store, run_transcription)

        return JobCreatedResponse(id=job.id, status=job.status.value, filename=job.filename)

    @app.get(
        "/transcriptions/{job_id}",
        response_model=JobResponse,
        tags=["transcriptions"],
        summary="Get caption-generation job status",
        responses={404: {"model": ErrorResponse, "description": "Job not found"}},
    )
    async def get_transcription(job_id: str) -> JobResponse:
        return _job_to_response(_get_job_or_404(job_id))

    @app.get(
        "/transcriptions/{job_id}/captions",
        response_model=CaptionListResponse,
        tags=["transcriptions"],
        summary="Get the captions of a completed job",
        responses={
            404: {"model": ErrorResponse, "description": "Job not found"},
            409: {"model": ErrorResponse, "description": "Job not yet completed"},
        },
    )
    async def get_transcription_captions(job_id: str) -> CaptionListResponse:
        return _caption_list(_get_completed_job(job_id).captions)

    @app.get(
        "/transcriptions/{job_id}/export/{fmt}",
        tags=["transcriptions"],
        summary="Download a completed job's captions as a subtitle file",
        responses={
            404: {"model": ErrorResponse, "description": "Job not found"},
            409: {"model": ErrorResponse, "description": "Job not yet completed"},
        },
    )
    async def export_transcription(job_id: str, fmt: ExportFormatName) -> Response:
        job = _get_completed_job(job_id)
        return _export_response(job.captions, fmt.value, Path(job.filename).stem)

    @app.delete(
        "/transcriptions/{job_id}",
        status_code=204,
        tags=["transcriptions"],
        summary="Delete a caption-generation job",
        responses={404: {"model": ErrorResponse, "description": "Job not found"}},
    )
    async def delete_transcription(job_id: str) -> Response:
        if not job_store.delete_job(job_id):
            raise HTTPException(status_code=404, detail="Job not found: {}".format(job_id))
        return Response(status_code=204)

    # -----------------------------------------------------------------------
    # Endpoints: Reference data and health
    # -----------------------------------------------------------------------

    @app.get(
        "/styles",
        response_model=List[StyleInfo],
        tags=["reference"],
        summary="List caption presentation styles",
    )
    async def list_styles() -> List[StyleInfo]:
        return [
            StyleInfo(
                value=style.value,
                label=STYLE_LABELS[style],
                description=STYLE_DESCRIPTIONS[style],
            )
            for style in CaptionStyle
        ]

    @app.get(
        "/formats",
        response_model=List[FormatInfo],
        tags=["reference"],
        summary="List available export formats",
    )
    async def list_formats() -> List[FormatInfo]:
        result = []
        for key, formatter_cls in sorted(FORMATTERS.items()):
            formatter = formatter_cls()
            output = formatter.format([])[0]
            result.append(FormatInfo(
                key=key,
                name=formatter.name,
                suffix=output.suffix,
                media_type=output.media_type,
            ))
        return result

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["health"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        return HealthResponse(status="ok", version=__version__)

    return app


app = create_app()


def run_api():
    """Entry point for the video-captioner-api console script."""
    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    logger.info("Starting caption API on port 8000")
    uvicorn.run(app, host="0.0.0.0", port=8000)
