"""In-memory caption-generation job store with TTL cleanup.

WHY: Generating captions for an uploaded video means a slow recognition
call (seconds to minutes), so the API returns a job ID immediately and
does the work in the background. The store tracks each job through
pending → transcribing → processing → completed | failed and holds the
finished captions until the client fetches or exports them.

HOW: Three components work together:
  JobStatus — enum of valid job states
  Job       — dataclass holding job metadata, status, temp dir, and captions
  JobStore  — thread-safe dict-based store with create/update/get/list/delete
              and TTL cleanup

RULES:
- The store is an object injected into the app (create_app(store=...)),
  not a module-level registry, so tests and multi-app deployments each
  get their own
- All store mutations are protected by threading.Lock
- Each job gets a dedicated temp directory for the uploaded media
- TTL-based expiry removes terminal jobs and their temp directories
- Job IDs are UUID4 hex strings
"""

from __future__ import annotations

import enum
import logging
import shutil
import tempfile
import threading
import time
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from video_captioner.core.ir import ProcessedCaption

logger = logging.getLogger(__name__)

# Default time-to-live for completed/failed jobs (seconds)
DEFAULT_TTL_SECONDS = 3600


class JobStatus(str, enum.Enum):
    """Valid states for a caption-generation job.

    RULES:
    - pending: job created, not yet started
    - transcribing: media sent to the recognition service
    - processing: segments being turned into captions
    - completed: captions ready
    - failed: unrecoverable error at any stage, or no captions produced
    """

    PENDING = "pending"
    TRANSCRIBING = "transcribing"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


TERMINAL_STATUSES = (JobStatus.COMPLETED, JobStatus.FAILED)


@dataclass
class Job:
    """Metadata and state for a single caption-generation job.

    RULES:
    - id: UUID4 hex string, unique and immutable after creation
    - filename: sanitized uploaded filename, stored inside output_dir
    - completed_at: set when the job reaches a terminal state
    - options: the ProcessingOptions fields used for this job
    - captions: populated only when status is COMPLETED
    """

    id: str
    status: JobStatus
    filename: str
    output_dir: Path
    created_at: float
    updated_at: float
    completed_at: Optional[float] = None
    error: Optional[str] = None
    options: Dict[str, Any] = field(default_factory=dict)
    captions: List[ProcessedCaption] = field(default_factory=list)

    @property
    def input_path(self) -> Path:
        return self.output_dir / self.filename


class JobStore:
    """Thread-safe in-memory store for caption-generation jobs.

    WHY: Request handlers and background tasks touch job state at the
    same time. A single store with a lock keeps updates consistent.

    RULES:
    - create_job() raises ValueError when max_jobs is reached
    - get_job() returns None for missing job IDs (no exceptions)
    - update_job() applies only non-None arguments and bumps updated_at
    - delete_job() removes the job and its temp directory
    """

    def __init__(
        self,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        max_jobs: int = 100,
    ) -> None:
        self._jobs: Dict[str, Job] = {}
        self._lock = threading.Lock()
        self._ttl_seconds = ttl_seconds
        self.max_jobs = max_jobs

    def create_job(
        self,
        filename: str,
        options: Optional[Dict[str, Any]] = None,
    ) -> Job:
        """Create a new job in PENDING state with a dedicated temp directory."""
        with self._lock:
            if len(self._jobs) >= self.max_jobs:
                raise ValueError(
                    "Maximum number of concurrent jobs ({}) reached".format(
                        self.max_jobs
                    )
                )

            job_id = uuid.uuid4().hex
            now = time.time()
            output_dir = Path(tempfile.mkdtemp(prefix="captioner_job_"))

            job = Job(
                id=job_id,
                status=JobStatus.PENDING,
                filename=filename,
                output_dir=output_dir,
                created_at=now,
                updated_at=now,
                options=options or {},
            )
            self._jobs[job_id] = job

        logger.info("Created job %s for file %s", job_id, filename)
        return job

    def get_job(self, job_id: str) -> Optional[Job]:
        with self._lock:
            return self._jobs.get(job_id)

    def list_jobs(self) -> List[Job]:
        """Return all jobs, oldest first."""
        with self._lock:
            return sorted(self._jobs.values(), key=lambda j: j.created_at)

    def update_job(
        self,
        job_id: str,
        status: Optional[JobStatus] = None,
        error: Optional[str] = None,
        captions: Optional[List[ProcessedCaption]] = None,
    ) -> Optional[Job]:
        """Update a job's mutable fields.

        RULES:
        - Returns the updated Job, or None if job_id not found
        - completed_at is set when status becomes COMPLETED or FAILED
        """
        with self._lock:
            job = self._jobs.get(job_id)
            if job is None:
                return None

            now = time.time()

            if status is not None:
                job.status = status
            if error is not None:
                job.error = error
            if captions is not None:
                job.captions = list(captions)

            job.updated_at = now

            if job.status in TERMINAL_STATUSES:
                job.completed_at = now

            return job

    def delete_job(self, job_id: str) -> bool:
        """Delete a job and clean up its temp directory.

        Returns True if the job was found and deleted, False otherwise.
        """
        with self._lock:
            job = self._jobs.pop(job_id, None)

        if job is None:
            return False

        self._cleanup_output_dir(job.output_dir)
        logger.info("Deleted job %s", job_id)
        return True

    def cleanup_expired(self) -> int:
        """Remove terminal jobs whose completed_at is older than the TTL.

        Returns the count of removed jobs.
        """
        now = time.time()
        expired_jobs: List[Job] = []

        with self._lock:
            for job_id, job in list(self._jobs.items()):
                if job.status not in TERMINAL_STATUSES:
                    continue
                if job.completed_at is None:
                    continue
                if now - job.completed_at > self._ttl_seconds:
                    expired_jobs.append(self._jobs.pop(job_id))

        for job in expired_jobs:
            self._cleanup_output_dir(job.output_dir)
            logger.info("Expired job %s (completed %.0fs ago)", job.id, now - job.completed_at)

        return len(expired_jobs)

    def clear(self) -> None:
        """Remove every job and its temp directory."""
        with self._lock:
            jobs = list(self._jobs.values())
            self._jobs.clear()
        for job in jobs:
            self._cleanup_output_dir(job.output_dir)

    @staticmethod
    def _cleanup_output_dir(output_dir: Path) -> None:
        """Remove a job's temp directory tree, logging on failure."""
        if output_dir.exists():
            try:
                shutil.rmtree(output_dir)
            except OSError:
                logger.warning("Failed to clean up temp dir: %s", output_dir)
