"""
Document Jobs - render a quote to a file once, tracking status.

Status moves pending -> processing -> completed | failed. A job is processed
at most once; there is no retry.
"""
import threading
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Optional

import structlog

from .document_service import DocumentRenderer
from .quote_service import QuoteService


logger = structlog.get_logger(__name__)


class PdfJobNotFoundError(ValueError):
    """Raised when a job ID is not in the repository."""


class JobStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class PdfJob:
    """A document generation job for one quote."""
    job_id: str
    quote_id: str
    status: JobStatus
    created_at: datetime
    file_path: Optional[str] = None
    error: Optional[str] = None
    completed_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "job_id": self.job_id,
            "quote_id": self.quote_id,
            "status": self.status.value,
            "file_path": self.file_path,
            "error": self.error,
            "created_at": self.created_at,
            "completed_at": self.completed_at,
        }


class PdfJobService:
    """In-memory job repository and runner."""

    def __init__(self, quote_service: QuoteService, renderer: DocumentRenderer, output_dir: Path):
        self.quote_service = quote_service
        self.renderer = renderer
        self.output_dir = Path(output_dir)
        self._jobs: dict[str, PdfJob] = {}
        self._lock = threading.Lock()

    def create_job(self, quote_id: str) -> PdfJob:
        """Register a pending job. The quote must exist."""
        self.quote_service.get_quote(quote_id)
        job = PdfJob(
            job_id=f"job-{uuid.uuid4().hex[:12]}",
            quote_id=quote_id,
            status=JobStatus.PENDING,
            created_at=datetime.now(timezone.utc),
        )
        with self._lock:
            self._jobs[job.job_id] = job
        logger.info("pdf_job_created", job_id=job.job_id, quote_id=quote_id)
        return job

    def get_job(self, job_id: str) -> PdfJob:
        job = self._jobs.get(job_id)
        if job is None:
            raise PdfJobNotFoundError(f"PDF job '{job_id}' not found")
        return job

    def list_jobs(self) -> list[PdfJob]:
        with self._lock:
            jobs = list(self._jobs.values())
        return sorted(jobs, key=lambda j: j.created_at)

    def list_jobs_for_quote(self, quote_id: str) -> list[PdfJob]:
        return [j for j in self.list_jobs() if j.quote_id == quote_id]

    def process_job(self, job_id: str) -> PdfJob:
        """
        Render the job's quote to output_dir.

        Only a pending job is processed; calling again on a job that has
        already started returns it unchanged. Rendering errors mark the job
        failed rather than propagating.
        """
        with self._lock:
            job = self.get_job(job_id)
            if job.status != JobStatus.PENDING:
                logger.warning("pdf_job_already_started", job_id=job_id, status=job.status.value)
                return job
            job.status = JobStatus.PROCESSING

        logger.info("pdf_job_processing", job_id=job_id, quote_id=job.quote_id)

        try:
            quote = self.quote_service.get_quote(job.quote_id)
            html = self.renderer.render_quote_html(quote)
            self.output_dir.mkdir(parents=True, exist_ok=True)
            path = self.output_dir / f"quote-{job.quote_id}-{job.job_id}.html"
            path.write_text(html, encoding='utf-8')
        except Exception as e:
            job.status = JobStatus.FAILED
            job.error = str(e)
            job.completed_at = datetime.now(timezone.utc)
            logger.error("pdf_job_failed", job_id=job_id, quote_id=job.quote_id, error=str(e))
            return job

        job.file_path = str(path)
        job.status = JobStatus.COMPLETED
        job.completed_at = datetime.now(timezone.utc)
        logger.info("pdf_job_completed", job_id=job_id, file_path=job.file_path)
        return job
