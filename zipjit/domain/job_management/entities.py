"""
Job Management Entities

Domain entity for fetch-and-package jobs.
"""

import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Optional

from .value_objects import JobProgress, JobStatus


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _format_bytes(count: int) -> str:
    if count >= 1024 * 1024:
        return f"{count / (1024 * 1024):.1f} MB"
    if count >= 1024:
        return f"{count / 1024:.1f} KB"
    return f"{count} B"


@dataclass
class FetchJob:
    """
    Entity representing one URL's fetch-and-package request.

    Manages job lifecycle with status transitions and progress tracking:
    pending -> downloading -> zipping -> complete, with failed reachable
    from every non-terminal state. Terminal jobs reject every transition.
    """

    job_id: str
    url: str
    filename: str
    status: JobStatus
    progress: JobProgress
    status_text: str
    created_at: datetime
    updated_at: datetime
    content_hash: Optional[str] = None
    archive_path: Optional[str] = None
    archive_name: Optional[str] = None
    error_message: Optional[str] = None
    error_category: Optional[str] = None

    @classmethod
    def create(cls, url: str, filename: str) -> "FetchJob":
        """
        Factory method to create a new pending job.

        Args:
            url: URL to fetch
            filename: Sanitized display name for the archived file

        Returns:
            New FetchJob instance
        """
        now = utcnow()
        return cls(
            job_id=str(uuid.uuid4()),
            url=url,
            filename=filename,
            status=JobStatus.PENDING,
            progress=JobProgress.initial(),
            status_text="Starting...",
            created_at=now,
            updated_at=now,
        )

    def _require(self, *allowed: JobStatus, action: str) -> None:
        if self.status not in allowed:
            raise ValueError(f"Cannot {action} job in {self.status.value} state")

    def start_download(self) -> None:
        """
        Transition job to downloading state.

        Idempotent when the job is already downloading.

        Raises:
            ValueError: If job is not pending or downloading
        """
        self._require(JobStatus.PENDING, JobStatus.DOWNLOADING, action="start")
        if self.status == JobStatus.PENDING:
            self.status = JobStatus.DOWNLOADING
            self.status_text = "Downloading..."
            self.updated_at = utcnow()

    def update_progress(self, progress: JobProgress) -> None:
        """
        Record download progress.

        Percentage and byte count never move backwards; a stale or
        reordered update keeps the larger value.

        Raises:
            ValueError: If job is not downloading
        """
        self._require(JobStatus.DOWNLOADING, action="update progress for")

        merged = JobProgress(
            percentage=max(self.progress.percentage, progress.percentage),
            bytes_downloaded=max(self.progress.bytes_downloaded, progress.bytes_downloaded),
            total_bytes=progress.total_bytes,
        )
        self.progress = merged
        if merged.is_indeterminate:
            self.status_text = f"Downloading... {_format_bytes(merged.bytes_downloaded)}"
        else:
            self.status_text = f"Downloading... {merged.percentage}%"
        self.updated_at = utcnow()

    def start_zipping(self, content_hash: str) -> None:
        """
        Record the content hash and move to the packaging phase.

        Raises:
            ValueError: If job is not downloading
        """
        self._require(JobStatus.DOWNLOADING, action="zip")
        self.status = JobStatus.ZIPPING
        self.content_hash = content_hash
        self.status_text = "Zipping..."
        self.updated_at = utcnow()

    def complete(self, archive_path: str, archive_name: str) -> None:
        """
        Mark job as complete.

        Args:
            archive_path: Location of the finished outer archive
            archive_name: Opaque identifier of the outer archive entry

        Raises:
            ValueError: If job is not zipping or archive_path is empty
        """
        self._require(JobStatus.ZIPPING, action="complete")
        if not archive_path:
            raise ValueError("archive_path is required to complete a job")

        self.status = JobStatus.COMPLETE
        self.progress = self.progress.completed()
        self.archive_path = archive_path
        self.archive_name = archive_name
        self.status_text = "Complete"
        self.updated_at = utcnow()

    def fail(
        self,
        error_message: str,
        error_category: Optional[str] = None,
        status_text: str = "Failed",
    ) -> None:
        """
        Mark job as failed.

        Args:
            error_message: Short, non-sensitive error description
            error_category: Optional error category for tracking
            status_text: Phase description shown to pollers

        Raises:
            ValueError: If job already reached a terminal state
        """
        if self.status.is_terminal():
            raise ValueError(f"Cannot fail job in {self.status.value} state")

        self.status = JobStatus.FAILED
        self.error_message = error_message or "Failed"
        self.error_category = error_category
        self.archive_path = None
        self.status_text = status_text
        self.updated_at = utcnow()

    def is_terminal(self) -> bool:
        """Check if job is in terminal state (complete or failed)."""
        return self.status.is_terminal()

    def is_ready(self) -> bool:
        """Check if the archive can be handed out."""
        return self.status == JobStatus.COMPLETE and bool(self.archive_path)

    def age_seconds(self, now: Optional[datetime] = None) -> float:
        return ((now or utcnow()) - self.created_at).total_seconds()

    def snapshot(self) -> "FetchJob":
        """Independent copy; all field values are immutable."""
        return replace(self)

    def to_dict(self) -> dict:
        """Convert job to dictionary for serialization."""
        return {
            "job_id": self.job_id,
            "url": self.url,
            "filename": self.filename,
            "status": self.status.value,
            "progress": self.progress.to_dict(),
            "status_text": self.status_text,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "content_hash": self.content_hash,
            "archive_path": self.archive_path,
            "archive_name": self.archive_name,
            "error_message": self.error_message,
            "error_category": self.error_category,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "FetchJob":
        """Create FetchJob from dictionary."""
        return cls(
            job_id=data["job_id"],
            url=data["url"],
            filename=data["filename"],
            status=JobStatus(data["status"]),
            progress=JobProgress.from_dict(data["progress"]),
            status_text=data.get("status_text", ""),
            created_at=datetime.fromisoformat(data["created_at"]),
            updated_at=datetime.fromisoformat(data["updated_at"]),
            content_hash=data.get("content_hash"),
            archive_path=data.get("archive_path"),
            archive_name=data.get("archive_name"),
            error_message=data.get("error_message"),
            error_category=data.get("error_category"),
        )
