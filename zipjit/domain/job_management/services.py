"""
Job Management Services

Domain services for job lifecycle management.
"""

import logging
from datetime import timedelta
from typing import List, Optional

from .entities import FetchJob
from .repositories import JobMutator, JobRepository, ReleaseCallback
from .value_objects import JobProgress, JobStatus
from zipjit.domain.errors import DomainError, ErrorCategory

logger = logging.getLogger(__name__)


class JobNotFoundError(DomainError):
    """Raised when a job is not found."""

    category = ErrorCategory.JOB_NOT_FOUND


class JobStateError(DomainError):
    """Raised when an invalid state transition is attempted."""

    pass


class JobNotReadyError(DomainError):
    """Raised when an archive is requested before the job completed."""

    category = ErrorCategory.JOB_NOT_READY


class JobManager:
    """
    Domain service for managing fetch job lifecycle.

    Coordinates job creation, status updates, and completion. Every
    mutation goes through the repository's atomic ``update`` so pollers
    only ever see whole transitions.
    """

    def __init__(self, job_repository: JobRepository):
        """
        Initialize JobManager with repository.

        Args:
            job_repository: Repository for job records
        """
        self.job_repo = job_repository

    def create_job(self, url: str, filename: str) -> FetchJob:
        """
        Create a new pending job.

        Args:
            url: Validated URL to fetch
            filename: Sanitized display name

        Returns:
            Created FetchJob

        Raises:
            Exception: If job creation fails
        """
        job = FetchJob.create(url, filename)

        if not self.job_repo.save(job):
            raise Exception("Failed to save job to repository")

        logger.info(f"Created job {job.job_id} for {url}")
        return job

    def get_job(self, job_id: str) -> FetchJob:
        """
        Retrieve a snapshot of a job by ID.

        Raises:
            JobNotFoundError: If job doesn't exist
        """
        job = self.job_repo.get(job_id)

        if job is None:
            raise JobNotFoundError(f"Job {job_id} not found")

        return job

    def update_job(self, job_id: str, mutator: JobMutator) -> FetchJob:
        """
        Apply ``mutator`` to the stored job under the repository lock.

        Raises:
            JobNotFoundError: If job doesn't exist
            JobStateError: If the mutation is not a legal transition
        """
        try:
            job = self.job_repo.update(job_id, mutator)
        except ValueError as e:
            raise JobStateError(str(e))

        if job is None:
            raise JobNotFoundError(f"Job {job_id} not found")
        return job

    def start_download(self, job_id: str) -> FetchJob:
        """
        Move a pending job into the downloading phase.

        Raises:
            JobNotFoundError: If job doesn't exist
            JobStateError: If job cannot be started
        """
        return self.update_job(job_id, lambda job: job.start_download())

    def update_progress(self, job_id: str, progress: JobProgress) -> FetchJob:
        """
        Record download progress; never lowers what was already reported.

        Raises:
            JobNotFoundError: If job doesn't exist
            JobStateError: If job is not downloading
        """
        return self.update_job(job_id, lambda job: job.update_progress(progress))

    def start_zipping(self, job_id: str, content_hash: str) -> FetchJob:
        return self.update_job(job_id, lambda job: job.start_zipping(content_hash))

    def complete_job(self, job_id: str, archive_path: str, archive_name: str) -> FetchJob:
        """
        Mark job as complete.

        Args:
            job_id: Job identifier
            archive_path: Location of the outer archive
            archive_name: Opaque identifier chosen by the encoder

        Raises:
            JobNotFoundError: If job doesn't exist
            JobStateError: If job cannot be completed
        """
        job = self.update_job(
            job_id, lambda job: job.complete(archive_path, archive_name)
        )
        logger.info(f"Job {job_id} complete (archive {archive_name}, md5 {job.content_hash})")
        return job

    def fail_job(
        self,
        job_id: str,
        error_message: str,
        error_category: Optional[str] = None,
        status_text: str = "Failed",
    ) -> FetchJob:
        """
        Mark job as failed.

        Args:
            job_id: Job identifier
            error_message: Short, non-sensitive error description
            error_category: Optional error category for tracking
            status_text: Phase description shown to pollers

        Raises:
            JobNotFoundError: If job doesn't exist
            JobStateError: If job is already terminal
        """
        return self.update_job(
            job_id, lambda job: job.fail(error_message, error_category, status_text)
        )

    def delete_job(self, job_id: str, release: Optional[ReleaseCallback] = None) -> bool:
        """
        Delete a job and, through ``release``, its backing archive.

        Returns:
            True if deleted
        """
        return self.job_repo.delete(job_id, release)

    def cleanup_expired_jobs(
        self,
        expiration_time: timedelta = timedelta(minutes=30),
        release: Optional[ReleaseCallback] = None,
    ) -> int:
        """
        Clean up expired jobs regardless of status.

        Each record is handled independently: a failure while releasing
        one job's files is logged and the record is still removed.

        Args:
            expiration_time: Maximum job age
            release: Callback that removes a job's backing archive

        Returns:
            Number of jobs cleaned up
        """
        expired_job_ids = self.job_repo.get_expired_jobs(expiration_time)

        count = 0
        for job_id in expired_job_ids:
            if self.job_repo.delete(job_id, release):
                count += 1

        if count:
            logger.info(f"Removed {count} expired jobs")
        return count

    def get_job_status_info(self, job_id: str) -> dict:
        """
        Get job status information for API response.

        Raises:
            JobNotFoundError: If job doesn't exist
        """
        job = self.get_job(job_id)

        return {
            "job_id": job.job_id,
            "status": job.status.value,
            "progress": job.progress.percentage,
            "bytes_downloaded": job.progress.bytes_downloaded,
            "total_bytes": job.progress.total_bytes,
            "status_text": job.status_text,
            "original_md5": job.content_hash,
            "filename": job.filename,
            "error": job.error_message,
            "error_category": job.error_category,
        }

    def live_archive_paths(self) -> List[str]:
        """Archive paths of every completed job still on record."""
        completed = self.job_repo.find_by_status(JobStatus.COMPLETE, limit=self.job_repo.count())
        return [job.archive_path for job in completed if job.archive_path]
