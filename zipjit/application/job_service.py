"""
Job Application Service

Coordinates job management use cases: the boundary operations the REST
layer calls.
"""

import logging
from typing import Any, Callable, Dict, Optional

from zipjit.config.fetch_config import FetchConfig
from zipjit.config.job_config import JobConfig
from zipjit.domain.address_guard import AddressGuard
from zipjit.domain.errors import EmptyUrlError
from zipjit.domain.file_storage import ArchiveHandle, DisplayName
from zipjit.domain.job_management import (
    FetchJob,
    JobManager,
    JobNotFoundError,
    JobNotReadyError,
)
from zipjit.infrastructure.local_file_repository import LocalFileRepository

logger = logging.getLogger(__name__)

TaskSpawner = Callable[[str, str, str], Any]


class JobService:
    """
    Application service for job management operations.

    Validates submissions synchronously, creates jobs, hands them to the
    task spawner and serves status and archives.
    """

    def __init__(
        self,
        job_manager: JobManager,
        file_repository: LocalFileRepository,
        guard: AddressGuard,
        job_config: Optional[JobConfig] = None,
        fetch_config: Optional[FetchConfig] = None,
        task_spawner: Optional[TaskSpawner] = None,
    ):
        """
        Initialize JobService.

        Args:
            job_manager: JobManager domain service
            file_repository: Owner of the temp directory
            guard: Address guard used for pre-flight validation
            job_config: Expiry and cleanup settings
            fetch_config: Filename length limit
            task_spawner: Called with ``(job_id, url, filename)`` to start
                the background run; may be set after construction
        """
        self.job_manager = job_manager
        self.file_repository = file_repository
        self.guard = guard
        self.job_config = job_config or JobConfig()
        self.fetch_config = fetch_config or FetchConfig()
        self.task_spawner = task_spawner

    def submit(self, url: Optional[str]) -> Dict[str, Any]:
        """
        Validate a URL and create a job for it.

        Args:
            url: URL submitted by the caller

        Returns:
            Dictionary with job information

        Raises:
            EmptyUrlError: If no URL was given
            InvalidUrlError: If the URL is malformed or not http(s)
            BlockedDestinationError: If the host resolves to a blocked address
            ResolutionError: If the host cannot be resolved
        """
        if url is None or not str(url).strip():
            raise EmptyUrlError("URL is required")

        validated = self.guard.validate_url(str(url))
        filename = DisplayName.from_url(
            validated.url, self.fetch_config.max_filename_length
        ).value

        job = self.job_manager.create_job(validated.url, filename)

        if self.task_spawner is not None:
            try:
                self.task_spawner(job.job_id, job.url, job.filename)
            except RuntimeError:
                logger.error(f"Could not schedule job {job.job_id}", exc_info=True)
                self.job_manager.delete_job(job.job_id)
                raise

        return {
            "job_id": job.job_id,
            "status": job.status.value,
            "message": "Job created successfully",
        }

    def poll_progress(self, job_id: str) -> Dict[str, Any]:
        """
        Get job status information.

        Raises:
            JobNotFoundError: If job doesn't exist
        """
        try:
            return self.job_manager.get_job_status_info(job_id)
        except JobNotFoundError:
            logger.debug(f"Job not found: {job_id}")
            raise

    def get_job(self, job_id: str) -> FetchJob:
        return self.job_manager.get_job(job_id)

    def retrieve_archive(self, job_id: str) -> ArchiveHandle:
        """
        Locate the finished archive of a job.

        Returns:
            ArchiveHandle with the path and the name to serve it as

        Raises:
            JobNotFoundError: If job doesn't exist or its archive is gone
            JobNotReadyError: If job has not completed
        """
        job = self.job_manager.get_job(job_id)

        if not job.is_ready():
            raise JobNotReadyError(f"Job {job_id} is {job.status.value}")

        if not self.file_repository.file_exists(job.archive_path):
            logger.warning(f"Archive of job {job_id} is missing from disk")
            raise JobNotFoundError(f"Archive of job {job_id} not found")

        return ArchiveHandle(path=job.archive_path, download_name=f"{job_id}.zip")

    def _release_archive(self, job: FetchJob) -> None:
        self.file_repository.delete_file(job.archive_path)

    def delete_job(self, job_id: str) -> bool:
        """
        Delete a job and its archive.

        Returns:
            True if the job existed
        """
        deleted = self.job_manager.delete_job(job_id, release=self._release_archive)
        if deleted:
            logger.info(f"Deleted job {job_id}")
        return deleted

    def cleanup_expired_jobs(self) -> int:
        """
        Remove every job older than the configured TTL, with its archive.

        Returns:
            Number of jobs cleaned up
        """
        return self.job_manager.cleanup_expired_jobs(
            self.job_config.job_ttl, release=self._release_archive
        )

    def cleanup_orphaned_files(self) -> int:
        """
        Remove stale temp entries that no live job owns.

        Returns:
            Number of entries removed
        """
        return self.file_repository.cleanup_orphaned_files(
            self.job_config.orphan_ttl.total_seconds(),
            keep=self.job_manager.live_archive_paths(),
        )
