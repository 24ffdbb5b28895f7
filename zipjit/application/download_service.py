"""
Download Service

Application service that runs one job from fetch to finished archive.
It is the only writer of a job's status once the job exists, and the
fault boundary of the background task: every exception ends as a failed
job, never as a crashed worker.
"""

import logging
import os
import time
from typing import Callable, Optional

from zipjit.domain.errors import (
    ERROR_MESSAGES,
    DomainError,
    ErrorCategory,
    PackagingError,
    user_message_for,
)
from zipjit.domain.job_management.services import (
    JobManager,
    JobNotFoundError,
    JobStateError,
)
from zipjit.domain.job_management.value_objects import JobProgress, percentage_of
from zipjit.infrastructure.archive_encoder import ArchiveEncoder
from zipjit.infrastructure.local_file_repository import LocalFileRepository
from zipjit.infrastructure.secure_fetcher import SecureFetcher

from .download_result import DownloadResult

logger = logging.getLogger(__name__)

PROGRESS_INTERVAL_SECONDS = 0.5


class ProgressThrottle:
    """
    Limits how often fetch progress is written to the job registry.

    With a known total, progress is published whenever the percentage
    moves. Without one, byte counts are published at most once per
    ``interval`` seconds. ``flush`` publishes the final count if the last
    call was held back.
    """

    def __init__(
        self,
        publish: Callable[[int, Optional[int]], None],
        interval: float = PROGRESS_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._publish = publish
        self.interval = interval
        self._clock = clock
        self._last_percentage: Optional[int] = None
        self._last_at: Optional[float] = None
        self._last_written: Optional[int] = None

    def __call__(self, written: int, total: Optional[int]) -> None:
        now = self._clock()
        if total:
            percentage = percentage_of(written, total)
            if percentage == self._last_percentage:
                return
            self._last_percentage = percentage
        elif self._last_at is not None and now - self._last_at < self.interval:
            return
        self._send(written, total, now)

    def flush(self, written: int, total: Optional[int]) -> None:
        if written != self._last_written:
            self._send(written, total, self._clock())

    def _send(self, written: int, total: Optional[int], now: float) -> None:
        self._last_at = now
        self._last_written = written
        self._publish(written, total)


class DownloadService:
    """
    Application service for the fetch, hash and package workflow.

    Coordinates JobManager, SecureFetcher, ArchiveEncoder and the local
    file repository.
    """

    def __init__(
        self,
        job_manager: JobManager,
        fetcher: SecureFetcher,
        encoder: ArchiveEncoder,
        file_repository: LocalFileRepository,
    ):
        """
        Initialize Download Service with dependencies.

        Args:
            job_manager: Domain service for job lifecycle management
            fetcher: Guarded HTTP fetcher
            encoder: Double-wrap archive encoder
            file_repository: Owner of the temp directory
        """
        self.job_manager = job_manager
        self.fetcher = fetcher
        self.encoder = encoder
        self.file_repository = file_repository

    def execute_download(self, job_id: str, url: str, filename: str) -> DownloadResult:
        """
        Execute the complete workflow for one job.

        Workflow:
        1. Move the job to downloading
        2. Fetch the URL into the job's scratch directory, publishing progress
        3. Record the MD5 and move to zipping
        4. Double-wrap the file into ``<temp>/<job_id>.zip``
        5. Complete the job
        6. On error: categorize and fail the job

        The scratch directory is removed on every path. If the record
        vanishes mid-run the archive produced so far is deleted too.

        Args:
            job_id: Job identifier
            url: Validated URL to fetch
            filename: Sanitized display name

        Returns:
            DownloadResult with success/failure information
        """
        archive_path: Optional[str] = None
        try:
            self.job_manager.start_download(job_id)
            logger.info(f"Job {job_id}: fetching {url}")

            workdir = self.file_repository.create_job_workdir(job_id)
            raw_path = os.path.join(workdir, filename)

            throttle = ProgressThrottle(
                lambda written, total: self._report_progress(job_id, written, total)
            )
            fetch_result = self.fetcher.fetch(url, raw_path, progress_callback=throttle)
            throttle.flush(fetch_result.bytes_written, fetch_result.total_bytes)

            self.job_manager.start_zipping(job_id, fetch_result.content_hash)
            logger.info(f"Job {job_id}: packaging {fetch_result.bytes_written} bytes")

            archive_path = self.file_repository.archive_path_for(job_id)
            identifier = self.encoder.double_wrap(raw_path, archive_path, filename)

            job = self.job_manager.complete_job(job_id, archive_path, identifier)
            return DownloadResult.create_success(job)

        except JobNotFoundError:
            logger.info(f"Job {job_id} was removed while running, discarding its files")
            self._discard_archive(archive_path)
            return DownloadResult.create_failure(
                job_id, None, ErrorCategory.JOB_NOT_FOUND,
                user_message_for(ErrorCategory.JOB_NOT_FOUND),
            )
        except Exception as e:
            self._discard_archive(archive_path)
            return self._handle_error(job_id, e)
        finally:
            self.file_repository.remove_job_workdir(job_id)

    def _report_progress(self, job_id: str, written: int, total: Optional[int]) -> None:
        self.job_manager.update_progress(job_id, JobProgress.downloading(written, total))

    def _discard_archive(self, archive_path: Optional[str]) -> None:
        try:
            self.file_repository.delete_file(archive_path)
        except OSError as e:
            logger.warning(f"Could not remove archive {archive_path}: {e}")

    def _handle_error(self, job_id: str, exception: Exception) -> DownloadResult:
        """
        Categorize an error and fail the job.

        Domain errors carry a short, safe detail that is shown to pollers.
        Anything else is an internal fault and only the generic message
        leaves this method.
        """
        if isinstance(exception, DomainError) and exception.category != ErrorCategory.SYSTEM_ERROR:
            error_category = exception.category
            error_info = ERROR_MESSAGES.get(
                error_category, ERROR_MESSAGES[ErrorCategory.SYSTEM_ERROR]
            )
            user_message = f"{error_info['title']}: {exception}"
            status_text = "Failed" if isinstance(exception, PackagingError) else "Download failed"
            cause = exception.original_error
            logger.warning(
                f"Job {job_id} failed with {error_category.value}: {exception}"
                + (f" ({type(cause).__name__}: {cause})" if cause else "")
            )
        else:
            error_category = ErrorCategory.SYSTEM_ERROR
            user_message = user_message_for(error_category)
            status_text = "Failed"
            logger.error(
                f"Job {job_id} failed with {error_category.value}: "
                f"{type(exception).__name__}: {exception}",
                exc_info=True,
            )

        job = None
        try:
            job = self.job_manager.fail_job(
                job_id, user_message, error_category.value, status_text
            )
        except JobNotFoundError:
            logger.info(f"Job {job_id} was removed before its failure could be recorded")
        except JobStateError as e:
            logger.error(f"Failed to update job {job_id} status: {e}")

        return DownloadResult.create_failure(job_id, job, error_category, user_message)
