"""
Cleanup Task

Periodic removal of expired jobs, their archives and orphaned temp files.
Runs on a daemon thread inside the service process.
"""

import logging
import threading
from typing import Any, Dict

from zipjit.application.job_service import JobService

logger = logging.getLogger(__name__)


def cleanup_expired_jobs(job_service: JobService) -> Dict[str, Any]:
    """
    Remove expired jobs and orphaned temp files.

    Each step runs independently; a failing step is recorded in
    ``errors`` and does not stop the next one.

    Returns:
        dict: Cleanup statistics with counts and errors
    """
    logger.info("Starting cleanup task")

    cleanup_stats: Dict[str, Any] = {
        "expired_jobs_removed": 0,
        "orphaned_files_cleaned": 0,
        "errors": [],
    }

    try:
        cleanup_stats["expired_jobs_removed"] = job_service.cleanup_expired_jobs()
    except Exception as e:
        error_msg = f"Error cleaning up expired jobs: {e}"
        cleanup_stats["errors"].append(error_msg)
        logger.error(error_msg, exc_info=True)

    try:
        cleanup_stats["orphaned_files_cleaned"] = job_service.cleanup_orphaned_files()
    except Exception as e:
        error_msg = f"Error cleaning up orphaned files: {e}"
        cleanup_stats["errors"].append(error_msg)
        logger.error(error_msg, exc_info=True)

    logger.info(
        f"Cleanup completed - Jobs: {cleanup_stats['expired_jobs_removed']}, "
        f"Orphaned: {cleanup_stats['orphaned_files_cleaned']}, "
        f"Errors: {len(cleanup_stats['errors'])}"
    )

    return cleanup_stats


class CleanupScheduler:
    """Daemon thread that calls ``cleanup_expired_jobs`` on a fixed interval."""

    def __init__(self, job_service: JobService, interval_seconds: float = 600):
        self.job_service = job_service
        self.interval_seconds = interval_seconds
        self._stop = threading.Event()
        self._thread = None

    def start(self) -> None:
        if self.is_running():
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._loop, name="zipjit-reaper", daemon=True
        )
        self._thread.start()
        logger.info(f"Cleanup scheduler started (every {self.interval_seconds}s)")

    def _loop(self) -> None:
        while not self._stop.wait(self.interval_seconds):
            cleanup_expired_jobs(self.job_service)

    def run_once(self) -> Dict[str, Any]:
        return cleanup_expired_jobs(self.job_service)

    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def stop(self, timeout: float = 5.0) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
