"""
Download Task

Thread-pool runner for background fetch jobs.
Thin wrapper that delegates to DownloadService.
"""

import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor

from zipjit.application.download_service import DownloadService

logger = logging.getLogger(__name__)


class JobRunner:
    """
    Runs ``DownloadService.execute_download`` on a bounded thread pool.

    ``spawn`` matches the task-spawner signature expected by JobService.
    """

    def __init__(self, download_service: DownloadService, max_workers: int = 4):
        self.download_service = download_service
        self.max_workers = max_workers
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="zipjit-job"
        )
        self._lock = threading.Lock()
        self._active = 0
        self._shutdown = False

    def spawn(self, job_id: str, url: str, filename: str) -> Future:
        """
        Schedule a job run.

        Raises:
            RuntimeError: If the runner has been shut down
        """
        with self._lock:
            if self._shutdown:
                raise RuntimeError("JobRunner is shut down")
            future = self._executor.submit(self._run, job_id, url, filename)
        return future

    def _run(self, job_id: str, url: str, filename: str):
        start_time = time.time()
        with self._lock:
            self._active += 1
        logger.info(f"Task started for job {job_id}")
        try:
            result = self.download_service.execute_download(job_id, url, filename)
            duration_ms = (time.time() - start_time) * 1000
            logger.info(
                f"Task finished for job {job_id} in {duration_ms:.2f}ms "
                f"({'complete' if result.success else 'failed'})"
            )
            return result
        except Exception:
            # execute_download already converts failures into failed jobs
            logger.exception(f"Task crashed for job {job_id}")
            return None
        finally:
            with self._lock:
                self._active -= 1

    @property
    def active_jobs(self) -> int:
        with self._lock:
            return self._active

    def is_running(self) -> bool:
        with self._lock:
            return not self._shutdown

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting jobs; optionally wait for running ones."""
        with self._lock:
            self._shutdown = True
        self._executor.shutdown(wait=wait, cancel_futures=not wait)
        logger.info("JobRunner shut down")
