"""
In-Memory Job Repository

Process-local implementation of JobRepository. Job state does not survive
a restart.
"""

import logging
import threading
from datetime import timedelta
from typing import Dict, List, Optional

from zipjit.domain.job_management.entities import FetchJob, utcnow
from zipjit.domain.job_management.repositories import (
    JobMutator,
    JobRepository,
    ReleaseCallback,
)
from zipjit.domain.job_management.value_objects import JobStatus

logger = logging.getLogger(__name__)


class InMemoryJobRepository(JobRepository):
    """
    Dict-backed job store guarded by a single lock.

    Records never leave the store: every read returns a snapshot and every
    write goes through ``save`` or ``update``.
    """

    def __init__(self):
        self._jobs: Dict[str, FetchJob] = {}
        self._lock = threading.Lock()

    def save(self, job: FetchJob) -> bool:
        with self._lock:
            self._jobs[job.job_id] = job.snapshot()
        return True

    def get(self, job_id: str) -> Optional[FetchJob]:
        with self._lock:
            job = self._jobs.get(job_id)
            return job.snapshot() if job is not None else None

    def update(self, job_id: str, mutator: JobMutator) -> Optional[FetchJob]:
        with self._lock:
            current = self._jobs.get(job_id)
            if current is None:
                return None
            working = current.snapshot()
            mutator(working)
            self._jobs[job_id] = working
            return working.snapshot()

    def delete(self, job_id: str, release: Optional[ReleaseCallback] = None) -> bool:
        with self._lock:
            job = self._jobs.get(job_id)
            if job is None:
                return False
            if release is not None:
                try:
                    release(job.snapshot())
                except OSError as e:
                    logger.error(f"Failed to release files of job {job_id}: {e}")
            del self._jobs[job_id]
            return True

    def exists(self, job_id: str) -> bool:
        with self._lock:
            return job_id in self._jobs

    def get_expired_jobs(self, expiration_time: timedelta) -> List[str]:
        cutoff = utcnow() - expiration_time
        with self._lock:
            return [
                job_id for job_id, job in self._jobs.items()
                if job.created_at < cutoff
            ]

    def find_by_status(self, status: JobStatus, limit: int = 100) -> List[FetchJob]:
        with self._lock:
            matches = [job for job in self._jobs.values() if job.status == status]
            return [job.snapshot() for job in matches[:limit]]

    def count(self) -> int:
        with self._lock:
            return len(self._jobs)
