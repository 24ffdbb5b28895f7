"""
Job Management Repositories

Repository interface for job storage.
Concrete implementations are in the infrastructure layer.
"""

from abc import ABC, abstractmethod
from datetime import timedelta
from typing import Callable, List, Optional

from .entities import FetchJob
from .value_objects import JobStatus

JobMutator = Callable[[FetchJob], None]
ReleaseCallback = Callable[[FetchJob], None]


class JobRepository(ABC):
    """
    Abstract repository interface for job records.

    Implementations must hand out copies only: callers never hold a
    reference to the stored record.
    """

    @abstractmethod
    def save(self, job: FetchJob) -> bool:
        """
        Save or replace a job.

        Args:
            job: FetchJob to save

        Returns:
            True if successful, False otherwise
        """
        pass

    @abstractmethod
    def get(self, job_id: str) -> Optional[FetchJob]:
        """
        Retrieve a snapshot of a job by ID.

        Args:
            job_id: Job identifier

        Returns:
            FetchJob copy if found, None otherwise
        """
        pass

    @abstractmethod
    def update(self, job_id: str, mutator: JobMutator) -> Optional[FetchJob]:
        """
        Apply ``mutator`` to the stored job atomically.

        The mutator runs on a working copy; the copy replaces the stored
        record only if the mutator returns without raising.

        Args:
            job_id: Job identifier
            mutator: Callable that mutates the job in place

        Returns:
            Snapshot of the updated job, None if the job does not exist
        """
        pass

    @abstractmethod
    def delete(self, job_id: str, release: Optional[ReleaseCallback] = None) -> bool:
        """
        Delete a job.

        Args:
            job_id: Job identifier
            release: Optional callback run on the record, under the same
                lock, before it is removed (used to delete backing files)

        Returns:
            True if deleted, False if the job did not exist
        """
        pass

    @abstractmethod
    def exists(self, job_id: str) -> bool:
        """Check if job exists."""
        pass

    @abstractmethod
    def get_expired_jobs(self, expiration_time: timedelta) -> List[str]:
        """
        Get list of job IDs older than ``expiration_time``.

        Args:
            expiration_time: Maximum job age

        Returns:
            List of expired job IDs
        """
        pass

    @abstractmethod
    def find_by_status(self, status: JobStatus, limit: int = 100) -> List[FetchJob]:
        """
        Find jobs by their current status.

        Args:
            status: The JobStatus to filter by
            limit: Maximum number of jobs to return

        Returns:
            Snapshots of matching jobs, in no particular order
        """
        pass

    @abstractmethod
    def count(self) -> int:
        """Number of stored jobs."""
        pass
