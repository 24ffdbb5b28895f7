"""
Download Result Value Object

Encapsulates the outcome of one job run.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from zipjit.domain.errors import ErrorCategory
from zipjit.domain.job_management.entities import FetchJob


@dataclass
class DownloadResult:
    """
    Value object representing the result of a fetch-and-package run.

    ``job`` is None when the record disappeared while the run was in
    progress (reaped or deleted).
    """

    success: bool
    job_id: str
    job: Optional[FetchJob] = None
    error_category: Optional[ErrorCategory] = None
    error_message: Optional[str] = None

    @classmethod
    def create_success(cls, job: FetchJob) -> 'DownloadResult':
        return cls(success=True, job_id=job.job_id, job=job)

    @classmethod
    def create_failure(
        cls,
        job_id: str,
        job: Optional[FetchJob],
        error_category: ErrorCategory,
        error_message: str
    ) -> 'DownloadResult':
        """
        Create a failed download result.

        Args:
            job_id: Job identifier
            job: Failed job snapshot, if the record still exists
            error_category: Category of error that occurred
            error_message: Human-readable error message

        Returns:
            DownloadResult indicating failure
        """
        return cls(
            success=False,
            job_id=job_id,
            job=job,
            error_category=error_category,
            error_message=error_message
        )

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert result to dictionary for serialization.

        Returns:
            Dictionary representation of the result
        """
        return {
            'status': 'complete' if self.success else 'failed',
            'job_id': self.job_id,
            'original_md5': self.job.content_hash if self.job else None,
            'error': self.error_message,
            'error_category': self.error_category.value if self.error_category else None
        }
