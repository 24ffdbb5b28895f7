"""
Job Management Value Objects

Immutable value objects for job status and progress tracking.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class JobStatus(Enum):
    """Job status enumeration."""
    PENDING = "pending"
    DOWNLOADING = "downloading"
    ZIPPING = "zipping"
    COMPLETE = "complete"
    FAILED = "failed"

    def is_terminal(self) -> bool:
        """Check if status is terminal (complete or failed)."""
        return self in (JobStatus.COMPLETE, JobStatus.FAILED)

    def is_active(self) -> bool:
        """Check if the job still has work to do."""
        return not self.is_terminal()


def percentage_of(bytes_downloaded: int, total_bytes: Optional[int]) -> int:
    """floor(bytes / total * 100) clamped to [0, 100]; 0 when total is unknown."""
    if not total_bytes or total_bytes <= 0:
        return 0
    return max(0, min(100, (bytes_downloaded * 100) // total_bytes))


@dataclass(frozen=True)
class JobProgress:
    """
    Value object representing job progress information.

    Immutable to ensure thread-safety when passed between components.
    ``total_bytes`` is None when the server did not declare a length, in
    which case the percentage is indeterminate and stays where it was.
    """
    percentage: int
    bytes_downloaded: int = 0
    total_bytes: Optional[int] = None

    def __post_init__(self):
        """Validate progress values."""
        if not 0 <= self.percentage <= 100:
            raise ValueError(f"Percentage must be between 0 and 100, got {self.percentage}")
        if self.bytes_downloaded < 0:
            raise ValueError(f"bytes_downloaded must be non-negative, got {self.bytes_downloaded}")

    @property
    def is_indeterminate(self) -> bool:
        return self.total_bytes is None

    def to_dict(self):
        """Convert to dictionary for serialization."""
        return {
            "percentage": self.percentage,
            "bytes_downloaded": self.bytes_downloaded,
            "total_bytes": self.total_bytes,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'JobProgress':
        """Create JobProgress from dictionary."""
        return cls(
            percentage=data.get("percentage", 0),
            bytes_downloaded=data.get("bytes_downloaded", 0),
            total_bytes=data.get("total_bytes"),
        )

    @classmethod
    def initial(cls) -> 'JobProgress':
        """Create initial progress state."""
        return cls(percentage=0)

    @classmethod
    def downloading(cls, bytes_downloaded: int, total_bytes: Optional[int] = None) -> 'JobProgress':
        """Create progress for the downloading phase."""
        return cls(
            percentage=percentage_of(bytes_downloaded, total_bytes),
            bytes_downloaded=bytes_downloaded,
            total_bytes=total_bytes,
        )

    def completed(self) -> 'JobProgress':
        """Same byte counts, percentage pinned to 100."""
        return JobProgress(
            percentage=100,
            bytes_downloaded=self.bytes_downloaded,
            total_bytes=self.total_bytes,
        )
