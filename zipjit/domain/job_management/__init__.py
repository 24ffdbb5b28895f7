"""
Job Management Domain

Manages asynchronous fetch jobs, progress tracking, and status updates.
"""

from .entities import FetchJob
from .value_objects import JobStatus, JobProgress, percentage_of
from .services import JobManager, JobNotFoundError, JobNotReadyError, JobStateError
from .repositories import JobRepository

__all__ = [
    'FetchJob',
    'JobStatus',
    'JobProgress',
    'percentage_of',
    'JobManager',
    'JobRepository',
    'JobNotFoundError',
    'JobNotReadyError',
    'JobStateError'
]
