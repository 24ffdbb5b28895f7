"""
Background Tasks

Job runner thread pool and the periodic cleanup thread.
"""

from .cleanup_task import CleanupScheduler, cleanup_expired_jobs
from .download_task import JobRunner

__all__ = ['CleanupScheduler', 'JobRunner', 'cleanup_expired_jobs']
