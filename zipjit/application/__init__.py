"""
Application Services Layer

Orchestrates domain services and coordinates use cases.
"""

from .dependency_container import DependencyContainer, DependencyNotFoundError
from .download_result import DownloadResult
from .download_service import DownloadService
from .job_service import JobService
from .rate_limit_service import RateLimitService

__all__ = [
    'DependencyContainer',
    'DependencyNotFoundError',
    'DownloadResult',
    'DownloadService',
    'JobService',
    'RateLimitService',
]
