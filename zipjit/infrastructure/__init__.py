"""
Infrastructure Layer

Concrete implementations of domain repositories plus the network and
archive adapters.
"""

from .archive_encoder import ArchiveEncoder
from .guarded_transport import GuardedHTTPAdapter, guarded_connection_factory
from .in_memory_job_repository import InMemoryJobRepository
from .local_file_repository import LocalFileRepository, LocalFileStorageError
from .rate_limit_config import RateLimitConfig
from .secure_fetcher import FetchResult, SecureFetcher

__all__ = [
    'ArchiveEncoder',
    'FetchResult',
    'GuardedHTTPAdapter',
    'InMemoryJobRepository',
    'LocalFileRepository',
    'LocalFileStorageError',
    'RateLimitConfig',
    'SecureFetcher',
    'guarded_connection_factory',
]
