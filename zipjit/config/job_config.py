"""
Job Configuration

Environment-based settings for background jobs, temp storage and cleanup.
"""

import os
from dataclasses import dataclass
from datetime import timedelta


@dataclass
class JobConfig:
    """
    Job processing configuration from environment variables.

    The archive password is a fixed, publicly known string: archives are
    obfuscated for transport, not kept confidential.
    """

    temp_dir: str = "./temp"
    job_ttl_minutes: int = 30
    orphan_ttl_minutes: int = 60
    cleanup_interval_seconds: int = 600
    max_workers: int = 4
    archive_password: str = "password"
    compress_level: int = 5

    def __post_init__(self):
        if self.max_workers <= 0:
            raise ValueError(f"max_workers must be positive, got {self.max_workers}")
        if not 0 <= self.compress_level <= 9:
            raise ValueError(f"compress_level must be 0-9, got {self.compress_level}")
        if not self.archive_password:
            raise ValueError("archive_password must not be empty")

    @property
    def job_ttl(self) -> timedelta:
        return timedelta(minutes=self.job_ttl_minutes)

    @property
    def orphan_ttl(self) -> timedelta:
        return timedelta(minutes=self.orphan_ttl_minutes)

    @classmethod
    def from_env(cls) -> 'JobConfig':
        """
        Load configuration from environment variables.

        Returns:
            JobConfig instance with loaded configuration
        """
        return cls(
            temp_dir=os.getenv('ZIPJIT_TEMP_DIR', './temp'),
            job_ttl_minutes=int(os.getenv('ZIPJIT_JOB_TTL_MINUTES', '30')),
            orphan_ttl_minutes=int(os.getenv('ZIPJIT_ORPHAN_TTL_MINUTES', '60')),
            cleanup_interval_seconds=int(os.getenv('ZIPJIT_CLEANUP_INTERVAL', '600')),
            max_workers=int(os.getenv('ZIPJIT_MAX_WORKERS', '4')),
            archive_password=os.getenv('ZIPJIT_ARCHIVE_PASSWORD', 'password'),
            compress_level=int(os.getenv('ZIPJIT_COMPRESS_LEVEL', '5')),
        )
