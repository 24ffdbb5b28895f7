"""
Fetch Configuration

Environment-based limits for outbound HTTP fetches.
"""

import os
from dataclasses import dataclass

MIB = 1024 * 1024


@dataclass
class FetchConfig:
    """
    Outbound fetch limits loaded from environment variables.

    ``max_file_size`` is in bytes; timeouts are in seconds.
    ``download_timeout`` bounds the whole fetch including redirects.
    """

    max_file_size: int = 2000 * MIB
    download_timeout: float = 300.0
    connect_timeout: float = 30.0
    max_redirects: int = 3
    chunk_size: int = 64 * 1024
    max_filename_length: int = 255
    user_agent: str = "zipjit/1.0"

    def __post_init__(self):
        if self.max_file_size <= 0:
            raise ValueError(f"max_file_size must be positive, got {self.max_file_size}")
        if self.download_timeout <= 0 or self.connect_timeout <= 0:
            raise ValueError("Timeouts must be positive")
        if self.max_redirects < 0:
            raise ValueError(f"max_redirects must be non-negative, got {self.max_redirects}")

    @classmethod
    def from_env(cls) -> 'FetchConfig':
        """
        Load configuration from environment variables.

        Returns:
            FetchConfig instance with loaded configuration
        """
        return cls(
            max_file_size=int(os.getenv('ZIPJIT_MAX_FILE_SIZE', str(2000 * MIB))),
            download_timeout=float(os.getenv('ZIPJIT_DOWNLOAD_TIMEOUT', '300')),
            connect_timeout=float(os.getenv('ZIPJIT_CONNECT_TIMEOUT', '30')),
            max_redirects=int(os.getenv('ZIPJIT_MAX_REDIRECTS', '3')),
            chunk_size=int(os.getenv('ZIPJIT_CHUNK_SIZE', str(64 * 1024))),
            max_filename_length=int(os.getenv('ZIPJIT_MAX_FILENAME_LENGTH', '255')),
            user_agent=os.getenv('ZIPJIT_USER_AGENT', 'zipjit/1.0'),
        )
