"""
Configuration

Environment-driven settings for fetching and job processing.
"""

from .fetch_config import FetchConfig
from .job_config import JobConfig

__all__ = ['FetchConfig', 'JobConfig']
