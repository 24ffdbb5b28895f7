"""
Rate Limiting Domain

Global token-bucket admission control for job submission.
"""

from .entities import TokenBucket
from .services import AdmissionGate
from .value_objects import RateLimit

__all__ = [
    'AdmissionGate',
    'RateLimit',
    'TokenBucket',
]
