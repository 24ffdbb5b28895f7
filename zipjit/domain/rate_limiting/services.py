"""
Rate Limiting Domain Services

Single global admission gate in front of job creation.
"""

import logging
import math
import threading
import time
from typing import Callable

from .entities import TokenBucket
from .value_objects import RateLimit
from ..errors import ErrorCategory, RateLimitExceededError

logger = logging.getLogger(__name__)


class AdmissionGate:
    """
    Global token bucket shared by all callers.

    ``clock`` is injectable so tests can step time deterministically.
    """

    def __init__(self, rate_limit: RateLimit, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._lock = threading.Lock()
        self._bucket = TokenBucket.full(rate_limit, clock())
        self.rate_limit = rate_limit

    def _take(self):
        with self._lock:
            return self._bucket.acquire(self._clock())

    def allow_request(self) -> bool:
        """Consume one token; False when the bucket is empty."""
        allowed, _ = self._take()
        return allowed

    def check(self) -> None:
        """
        Consume one token or refuse.

        Raises:
            RateLimitExceededError: If the bucket is empty
        """
        allowed, retry_after = self._take()
        if allowed:
            return

        retry_after_header = "1" if math.isinf(retry_after) else str(max(1, math.ceil(retry_after)))
        logger.info(f"Admission refused, retry after {retry_after_header}s")
        raise RateLimitExceededError(
            category=ErrorCategory.RATE_LIMITED,
            technical_message="Global request rate exceeded",
            context={"retry_after": retry_after_header},
        )
