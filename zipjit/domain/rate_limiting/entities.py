"""
Rate Limiting Entities

Domain entities for rate limiting with zero external dependencies.
"""

from dataclasses import dataclass
from typing import Tuple

from .value_objects import RateLimit


@dataclass
class TokenBucket:
    """
    Entity holding the token count of one bucket.

    Not thread-safe on its own; the admission gate serializes access.
    """
    capacity: int
    refill_per_second: float
    tokens: float
    last_checked: float

    @classmethod
    def full(cls, rate_limit: RateLimit, now: float) -> "TokenBucket":
        return cls(
            capacity=rate_limit.burst,
            refill_per_second=rate_limit.requests_per_second,
            tokens=float(rate_limit.burst),
            last_checked=now,
        )

    def acquire(self, now: float) -> Tuple[bool, float]:
        """
        Take one token if available.

        Returns:
            (allowed, seconds until a token is available)
        """
        if self.refill_per_second > 0:
            elapsed = max(0.0, now - self.last_checked)
            self.tokens = min(self.capacity, self.tokens + elapsed * self.refill_per_second)
        self.last_checked = now
        if self.tokens >= 1.0:
            self.tokens -= 1.0
            return True, 0.0
        if self.refill_per_second <= 0:
            return False, float("inf")
        return False, max(0.0, (1.0 - self.tokens) / self.refill_per_second)
