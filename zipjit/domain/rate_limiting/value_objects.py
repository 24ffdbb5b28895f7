"""
Rate Limiting Value Objects

Immutable value objects for rate limiting with zero external dependencies.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimit:
    """
    Immutable token-bucket configuration.

    ``requests_per_second`` is the refill rate, ``burst`` the bucket
    capacity (how many requests may arrive back to back).
    """
    requests_per_second: float
    burst: int

    def __post_init__(self):
        """Validate limit values."""
        if self.requests_per_second < 0:
            raise ValueError(
                f"requests_per_second must be non-negative, got {self.requests_per_second}"
            )
        if self.burst <= 0:
            raise ValueError(f"Burst must be positive, got {self.burst}")
