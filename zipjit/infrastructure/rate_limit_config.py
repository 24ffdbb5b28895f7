"""
Rate Limit Configuration

Environment-based configuration for the global admission gate.
"""

import os
from dataclasses import dataclass

from zipjit.domain.rate_limiting.value_objects import RateLimit


@dataclass
class RateLimitConfig:
    """
    Rate limit configuration from environment variables.

    One token bucket covers every caller: ``requests_per_second`` is the
    refill rate, ``burst`` the bucket size.
    """

    enabled: bool = True
    requests_per_second: float = 1.0
    burst: int = 2

    @classmethod
    def from_env(cls) -> 'RateLimitConfig':
        """
        Load configuration from environment variables.

        Returns:
            RateLimitConfig instance with loaded configuration
        """
        return cls(
            enabled=os.getenv('RATE_LIMIT_ENABLED', 'true').lower() == 'true',
            requests_per_second=float(os.getenv('RATE_LIMIT_REQUESTS_PER_SECOND', '1')),
            burst=int(os.getenv('RATE_LIMIT_BURST', '2')),
        )

    def to_rate_limit(self) -> RateLimit:
        return RateLimit(requests_per_second=self.requests_per_second, burst=self.burst)

    def should_enforce(self) -> bool:
        """Rate limiting is enforced whenever it is enabled."""
        return self.enabled
