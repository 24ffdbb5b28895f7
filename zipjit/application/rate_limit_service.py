"""
Rate Limit Application Service

Applies the global admission gate when rate limiting is enabled.
"""

from zipjit.domain.rate_limiting import AdmissionGate
from zipjit.infrastructure.rate_limit_config import RateLimitConfig


class RateLimitService:
    """
    Application service in front of the admission gate.

    Keeps the enable flag out of the domain: a disabled limiter admits
    every request without touching the bucket.
    """

    def __init__(self, gate: AdmissionGate, config: RateLimitConfig):
        self.gate = gate
        self.config = config

    def allow_request(self) -> bool:
        if not self.config.should_enforce():
            return True
        return self.gate.allow_request()

    def check_submission(self) -> None:
        """
        Admit one job submission.

        Raises:
            RateLimitExceededError: If the gate is enforced and empty
        """
        if not self.config.should_enforce():
            return
        self.gate.check()
