"""
Unit tests for RateLimitService and RateLimitConfig.
"""

from unittest.mock import Mock

import pytest

from zipjit.application.rate_limit_service import RateLimitService
from zipjit.domain.errors import RateLimitExceededError
from zipjit.domain.rate_limiting import AdmissionGate, RateLimit
from zipjit.infrastructure.rate_limit_config import RateLimitConfig


class TestRateLimitService:
    def test_enforced_gate(self):
        gate = AdmissionGate(RateLimit(0.0, 1), clock=lambda: 0.0)
        service = RateLimitService(gate, RateLimitConfig(enabled=True))

        service.check_submission()
        with pytest.raises(RateLimitExceededError):
            service.check_submission()
        assert not service.allow_request()

    def test_disabled_limiter_never_touches_gate(self):
        gate = Mock()
        service = RateLimitService(gate, RateLimitConfig(enabled=False))

        for _ in range(10):
            service.check_submission()
            assert service.allow_request()

        gate.check.assert_not_called()
        gate.allow_request.assert_not_called()


class TestRateLimitConfig:
    def test_defaults(self):
        config = RateLimitConfig()

        assert config.should_enforce()
        assert config.to_rate_limit() == RateLimit(requests_per_second=1.0, burst=2)

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("RATE_LIMIT_ENABLED", "false")
        monkeypatch.setenv("RATE_LIMIT_REQUESTS_PER_SECOND", "5")
        monkeypatch.setenv("RATE_LIMIT_BURST", "20")

        config = RateLimitConfig.from_env()

        assert not config.should_enforce()
        assert config.requests_per_second == 5.0
        assert config.burst == 20
