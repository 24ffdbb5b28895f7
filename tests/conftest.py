"""
Pytest configuration and shared fixtures for ZipJIT tests.

This module provides:
- Hypothesis configuration for property-based testing
- Address guards with fake resolvers
- A local HTTP server reachable as ``files.test``
- Job manager, repositories and app factories wired to a temp directory
"""

import os

import pytest
from hypothesis import HealthCheck, Phase, settings

from app_factory import create_app
from zipjit.domain.address_guard import AddressGuard
from zipjit.domain.job_management import JobManager
from zipjit.infrastructure.in_memory_job_repository import InMemoryJobRepository
from zipjit.infrastructure.local_file_repository import LocalFileRepository

from tests.fixtures.app_helpers import build_app_config
from tests.fixtures.http_server import start_server
from tests.fixtures.resolvers import DNS_TABLE, TEST_BLOCKED_NETWORKS, StaticResolver

# =============================================================================
# Hypothesis Configuration
# =============================================================================

settings.register_profile(
    "default",
    max_examples=100,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.target, Phase.shrink],
)

settings.register_profile(
    "ci",
    max_examples=200,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
)

settings.register_profile(
    "dev",
    max_examples=10,
    deadline=None,
)

settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "default"))

# =============================================================================
# Address Guard Fixtures
# =============================================================================

@pytest.fixture
def resolver():
    return StaticResolver(DNS_TABLE)


@pytest.fixture
def guard(resolver):
    """Guard that resolves through ``DNS_TABLE`` with the default blocklist."""
    return AddressGuard(resolver=resolver)


@pytest.fixture
def loopback_guard(resolver):
    """Guard that lets the local server through; everything else stays blocked."""
    return AddressGuard(resolver=resolver, blocked_networks=TEST_BLOCKED_NETWORKS)


# =============================================================================
# HTTP Server Fixtures
# =============================================================================

@pytest.fixture(scope="session")
def http_server():
    server = start_server()
    yield server
    server.shutdown()
    server.server_close()


# =============================================================================
# Job Fixtures
# =============================================================================

@pytest.fixture
def job_repository():
    return InMemoryJobRepository()


@pytest.fixture
def job_manager(job_repository):
    return JobManager(job_repository)


@pytest.fixture
def file_repository(tmp_path):
    return LocalFileRepository(str(tmp_path / "temp"))


# =============================================================================
# Application Fixtures
# =============================================================================

@pytest.fixture
def app(tmp_path, loopback_guard):
    """App without background threads; jobs stay pending."""
    return create_app(build_app_config(tmp_path), guard=loopback_guard)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def running_app(tmp_path, loopback_guard):
    """App with the job runner and reaper running."""
    app = create_app(
        build_app_config(tmp_path, start_workers=True, chunk_size=1024),
        guard=loopback_guard,
    )
    yield app
    app.cleanup_scheduler.stop()
    app.job_runner.shutdown(wait=True)

