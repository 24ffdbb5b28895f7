"""
Application Factory

Creates and configures Flask application with all dependencies.
This factory pattern improves testability by allowing dependency injection
and configuration overrides.
"""

import logging
import os
from typing import Optional

from flask import Flask, jsonify
from flask_cors import CORS

from zipjit.application.dependency_container import DependencyContainer
from zipjit.application.download_service import DownloadService
from zipjit.application.job_service import JobService
from zipjit.application.rate_limit_service import RateLimitService
from zipjit.config.fetch_config import FetchConfig
from zipjit.config.job_config import JobConfig
from zipjit.domain.address_guard import AddressGuard
from zipjit.domain.job_management import JobManager, JobRepository
from zipjit.domain.rate_limiting import AdmissionGate
from zipjit.infrastructure.archive_encoder import ArchiveEncoder
from zipjit.infrastructure.in_memory_job_repository import InMemoryJobRepository
from zipjit.infrastructure.local_file_repository import LocalFileRepository
from zipjit.infrastructure.rate_limit_config import RateLimitConfig
from zipjit.infrastructure.secure_fetcher import SecureFetcher
from zipjit.tasks.cleanup_task import CleanupScheduler
from zipjit.tasks.download_task import JobRunner

logger = logging.getLogger(__name__)


class AppConfig:
    """Application configuration."""

    def __init__(self):
        self.api_version = os.getenv("API_VERSION", "v1")
        self.flask_env = os.getenv("FLASK_ENV", "development")
        self.is_production = self.flask_env == "production"

        # Background job threads and the cleanup thread; tests turn these off
        self.start_workers = os.getenv("ZIPJIT_START_WORKERS", "true").lower() == "true"

        self.job = JobConfig.from_env()
        self.fetch = FetchConfig.from_env()
        self.rate_limit = RateLimitConfig.from_env()


def create_app(config: Optional[AppConfig] = None, guard: Optional[AddressGuard] = None) -> Flask:
    """
    Create and configure Flask application.

    Args:
        config: Application configuration, uses default if None
        guard: Address guard override, mainly for tests that need a
            custom resolver or blocked-range table

    Returns:
        Configured Flask application
    """
    if config is None:
        config = AppConfig()

    app = Flask(__name__)

    CORS(
        app,
        resources={
            r"/*": {
                "origins": "*",
                "methods": ["GET", "POST", "DELETE", "OPTIONS"],
                "allow_headers": ["Content-Type"],
                "expose_headers": ["Content-Disposition", "Retry-After"],
                "max_age": 3600,
            }
        },
    )

    _initialize_services(app, config, guard or AddressGuard())

    _register_blueprints(app, config)

    _register_health_endpoint(app)

    if config.start_workers:
        app.cleanup_scheduler.start()

    return app


def _initialize_services(app: Flask, config: AppConfig, guard: AddressGuard) -> None:
    """
    Initialize application services and attach them to the app through
    the DependencyContainer.

    Args:
        app: Flask application
        config: Application configuration
        guard: Address guard shared by validation and the fetcher
    """
    container = DependencyContainer()

    # Infrastructure
    job_repository = InMemoryJobRepository()
    file_repository = LocalFileRepository(config.job.temp_dir)
    encoder = ArchiveEncoder(config.job.archive_password, config.job.compress_level)
    fetcher = SecureFetcher(guard, config.fetch)

    container.register_singleton(AddressGuard, guard)
    container.register_singleton(JobRepository, job_repository)
    container.register_singleton(LocalFileRepository, file_repository)
    container.register_singleton(ArchiveEncoder, encoder)
    container.register_singleton(SecureFetcher, fetcher)

    # Domain services
    job_manager = JobManager(job_repository)
    gate = AdmissionGate(config.rate_limit.to_rate_limit())

    container.register_singleton(JobManager, job_manager)
    container.register_singleton(AdmissionGate, gate)

    # Application services
    download_service = DownloadService(job_manager, fetcher, encoder, file_repository)
    job_service = JobService(
        job_manager,
        file_repository,
        guard,
        job_config=config.job,
        fetch_config=config.fetch,
    )
    rate_limit_service = RateLimitService(gate, config.rate_limit)

    container.register_singleton(DownloadService, download_service)
    container.register_singleton(JobService, job_service)
    container.register_singleton(RateLimitService, rate_limit_service)

    # Background workers
    job_runner = None
    if config.start_workers:
        job_runner = JobRunner(download_service, config.job.max_workers)
        job_service.task_spawner = job_runner.spawn
        container.register_singleton(JobRunner, job_runner)

    cleanup_scheduler = CleanupScheduler(job_service, config.job.cleanup_interval_seconds)
    container.register_singleton(CleanupScheduler, cleanup_scheduler)

    app.container = container
    app.job_service = job_service
    app.job_runner = job_runner
    app.cleanup_scheduler = cleanup_scheduler

    logger.info(f"Services initialized (temp dir {file_repository.storage_dir})")


def _register_blueprints(app: Flask, config: AppConfig) -> None:
    """
    Register API blueprints.

    Args:
        app: Flask application
        config: Application configuration
    """
    from zipjit.api.v1 import api_v1_bp

    app.register_blueprint(api_v1_bp)

    logger.info(
        f"API {config.api_version} registered at /api/{config.api_version} "
        f"with Swagger UI at /api/{config.api_version}/docs"
    )


def _get_health_status(app: Flask) -> tuple[dict, int]:
    """
    Get health status of the worker pool, reaper and temp directory.

    Returns:
        Tuple of (health_status_dict, http_status_code)
    """
    health_status = {
        "status": "ok",
        "message": "backend ready",
        "workers": "unknown",
        "reaper": "unknown",
        "storage": "unknown",
    }

    runner = getattr(app, "job_runner", None)
    if runner is not None and runner.is_running():
        health_status["workers"] = f"running ({runner.active_jobs} active)"
    else:
        health_status["workers"] = "stopped"
        health_status["status"] = "degraded"

    scheduler = getattr(app, "cleanup_scheduler", None)
    if scheduler is not None and scheduler.is_running():
        health_status["reaper"] = "running"
    else:
        health_status["reaper"] = "stopped"
        health_status["status"] = "degraded"

    file_repository = app.container.resolve(LocalFileRepository)
    if file_repository.is_available():
        health_status["storage"] = "writable"
    else:
        health_status["storage"] = "unavailable"
        health_status["status"] = "degraded"

    status_code = 200 if health_status["status"] == "ok" else 503
    return health_status, status_code


def _register_health_endpoint(app: Flask) -> None:
    """
    Register health check endpoint.

    Args:
        app: Flask application
    """

    @app.route("/health", methods=["GET"])
    def health():
        """
        Health check endpoint.
        Returns overall health status of the application and its workers.
        """
        health_status, status_code = _get_health_status(app)
        return jsonify(health_status), status_code
