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

from tempdrop.application.dependency_container import DependencyContainer
from tempdrop.application.event_publisher import EventPublisher
from tempdrop.application.reaper_scheduler import ReaperScheduler
from tempdrop.application.reaper_service import ExpiredFileReaper
from tempdrop.config.celery_config import make_celery
from tempdrop.domain.file_storage import (
    FileManager,
    FileRecordRepository,
    ObjectGateway,
    SignedUrlService,
    utc_now,
)
from tempdrop.infrastructure.storage_factory import ObjectGatewayFactory

logger = logging.getLogger(__name__)

METADATA_BACKENDS = ("memory", "redis")
REAPER_MODES = ("thread", "celery", "off")


class AppConfig:
    """Application configuration."""

    def __init__(self):
        self.flask_env = os.getenv("FLASK_ENV", "development")
        self.is_production = self.flask_env == "production"
        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()

        # Metadata and blob storage
        self.metadata_backend = os.getenv("METADATA_BACKEND", "memory").lower()
        self.storage_backend = os.getenv("STORAGE_BACKEND", "local").lower()
        self.storage_dir = os.getenv("STORAGE_DIR", "/tmp/tempdrop")

        # Upload URLs
        self.public_base_url = os.getenv("PUBLIC_BASE_URL", "")
        self.secret_key = os.getenv("SECRET_KEY")
        self.upload_url_ttl_seconds = int(os.getenv("UPLOAD_URL_TTL_SECONDS", 900))

        # Reaper
        self.reaper_mode = os.getenv("REAPER_MODE", "thread").lower()
        self.reaper_interval_seconds = float(os.getenv("REAPER_INTERVAL_SECONDS", 60))
        self.reaper_max_workers = int(os.getenv("REAPER_MAX_WORKERS", 4))

    def validate(self) -> None:
        """
        Reject unsupported combinations.

        Raises:
            ValueError: On an unknown backend or reaper mode, or a Celery
                reaper without a shared metadata store
        """
        if self.metadata_backend not in METADATA_BACKENDS:
            raise ValueError(f"Unknown METADATA_BACKEND: {self.metadata_backend!r}")
        if self.reaper_mode not in REAPER_MODES:
            raise ValueError(f"Unknown REAPER_MODE: {self.reaper_mode!r}")
        if self.reaper_mode == "celery" and self.metadata_backend != "redis":
            raise ValueError("REAPER_MODE=celery requires METADATA_BACKEND=redis")


def create_app(config: Optional[AppConfig] = None) -> Flask:
    """
    Create and configure Flask application.

    Args:
        config: Application configuration, uses default if None

    Returns:
        Configured Flask application
    """
    if config is None:
        config = AppConfig()
    config.validate()

    _configure_logging(config)

    # Create Flask app
    app = Flask(__name__)
    app.config.update(
        METADATA_BACKEND=config.metadata_backend,
        STORAGE_BACKEND=config.storage_backend,
        REAPER_MODE=config.reaper_mode,
    )

    # Configure CORS
    CORS(
        app,
        resources={
            r"/*": {
                "origins": "*",
                "methods": ["GET", "POST", "PUT", "OPTIONS"],
                "allow_headers": ["Content-Type", "Authorization"],
                "expose_headers": ["Content-Type", "Content-Disposition"],
                "max_age": 3600,
            }
        },
    )

    # Initialize Celery (broker connections are opened lazily)
    app.celery = make_celery(app)

    # Initialize services
    _initialize_services(app, config)

    # Register blueprints
    _register_blueprints(app)

    # Register health check endpoint
    _register_health_endpoint(app)

    # Start the in-process reaper if configured
    _start_reaper(app, config)

    return app


def _configure_logging(config: AppConfig) -> None:
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _create_file_repository(config: AppConfig) -> FileRecordRepository:
    """
    Create the metadata store selected by METADATA_BACKEND.

    Args:
        config: Application configuration

    Returns:
        FileRecordRepository implementation
    """
    if config.metadata_backend == "redis":
        from tempdrop.config.redis_config import RedisConfig, get_redis_repository, init_redis
        from tempdrop.infrastructure.redis_file_repository import RedisFileRecordRepository

        redis_config = RedisConfig()
        init_redis(redis_config)
        logger.info(f"Metadata store: Redis at {redis_config.host}:{redis_config.port}")
        return RedisFileRecordRepository(get_redis_repository(redis_config.key_prefix))

    from tempdrop.infrastructure.in_memory_file_repository import InMemoryFileRecordRepository

    logger.info("Metadata store: in-memory")
    return InMemoryFileRecordRepository()


def _initialize_services(app: Flask, config: AppConfig) -> None:
    """
    Initialize application services and attach to app context using DependencyContainer.

    All services are registered as singletons and resolved via
    container.resolve() in API routes and Celery tasks.

    Args:
        app: Flask application
        config: Application configuration
    """
    container = DependencyContainer()

    # Events
    event_publisher = EventPublisher()
    container.register_singleton(EventPublisher, event_publisher)
    container.setup_event_handlers(event_publisher)

    # Infrastructure adapters
    file_repository = _create_file_repository(config)
    signed_url_service = SignedUrlService(
        secret_key=config.secret_key, base_url=config.public_base_url
    )
    object_gateway = ObjectGatewayFactory.create_gateway(
        config.storage_backend,
        signer=signed_url_service,
        upload_ttl_seconds=config.upload_url_ttl_seconds,
        storage_dir=config.storage_dir,
    )

    container.register_singleton(FileRecordRepository, file_repository)
    container.register_singleton(SignedUrlService, signed_url_service)
    container.register_singleton(ObjectGateway, object_gateway)

    # Domain and application services
    file_manager = FileManager(file_repository, object_gateway, event_publisher)
    reaper = ExpiredFileReaper(
        file_repository,
        object_gateway,
        max_workers=config.reaper_max_workers,
        event_publisher=event_publisher,
    )

    container.register_singleton(FileManager, file_manager)
    container.register_singleton(ExpiredFileReaper, reaper)

    # Attach container to Flask app context
    app.container = container

    # Attach commonly-used services directly to app for convenient access
    app.file_manager = file_manager

    logger.info("Application services initialized with DependencyContainer")


def _register_blueprints(app: Flask) -> None:
    """
    Register API blueprints.

    Args:
        app: Flask application
    """
    from tempdrop.api import api_bp
    from tempdrop.api.objects import objects_bp

    app.register_blueprint(api_bp)
    app.register_blueprint(objects_bp)

    logger.info("API registered at /api with Swagger UI at /api/docs")


def _start_reaper(app: Flask, config: AppConfig) -> None:
    """
    Start the reaper scheduler when REAPER_MODE is 'thread'.

    In 'celery' mode the beat schedule in CeleryConfig drives the reaper.
    """
    app.reaper_scheduler = None

    if config.reaper_mode != "thread":
        logger.info(f"In-process reaper disabled (REAPER_MODE={config.reaper_mode})")
        return

    scheduler = ReaperScheduler(
        app.container.resolve(ExpiredFileReaper),
        interval_seconds=config.reaper_interval_seconds,
    )
    scheduler.start()
    app.reaper_scheduler = scheduler


def _get_health_status(app: Flask) -> tuple[dict, int]:
    """
    Get health status of the service.

    Args:
        app: Flask application instance

    Returns:
        Tuple of (health_status_dict, http_status_code)
    """
    health_status = {
        "status": "ok",
        "timestamp": utc_now().isoformat(),
        "metadataBackend": app.config["METADATA_BACKEND"],
        "storageBackend": app.config["STORAGE_BACKEND"],
        "reaper": app.config["REAPER_MODE"],
        "records": None,
    }

    if app.config["METADATA_BACKEND"] == "redis":
        from tempdrop.config.redis_config import redis_health_check

        if not redis_health_check():
            logger.error("Health check: Redis did not answer PING")
            health_status["status"] = "degraded"
            return health_status, 503

    try:
        repository = app.container.resolve(FileRecordRepository)
        health_status["records"] = repository.count()
    except Exception as e:
        logger.error(f"Health check could not reach the metadata store: {e}")
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
        Returns overall health status of the application and its dependencies.
        """
        health_status, status_code = _get_health_status(app)
        return jsonify(health_status), status_code
