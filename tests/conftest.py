"""
Shared pytest fixtures and configuration for the TempDrop test suite.

This module provides:
- Hypothesis configuration for property-based testing
- Shared fixtures for records, repositories and gateways
- A Flask application wired with in-memory collaborators
"""

import os
from datetime import datetime, timezone

import pytest

# Modules importing celery_app build the default app at import time; keep
# that app from starting the reaper thread or writing outside tmp.
os.environ.setdefault("REAPER_MODE", "off")
os.environ.setdefault("METADATA_BACKEND", "memory")
os.environ.setdefault("STORAGE_BACKEND", "local")

# Hypothesis configuration
from hypothesis import HealthCheck, Phase, settings  # noqa: E402

from tempdrop.infrastructure.in_memory_file_repository import (  # noqa: E402
    InMemoryFileRecordRepository,
)
from tests.fixtures import MockObjectGateway  # noqa: E402

# Register Hypothesis profiles
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
    suppress_health_check=[HealthCheck.too_slow],
)
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "default"))


# =============================================================================
# Time-related Fixtures
# =============================================================================

@pytest.fixture
def fixed_now() -> datetime:
    """Provide a fixed timezone-aware datetime for deterministic testing."""
    return datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


# =============================================================================
# Domain Fixtures
# =============================================================================

@pytest.fixture
def memory_repository() -> InMemoryFileRecordRepository:
    """Provide an empty in-memory metadata store."""
    return InMemoryFileRecordRepository()


@pytest.fixture
def mock_gateway() -> MockObjectGateway:
    """Provide an in-memory object gateway with failure injection."""
    return MockObjectGateway()


@pytest.fixture
def signer():
    """Provide a SignedUrlService with a fixed key."""
    from tempdrop.domain.file_storage.signed_url_service import SignedUrlService

    return SignedUrlService(secret_key="test-secret", base_url="http://testserver")


@pytest.fixture
def local_gateway(tmp_path, signer):
    """Provide a LocalObjectGateway rooted in a temporary directory."""
    from tempdrop.infrastructure.local_object_gateway import LocalObjectGateway

    return LocalObjectGateway(str(tmp_path / "objects"), signer=signer)


# =============================================================================
# Application Fixtures
# =============================================================================

@pytest.fixture
def app_config(tmp_path):
    """Application configuration using in-memory metadata and tmp storage."""
    from app_factory import AppConfig

    config = AppConfig()
    config.metadata_backend = "memory"
    config.storage_backend = "local"
    config.storage_dir = str(tmp_path / "storage")
    config.public_base_url = "http://testserver"
    config.secret_key = "test-secret"
    config.reaper_mode = "off"
    return config


@pytest.fixture
def flask_app(app_config):
    """Create the Flask app for testing."""
    from app_factory import create_app

    app = create_app(app_config)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(flask_app):
    """Create test client."""
    return flask_app.test_client()


# =============================================================================
# Pytest Configuration Hooks
# =============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, no external dependencies)"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests (require external services)"
    )
    config.addinivalue_line(
        "markers", "contract: Contract tests (verify interface compliance)"
    )
    config.addinivalue_line(
        "markers", "property: Property-based tests using Hypothesis"
    )


def pytest_collection_modifyitems(config, items):
    """
    Automatically mark tests based on their location.

    - tests/unit/* -> @pytest.mark.unit
    - tests/integration/* -> @pytest.mark.integration
    - tests/contracts/* -> @pytest.mark.contract
    - tests/property/* -> @pytest.mark.property
    """
    for item in items:
        test_path = str(item.fspath)

        if "/unit/" in test_path or "\\unit\\" in test_path:
            item.add_marker(pytest.mark.unit)
        elif "/integration/" in test_path or "\\integration\\" in test_path:
            item.add_marker(pytest.mark.integration)
        elif "/contracts/" in test_path or "\\contracts\\" in test_path:
            item.add_marker(pytest.mark.contract)
        elif "/property/" in test_path or "\\property\\" in test_path:
            item.add_marker(pytest.mark.property)
