"""
Shared pytest fixtures.

Part of IRL-13: Test wiring for services and routers

Provides fake slot stores, a fake catalog, a sync storage service built on
them, and a TestClient whose dependencies are overridden with those fakes.
"""

from typing import Generator

import pytest
from fastapi.testclient import TestClient

from api.deps import (
    get_analytics_cache,
    get_catalog,
    get_history_cache,
    get_settings,
    get_sync_storage,
)
from backend.core.history_aggregator import HistoryCache
from backend.core.training_analytics import AnalyticsCache
from backend.main import create_app
from backend.services import SyncStorageService
from backend.settings import Settings
from tests.fakes import FakeExerciseCatalog, FakeSlotStore, create_catalog
from tests.fakes.builders import FIXED_NOW_MS


# =============================================================================
# Settings
# =============================================================================


@pytest.fixture
def test_settings() -> Settings:
    """Test settings that never read a .env file."""
    return Settings(environment="test", _env_file=None)


# =============================================================================
# Fakes
# =============================================================================


@pytest.fixture
def catalog() -> FakeExerciseCatalog:
    return create_catalog()


@pytest.fixture
def local_store() -> FakeSlotStore:
    return FakeSlotStore()


@pytest.fixture
def remote_store() -> FakeSlotStore:
    return FakeSlotStore()


@pytest.fixture
def sync_service(local_store, remote_store, catalog, test_settings) -> SyncStorageService:
    """Sync service over fake stores with a fixed clock."""
    return SyncStorageService(
        local_store,
        remote_store,
        settings=test_settings,
        catalog=catalog,
        clock=lambda: FIXED_NOW_MS,
    )


# =============================================================================
# Test App and Client
# =============================================================================


@pytest.fixture
def app(test_settings):
    """Create test application instance."""
    return create_app(settings=test_settings)


@pytest.fixture
def client(app, sync_service, catalog, test_settings) -> Generator[TestClient, None, None]:
    """
    Per-test FastAPI TestClient wired to the fakes.
    Properly cleans up dependency overrides after each test.
    """
    history_cache = HistoryCache()
    analytics_cache = AnalyticsCache()
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_catalog] = lambda: catalog
    app.dependency_overrides[get_sync_storage] = lambda: sync_service
    app.dependency_overrides[get_history_cache] = lambda: history_cache
    app.dependency_overrides[get_analytics_cache] = lambda: analytics_cache
    yield TestClient(app)
    app.dependency_overrides.clear()

