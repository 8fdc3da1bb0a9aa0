"""
FastAPI Dependency Providers for the IronLog Progression API.

Part of IRL-13: Dependency providers for storage, catalog and caches

This module provides FastAPI dependency injection functions that return
interface types (Protocols) rather than concrete implementations. This
enables clean separation of concerns and easy testing with fake
implementations.

Architecture:
- Settings, Supabase client, slot stores and the catalog are cached
  per-process (lru_cache)
- The sync storage service is a per-process singleton so its sync status
  survives across requests
- History and analytics caches are per-process and keyed by session log
  revision, so they never serve stale data

Usage in routers:
    from api.deps import get_sync_storage
    from backend.services import SyncStorageService

    @router.get("/state")
    def read_state(storage: SyncStorageService = Depends(get_sync_storage)):
        return storage.load_state()

Testing:
    # Override dependencies in tests
    app.dependency_overrides[get_sync_storage] = lambda: fake_service
"""

from functools import lru_cache
from typing import Optional

from fastapi import Depends
from supabase import Client, create_client

# Protocol types (interfaces)
from application.ports import ExerciseCatalog, StateSlotStore
from application.use_cases import RegisterExerciseUseCase

# Concrete implementations
from infrastructure import (
    InMemorySlotStore,
    JsonFileSlotStore,
    SupabaseSlotStore,
    YamlExerciseCatalog,
)
from backend.core.history_aggregator import HistoryCache
from backend.core.training_analytics import AnalyticsCache
from backend.services import SyncStorageService

# Settings from Phase 0
from backend.settings import Settings, get_settings as _get_settings


# =============================================================================
# Settings Provider
# =============================================================================


def get_settings() -> Settings:
    """
    Get application settings.

    Returns cached Settings instance from backend.settings.
    Use this as a FastAPI dependency for settings access.

    Returns:
        Settings: Application settings instance
    """
    return _get_settings()


# =============================================================================
# Supabase Client Provider
# =============================================================================


@lru_cache
def get_supabase_client() -> Optional[Client]:
    """
    Get Supabase client instance (cached).

    Creates a Supabase client using credentials from settings.
    Returns None if credentials are not configured.

    Returns:
        Client: Supabase client instance, or None if not configured
    """
    settings = _get_settings()

    if not settings.supabase_url or not settings.supabase_key:
        return None

    return create_client(settings.supabase_url, settings.supabase_key)


# =============================================================================
# Slot Store Providers
# =============================================================================


@lru_cache
def get_local_store() -> StateSlotStore:
    """This device's slot store (JSON file)."""
    return JsonFileSlotStore(_get_settings().local_store_path)


@lru_cache
def get_remote_store() -> StateSlotStore:
    """
    Remote mirror slot store, chosen by ``settings.remote_backend``.

    Raises:
        RuntimeError: If the Supabase backend is selected without credentials
    """
    settings = _get_settings()

    if settings.remote_backend == "supabase":
        client = get_supabase_client()
        if client is None:
            raise RuntimeError(
                "remote_backend is 'supabase' but SUPABASE_URL / key are not configured"
            )
        return SupabaseSlotStore(client, table=settings.state_table)

    if settings.remote_backend == "file":
        return JsonFileSlotStore(settings.remote_store_path)

    return InMemorySlotStore()


# =============================================================================
# Catalog Provider
# =============================================================================


@lru_cache
def get_catalog() -> ExerciseCatalog:
    """Exercise catalog loaded once per process."""
    return YamlExerciseCatalog(_get_settings().catalog_path)


# =============================================================================
# Service Providers
# =============================================================================


@lru_cache
def get_sync_storage() -> SyncStorageService:
    """Process-wide sync storage service."""
    return SyncStorageService(
        get_local_store(),
        get_remote_store(),
        settings=_get_settings(),
        catalog=get_catalog(),
    )


@lru_cache
def get_history_cache() -> HistoryCache:
    return HistoryCache()


@lru_cache
def get_analytics_cache() -> AnalyticsCache:
    return AnalyticsCache()


# =============================================================================
# Use Case Providers
# =============================================================================


def get_register_exercise_use_case(
    catalog: ExerciseCatalog = Depends(get_catalog),
    history_cache: HistoryCache = Depends(get_history_cache),
    settings: Settings = Depends(get_settings),
) -> RegisterExerciseUseCase:
    """
    Get RegisterExerciseUseCase instance.

    Returns:
        RegisterExerciseUseCase: Use case wired to the catalog and history cache
    """
    return RegisterExerciseUseCase(
        catalog=catalog,
        history_cache=history_cache,
        history_weeks=settings.history_weeks,
        default_target_sets=settings.default_target_sets,
    )


# =============================================================================
# Exports
# =============================================================================


__all__ = [
    # Settings
    "get_settings",
    # Supabase
    "get_supabase_client",
    # Stores
    "get_local_store",
    "get_remote_store",
    # Catalog
    "get_catalog",
    # Services
    "get_sync_storage",
    "get_history_cache",
    "get_analytics_cache",
    # Use cases
    "get_register_exercise_use_case",
]
