"""
API package for the IronLog Progression API.

Part of IRL-13: HTTP surface

This package contains:
- deps.py: FastAPI dependency providers for DI
- routers/: API route handlers
"""

# Re-export dependency providers for convenient access
from api.deps import (
    get_settings,
    get_supabase_client,
    get_local_store,
    get_remote_store,
    get_catalog,
    get_sync_storage,
    get_history_cache,
    get_analytics_cache,
    get_register_exercise_use_case,
)

__all__ = [
    # Settings
    "get_settings",
    # Database
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
