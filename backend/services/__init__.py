"""Backend services for the IronLog Progression API."""

from backend.services.sync_storage import (
    GUEST_USER_ID,
    LoadedState,
    SaveResult,
    SyncStorageService,
)

__all__ = [
    "GUEST_USER_ID",
    "LoadedState",
    "SaveResult",
    "SyncStorageService",
]
