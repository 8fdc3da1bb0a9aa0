"""
Interfaces (Ports) for the IronLog Progression API.

Part of IRL-5: Define storage and catalog ports

This package defines abstract interfaces that decouple the sync and
progression cores from infrastructure (files, Supabase, catalog files).
Implementations are provided in the infrastructure layer.

Architecture follows the Ports & Adapters (Hexagonal) pattern:
- Ports: Abstract interfaces defined here (what the core needs)
- Adapters: Concrete implementations in infrastructure/ (how it's provided)

Usage:
    from application.ports import StateSlotStore, ExerciseCatalog

    class SyncStorageService:
        def __init__(self, local_store: StateSlotStore, remote_store: StateSlotStore):
            self._local = local_store
            self._remote = remote_store
"""

# Storage slots (local cache and remote mirror)
from application.ports.state_slot_store import StateSlotStore

# Exercise catalog lookup (IRL-11)
from application.ports.exercise_catalog import ExerciseCatalog

__all__ = [
    # Storage
    "StateSlotStore",
    # Catalog
    "ExerciseCatalog",
]
