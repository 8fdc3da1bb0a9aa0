"""
Infrastructure Layer for the IronLog Progression API.

Part of IRL-10: Local cache and remote mirror adapters

This package contains concrete implementations of the application ports:
- db/: Supabase remote mirror
- storage/: JSON file and in-memory slot stores
- catalog/: YAML exercise catalog
"""

from infrastructure.catalog import YamlExerciseCatalog
from infrastructure.db import SupabaseSlotStore
from infrastructure.storage import InMemorySlotStore, JsonFileSlotStore

__all__ = [
    "SupabaseSlotStore",
    "JsonFileSlotStore",
    "InMemorySlotStore",
    "YamlExerciseCatalog",
]
