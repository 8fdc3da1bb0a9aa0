"""
Local storage slot adapters.

Part of IRL-10: Local cache and remote mirror adapters
"""

from infrastructure.storage.file_store import JsonFileSlotStore
from infrastructure.storage.memory_store import InMemorySlotStore

__all__ = [
    "JsonFileSlotStore",
    "InMemorySlotStore",
]
