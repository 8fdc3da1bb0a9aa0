"""
Fake Implementations for Testing.

Part of IRL-10: In-memory fakes for the storage and catalog ports

This package provides in-memory fake implementations of the port interfaces
for fast, isolated testing. No files, database or network required.

Features:
- Fakes implement the same Protocol interfaces as real implementations
- Supports seeding with test data
- Supports reset() for test isolation
- Failure injection on the slot store

Usage:
    from tests.fakes import FakeSlotStore, create_catalog

    store = FakeSlotStore()
    store.fail_on_set = True  # next set_item raises StorageError

    catalog = create_catalog()
"""

from tests.fakes.builders import days_ago, make_session, make_set
from tests.fakes.exercise_catalog import SAMPLE_EXERCISES, FakeExerciseCatalog, create_catalog
from tests.fakes.slot_store import FakeSlotStore

__all__ = [
    "FakeSlotStore",
    "FakeExerciseCatalog",
    "SAMPLE_EXERCISES",
    "create_catalog",
    "make_set",
    "make_session",
    "days_ago",
]
