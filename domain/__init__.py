"""
Domain layer for the IronLog Progression API.

This package contains pure domain models that are independent of
infrastructure concerns (storage slots, HTTP, external services).
"""

from domain.models import (
    CatalogExercise,
    ExerciseProfile,
    HistoryPoint,
    ProgressionSuggestion,
    Session,
    SetEntry,
    StateEnvelope,
    SyncStatus,
    TrainingState,
    UpdateTimestamps,
)

__all__ = [
    "CatalogExercise",
    "ExerciseProfile",
    "HistoryPoint",
    "ProgressionSuggestion",
    "Session",
    "SetEntry",
    "StateEnvelope",
    "SyncStatus",
    "TrainingState",
    "UpdateTimestamps",
]
