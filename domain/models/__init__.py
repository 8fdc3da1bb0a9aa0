"""
Domain models for the IronLog Progression API.

This package contains pure domain models that are independent of
infrastructure concerns (storage slots, HTTP, external services).

These models represent the core concepts:
- TrainingState: The persisted blob (settings, sessions, profiles, routines)
- Session / SetEntry: Logged training and the sets performed in it
- ExerciseProfile: Last performance and next suggestion per exercise
- HistoryPoint: Derived per-day rollup feeding the progression engine
- StateEnvelope / SyncMetadata: What a storage slot actually holds

Usage:
    >>> from domain.models import TrainingState, Session

    >>> state = TrainingState(sessions=[
    ...     Session(id="s1", type="strength", date_iso="2024-01-10"),
    ... ])

    >>> # Serialize to the persisted JSON shape
    >>> blob = state.to_blob()

    >>> # And back
    >>> state = TrainingState.model_validate(blob)
"""

from domain.models.catalog import CatalogExercise
from domain.models.history import Decision, HistoryPoint, ProgressionSuggestion
from domain.models.profile import ExerciseProfile, LastPerformance, NextSuggestion
from domain.models.session import Session, SessionType, SetEntry, SetMode, parse_iso_datetime
from domain.models.state import (
    CURRENT_SCHEMA_VERSION,
    TRACKED_ENTITY_KEYS,
    CustomExercise,
    CustomExerciseTargets,
    ProgressionProfileType,
    StateEnvelope,
    SyncMetadata,
    SyncPhase,
    SyncStatus,
    TrainingState,
    UpdateTimestamps,
    UserSettings,
)

__all__ = [
    # State blob
    "TrainingState",
    "UserSettings",
    "CustomExercise",
    "CustomExerciseTargets",
    "CURRENT_SCHEMA_VERSION",
    "TRACKED_ENTITY_KEYS",
    # Sessions
    "Session",
    "SetEntry",
    "parse_iso_datetime",
    # Profiles
    "ExerciseProfile",
    "LastPerformance",
    "NextSuggestion",
    # Derived
    "HistoryPoint",
    "ProgressionSuggestion",
    # Catalog
    "CatalogExercise",
    # Sync
    "StateEnvelope",
    "SyncMetadata",
    "SyncStatus",
    "UpdateTimestamps",
    # Enums
    "SessionType",
    "SetMode",
    "Decision",
    "ProgressionProfileType",
    "SyncPhase",
]
