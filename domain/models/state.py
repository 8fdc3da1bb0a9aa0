"""
Persisted state blob and its sync envelope.

Part of IRL-3: Explicit entity model for the persisted state blob
Updated in IRL-9: Sync metadata and status models

The blob is stored as JSON using the camelCase keys older clients wrote
(`profileByExerciseId`, `userRoutinesIndex`, ...). Models accept both the
alias and the Python field name, and keep unknown keys so nothing a newer
client wrote is silently discarded.
"""

from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from domain.models.profile import ExerciseProfile
from domain.models.session import Session

CURRENT_SCHEMA_VERSION = 5

# Top-level keys that carry their own logical clock and are merged
# structurally on ties. Everything else is last-writer (local) wins.
TRACKED_ENTITY_KEYS = ("sessions", "profileByExerciseId", "userRoutinesIndex")


class ProgressionProfileType(str, Enum):
    """Named tuning presets for the progression engine."""

    STRENGTH = "strength"
    HYPERTROPHY = "hypertrophy"
    RECOMPOSITION = "recomposition"


class UserSettings(BaseModel):
    """User-facing preferences stored alongside the training log."""

    unit: Literal["kg", "lb"] = "kg"
    default_rest_sec: float = Field(default=90, alias="defaultRestSec")
    sound: bool = True
    vibration: bool = True
    theme: Literal["system", "light", "dark"] = "system"
    progression_profile: ProgressionProfileType = Field(
        default=ProgressionProfileType.HYPERTROPHY,
        alias="progressionProfile",
    )
    min_weight_kg: float = Field(default=0.0, ge=0, alias="minWeightKg")

    model_config = {"populate_by_name": True, "extra": "allow"}


class CustomExerciseTargets(BaseModel):
    """Fixed prescription attached to a user-defined exercise."""

    target_sets: Optional[int] = Field(default=None, alias="targetSets")
    target_reps_range: Optional[str] = Field(default=None, alias="targetRepsRange")
    target_time_sec: Optional[float] = Field(default=None, alias="targetTimeSec")
    rest_sec: Optional[float] = Field(default=None, alias="restSec")

    model_config = {"populate_by_name": True, "extra": "allow"}


class CustomExercise(BaseModel):
    """An exercise the user created that is not in the catalog."""

    id: str
    name: str
    mode: str = "reps"
    muscles: List[str] = Field(default_factory=list)
    implement: Optional[str] = None
    fixed: CustomExerciseTargets = Field(default_factory=CustomExerciseTargets)
    notes: Optional[str] = None

    model_config = {"populate_by_name": True, "extra": "allow"}


class TrainingState(BaseModel):
    """
    The whole user state blob.

    Examples:
        >>> state = TrainingState()
        >>> state.version
        5
        >>> blob = state.to_blob()
        >>> TrainingState.model_validate(blob) == state
        True
    """

    version: int = CURRENT_SCHEMA_VERSION
    settings: UserSettings = Field(default_factory=UserSettings)
    sessions: List[Session] = Field(default_factory=list)
    profile_by_exercise_id: Dict[str, ExerciseProfile] = Field(
        default_factory=dict,
        alias="profileByExerciseId",
    )
    user_routines_index: Dict[str, List[str]] = Field(
        default_factory=dict,
        alias="userRoutinesIndex",
    )
    custom_exercises_by_id: Dict[str, CustomExercise] = Field(
        default_factory=dict,
        alias="customExercisesById",
    )
    custom_routine_names: Dict[str, str] = Field(
        default_factory=dict,
        alias="customRoutineNames",
    )

    model_config = {"populate_by_name": True, "extra": "allow"}

    def to_blob(self) -> Dict[str, Any]:
        """Serialize to the JSON-shaped dict stored in a slot."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class UpdateTimestamps(BaseModel):
    """One logical clock (epoch ms) per tracked entity."""

    sessions: int = 0
    profile_by_exercise_id: int = Field(default=0, alias="profileByExerciseId")
    user_routines_index: int = Field(default=0, alias="userRoutinesIndex")

    model_config = {"populate_by_name": True}

    def to_dict(self) -> Dict[str, int]:
        return self.model_dump(by_alias=True)


class SyncMetadata(BaseModel):
    """Metadata stored next to the state in every slot."""

    updated_at: UpdateTimestamps = Field(default_factory=UpdateTimestamps, alias="updatedAt")
    last_synced_at: Optional[str] = Field(default=None, alias="lastSyncedAt")

    model_config = {"populate_by_name": True}


class StateEnvelope(BaseModel):
    """The JSON document held in a local or remote slot."""

    user_id: Optional[str] = Field(default=None, alias="userId")
    state: Dict[str, Any] = Field(default_factory=dict)
    metadata: SyncMetadata = Field(default_factory=SyncMetadata)

    model_config = {"populate_by_name": True}


class SyncPhase(str, Enum):
    """Lifecycle of a save/sync round-trip."""

    IDLE = "idle"
    SYNCING = "syncing"
    CONFLICT = "conflict"
    ERROR = "error"


class SyncStatus(BaseModel):
    """Snapshot published to sync status observers."""

    phase: SyncPhase = SyncPhase.IDLE
    last_synced_at: Optional[str] = Field(default=None, alias="lastSyncedAt")
    error: Optional[str] = None

    model_config = {"populate_by_name": True, "frozen": True}
