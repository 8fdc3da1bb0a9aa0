"""
Training session and set entities.

Part of IRL-3: Explicit entity model for the persisted state blob

Sessions are immutable once created (except for deletion) and are treated
as atomic units when two copies of the state are merged.
"""

from datetime import date, datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class SessionType(str, Enum):
    """Kind of training session."""

    STRENGTH = "strength"
    CARDIO = "cardio"


class SetMode(str, Enum):
    """How a set is measured: repetitions or holding time."""

    REPS = "reps"
    TIME = "time"


class SetEntry(BaseModel):
    """
    A single performed set.

    For time-based sets (`mode == "time"`) the `reps` field holds the number
    of seconds held; those sets never feed the progression engine.
    """

    id: str = Field(..., description="Opaque set identifier")
    exercise_id: str = Field(..., alias="exerciseId")
    exercise_name: Optional[str] = Field(default=None, alias="exerciseName")
    mode: str = Field(default=SetMode.REPS.value)
    reps: Optional[int] = None
    weight_kg: Optional[float] = Field(default=None, alias="weightKg")
    rpe: Optional[float] = None
    rir: Optional[float] = None
    tempo: Optional[str] = None
    at: int = Field(default=0, description="Epoch milliseconds when the set was logged")
    drop: Optional[bool] = None

    model_config = {"populate_by_name": True, "extra": "allow"}

    @property
    def is_time_based(self) -> bool:
        return self.mode == SetMode.TIME.value

    @property
    def volume(self) -> float:
        """Weight x reps, zero for time-based or incomplete sets."""
        if self.is_time_based or self.reps is None or self.weight_kg is None:
            return 0.0
        return self.weight_kg * self.reps


class Session(BaseModel):
    """
    A logged training session.

    Identity is `id`. `date_iso` may be a plain date (``2024-01-10``) or a
    full ISO timestamp; `session_datetime()` normalizes both.
    """

    id: str = Field(..., description="Opaque session identifier")
    type: str = Field(default=SessionType.STRENGTH.value)
    date_iso: str = Field(..., alias="dateISO")
    routine_key: Optional[str] = Field(default=None, alias="routineKey")
    sets: List[SetEntry] = Field(default_factory=list)
    duration_sec: Optional[float] = Field(default=None, alias="durationSec")
    total_volume: Optional[float] = Field(default=None, alias="totalVolume")
    distance_km: Optional[float] = Field(default=None, alias="distanceKm")
    kcal: Optional[float] = None

    model_config = {"populate_by_name": True, "extra": "allow"}

    @property
    def is_strength(self) -> bool:
        return self.type == SessionType.STRENGTH.value

    def session_datetime(self) -> Optional[datetime]:
        """Parse `date_iso`; returns None when it is not a valid date."""
        return parse_iso_datetime(self.date_iso)

    def day(self) -> Optional[date]:
        when = self.session_datetime()
        return when.date() if when else None


def parse_iso_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO date or timestamp string, tolerating a trailing ``Z``.

    Naive results are returned as-is; aware ones are converted to naive UTC
    so they can be compared with each other.
    """
    if not value:
        return None
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        try:
            parsed = datetime.combine(date.fromisoformat(text[:10]), datetime.min.time())
        except ValueError:
            return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed
