"""
Derived per-exercise history rollups and progression suggestions.

These are computed from raw sessions and never persisted on their own.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class HistoryPoint(BaseModel):
    """Rollup of one exercise on one calendar day."""

    date: str = Field(..., description="Calendar day, YYYY-MM-DD")
    avg_rir: float = Field(..., alias="avgRir")
    sets_completed: int = Field(..., alias="setsCompleted")
    compliance: float = Field(..., ge=0, le=1)
    top_reps: int = Field(..., alias="topReps")
    top_weight_kg: float = Field(..., alias="topWeightKg")
    top_e1rm: float = Field(..., alias="topE1RM")

    model_config = {"populate_by_name": True, "frozen": True}


class Decision(str, Enum):
    """Which rung of the progression ladder produced a suggestion."""

    PAUSE_BACKOFF = "pause_backoff"
    DELOAD = "deload"
    LOAD_INCREASE = "load_increase"
    PLATEAU_REP_ADD = "plateau_rep_add"
    REP_ADD = "rep_add"
    HOLD = "hold"


class ProgressionSuggestion(BaseModel):
    """
    Output of the progression engine.

    An empty suggestion (all fields None) means the engine had nothing to
    propose: no previous set, or a time-based exercise.
    """

    weight_kg: Optional[float] = Field(default=None, alias="weightKg")
    reps: Optional[int] = None
    explanation: Optional[str] = None
    decision: Optional[Decision] = None

    model_config = {"populate_by_name": True, "frozen": True}

    @property
    def is_empty(self) -> bool:
        return self.weight_kg is None and self.reps is None

    @classmethod
    def empty(cls) -> "ProgressionSuggestion":
        return cls()
