"""
Per-exercise progression profile.

Part of IRL-3: Explicit entity model for the persisted state blob
"""

from typing import Optional

from pydantic import BaseModel, Field


class LastPerformance(BaseModel):
    """Most recent completed top set for an exercise."""

    weight_kg: float = Field(default=0.0, alias="weightKg")
    reps: int = 0
    rir: Optional[float] = None
    date_iso: Optional[str] = Field(default=None, alias="dateISO")

    model_config = {"populate_by_name": True, "extra": "allow"}


class NextSuggestion(BaseModel):
    """Suggested target for the next occurrence of an exercise."""

    weight_kg: Optional[float] = Field(default=None, alias="weightKg")
    reps: Optional[int] = None
    explanation: Optional[str] = None

    model_config = {"populate_by_name": True, "extra": "allow"}


class ExerciseProfile(BaseModel):
    """
    Progression state kept for one exercise.

    `last` is what the user actually did most recently; `next` is what the
    progression engine proposed for the following session.
    """

    last: Optional[LastPerformance] = None
    next: Optional[NextSuggestion] = None

    model_config = {"populate_by_name": True, "extra": "allow"}
