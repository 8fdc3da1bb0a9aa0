"""
Read-only exercise catalog entries.

Part of IRL-11: Exercise catalog lookup port
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class CatalogExercise(BaseModel):
    """
    Exercise metadata provided by the catalog collaborator.

    `target_reps_range` is free text (``"8-12"``, ``"10"``) and is parsed by
    the progression engine; `target_sets` is the compliance denominator for
    history rollups.
    """

    id: str
    name: str
    mode: str = "reps"
    muscles: List[str] = Field(default_factory=list)
    implement: Optional[str] = None
    target_reps_range: Optional[str] = Field(default=None, alias="targetRepsRange")
    target_reps: Optional[int] = Field(default=None, alias="targetReps")
    target_sets: int = Field(default=3, ge=1, alias="targetSets")
    target_time_sec: Optional[float] = Field(default=None, alias="targetTimeSec")
    initial_weight_kg: Optional[float] = Field(default=None, alias="initialWeightKg")

    model_config = {"populate_by_name": True, "frozen": True}

    @property
    def primary_group(self) -> Optional[str]:
        return self.muscles[0] if self.muscles else None
