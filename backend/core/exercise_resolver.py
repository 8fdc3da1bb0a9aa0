"""
Resolve an exercise id to its definition.

Custom exercises stored in the user's state shadow catalog entries with
the same id.
"""
from typing import Optional, Union

from application.ports import ExerciseCatalog
from domain.models import CatalogExercise, CustomExercise, TrainingState

ResolvedExercise = Union[CatalogExercise, CustomExercise]


def resolve_exercise(
    exercise_id: str,
    state: Optional[TrainingState],
    catalog: Optional[ExerciseCatalog],
) -> Optional[ResolvedExercise]:
    """Return the custom exercise, else the catalog entry, else None."""
    if state is not None:
        custom = state.custom_exercises_by_id.get(exercise_id)
        if custom is not None:
            return custom
    if catalog is not None:
        return catalog.get_exercise(exercise_id)
    return None


def target_sets_for(exercise: Optional[ResolvedExercise], default: int = 3) -> int:
    """Prescribed sets per session for an exercise, ``default`` if unknown."""
    if isinstance(exercise, CatalogExercise):
        return exercise.target_sets
    if isinstance(exercise, CustomExercise) and exercise.fixed.target_sets:
        return exercise.fixed.target_sets
    return default


def default_weight_for(exercise: Optional[ResolvedExercise]) -> Optional[float]:
    if isinstance(exercise, CatalogExercise):
        return exercise.initial_weight_kg
    return None
