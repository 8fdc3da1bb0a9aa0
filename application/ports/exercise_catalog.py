"""
Exercise Catalog Interface (Port).

Part of IRL-11: Exercise catalog lookup port

Read-only collaborator that provides per-exercise metadata (muscles,
implement, target rep range, target sets) and the routine templates a new
user starts from. Catalog content itself is maintained outside this
project.
"""
from typing import Dict, List, Optional, Protocol

from domain.models import CatalogExercise


class ExerciseCatalog(Protocol):
    """
    Abstract interface for exercise catalog lookups.

    Used by the history aggregator (compliance denominators), the
    progression engine callers (target rep ranges) and the schema
    migration (matching legacy free-text exercise names).
    """

    def get_exercise(self, exercise_id: str) -> Optional[CatalogExercise]:
        """
        Get catalog metadata for one exercise.

        Args:
            exercise_id: Catalog exercise id

        Returns:
            CatalogExercise or None if the id is unknown
        """
        ...

    def all_exercises(self) -> List[CatalogExercise]:
        """
        List every catalog exercise.

        Returns:
            All exercises, in catalog order
        """
        ...

    def routine_templates(self) -> Dict[str, List[str]]:
        """
        Get the template routines.

        Returns:
            Mapping of routine key to exercise ids in display order
        """
        ...
