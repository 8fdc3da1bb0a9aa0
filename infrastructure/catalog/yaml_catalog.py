"""
YAML-backed exercise catalog.

Part of IRL-11: Exercise catalog lookup port

File layout::

    exercises:
      - id: barbell-back-squat
        name: Barbell Back Squat
        muscles: [legs]
        implement: barbell
        targetRepsRange: "6-8"
        targetSets: 3
    routines:
      lower_a: [barbell-back-squat, ...]
"""
import logging
import pathlib
from typing import Any, Dict, List, Optional, Union

import yaml
from pydantic import ValidationError

from domain.models import CatalogExercise

logger = logging.getLogger(__name__)

ROOT = pathlib.Path(__file__).resolve().parents[2]

DEFAULT_CATALOG_PATH = ROOT / "shared/dictionaries/exercise_catalog.yaml"


class YamlExerciseCatalog:
    """
    ExerciseCatalog implementation reading a YAML file once at startup.

    Invalid entries are skipped with a warning; routine templates that
    reference unknown ids keep only the known ones.
    """

    def __init__(
        self,
        path: Optional[Union[pathlib.Path, str]] = None,
        *,
        data: Optional[Dict[str, Any]] = None,
    ):
        """
        Args:
            path: YAML file to read (defaults to the bundled sample catalog)
            data: Already-parsed catalog; when given, no file is read
        """
        self._by_id: Dict[str, CatalogExercise] = {}
        self._routines: Dict[str, List[str]] = {}
        if data is None:
            source = pathlib.Path(path) if path else DEFAULT_CATALOG_PATH
            data = yaml.safe_load(source.read_text(encoding="utf-8")) or {}
        self._load(data)

    def _load(self, data: Dict[str, Any]) -> None:
        for raw in data.get("exercises") or []:
            try:
                exercise = CatalogExercise.model_validate(raw)
            except ValidationError as e:
                logger.warning(f"Skipping invalid catalog entry {raw!r}: {e}")
                continue
            self._by_id[exercise.id] = exercise

        for key, ids in (data.get("routines") or {}).items():
            known = [i for i in ids or [] if i in self._by_id]
            if len(known) != len(ids or []):
                logger.warning(f"Routine template {key} references unknown exercises")
            self._routines[str(key)] = known

        logger.info(
            f"Loaded exercise catalog: {len(self._by_id)} exercises, "
            f"{len(self._routines)} routine templates"
        )

    def get_exercise(self, exercise_id: str) -> Optional[CatalogExercise]:
        return self._by_id.get(exercise_id)

    def all_exercises(self) -> List[CatalogExercise]:
        return list(self._by_id.values())

    def routine_templates(self) -> Dict[str, List[str]]:
        return {key: list(ids) for key, ids in self._routines.items()}
