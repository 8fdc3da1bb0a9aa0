"""
Match free-text exercise names to catalog ids.

Part of IRL-7: Schema migration to catalog-backed routines

Used when migrating old routines that stored exercises by name. Stages:
1. Exact match on the normalized name
2. Containment (one normalized name inside the other)
3. Fuzzy match using rapidfuzz token_set_ratio
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from rapidfuzz import fuzz

from application.ports import ExerciseCatalog
from backend.core.normalize import normalize
from domain.models import CatalogExercise

logger = logging.getLogger(__name__)


class MatchMethod(str, Enum):
    """How the match was determined."""
    EXACT = "exact"
    CONTAINS = "contains"
    FUZZY = "fuzzy"
    NONE = "none"


@dataclass
class ExerciseMatch:
    """Result of a name matching attempt."""
    exercise_id: Optional[str]
    confidence: float  # 0.0 to 1.0
    method: MatchMethod


NO_MATCH = ExerciseMatch(exercise_id=None, confidence=0.0, method=MatchMethod.NONE)


class CatalogNameMatcher:
    """
    Resolves exercise names against an ExerciseCatalog.

    Normalized catalog names are computed once per matcher.
    """

    FUZZY_ACCEPT = 0.85

    def __init__(self, catalog: Optional[ExerciseCatalog]):
        exercises: List[CatalogExercise] = catalog.all_exercises() if catalog else []
        self._candidates: List[Tuple[CatalogExercise, str]] = [
            (ex, normalize(ex.name)) for ex in exercises
        ]

    def match(self, name: str) -> ExerciseMatch:
        normalized = normalize(name)
        if not normalized:
            return NO_MATCH

        for ex, candidate in self._candidates:
            if candidate == normalized:
                return ExerciseMatch(ex.id, 1.0, MatchMethod.EXACT)

        for ex, candidate in self._candidates:
            if candidate and (normalized in candidate or candidate in normalized):
                logger.debug(f"Containment match: '{name}' -> '{ex.id}'")
                return ExerciseMatch(ex.id, 0.9, MatchMethod.CONTAINS)

        best: Optional[CatalogExercise] = None
        best_score = 0.0
        for ex, candidate in self._candidates:
            score = fuzz.token_set_ratio(normalized, candidate) / 100.0
            if score > best_score:
                best, best_score = ex, score

        if best is not None and best_score >= self.FUZZY_ACCEPT:
            logger.debug(f"Fuzzy match: '{name}' -> '{best.id}' ({best_score:.2f})")
            return ExerciseMatch(best.id, best_score, MatchMethod.FUZZY)

        return NO_MATCH
