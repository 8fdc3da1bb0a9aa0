"""
Adaptive progression engine.

Part of IRL-6: Next-session weight/reps suggestions

Given the last completed top set of an exercise and its recent history,
proposes the next target. Decision ladder, first match wins:

1. Pause backoff  - 14+ days since the exercise was last trained
2. Deload         - high fatigue (mean RIR < 1) and low compliance (< 0.75)
3. Load increase  - top of the rep range with RIR >= 2 and compliance >= 0.9
4. Plateau reps   - e1RM flat over three sessions, compliance >= 0.8
5. Rep add        - below the top of the range with RIR >= 1.5
6. Hold

The engine is pure: the same inputs (including ``today``) always give the
same suggestion.
"""
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union
import logging
import math
import re

from domain.models import (
    CatalogExercise,
    CustomExercise,
    Decision,
    HistoryPoint,
    LastPerformance,
    ProgressionProfileType,
    ProgressionSuggestion,
    parse_iso_datetime,
)
from backend.core.history_aggregator import last_used_set, round1

logger = logging.getLogger(__name__)

PAUSE_BACKOFF_DAYS = 14
HISTORY_WINDOW = 2
PLATEAU_LOOKBACK = 3


@dataclass(frozen=True)
class ProgressionProfile:
    """Tuning constants for one progression preset."""

    load_step_kg: float
    rep_step: int
    deload_pct: float
    pause_backoff_pct: float


PROGRESSION_PROFILES: Dict[str, ProgressionProfile] = {
    ProgressionProfileType.STRENGTH.value: ProgressionProfile(
        load_step_kg=2.5, rep_step=1, deload_pct=0.10, pause_backoff_pct=0.08
    ),
    ProgressionProfileType.HYPERTROPHY.value: ProgressionProfile(
        load_step_kg=1.25, rep_step=1, deload_pct=0.08, pause_backoff_pct=0.06
    ),
    ProgressionProfileType.RECOMPOSITION.value: ProgressionProfile(
        load_step_kg=1.25, rep_step=2, deload_pct=0.06, pause_backoff_pct=0.05
    ),
}


def get_progression_profile(profile_type: Optional[Union[str, ProgressionProfileType]]) -> ProgressionProfile:
    """Look up a preset by name; unknown names fall back to hypertrophy."""
    key = profile_type.value if isinstance(profile_type, ProgressionProfileType) else profile_type
    profile = PROGRESSION_PROFILES.get(key or "")
    if profile is None:
        logger.debug(f"Unknown progression profile {profile_type!r}, using hypertrophy")
        return PROGRESSION_PROFILES[ProgressionProfileType.HYPERTROPHY.value]
    return profile


@dataclass(frozen=True)
class ExerciseTarget:
    """What the engine needs to know about an exercise's prescription."""

    mode: str = "reps"
    target_reps: Optional[int] = None
    target_reps_range: Optional[str] = None

    @property
    def is_time_based(self) -> bool:
        return self.mode == "time"

    @classmethod
    def from_exercise(cls, exercise: Union[CatalogExercise, CustomExercise, Mapping[str, Any], None]) -> "ExerciseTarget":
        """Build from a catalog entry, a custom exercise or a raw dict."""
        if exercise is None:
            return cls()
        if isinstance(exercise, CatalogExercise):
            return cls(
                mode=exercise.mode,
                target_reps=exercise.target_reps,
                target_reps_range=exercise.target_reps_range,
            )
        if isinstance(exercise, CustomExercise):
            return cls(mode=exercise.mode, target_reps_range=exercise.fixed.target_reps_range)
        fixed = exercise.get("fixed") or {}
        return cls(
            mode=exercise.get("mode") or "reps",
            target_reps=exercise.get("targetReps"),
            target_reps_range=fixed.get("targetRepsRange") or exercise.get("targetRepsRange"),
        )


def parse_rep_range(target_reps_range: Optional[str], target_reps: Optional[int] = None) -> Tuple[int, int]:
    """
    Extract ``(min, max)`` reps from free text.

    Examples:
        >>> parse_rep_range("8-12")
        (8, 12)
        >>> parse_rep_range("10 reps")
        (10, 10)
        >>> parse_rep_range(None, target_reps=5)
        (5, 5)
    """
    numbers = [int(n) for n in re.findall(r"\d+", str(target_reps_range or ""))]
    if not numbers:
        fallback = int(target_reps or 0)
        return fallback, fallback
    if len(numbers) == 1:
        return numbers[0], numbers[0]
    return numbers[0], numbers[1]


def rpe_to_rir(rpe: Optional[float]) -> Optional[float]:
    """
    Map an RPE rating to reps in reserve.

    >= 9.5 -> 0, >= 8.5 -> 1, >= 8 -> 2, >= 7 -> 3, otherwise 4.
    """
    if rpe is None:
        return None
    if rpe >= 9.5:
        return 0
    if rpe >= 8.5:
        return 1
    if rpe >= 8:
        return 2
    if rpe >= 7:
        return 3
    return 4


def _as_last(last: Union[LastPerformance, Mapping[str, Any], None]) -> Optional[LastPerformance]:
    if last is None or isinstance(last, LastPerformance):
        return last
    return LastPerformance.model_validate(last)


def _as_points(history: Optional[Sequence[Union[HistoryPoint, Mapping[str, Any]]]]) -> List[HistoryPoint]:
    return [p if isinstance(p, HistoryPoint) else HistoryPoint.model_validate(p) for p in history or []]


def _days_since(date_iso: Optional[str], today: date) -> int:
    when = parse_iso_datetime(date_iso)
    if when is None:
        return 0
    return (today - when.date()).days


def _pct(fraction: float) -> int:
    return int(round(fraction * 100))


def calc_next(
    last: Union[LastPerformance, Mapping[str, Any], None],
    exercise: Union[ExerciseTarget, CatalogExercise, CustomExercise, Mapping[str, Any], None],
    profile: Optional[Mapping[str, Any]] = None,
    profile_type: Optional[Union[str, ProgressionProfileType]] = ProgressionProfileType.HYPERTROPHY,
    history: Optional[Sequence[Union[HistoryPoint, Mapping[str, Any]]]] = None,
    today: Optional[date] = None,
) -> ProgressionSuggestion:
    """
    Suggest the next working weight and reps for an exercise.

    Args:
        last: Most recent completed top set (weightKg, reps, rir?, dateISO?)
        exercise: Exercise prescription (mode, targetReps, targetRepsRange)
        profile: Optional ``{"minWeightKg": ...}`` floor for any reduction
        profile_type: Progression preset name
        history: Trailing HistoryPoints, oldest first
        today: Reference day for the pause check (defaults to today)

    Returns:
        ProgressionSuggestion, empty when there is no previous set or the
        exercise is time-based
    """
    last = _as_last(last)
    target = exercise if isinstance(exercise, ExerciseTarget) else ExerciseTarget.from_exercise(exercise)
    if last is None or target.is_time_based:
        return ProgressionSuggestion.empty()

    conf = get_progression_profile(profile_type)
    min_reps, max_reps = parse_rep_range(target.target_reps_range, target.target_reps)
    min_weight = float((profile or {}).get("minWeightKg") or 0)
    points = _as_points(history)
    today = today or date.today()

    recent = points[-HISTORY_WINDOW:]
    if recent:
        avg_rir = sum(p.avg_rir for p in recent) / len(recent)
        avg_compliance = sum(p.compliance for p in recent) / len(recent)
    else:
        avg_rir = last.rir if last.rir is not None else 1.0
        avg_compliance = 1.0

    e1rm_trend: Optional[float] = None
    if len(points) >= PLATEAU_LOOKBACK:
        e1rm_trend = points[-1].top_e1rm - points[-PLATEAU_LOOKBACK].top_e1rm

    days_since = _days_since(last.date_iso, today)

    def clamp_reps(reps: int) -> int:
        if max_reps <= 0:
            return max(0, reps)
        return max(min_reps, min(max_reps, reps))

    def suggestion(weight: float, reps: int, explanation: str, decision: Decision) -> ProgressionSuggestion:
        return ProgressionSuggestion(
            weight_kg=round1(weight),
            reps=reps,
            explanation=explanation,
            decision=decision,
        )

    if days_since >= PAUSE_BACKOFF_DAYS:
        return suggestion(
            max(min_weight, last.weight_kg * (1 - conf.pause_backoff_pct)),
            last.reps,
            f"-{_pct(conf.pause_backoff_pct)}% because you are coming back after "
            f"{days_since} days without training this exercise.",
            Decision.PAUSE_BACKOFF,
        )

    if avg_rir < 1 and avg_compliance < 0.75:
        return suggestion(
            max(min_weight, last.weight_kg * (1 - conf.deload_pct)),
            max(min_reps, last.reps - 1),
            f"Deload ({_pct(conf.deload_pct)}%) due to high fatigue "
            f"(mean RIR {round1(avg_rir)}) and low compliance.",
            Decision.DELOAD,
        )

    if last.reps >= max_reps and avg_rir >= 2 and avg_compliance >= 0.9:
        return suggestion(
            max(min_weight, last.weight_kg + conf.load_step_kg),
            clamp_reps(last.reps),
            f"+{conf.load_step_kg} kg because you hit the top of the rep range "
            f"with RIR >= 2 over the last sessions.",
            Decision.LOAD_INCREASE,
        )

    if e1rm_trend is not None and e1rm_trend <= 0 and avg_compliance >= 0.8:
        reps = min(max_reps, last.reps + conf.rep_step) if max_reps > 0 else last.reps + conf.rep_step
        plural = "s" if conf.rep_step > 1 else ""
        return suggestion(
            last.weight_kg,
            reps,
            f"+{conf.rep_step} rep{plural} because estimated 1RM has stalled "
            f"while compliance held up.",
            Decision.PLATEAU_REP_ADD,
        )

    if last.reps < max_reps and avg_rir >= 1.5:
        return suggestion(
            last.weight_kg,
            min(max_reps, last.reps + 1),
            "+1 rep to move toward the top of the range while keeping reps in reserve.",
            Decision.REP_ADD,
        )

    return suggestion(
        last.weight_kg,
        clamp_reps(last.reps),
        "Keep the same load and reps to consolidate technique.",
        Decision.HOLD,
    )


def round_to_increment(value: float, increment: float = 0.25) -> float:
    """Round to the nearest plate increment."""
    return math.floor(value / increment + 0.5) * increment


def initial_weight_for_exercise(
    exercise_id: str,
    profile_by_exercise_id: Optional[Mapping[str, Any]] = None,
    sessions: Optional[Sequence[Any]] = None,
    default_weight_kg: Optional[float] = None,
) -> float:
    """
    Starting weight to prefill when the user begins an exercise.

    Order of preference: the engine's last suggestion, the last recorded
    top set, the last weighted set in the log, the catalog default. The
    result is rounded to 0.25 kg.
    """
    entry = (profile_by_exercise_id or {}).get(exercise_id)
    if entry is not None and not isinstance(entry, Mapping):
        entry = entry.model_dump(by_alias=True)
    entry = entry or {}

    for source in (entry.get("next"), entry.get("last")):
        weight = (source or {}).get("weightKg")
        if weight:
            return round_to_increment(float(weight))

    used = last_used_set(exercise_id, sessions or [])
    if used:
        return round_to_increment(float(used["weightKg"]))

    return round_to_increment(float(default_weight_kg or 0))
