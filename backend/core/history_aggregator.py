"""
Per-exercise training history rollups.

Part of IRL-5: History aggregation for the progression engine

Turns the raw session log into one HistoryPoint per calendar day for a
single exercise inside a trailing window. The rollups are pure functions of
their inputs; memoization lives in HistoryCache, which the caller owns and
keys by a revision of the session log.
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union
import logging
import math

from domain.models import HistoryPoint, Session, SetEntry

logger = logging.getLogger(__name__)

MIN_WEEKS = 2
MAX_WEEKS = 6
DEFAULT_WEEKS = 4
DEFAULT_TARGET_SETS = 3

# RIR assumed for a logged set that carries none.
DEFAULT_SET_RIR = 1.0

SessionLike = Union[Session, Dict[str, Any]]


# =============================================================================
# Helpers
# =============================================================================


def round1(value: float) -> float:
    """Round to one decimal place, halves away from zero for positive values."""
    return math.floor(value * 10 + 0.5) / 10


def clamp_weeks(weeks: Optional[int]) -> int:
    """Clamp a requested window to the supported [2, 6] weeks."""
    if weeks is None:
        return DEFAULT_WEEKS
    return max(MIN_WEEKS, min(MAX_WEEKS, int(weeks)))


def estimate_1rm_epley(weight: float, reps: float) -> float:
    """
    Estimated one-rep max using the Epley formula.

    Formula: 1RM = weight * (1 + reps/30)

    Returns 0 when either input is not positive.
    """
    if not weight or not reps or weight <= 0 or reps <= 0:
        return 0.0
    return weight * (1.0 + reps / 30.0)


def as_sessions(sessions: Iterable[SessionLike]) -> List[Session]:
    parsed: List[Session] = []
    for raw in sessions or []:
        if isinstance(raw, Session):
            parsed.append(raw)
        else:
            parsed.append(Session.model_validate(raw))
    return parsed


def _is_finite(value: Optional[float]) -> bool:
    return value is not None and math.isfinite(value)


def _counts_for_history(entry: SetEntry, exercise_id: str) -> bool:
    return (
        entry.exercise_id == exercise_id
        and not entry.is_time_based
        and _is_finite(entry.reps)
        and _is_finite(entry.weight_kg)
    )


# =============================================================================
# Rollups
# =============================================================================


def build_history(
    sessions: Iterable[SessionLike],
    exercise_id: str,
    target_sets: int = DEFAULT_TARGET_SETS,
    weeks: int = DEFAULT_WEEKS,
    now: Optional[datetime] = None,
) -> List[HistoryPoint]:
    """
    Roll up an exercise's sets into one point per training day.

    Only strength sessions inside the trailing window count, and only
    weighted rep sets (time-based sets are skipped). Several sessions on the
    same day fold into one point.

    Args:
        sessions: Session models or their JSON dicts
        exercise_id: Exercise to aggregate
        target_sets: Prescribed sets per session (compliance denominator)
        weeks: Window length, clamped to [2, 6]
        now: Reference time for the window (defaults to now)

    Returns:
        HistoryPoints sorted by date ascending
    """
    window = clamp_weeks(weeks)
    reference = now or datetime.now(timezone.utc).replace(tzinfo=None)
    cutoff = reference - timedelta(weeks=window)

    by_day: Dict[str, List[SetEntry]] = {}
    for session in as_sessions(sessions):
        if not session.is_strength:
            continue
        when = session.session_datetime()
        if when is None or when < cutoff:
            continue
        matching = [s for s in session.sets if _counts_for_history(s, exercise_id)]
        if not matching:
            continue
        by_day.setdefault(when.date().isoformat(), []).extend(matching)

    denominator = max(1, target_sets or 0)
    points = []
    for day in sorted(by_day):
        sets = by_day[day]
        avg_rir = sum(s.rir if s.rir is not None else DEFAULT_SET_RIR for s in sets) / len(sets)
        points.append(
            HistoryPoint(
                date=day,
                avg_rir=round1(avg_rir),
                sets_completed=len(sets),
                compliance=round1(min(1.0, len(sets) / denominator)),
                top_reps=max(int(s.reps) for s in sets),
                top_weight_kg=round1(max(s.weight_kg for s in sets)),
                top_e1rm=round1(max(estimate_1rm_epley(s.weight_kg, s.reps) for s in sets)),
            )
        )
    return points


def last_used_set(exercise_id: str, sessions: Iterable[SessionLike]) -> Optional[Dict[str, Any]]:
    """
    Most recent weighted rep set logged for an exercise.

    Returns:
        ``{"weightKg", "reps", "rir", "dateISO"}`` or None if the exercise
        was never performed with load
    """
    ordered = sorted(
        as_sessions(sessions),
        key=lambda s: s.session_datetime() or datetime.min,
        reverse=True,
    )
    for session in ordered:
        for entry in reversed(session.sets):
            if entry.exercise_id != exercise_id or entry.is_time_based:
                continue
            if entry.weight_kg and entry.weight_kg > 0 and entry.reps:
                return {
                    "weightKg": entry.weight_kg,
                    "reps": entry.reps,
                    "rir": entry.rir,
                    "dateISO": session.date_iso,
                }
    return None


def best_e1rm(sessions: Iterable[SessionLike], exercise_id: str) -> float:
    """All-time best Epley estimate for an exercise, 0 if none."""
    best = 0.0
    for session in as_sessions(sessions):
        for entry in session.sets:
            if _counts_for_history(entry, exercise_id):
                best = max(best, estimate_1rm_epley(entry.weight_kg, entry.reps))
    return round1(best)


# =============================================================================
# Cache
# =============================================================================


Revision = Tuple[int, Optional[str]]


def history_revision(sessions: Sequence[SessionLike]) -> Revision:
    """
    Cheap revision marker for a session log.

    Sessions are append-only (or deleted whole), so the count plus the most
    recent date changes whenever the log does.
    """
    latest: Optional[str] = None
    for raw in sessions or []:
        date_iso = raw.date_iso if isinstance(raw, Session) else (raw or {}).get("dateISO")
        if date_iso and (latest is None or str(date_iso) > latest):
            latest = str(date_iso)
    return (len(sessions or []), latest)


class HistoryCache:
    """
    Caller-owned memo for build_history.

    Entries are keyed by ``(revision, exercise_id, target_sets, weeks)``.
    The owner of the session log holds one instance; a new revision simply
    misses, and invalidate() drops everything.

    Note: results are only valid for the ``now`` of the first build of a
    key. Callers that pin ``now`` should bypass the cache.
    """

    def __init__(self, max_entries: int = 256):
        self._entries: Dict[Tuple[Any, ...], List[HistoryPoint]] = {}
        self._max_entries = max_entries

    def get_or_build(
        self,
        sessions: Sequence[SessionLike],
        exercise_id: str,
        target_sets: int = DEFAULT_TARGET_SETS,
        weeks: int = DEFAULT_WEEKS,
        revision: Optional[Revision] = None,
    ) -> List[HistoryPoint]:
        key = (
            revision if revision is not None else history_revision(sessions),
            exercise_id,
            target_sets,
            clamp_weeks(weeks),
        )
        cached = self._entries.get(key)
        if cached is not None:
            return list(cached)

        points = build_history(sessions, exercise_id, target_sets=target_sets, weeks=weeks)
        if len(self._entries) >= self._max_entries:
            self._entries.clear()
            logger.debug("History cache full, cleared")
        self._entries[key] = points
        return list(points)

    def invalidate(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
