"""
Helpers for building and finishing a strength session.

Part of IRL-8: Logging sets against the active session

All functions return new models; inputs are never mutated, which keeps the
previous state available for the sync service's change detection.
"""
import time
import uuid
from datetime import datetime
from typing import Iterable, List, Optional, Sequence

from backend.core.history_aggregator import best_e1rm, estimate_1rm_epley, round1
from backend.core.progression_engine import rpe_to_rir
from domain.models import Session, SessionType, SetEntry, SetMode


def new_id() -> str:
    return uuid.uuid4().hex


def create_strength_session(routine_key: Optional[str], now: Optional[datetime] = None) -> Session:
    """Start an empty strength session dated ``now``."""
    when = now or datetime.now()
    return Session(
        id=new_id(),
        type=SessionType.STRENGTH.value,
        date_iso=when.isoformat(timespec="seconds"),
        routine_key=routine_key,
        sets=[],
    )


def build_set(
    exercise_id: str,
    mode: str,
    reps: Optional[int],
    weight_kg: Optional[float],
    rpe: Optional[float] = None,
    rir: Optional[float] = None,
    exercise_name: Optional[str] = None,
    at: Optional[int] = None,
) -> SetEntry:
    """
    Build a logged set.

    When only RPE is given, RIR is derived from it so history rollups have
    a fatigue signal.
    """
    if rir is None and rpe is not None:
        rir = rpe_to_rir(rpe)
    return SetEntry(
        id=new_id(),
        exercise_id=exercise_id,
        exercise_name=exercise_name,
        mode=mode or SetMode.REPS.value,
        reps=reps,
        weight_kg=weight_kg,
        rpe=rpe,
        rir=rir,
        at=at if at is not None else int(time.time() * 1000),
    )


def append_sets(session: Session, sets: Iterable[SetEntry]) -> Session:
    """Return a copy of ``session`` with ``sets`` added at the end."""
    return session.model_copy(update={"sets": [*session.sets, *sets]}, deep=True)


def session_volume(session: Session) -> float:
    """Sum of weight x reps over the session's rep sets."""
    return sum(entry.volume for entry in session.sets)


def finalize_session(
    session: Session,
    duration_sec: Optional[float],
    kcal: Optional[float] = None,
) -> Session:
    """Stamp duration, calories and total volume on a finished session."""
    return session.model_copy(
        update={
            "duration_sec": duration_sec,
            "kcal": kcal,
            "total_volume": session_volume(session),
        },
        deep=True,
    )


def detect_e1rm_pr(
    sessions: Sequence[Session],
    sets: Iterable[SetEntry],
    exercise_id: str,
) -> bool:
    """
    True when one of ``sets`` beats the all-time best e1RM in ``sessions``.

    ``sessions`` must not already contain ``sets``. The first weighted set
    ever logged for an exercise counts as a PR.
    """
    previous_best = best_e1rm(sessions, exercise_id)
    candidates: List[float] = [
        round1(estimate_1rm_epley(s.weight_kg or 0, s.reps or 0))
        for s in sets
        if s.exercise_id == exercise_id and not s.is_time_based
    ]
    if not candidates:
        return False
    return max(candidates) > previous_best
