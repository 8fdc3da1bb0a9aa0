"""
Training frequency analytics per muscle group.

Part of IRL-12: Frequency and weekly heatmap data

Data-only aggregations over the session log; presentation is left to the
client. Results can be memoized in an AnalyticsCache owned by the caller.
"""
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Set, Tuple
import logging

from application.ports import ExerciseCatalog
from backend.core.history_aggregator import (
    Revision,
    SessionLike,
    as_sessions,
    estimate_1rm_epley,
    history_revision,
)
from backend.core.migrations import infer_muscles
from domain.models import Session, SetEntry

logger = logging.getLogger(__name__)

OTHER_GROUP = "other"


def iso_week_key(day: date) -> str:
    """ISO week label, e.g. ``2024-W02``."""
    year, week, _ = day.isocalendar()
    return f"{year}-W{week:02d}"


def is_valid_set(entry: SetEntry) -> bool:
    """A weighted rep set with positive reps."""
    return (
        not entry.is_time_based
        and entry.reps is not None
        and entry.reps > 0
        and entry.weight_kg is not None
        and entry.weight_kg >= 0
    )


def primary_group_of(entry: SetEntry, catalog: Optional[ExerciseCatalog]) -> str:
    """Catalog muscle group for a set, guessed from its name if unknown."""
    exercise = catalog.get_exercise(entry.exercise_id) if catalog else None
    if exercise is not None and exercise.primary_group:
        return exercise.primary_group
    name = entry.exercise_name or (exercise.name if exercise else "") or entry.exercise_id
    guessed = infer_muscles(name)
    return guessed[0] if guessed else OTHER_GROUP


def _naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _in_scope(
    session: Session,
    start: Optional[datetime],
    end: Optional[datetime],
    routine_filter: Optional[str],
) -> Optional[datetime]:
    if not session.is_strength:
        return None
    when = session.session_datetime()
    if when is None:
        return None
    start, end = _naive_utc(start), _naive_utc(end)
    if start and when < start:
        return None
    if end and when > end:
        return None
    if routine_filter and session.routine_key != routine_filter:
        return None
    return when


def frequency_days_by_group(
    sessions: Sequence[SessionLike],
    catalog: Optional[ExerciseCatalog],
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    routine_filter: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """
    Number of distinct training days per muscle group.

    Returns:
        ``[{"group": str, "days": int}]`` sorted by days, most trained first
    """
    days_by_group: Dict[str, Set[str]] = {}
    for session in as_sessions(sessions):
        when = _in_scope(session, start, end, routine_filter)
        if when is None:
            continue
        day = when.date().isoformat()
        for group in {primary_group_of(s, catalog) for s in session.sets if is_valid_set(s)}:
            days_by_group.setdefault(group, set()).add(day)

    rows = [{"group": group, "days": len(days)} for group, days in days_by_group.items() if days]
    rows.sort(key=lambda r: (-r["days"], r["group"]))
    return rows


def weekly_group_heatmap(
    sessions: Sequence[SessionLike],
    catalog: Optional[ExerciseCatalog],
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    routine_filter: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Training days per muscle group per ISO week.

    Returns:
        ``{"weeks": [...], "groups": [...], "values": {week: {group: n}}}``
        with every week/group cell filled (0 when untrained)
    """
    seen: Set[Tuple[str, str]] = set()
    matrix: Dict[str, Dict[str, int]] = {}
    for session in as_sessions(sessions):
        when = _in_scope(session, start, end, routine_filter)
        if when is None:
            continue
        week = iso_week_key(when.date())
        day = when.date().isoformat()
        for entry in session.sets:
            if not is_valid_set(entry):
                continue
            group = primary_group_of(entry, catalog)
            if (group, day) in seen:
                continue
            seen.add((group, day))
            row = matrix.setdefault(week, {})
            row[group] = row.get(group, 0) + 1

    weeks = sorted(matrix)
    groups = sorted({g for row in matrix.values() for g in row})
    values = {w: {g: matrix[w].get(g, 0) for g in groups} for w in weeks}
    return {"weeks": weeks, "groups": groups, "values": values}


def exercise_progress(sessions: Sequence[SessionLike], exercise_id: str) -> List[Dict[str, Any]]:
    """
    Daily volume and best e1RM for one exercise over the whole log.

    Returns:
        ``[{"date", "volume", "e1rm"}]`` sorted by date
    """
    by_day: Dict[str, Dict[str, Any]] = {}
    for session in as_sessions(sessions):
        if not session.is_strength:
            continue
        day = session.day()
        if day is None:
            continue
        for entry in session.sets:
            if entry.exercise_id != exercise_id or not is_valid_set(entry):
                continue
            row = by_day.setdefault(day.isoformat(), {"date": day.isoformat(), "volume": 0.0, "e1rm": 0})
            row["volume"] += entry.volume
            row["e1rm"] = max(row["e1rm"], round(estimate_1rm_epley(entry.weight_kg, entry.reps)))
    return [by_day[d] for d in sorted(by_day)]


class AnalyticsCache:
    """
    Caller-owned memo for the aggregations above.

    Keys combine the session log revision with the query parameters, so a
    changed log never serves stale results.
    """

    def __init__(self):
        self._entries: Dict[Tuple[Any, ...], Any] = {}

    def _key(self, kind: str, revision: Revision, *params: Any) -> Tuple[Any, ...]:
        return (kind, revision, *[p.isoformat() if isinstance(p, (date, datetime)) else p for p in params])

    def frequency(self, sessions, catalog, start=None, end=None, routine_filter=None):
        key = self._key("frequency", history_revision(sessions), start, end, routine_filter)
        if key not in self._entries:
            self._entries[key] = frequency_days_by_group(sessions, catalog, start, end, routine_filter)
        return self._entries[key]

    def heatmap(self, sessions, catalog, start=None, end=None, routine_filter=None):
        key = self._key("heatmap", history_revision(sessions), start, end, routine_filter)
        if key not in self._entries:
            self._entries[key] = weekly_group_heatmap(sessions, catalog, start, end, routine_filter)
        return self._entries[key]

    def invalidate(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
