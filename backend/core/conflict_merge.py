"""
Conflict merge strategy for local/remote state blobs.

Part of IRL-4: Deterministic reconciliation of diverged state copies

Each tracked entity (sessions, per-exercise profiles, routine index) carries
its own logical clock. The copy with the newer clock wins the entity
outright; on a tie the two values are merged structurally so nothing is
lost:

- sessions: union by id, newer ``dateISO`` wins a duplicate id
- profileByExerciseId: shallow merge, this device wins per exercise id
- userRoutinesIndex: sorted union of keys and exercise ids

Inputs and outputs are JSON-shaped dicts (camelCase keys) exactly as they
sit in a storage slot, so a missing or empty remote copy (``{}``) needs no
special casing.
"""
import copy
import json
import logging
import time
from typing import Any, Dict, List, Mapping, Optional

from domain.models import TRACKED_ENTITY_KEYS, parse_iso_datetime

logger = logging.getLogger(__name__)

CONFLICT_ENTITY_KEYS = TRACKED_ENTITY_KEYS


def _clock(timestamps: Optional[Mapping[str, Any]], key: str) -> int:
    if not timestamps:
        return 0
    value = timestamps.get(key)
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


def _session_sort_key(session: Mapping[str, Any]) -> float:
    when = parse_iso_datetime(session.get("dateISO"))
    return when.timestamp() if when else 0.0


def _merge_sessions(local: Optional[List[Any]], remote: Optional[List[Any]]) -> List[Any]:
    by_id: Dict[str, Any] = {}
    # Local first so an exact dateISO tie keeps the local copy.
    for session in list(local or []) + list(remote or []):
        if not isinstance(session, Mapping) or not session.get("id"):
            continue
        session_id = str(session["id"])
        current = by_id.get(session_id)
        if current is None or _session_sort_key(session) > _session_sort_key(current):
            by_id[session_id] = session
    merged = sorted(by_id.values(), key=_session_sort_key, reverse=True)
    return copy.deepcopy(merged)


def _merge_profiles(
    local: Optional[Mapping[str, Any]], remote: Optional[Mapping[str, Any]]
) -> Dict[str, Any]:
    merged = dict(remote or {})
    merged.update(local or {})
    return copy.deepcopy(merged)


def _merge_routines(
    local: Optional[Mapping[str, Any]], remote: Optional[Mapping[str, Any]]
) -> Dict[str, List[str]]:
    local = local or {}
    remote = remote or {}
    merged: Dict[str, List[str]] = {}
    for routine_key in sorted(set(local) | set(remote), key=str):
        ids = list(local.get(routine_key) or []) + list(remote.get(routine_key) or [])
        merged[routine_key] = sorted(set(ids), key=str)
    return merged


_STRUCTURAL_MERGERS = {
    "sessions": _merge_sessions,
    "profileByExerciseId": _merge_profiles,
    "userRoutinesIndex": _merge_routines,
}


def merge_states(
    local: Optional[Mapping[str, Any]],
    remote: Optional[Mapping[str, Any]],
    timestamps: Optional[Mapping[str, Mapping[str, Any]]] = None,
) -> Dict[str, Any]:
    """
    Reconcile two copies of the state blob.

    Args:
        local: This device's state blob
        remote: The remote mirror's state blob (may be empty)
        timestamps: ``{"local": {...}, "remote": {...}}`` update clocks per
            tracked entity key; missing clocks count as zero

    Returns:
        A new blob. Untracked fields come from ``local`` (falling back to
        ``remote`` for keys only it has); tracked entities follow the
        clock comparison described in the module docstring.

    Examples:
        >>> merge_states(
        ...     {"sessions": [{"id": "a", "dateISO": "2024-01-02"}]},
        ...     {"sessions": [{"id": "b", "dateISO": "2024-01-01"}]},
        ... )["sessions"]
        [{'id': 'a', 'dateISO': '2024-01-02'}, {'id': 'b', 'dateISO': '2024-01-01'}]
    """
    local = local or {}
    remote = remote or {}
    timestamps = timestamps or {}
    local_clocks = timestamps.get("local") or {}
    remote_clocks = timestamps.get("remote") or {}

    merged: Dict[str, Any] = copy.deepcopy({**remote, **local})

    for key in CONFLICT_ENTITY_KEYS:
        local_at = _clock(local_clocks, key)
        remote_at = _clock(remote_clocks, key)

        if local_at > remote_at:
            source, value = "local", local.get(key)
        elif remote_at > local_at:
            source, value = "remote", remote.get(key)
        elif _canonical(local.get(key)) == _canonical(remote.get(key)):
            # Identical copies keep their order.
            source, value = "both", local.get(key)
        else:
            merged[key] = _STRUCTURAL_MERGERS[key](local.get(key), remote.get(key))
            continue

        if value is None:
            merged.pop(key, None)
        else:
            merged[key] = copy.deepcopy(value)
        logger.debug(f"Conflict merge: {key} taken from {source} ({local_at} vs {remote_at})")

    return merged


def _canonical(value: Any) -> str:
    return json.dumps(value, sort_keys=True, separators=(",", ":"), default=str)


def current_time_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def next_updated_at(
    prev: Optional[Mapping[str, Any]],
    next_state: Optional[Mapping[str, Any]],
    previous_state: Optional[Mapping[str, Any]],
    now_ms: Optional[int] = None,
) -> Dict[str, int]:
    """
    Advance the per-entity clocks after a local edit.

    A key whose value changed between ``previous_state`` and ``next_state``
    is stamped with the current time. An unchanged key keeps its clock,
    zero if it never had one. Clocks never move backwards, even if the wall
    clock does.
    """
    now = now_ms if now_ms is not None else current_time_ms()
    next_state = next_state or {}
    previous_state = previous_state or {}

    clocks: Dict[str, int] = {}
    for key, value in (prev or {}).items():
        try:
            clocks[key] = int(value or 0)
        except (TypeError, ValueError):
            continue

    for key in CONFLICT_ENTITY_KEYS:
        current = clocks.get(key, 0)
        changed = _canonical(next_state.get(key)) != _canonical(previous_state.get(key))
        clocks[key] = max(current, now) if changed else current
    return clocks


def merge_updated_at(
    local: Optional[Mapping[str, Any]], remote: Optional[Mapping[str, Any]]
) -> Dict[str, int]:
    """Per-key maximum of two clock maps, used for a merged envelope."""
    keys = set(CONFLICT_ENTITY_KEYS) | set(local or {}) | set(remote or {})
    return {key: max(_clock(local, key), _clock(remote, key)) for key in sorted(keys)}
