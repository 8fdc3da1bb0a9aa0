"""
Schema migrations for the persisted state blob.

Part of IRL-7: Schema migration to catalog-backed routines

Blobs are upgraded through a chain of single-step migrations keyed by the
version they upgrade *from*, then validated record by record. Nothing here
raises on bad data: unmigratable records are dropped and reported in the
returned warnings.

Version history:
    4 - routines stored as a list of ``{name, exercises: [{name, ...}]}``
    5 - ``userRoutinesIndex`` of exercise ids plus ``customExercisesById``
"""
import hashlib
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional

from pydantic import ValidationError

from application.ports import ExerciseCatalog
from backend.core.exercise_matcher import CatalogNameMatcher
from backend.core.normalize import normalize
from domain.models import (
    CURRENT_SCHEMA_VERSION,
    CustomExercise,
    ExerciseProfile,
    Session,
    TrainingState,
    UserSettings,
)

logger = logging.getLogger(__name__)

LEGACY_ROUTINES_VERSION = 4

# Keyword patterns (on normalized names) used to guess the muscle group of
# an exercise the catalog does not know.
MUSCLE_PATTERNS = [
    ("chest", r"\b(chest|bench|fly|flye|pec|pecho|apertura)\b"),
    ("back", r"\b(back|row|pulldown|pull|pullup|lat|espalda|jalon)\b"),
    ("legs", r"\b(leg|squat|deadlift|lunge|quad|glute|calf|pierna|zancada)\b"),
    ("shoulders", r"\b(shoulder|overhead|military|lateral|delt|face|hombro)\b"),
    ("arms", r"\b(biceps|curl|triceps|dip|skullcrusher|pushdown|brazo)\b"),
    ("core", r"\b(core|abs|plank|crunch|rollout|pallof|woodchopper)\b"),
]


@dataclass
class MigrationResult:
    """Migrated, validated state plus what had to be changed or dropped."""

    state: TrainingState
    warnings: List[str] = field(default_factory=list)


# =============================================================================
# Helpers
# =============================================================================


def stable_hash(text: str) -> str:
    """Short base-36 digest of a string, stable across runs and platforms."""
    digest = int.from_bytes(hashlib.sha1(text.encode("utf-8")).digest()[:6], "big")
    alphabet = "0123456789abcdefghijklmnopqrstuvwxyz"
    out = ""
    while digest:
        digest, rem = divmod(digest, 36)
        out = alphabet[rem] + out
    return out or "0"


def infer_muscles(name: str) -> List[str]:
    """Best-effort muscle group for an exercise name, or ``[]``."""
    normalized = normalize(name)
    for group, pattern in MUSCLE_PATTERNS:
        if re.search(pattern, normalized):
            return [group]
    return []


def detect_version(data: Mapping[str, Any]) -> int:
    """
    Schema version of a raw blob.

    Unversioned blobs holding a legacy ``routines`` list are version 4;
    other unversioned blobs are assumed current.
    """
    version = data.get("version")
    if isinstance(version, int) and not isinstance(version, bool):
        return version
    if isinstance(data.get("routines"), list):
        return LEGACY_ROUTINES_VERSION
    return CURRENT_SCHEMA_VERSION


# =============================================================================
# Migration steps
# =============================================================================


def _custom_from_legacy(old: Mapping[str, Any], name: str) -> Dict[str, Any]:
    target_reps = old.get("targetReps")
    return {
        "id": f"custom/{stable_hash(name)}",
        "name": name,
        "mode": old.get("mode") or "reps",
        "muscles": infer_muscles(name),
        "fixed": {
            "targetSets": old.get("targetSets"),
            "targetRepsRange": old.get("targetRepsRange") or (str(target_reps) if target_reps else None),
            "targetTimeSec": old.get("targetTimeSec"),
            "restSec": old.get("restSec"),
        },
        "notes": old.get("notes"),
    }


def migrate_v4_to_v5(
    data: Dict[str, Any], catalog: Optional[ExerciseCatalog], warnings: List[str]
) -> Dict[str, Any]:
    """
    Convert name-based routines into an id-based routine index.

    Routines map onto the catalog's template keys in order, extra ones get
    ``custom_<n>``. Names that match no catalog exercise become custom
    exercises with a stable ``custom/<hash>`` id.
    """
    data = dict(data)
    custom: Dict[str, Any] = dict(data.get("customExercisesById") or {})
    data.setdefault("profileByExerciseId", {})
    templates = catalog.routine_templates() if catalog else {}
    template_keys = list(templates)

    if not data.get("userRoutinesIndex") and isinstance(data.get("routines"), list):
        matcher = CatalogNameMatcher(catalog)
        index: Dict[str, List[str]] = {key: [] for key in template_keys}

        for idx, routine in enumerate(data["routines"]):
            key = template_keys[idx] if idx < len(template_keys) else f"custom_{idx}"
            ids = index.setdefault(key, [])
            exercises = routine.get("exercises") if isinstance(routine, Mapping) else None
            for old in exercises or []:
                name = str((old or {}).get("name") or "").strip()
                if not name:
                    warnings.append(f"Dropped unnamed exercise in routine {key}")
                    continue
                match = matcher.match(name)
                if match.exercise_id:
                    ids.append(match.exercise_id)
                    continue
                entry = _custom_from_legacy(old, name)
                custom[entry["id"]] = entry
                ids.append(entry["id"])
            if isinstance(routine, Mapping) and routine.get("name") and key.startswith("custom_"):
                data.setdefault("customRoutineNames", {})[key] = str(routine["name"])

        data["userRoutinesIndex"] = index

    known = {ex.id for ex in catalog.all_exercises()} if catalog else None
    if known is not None:
        pruned: Dict[str, List[str]] = {}
        for key, ids in (data.get("userRoutinesIndex") or {}).items():
            kept = [i for i in ids or [] if i in custom or i in known]
            if len(kept) != len(ids or []):
                warnings.append(f"Dropped {len(ids or []) - len(kept)} unknown exercise(s) from routine {key}")
            pruned[key] = kept
        data["userRoutinesIndex"] = pruned

    data["customExercisesById"] = custom
    data.pop("routines", None)
    data["version"] = 5
    return data


MigrationStep = Callable[[Dict[str, Any], Optional[ExerciseCatalog], List[str]], Dict[str, Any]]

MIGRATIONS: Dict[int, MigrationStep] = {
    LEGACY_ROUTINES_VERSION: migrate_v4_to_v5,
}


# =============================================================================
# Validation
# =============================================================================


def _validate(data: Mapping[str, Any], warnings: List[str]) -> TrainingState:
    """Validate each record on its own so one bad entry does not sink the blob."""
    sessions: List[Session] = []
    for raw in data.get("sessions") or []:
        try:
            sessions.append(Session.model_validate(raw))
        except ValidationError:
            ident = raw.get("id") if isinstance(raw, Mapping) else None
            warnings.append(f"Dropped invalid session {ident!r}")

    profiles: Dict[str, ExerciseProfile] = {}
    for exercise_id, raw in (data.get("profileByExerciseId") or {}).items():
        try:
            profiles[str(exercise_id)] = ExerciseProfile.model_validate(raw or {})
        except ValidationError:
            warnings.append(f"Dropped invalid profile for {exercise_id}")

    custom: Dict[str, CustomExercise] = {}
    for exercise_id, raw in (data.get("customExercisesById") or {}).items():
        try:
            custom[str(exercise_id)] = CustomExercise.model_validate(raw)
        except ValidationError:
            warnings.append(f"Dropped invalid custom exercise {exercise_id}")

    try:
        settings = UserSettings.model_validate(data.get("settings") or {})
    except ValidationError:
        warnings.append("Invalid settings replaced with defaults")
        settings = UserSettings()

    routines: Dict[str, List[str]] = {}
    for key, ids in (data.get("userRoutinesIndex") or {}).items():
        if isinstance(ids, list):
            routines[str(key)] = [str(i) for i in ids if isinstance(i, str)]
        else:
            warnings.append(f"Dropped malformed routine {key}")

    names = data.get("customRoutineNames") or {}
    routine_names = {str(k): str(v) for k, v in names.items()} if isinstance(names, Mapping) else {}

    known = {
        "version", "settings", "sessions", "profileByExerciseId", "userRoutinesIndex",
        "customExercisesById", "customRoutineNames",
    }
    extras = {k: v for k, v in data.items() if k not in known}

    return TrainingState(
        version=CURRENT_SCHEMA_VERSION,
        settings=settings,
        sessions=sessions,
        profile_by_exercise_id=profiles,
        user_routines_index=routines,
        custom_exercises_by_id=custom,
        custom_routine_names=routine_names,
        **extras,
    )


# =============================================================================
# Public API
# =============================================================================


def migrate(prev_state: Optional[Mapping[str, Any]], catalog: Optional[ExerciseCatalog] = None) -> MigrationResult:
    """
    Upgrade a raw state blob to the current schema and validate it.

    Args:
        prev_state: Blob as read from a storage slot (any version)
        catalog: Used to resolve legacy exercise names; without it every
            legacy exercise becomes a custom one

    Returns:
        MigrationResult with a TrainingState at CURRENT_SCHEMA_VERSION
    """
    data: Dict[str, Any] = dict(prev_state or {})
    warnings: List[str] = []
    version = detect_version(data)

    if version > CURRENT_SCHEMA_VERSION:
        warnings.append(f"State version {version} is newer than {CURRENT_SCHEMA_VERSION}; reading as-is")
    elif version < LEGACY_ROUTINES_VERSION:
        warnings.append(f"No migration path from version {version}; reading as current")

    while version in MIGRATIONS:
        target = version + 1
        data = MIGRATIONS[version](data, catalog, warnings)
        warnings.append(f"migrated {version}→{target}")
        logger.info(f"Migrated state blob from v{version} to v{target}")
        version = target

    state = _validate(data, warnings)
    if warnings:
        logger.warning(f"State migration produced {len(warnings)} warning(s): {warnings}")
    return MigrationResult(state=state, warnings=warnings)


def default_state(catalog: Optional[ExerciseCatalog] = None) -> TrainingState:
    """Fresh state whose routine index is a copy of the catalog templates."""
    templates = catalog.routine_templates() if catalog else {}
    return TrainingState(user_routines_index={k: list(v) for k, v in templates.items()})
