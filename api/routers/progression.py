"""
Progression router for suggestions, history and set registration.

Part of IRL-6: Next-session weight/reps suggestions

This router provides endpoints for:
- Computing a suggestion from explicit inputs
- Per-exercise history rollups from the stored session log
- Registering completed sets (updates the profile and saves the state)
- Starting weight to prefill for an exercise
"""
import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query
from pydantic import BaseModel, Field

from api.deps import (
    get_catalog,
    get_history_cache,
    get_register_exercise_use_case,
    get_settings,
    get_sync_storage,
)
from application.exceptions import ExerciseNotFoundError
from application.ports import ExerciseCatalog
from application.use_cases import RegisterExerciseUseCase
from backend.core.exercise_resolver import default_weight_for, resolve_exercise, target_sets_for
from backend.core.history_aggregator import HistoryCache
from backend.core.progression_engine import ExerciseTarget, calc_next, initial_weight_for_exercise
from backend.core.workout_session import build_set
from backend.services import SyncStorageService
from backend.settings import Settings
from domain.models import (
    HistoryPoint,
    LastPerformance,
    ProgressionProfileType,
    ProgressionSuggestion,
    SyncStatus,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/progression",
    tags=["Progression"],
)


# =============================================================================
# Request/Response Models
# =============================================================================


class ExerciseTargetBody(BaseModel):
    """Inline exercise prescription."""
    mode: str = "reps"
    target_reps: Optional[int] = Field(default=None, alias="targetReps")
    target_reps_range: Optional[str] = Field(default=None, alias="targetRepsRange")

    model_config = {"populate_by_name": True}


class SuggestRequest(BaseModel):
    """Explicit inputs for a single engine run."""
    last: Optional[LastPerformance] = None
    exercise_id: Optional[str] = Field(default=None, alias="exerciseId")
    exercise: Optional[ExerciseTargetBody] = None
    profile_type: Optional[ProgressionProfileType] = Field(default=None, alias="profileType")
    min_weight_kg: float = Field(default=0.0, ge=0, alias="minWeightKg")
    history: List[HistoryPoint] = Field(default_factory=list)
    today: Optional[date] = None

    model_config = {"populate_by_name": True}


class SetBody(BaseModel):
    """A completed set as submitted by the client."""
    mode: str = "reps"
    reps: Optional[int] = Field(default=None, ge=0)
    weight_kg: Optional[float] = Field(default=None, ge=0, alias="weightKg")
    rpe: Optional[float] = Field(default=None, ge=0, le=10)
    rir: Optional[float] = Field(default=None, ge=0)

    model_config = {"populate_by_name": True}


class RegisterRequest(BaseModel):
    """Sets of one exercise to append to the active session."""
    sets: List[SetBody] = Field(..., min_length=1)
    session_id: Optional[str] = Field(default=None, alias="sessionId")
    routine_key: Optional[str] = Field(default=None, alias="routineKey")
    today: Optional[date] = None

    model_config = {"populate_by_name": True}


class RegisterResponse(BaseModel):
    """Outcome of a registration."""
    exercise_id: str = Field(..., alias="exerciseId")
    session_id: str = Field(..., alias="sessionId")
    suggestion: ProgressionSuggestion
    is_pr: bool = Field(default=False, alias="isPr")
    history: List[HistoryPoint] = Field(default_factory=list)
    status: SyncStatus

    model_config = {"populate_by_name": True}


class HistoryResponse(BaseModel):
    """Trailing history rollups for one exercise."""
    exercise_id: str = Field(..., alias="exerciseId")
    weeks: int
    points: List[HistoryPoint]

    model_config = {"populate_by_name": True}


class InitialWeightResponse(BaseModel):
    exercise_id: str = Field(..., alias="exerciseId")
    weight_kg: float = Field(..., alias="weightKg")

    model_config = {"populate_by_name": True}


# =============================================================================
# Endpoints
# =============================================================================


@router.post("/suggest", response_model=ProgressionSuggestion, response_model_by_alias=True)
def suggest(
    request: SuggestRequest,
    catalog: ExerciseCatalog = Depends(get_catalog),
    settings: Settings = Depends(get_settings),
) -> ProgressionSuggestion:
    """
    Run the progression engine on explicit inputs.

    The exercise is taken from the body, or looked up by ``exerciseId``.
    Returns an empty suggestion when there is no previous set or the
    exercise is time-based.
    """
    if request.exercise is not None:
        exercise = ExerciseTarget(
            mode=request.exercise.mode,
            target_reps=request.exercise.target_reps,
            target_reps_range=request.exercise.target_reps_range,
        )
    elif request.exercise_id:
        exercise = catalog.get_exercise(request.exercise_id)
        if exercise is None:
            raise HTTPException(status_code=404, detail=f"Exercise '{request.exercise_id}' not found")
    else:
        raise HTTPException(status_code=422, detail="Provide either 'exercise' or 'exerciseId'")

    return calc_next(
        request.last,
        exercise,
        profile={"minWeightKg": request.min_weight_kg},
        profile_type=request.profile_type or settings.default_progression_profile,
        history=request.history,
        today=request.today,
    )


@router.get("/{exercise_id:path}/history", response_model=HistoryResponse, response_model_by_alias=True)
def read_history(
    exercise_id: str = Path(..., description="Catalog or custom exercise id"),
    weeks: Optional[int] = Query(None, ge=2, le=6, description="Trailing window in weeks"),
    storage: SyncStorageService = Depends(get_sync_storage),
    catalog: ExerciseCatalog = Depends(get_catalog),
    cache: HistoryCache = Depends(get_history_cache),
    settings: Settings = Depends(get_settings),
) -> HistoryResponse:
    """Per-day rollups for an exercise from the stored session log."""
    state = storage.load_state().state
    exercise = resolve_exercise(exercise_id, state, catalog)
    if exercise is None:
        raise HTTPException(status_code=404, detail=f"Exercise '{exercise_id}' not found")

    window = weeks or settings.history_weeks
    points = cache.get_or_build(
        state.sessions,
        exercise_id,
        target_sets=target_sets_for(exercise, settings.default_target_sets),
        weeks=window,
    )
    return HistoryResponse(exercise_id=exercise_id, weeks=window, points=points)


@router.get(
    "/{exercise_id:path}/initial-weight",
    response_model=InitialWeightResponse,
    response_model_by_alias=True,
)
def read_initial_weight(
    exercise_id: str = Path(..., description="Catalog or custom exercise id"),
    storage: SyncStorageService = Depends(get_sync_storage),
    catalog: ExerciseCatalog = Depends(get_catalog),
) -> InitialWeightResponse:
    """Weight to prefill when the user starts this exercise."""
    state = storage.load_state().state
    exercise = resolve_exercise(exercise_id, state, catalog)
    if exercise is None:
        raise HTTPException(status_code=404, detail=f"Exercise '{exercise_id}' not found")

    weight = initial_weight_for_exercise(
        exercise_id,
        state.profile_by_exercise_id,
        state.sessions,
        default_weight_kg=default_weight_for(exercise),
    )
    return InitialWeightResponse(exercise_id=exercise_id, weight_kg=weight)


@router.post("/{exercise_id:path}/register", response_model=RegisterResponse, response_model_by_alias=True)
async def register_exercise(
    request: RegisterRequest,
    exercise_id: str = Path(..., description="Catalog or custom exercise id"),
    storage: SyncStorageService = Depends(get_sync_storage),
    use_case: RegisterExerciseUseCase = Depends(get_register_exercise_use_case),
) -> RegisterResponse:
    """
    Register completed sets and store the next suggestion.

    The new state is saved through the sync storage service; a failed sync
    is reported in ``status`` rather than as an HTTP error.
    """
    loaded = storage.load_state()
    sets = [
        build_set(exercise_id, s.mode, s.reps, s.weight_kg, rpe=s.rpe, rir=s.rir)
        for s in request.sets
    ]

    try:
        result = use_case.execute(
            loaded.state,
            exercise_id,
            sets,
            session_id=request.session_id,
            routine_key=request.routine_key,
            today=request.today,
        )
    except ExerciseNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    await storage.save_state(result.state, loaded.state, loaded.metadata)

    return RegisterResponse(
        exercise_id=exercise_id,
        session_id=result.session.id,
        suggestion=result.suggestion,
        is_pr=result.is_pr,
        history=result.history,
        status=storage.current_status,
    )
