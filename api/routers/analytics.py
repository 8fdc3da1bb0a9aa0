"""
Analytics router for training frequency per muscle group.

Part of IRL-12: Frequency and weekly heatmap data
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from api.deps import get_analytics_cache, get_catalog, get_sync_storage
from application.ports import ExerciseCatalog
from backend.core.training_analytics import AnalyticsCache, exercise_progress
from backend.services import SyncStorageService

router = APIRouter(
    prefix="/analytics",
    tags=["Analytics"],
)


class GroupFrequency(BaseModel):
    group: str
    days: int


class HeatmapResponse(BaseModel):
    weeks: List[str]
    groups: List[str]
    values: Dict[str, Dict[str, int]]


class ExerciseProgressPoint(BaseModel):
    date: str
    volume: float
    e1rm: float


@router.get("/frequency", response_model=List[GroupFrequency])
def read_frequency(
    start: Optional[datetime] = Query(None, description="Only sessions on or after"),
    end: Optional[datetime] = Query(None, description="Only sessions on or before"),
    routine: Optional[str] = Query(None, description="Only sessions of this routine"),
    storage: SyncStorageService = Depends(get_sync_storage),
    catalog: ExerciseCatalog = Depends(get_catalog),
    cache: AnalyticsCache = Depends(get_analytics_cache),
) -> List[Dict[str, Any]]:
    """Distinct training days per muscle group, most trained first."""
    sessions = storage.load_state().state.sessions
    return cache.frequency(sessions, catalog, start, end, routine)


@router.get("/heatmap", response_model=HeatmapResponse)
def read_heatmap(
    start: Optional[datetime] = Query(None, description="Only sessions on or after"),
    end: Optional[datetime] = Query(None, description="Only sessions on or before"),
    routine: Optional[str] = Query(None, description="Only sessions of this routine"),
    storage: SyncStorageService = Depends(get_sync_storage),
    catalog: ExerciseCatalog = Depends(get_catalog),
    cache: AnalyticsCache = Depends(get_analytics_cache),
) -> Dict[str, Any]:
    """Training days per muscle group per ISO week."""
    sessions = storage.load_state().state.sessions
    return cache.heatmap(sessions, catalog, start, end, routine)


@router.get("/exercises/{exercise_id:path}/progress", response_model=List[ExerciseProgressPoint])
def read_exercise_progress(
    exercise_id: str,
    storage: SyncStorageService = Depends(get_sync_storage),
) -> List[Dict[str, Any]]:
    """Daily volume and best estimated 1RM for one exercise."""
    return exercise_progress(storage.load_state().state.sessions, exercise_id)
