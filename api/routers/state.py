"""
State router for loading and saving the training state envelope.

Part of IRL-9: Sync storage service

This router provides endpoints for:
- Loading the local state (migrated to the current schema)
- Saving a new state, which reconciles it with the remote mirror
- Reading the current sync status
"""
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from api.deps import get_sync_storage
from backend.services import SyncStorageService
from domain.models import SyncMetadata, SyncStatus, TrainingState

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/state",
    tags=["State"],
)


# =============================================================================
# Request/Response Models
# =============================================================================


class StateResponse(BaseModel):
    """Loaded state envelope."""
    user_id: str = Field(..., alias="userId")
    state: Dict[str, Any]
    metadata: SyncMetadata
    warnings: List[str] = Field(default_factory=list)

    model_config = {"populate_by_name": True}


class SaveStateRequest(BaseModel):
    """New state plus what the client had before editing it."""
    state: Dict[str, Any]
    previous_state: Optional[Dict[str, Any]] = Field(default=None, alias="previousState")
    metadata: Optional[SyncMetadata] = None

    model_config = {"populate_by_name": True}


class SaveStateResponse(BaseModel):
    """Reconciled state and the metadata for the next save."""
    state: Dict[str, Any]
    metadata: Optional[SyncMetadata] = None
    status: SyncStatus

    model_config = {"populate_by_name": True}


# =============================================================================
# Endpoints
# =============================================================================


@router.get("", response_model=StateResponse, response_model_by_alias=True)
def read_state(
    storage: SyncStorageService = Depends(get_sync_storage),
) -> StateResponse:
    """
    Load this device's state.

    Missing or malformed local data yields the default state; migration
    warnings are returned alongside.
    """
    loaded = storage.load_state()
    return StateResponse(
        user_id=loaded.user_id,
        state=loaded.state.to_blob(),
        metadata=loaded.metadata,
        warnings=loaded.warnings,
    )


@router.put("", response_model=SaveStateResponse, response_model_by_alias=True)
async def save_state(
    request: SaveStateRequest,
    storage: SyncStorageService = Depends(get_sync_storage),
) -> SaveStateResponse:
    """
    Save a new state and reconcile it with the remote mirror.

    Always answers 200: a failed sync is reported through ``status.phase``
    (``error``) and the submitted state is echoed back.
    """
    result = await storage.save_state(request.state, request.previous_state, request.metadata)
    state = result.state.to_blob() if isinstance(result.state, TrainingState) else dict(result.state)
    return SaveStateResponse(
        state=state,
        metadata=result.metadata,
        status=storage.current_status,
    )


@router.get("/sync-status", response_model=SyncStatus, response_model_by_alias=True)
def read_sync_status(
    storage: SyncStorageService = Depends(get_sync_storage),
) -> SyncStatus:
    """Current sync status (idle, syncing, conflict or error)."""
    return storage.current_status
