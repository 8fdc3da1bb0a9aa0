"""
Local-first state persistence with remote mirroring.

Part of IRL-9: Sync storage service

The state envelope ``{userId, state, metadata}`` is written to a fixed
local slot on every save, then reconciled with the remote mirror under
``<remote_prefix>:<userId>`` using the conflict merge strategy. The merged
result is written back to both slots.

Callers sequence their own saves; there is no background sync loop. Remote
slot calls run in the default executor so a slow backend does not block
the event loop.
"""
import asyncio
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from pydantic import ValidationError

from application.exceptions import StorageError
from application.ports import ExerciseCatalog, StateSlotStore
from backend.core.conflict_merge import (
    current_time_ms,
    merge_states,
    merge_updated_at,
    next_updated_at,
)
from backend.core.migrations import default_state, migrate
from backend.settings import Settings, get_settings
from domain.models import (
    StateEnvelope,
    SyncMetadata,
    SyncPhase,
    SyncStatus,
    TrainingState,
    UpdateTimestamps,
)

logger = logging.getLogger(__name__)

GUEST_USER_ID = "guest"

StateLike = Union[TrainingState, Mapping[str, Any]]
MetadataLike = Union[SyncMetadata, Mapping[str, Any]]
StatusCallback = Callable[[SyncStatus], None]


@dataclass
class LoadedState:
    """What load_state hands to the UI layer."""

    state: TrainingState
    metadata: SyncMetadata
    user_id: str
    warnings: List[str] = field(default_factory=list)


@dataclass
class SaveResult:
    """
    Reconciled state and the metadata to pass into the next save.

    After a failed save these are the caller's own arguments, untouched.
    """

    state: StateLike
    metadata: Optional[MetadataLike]


def _canonical(value: Any) -> str:
    return json.dumps(value, sort_keys=True, separators=(",", ":"), default=str)


class SyncStorageService:
    """
    Persists the training state locally and mirrors it to a remote slot.

    Args:
        local_store: Slot store for this device (cache + identity slot)
        remote_store: Slot store for the remote mirror
        settings: Slot keys; defaults to get_settings()
        catalog: Used by schema migrations and default state
        clock: Epoch-millisecond clock for update timestamps
    """

    def __init__(
        self,
        local_store: StateSlotStore,
        remote_store: StateSlotStore,
        *,
        settings: Optional[Settings] = None,
        catalog: Optional[ExerciseCatalog] = None,
        clock: Optional[Callable[[], int]] = None,
    ):
        settings = settings or get_settings()
        self._local = local_store
        self._remote = remote_store
        self._catalog = catalog
        self._clock = clock or current_time_ms
        self._local_key = settings.local_slot_key
        self._remote_prefix = settings.remote_slot_prefix
        self._identity_key = settings.identity_slot_key
        self._status = SyncStatus()
        self._listeners: List[StatusCallback] = []

    # -------------------------------------------------------------------------
    # Identity
    # -------------------------------------------------------------------------

    def get_current_user(self) -> str:
        """User id from the identity slot, ``guest`` when nobody signed in."""
        user_id = self._local.get_item(self._identity_key)
        return user_id or GUEST_USER_ID

    def remote_key(self, user_id: str) -> str:
        return f"{self._remote_prefix}:{user_id}"

    # -------------------------------------------------------------------------
    # Sync status
    # -------------------------------------------------------------------------

    @property
    def current_status(self) -> SyncStatus:
        return self._status

    def subscribe_sync_status(self, callback: StatusCallback) -> Callable[[], None]:
        """
        Register a status observer.

        The callback fires immediately with the current status, then on
        every transition. Returns an unsubscribe function; calling it more
        than once is a no-op.
        """
        self._listeners.append(callback)
        self._notify(callback, self._status)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _notify(self, callback: StatusCallback, status: SyncStatus) -> None:
        try:
            callback(status)
        except Exception:
            logger.exception("Sync status observer failed")

    def _emit(self, phase: SyncPhase, *, last_synced_at: Optional[str] = None, error: Optional[str] = None) -> None:
        self._status = SyncStatus(
            phase=phase,
            last_synced_at=last_synced_at or self._status.last_synced_at,
            error=error,
        )
        logger.info(f"Sync status -> {phase.value}" + (f": {error}" if error else ""))
        for callback in list(self._listeners):
            self._notify(callback, self._status)

    # -------------------------------------------------------------------------
    # Envelopes
    # -------------------------------------------------------------------------

    def _parse_envelope(self, raw: Optional[str], slot_key: str) -> Optional[StateEnvelope]:
        if not raw:
            return None
        try:
            return StateEnvelope.model_validate(json.loads(raw))
        except (json.JSONDecodeError, ValidationError, TypeError) as e:
            logger.warning(f"Ignoring malformed envelope in slot {slot_key}: {e}")
            return None

    @staticmethod
    def _dump(envelope: StateEnvelope) -> str:
        return envelope.model_dump_json(by_alias=True)

    @staticmethod
    def _as_blob(state: Optional[StateLike]) -> Dict[str, Any]:
        if state is None:
            return {}
        if isinstance(state, TrainingState):
            return state.to_blob()
        return dict(state)

    @staticmethod
    def _as_metadata(metadata: Optional[MetadataLike]) -> SyncMetadata:
        if metadata is None:
            return SyncMetadata()
        if isinstance(metadata, SyncMetadata):
            return metadata
        return SyncMetadata.model_validate(metadata)

    async def _run_remote(self, fn: Callable[..., Any], *args: Any) -> Any:
        return await asyncio.get_running_loop().run_in_executor(None, fn, *args)

    # -------------------------------------------------------------------------
    # Load / save
    # -------------------------------------------------------------------------

    def load_state(self) -> LoadedState:
        """
        Read and migrate the local envelope.

        Never raises: a missing, unreadable or malformed envelope yields the
        default state. The remote mirror is not consulted.
        """
        warnings: List[str] = []
        try:
            user_id = self.get_current_user()
            raw = self._local.get_item(self._local_key)
        except StorageError as e:
            logger.warning(f"Local slot unreadable, using defaults: {e}")
            return LoadedState(
                state=default_state(self._catalog),
                metadata=SyncMetadata(),
                user_id=GUEST_USER_ID,
                warnings=[f"local storage unreadable: {e.message}"],
            )

        envelope = self._parse_envelope(raw, self._local_key)
        if envelope is None or not envelope.state:
            if raw:
                warnings.append("local envelope malformed; using defaults")
            return LoadedState(
                state=default_state(self._catalog),
                metadata=envelope.metadata if envelope else SyncMetadata(),
                user_id=user_id,
                warnings=warnings,
            )

        result = migrate(envelope.state, self._catalog)
        return LoadedState(
            state=result.state,
            metadata=envelope.metadata,
            user_id=user_id,
            warnings=result.warnings,
        )

    async def save_state(
        self,
        state: StateLike,
        previous_state: Optional[StateLike] = None,
        metadata: Optional[MetadataLike] = None,
    ) -> SaveResult:
        """
        Persist ``state`` locally, reconcile with the remote mirror, and
        write the merged result to both slots.

        Args:
            state: The new state produced by the UI layer
            previous_state: The state before this edit, for change detection
            metadata: Metadata returned by the previous load or save

        Returns:
            SaveResult with the merged state. On any failure the status goes
            to ``error`` and the caller's state and metadata come back
            unchanged.
        """
        self._emit(SyncPhase.SYNCING)

        try:
            meta = self._as_metadata(metadata)
            current = state if isinstance(state, TrainingState) else TrainingState.model_validate(state)
            blob = current.to_blob()
            local_updated_at = next_updated_at(
                meta.updated_at.to_dict(),
                blob,
                self._as_blob(previous_state),
                now_ms=self._clock(),
            )
            user_id = self.get_current_user()

            local_envelope = StateEnvelope(
                user_id=user_id,
                state=blob,
                metadata=SyncMetadata(
                    updated_at=UpdateTimestamps.model_validate(local_updated_at),
                    last_synced_at=meta.last_synced_at,
                ),
            )
            self._local.set_item(self._local_key, self._dump(local_envelope))

            remote_key = self.remote_key(user_id)
            raw_remote = await self._run_remote(self._remote.get_item, remote_key)
            remote = self._parse_envelope(raw_remote, remote_key) or StateEnvelope()
            remote_updated_at = remote.metadata.updated_at.to_dict()

            merged_blob = merge_states(
                blob,
                remote.state,
                {"local": local_updated_at, "remote": remote_updated_at},
            )
            merged = migrate(merged_blob, self._catalog).state

            synced_at = datetime.now(timezone.utc).isoformat()
            merged_meta = SyncMetadata(
                updated_at=UpdateTimestamps.model_validate(
                    merge_updated_at(local_updated_at, remote_updated_at)
                ),
                last_synced_at=synced_at,
            )
            merged_envelope = StateEnvelope(user_id=user_id, state=merged.to_blob(), metadata=merged_meta)
            payload = self._dump(merged_envelope)

            await self._run_remote(self._remote.set_item, remote_key, payload)
            self._local.set_item(self._local_key, payload)

            has_conflict = _canonical(merged_envelope.state) != _canonical(blob)
            self._emit(
                SyncPhase.CONFLICT if has_conflict else SyncPhase.IDLE,
                last_synced_at=synced_at,
            )
            return SaveResult(state=merged, metadata=merged_meta)

        except Exception as e:
            logger.exception(f"Failed to save state: {e}")
            self._emit(SyncPhase.ERROR, error=str(e))
            return SaveResult(state=state, metadata=metadata)
