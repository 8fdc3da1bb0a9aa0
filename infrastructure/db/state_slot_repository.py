"""
Supabase State Slot Store Implementation.

Part of IRL-10: Remote mirror on Supabase

This module implements the StateSlotStore protocol on a Supabase table.
Each row is one slot:

    state_slots(slot_key text primary key, payload text, updated_at timestamptz)

The sync service namespaces remote slots per user id
(``"<prefix>:<user_id>"``), so one table holds every user's mirror.
"""
from datetime import datetime, timezone
from typing import Optional
import logging

from supabase import Client

from application.exceptions import StorageError

logger = logging.getLogger(__name__)

DEFAULT_TABLE = "state_slots"


class SupabaseSlotStore:
    """
    Supabase implementation of StateSlotStore.

    Unlike the read-mostly repositories, failures here are raised as
    StorageError so the sync service can surface an ``error`` status
    instead of silently treating a failed write as success.
    """

    def __init__(self, client: Client, *, table: str = DEFAULT_TABLE):
        """
        Initialize with Supabase client.

        Args:
            client: Supabase client instance (injected)
            table: Table holding the slots
        """
        self._client = client
        self._table = table

    def get_item(self, key: str) -> Optional[str]:
        """Read a slot payload; None when the row does not exist."""
        try:
            result = self._client.table(self._table) \
                .select("payload") \
                .eq("slot_key", key) \
                .limit(1) \
                .execute()
        except Exception as e:
            logger.exception(f"Error reading slot {key}: {e}")
            raise StorageError(f"Failed to read slot {key}: {e}", slot_key=key) from e

        if not result.data:
            return None
        return result.data[0].get("payload")

    def set_item(self, key: str, value: str) -> None:
        """Upsert a slot payload."""
        try:
            self._client.table(self._table).upsert({
                "slot_key": key,
                "payload": value,
                "updated_at": datetime.now(timezone.utc).isoformat(),
            }, on_conflict="slot_key").execute()
        except Exception as e:
            logger.exception(f"Error writing slot {key}: {e}")
            raise StorageError(f"Failed to write slot {key}: {e}", slot_key=key) from e

    def remove_item(self, key: str) -> None:
        """Delete a slot row if present."""
        try:
            self._client.table(self._table) \
                .delete() \
                .eq("slot_key", key) \
                .execute()
        except Exception as e:
            logger.exception(f"Error removing slot {key}: {e}")
            raise StorageError(f"Failed to remove slot {key}: {e}", slot_key=key) from e
