"""
Infrastructure Database Layer.

Part of IRL-10: Local cache and remote mirror adapters

This package provides Supabase-backed implementations of the ports defined
in application.ports.

Usage:
    from supabase import create_client
    from infrastructure.db import SupabaseSlotStore

    # Create Supabase client
    client = create_client(SUPABASE_URL, SUPABASE_KEY)

    # Remote mirror for the sync storage service
    remote_store = SupabaseSlotStore(client, table="state_slots")
"""

from infrastructure.db.state_slot_repository import SupabaseSlotStore

__all__ = [
    "SupabaseSlotStore",
]
