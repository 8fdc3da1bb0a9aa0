"""
State Slot Store Interface (Port).

Part of IRL-5: Define storage and catalog ports

A slot store is a namespaced key-value store holding JSON strings. The
sync service uses two of them: the local cache (one fixed key) and the
remote mirror (one key per user id). "Remote" may be a second local file
or a networked backend; the interface is identical either way.
"""
from typing import Optional, Protocol


class StateSlotStore(Protocol):
    """
    Abstract interface for reading and writing storage slots.

    Implementations raise ``application.exceptions.StorageError`` when the
    underlying medium fails. A missing key is not an error: ``get_item``
    returns None.
    """

    def get_item(self, key: str) -> Optional[str]:
        """
        Read the raw value of a slot.

        Args:
            key: Slot key

        Returns:
            Stored string, or None if the slot is empty
        """
        ...

    def set_item(self, key: str, value: str) -> None:
        """
        Write the raw value of a slot, replacing any previous value.

        Args:
            key: Slot key
            value: String to store (a serialized JSON envelope)
        """
        ...

    def remove_item(self, key: str) -> None:
        """
        Clear a slot. Removing a missing key is a no-op.

        Args:
            key: Slot key
        """
        ...
