"""In-process slot store, used as a remote mirror in single-device setups."""

from typing import Dict, Optional


class InMemorySlotStore:
    """
    StateSlotStore kept in a dict.

    Data lives as long as the process. Useful when the "remote" is just a
    second local slot, and for wiring the API without any backend.
    """

    def __init__(self, seed: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(seed or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)

    def dump(self) -> Dict[str, str]:
        """Copy of every slot, for inspection."""
        return dict(self._data)
