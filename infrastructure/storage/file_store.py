"""JSON file slot store: every slot lives in one JSON object on disk."""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, Optional, Union

from application.exceptions import StorageError

logger = logging.getLogger(__name__)


class JsonFileSlotStore:
    """
    StateSlotStore backed by a single JSON file (``{key: value}``).

    Writes go to a temporary file in the same directory and are renamed
    into place, so a crash mid-write leaves the previous content intact.
    A file that is not valid JSON is treated as empty on read and
    overwritten on the next write.
    """

    def __init__(self, path: Union[Path, str]):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def get_item(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        self._write_all(data)

    def remove_item(self, key: str) -> None:
        data = self._read_all()
        if key in data:
            del data[key]
            self._write_all(data)

    def _read_all(self) -> Dict[str, str]:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as e:
            raise StorageError(f"Failed to read {self._path}: {e}") from e

        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning(f"Slot file {self._path} is not valid JSON; treating as empty")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Slot file {self._path} does not hold an object; treating as empty")
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _write_all(self, data: Dict[str, str]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self._path.parent, prefix=f".{self._path.name}.")
        except OSError as e:
            raise StorageError(f"Failed to write {self._path}: {e}") from e

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(data, handle)
            os.replace(tmp_name, self._path)
        except BaseException as e:
            Path(tmp_name).unlink(missing_ok=True)
            if isinstance(e, OSError):
                raise StorageError(f"Failed to write {self._path}: {e}") from e
            raise
