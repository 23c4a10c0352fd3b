"""
Analyst Console - Persisted Store
Key/value persistence for presets and the auto-save slot.

Every value is written whole (no partial-field updates). JsonFileStore keeps
one JSON file per key inside a data directory; MemoryStore is the in-process
equivalent used by tests.
"""

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict

logger = logging.getLogger(__name__)

PRESETS_KEY = 'presets'
AUTOSAVE_KEY = 'auto-save'


class KeyValueStore(ABC):
    """Minimal durable key/value interface."""

    @abstractmethod
    def get(self, key: str, default=None) -> Any:
        """Return the stored value, or default when absent or unreadable."""
        raise NotImplementedError

    @abstractmethod
    def put(self, key: str, value: Any) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove key; a missing key is not an error."""
        raise NotImplementedError


class JsonFileStore(KeyValueStore):
    """
    File-based store, one `<key>.json` per key.

    Args:
        data_dir: Directory to keep the files in (created if missing)
    """

    def __init__(self, data_dir: str = "."):
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        return self.data_dir / f"{key}.json"

    def get(self, key: str, default=None) -> Any:
        filepath = self._path(key)
        if not filepath.exists():
            return default
        try:
            with open(filepath, 'r', encoding='utf-8') as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            # corrupted record: fall back to the default, never block the user
            logger.warning("Could not load %s, discarding it: %s", filepath, e)
            return default

    def put(self, key: str, value: Any) -> None:
        filepath = self._path(key)
        fd, tmp_path = tempfile.mkstemp(dir=str(self.data_dir), prefix=f".{key}.", suffix='.tmp')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(value, f, indent=2)
            os.replace(tmp_path, filepath)
        except Exception:
            logger.exception("Error saving %s", filepath)
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def delete(self, key: str) -> None:
        try:
            self._path(key).unlink()
        except FileNotFoundError:
            pass


class MemoryStore(KeyValueStore):
    """In-memory store; values are kept as JSON text like the file store."""

    def __init__(self):
        self._values: Dict[str, str] = {}

    def get(self, key: str, default=None) -> Any:
        if key not in self._values:
            return default
        try:
            return json.loads(self._values[key])
        except ValueError as e:
            logger.warning("Could not decode %r, discarding it: %s", key, e)
            return default

    def put(self, key: str, value: Any) -> None:
        self._values[key] = json.dumps(value)

    def delete(self, key: str) -> None:
        self._values.pop(key, None)

    def put_raw(self, key: str, text: str) -> None:
        """Store text as-is (lets tests plant corrupted records)."""
        self._values[key] = text

    def __contains__(self, key: str) -> bool:
        return key in self._values
