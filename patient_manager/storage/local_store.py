"""Device-local key-value storage for session data."""

import json
import os
import tempfile
from pathlib import Path
from typing import Protocol

from patient_manager.utils.logging import get_logger

logger = get_logger(__name__)


class KeyValueStore(Protocol):
    """Interface for device-local string storage.

    Mirrors the browser ``localStorage`` surface:
    - In-memory store for tests and throwaway runs
    - JSON file store for the terminal client
    """

    def get_item(self, key: str) -> str | None:
        """Return the stored value, or None if the key is absent."""
        ...

    def set_item(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one."""
        ...

    def remove_item(self, key: str) -> None:
        """Remove a key; no-op if it is absent."""
        ...


class InMemoryKeyValueStore:
    """Key-value store that lives only as long as the process."""

    def __init__(self, initial: dict[str, str] | None = None):
        """Initialize with optional pre-populated entries."""
        self.items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value

    def remove_item(self, key: str) -> None:
        self.items.pop(key, None)


class JsonFileKeyValueStore:
    """Key-value store persisted as a single JSON object on disk.

    A missing or unreadable file reads as empty. Writes go through a
    temporary file in the same directory and are renamed into place.
    """

    def __init__(self, path: Path):
        """Initialize store.

        Args:
            path: Location of the JSON file; parent directories are created on first write
        """
        self.path = Path(path)

    def get_item(self, key: str) -> str | None:
        value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        items = self._read()
        items[key] = value
        self._write(items)

    def remove_item(self, key: str) -> None:
        items = self._read()
        if key in items:
            del items[key]
            self._write(items)

    def _read(self) -> dict[str, str]:
        """Load all entries from disk."""
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable storage file {self.path}: {e}")
            return {}

        if not isinstance(data, dict):
            logger.warning(f"Ignoring storage file {self.path} with unexpected content")
            return {}
        return data

    def _write(self, items: dict[str, str]) -> None:
        """Replace the storage file with the given entries."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".storage-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(items, fh)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
