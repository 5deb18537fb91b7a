"""Key-value namespaces used by the embedded backend."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Protocol


class KeyValueStorage(Protocol):
    """String values under string keys; a single ``set_item`` is atomic."""

    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...


class MemoryStorage:
    """Process-local namespace backed by a dictionary."""

    def __init__(self, items: dict[str, str] | None = None) -> None:
        self._items: dict[str, str] = dict(items or {})

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value


class JsonFileStorage:
    """One ``<key>.json`` file per key inside a directory.

    Writes land in a temporary file in the same directory and are moved into
    place with ``os.replace``, so readers never see a half-written value.
    """

    def __init__(self, directory: str | Path) -> None:
        """Initialize file storage.

        Parameters
        ----------
        directory : str | Path
            Directory holding one JSON file per key; created if missing.
        """
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def path_for(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get_item(self, key: str) -> str | None:
        path = self.path_for(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set_item(self, key: str, value: str) -> None:
        fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(value)
            os.replace(tmp_name, self.path_for(key))
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
