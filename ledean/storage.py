"""A small document store keeping one JSON file per resource."""

from __future__ import annotations

import json
import os
import tempfile
import threading
from pathlib import Path
from typing import Any


class StorageError(Exception):
    """Raised when a record cannot be read or written."""


class JsonStore:
    """Stores JSON values as ``<directory>/<collection>/<resource>.json``."""

    def __init__(self, directory: str | os.PathLike[str]) -> None:
        self.directory = Path(directory)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageError(f"cannot create store at {self.directory}: {exc}") from exc
        self._lock = threading.Lock()

    def _path(self, collection: str, resource: str) -> Path:
        if not collection:
            raise StorageError("missing collection")
        if not resource:
            raise StorageError("missing resource")
        return self.directory / collection / f"{resource}.json"

    def read(self, collection: str, resource: str) -> Any:
        """Return the value stored under ``collection``/``resource``."""
        path = self._path(collection, resource)
        with self._lock:
            try:
                text = path.read_text(encoding="utf-8")
            except OSError as exc:
                raise StorageError(f"cannot read {path}: {exc}") from exc
        try:
            return json.loads(text)
        except ValueError as exc:
            raise StorageError(f"invalid JSON in {path}: {exc}") from exc

    def write(self, collection: str, resource: str, value: Any) -> None:
        """Store ``value`` as JSON, replacing the file atomically."""
        path = self._path(collection, resource)
        try:
            text = json.dumps(value, indent="\t")
        except (TypeError, ValueError) as exc:
            raise StorageError(f"cannot encode {collection}/{resource}: {exc}") from exc
        with self._lock:
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
                fd, tmp_name = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(text)
                os.replace(tmp_name, path)
            except OSError as exc:
                raise StorageError(f"cannot write {path}: {exc}") from exc