from __future__ import annotations

import json
import os
import tempfile
from abc import ABC, abstractmethod
from contextlib import contextmanager
from threading import RLock
from typing import Any, Dict, Iterator, List

from loguru import logger

from .results import PersistenceError
from .settings import Settings

Record = Dict[str, Any]


def _check_records(payload: Any, source: str) -> List[Record]:
    if not isinstance(payload, list) or not all(isinstance(r, dict) for r in payload):
        raise PersistenceError(f"{source} does not hold a list of records")
    return payload


# PUBLIC_INTERFACE
class CollectionBackend(ABC):
    """
    Durable home of one collection. The whole collection is loaded and saved
    at once; implementations raise PersistenceError on any failure and must
    leave the previous content intact when a save fails.
    """

    name: str

    @abstractmethod
    def load(self) -> List[Record]:
        """Return every record of the collection."""

    @abstractmethod
    def save(self, records: List[Record]) -> None:
        """Replace the whole collection with ``records``."""


class JsonFileBackend(CollectionBackend):
    """
    One pretty-printed JSON array per collection. Saves write a sibling temp
    file and os.replace() it over the target.
    """

    def __init__(self, name: str, path: str) -> None:
        self.name = name
        self._path = path

    @property
    def path(self) -> str:
        return self._path

    def load(self) -> List[Record]:
        if not os.path.exists(self._path):
            return []
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                payload = json.load(f)
        except (OSError, ValueError) as e:
            raise PersistenceError(f"cannot read {self._path}: {e}") from e
        return _check_records(payload, self._path)

    def save(self, records: List[Record]) -> None:
        directory = os.path.dirname(os.path.abspath(self._path))
        tmp_path = None
        try:
            os.makedirs(directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=f".{self.name}-", suffix=".tmp", dir=directory)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(records, f, indent=2, ensure_ascii=False)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self._path)
        except (OSError, TypeError, ValueError) as e:
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise PersistenceError(f"cannot write {self._path}: {e}") from e


class InMemoryBackend(CollectionBackend):
    """
    Keeps a serialized snapshot in memory, suitable for testing and ephemeral runs.
    Every load returns fresh copies so callers can never mutate stored state.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._snapshot = "[]"

    def load(self) -> List[Record]:
        return _check_records(json.loads(self._snapshot), f"memory:{self.name}")

    def save(self, records: List[Record]) -> None:
        try:
            self._snapshot = json.dumps(records)
        except (TypeError, ValueError) as e:
            raise PersistenceError(f"cannot serialize {self.name}: {e}") from e


# PUBLIC_INTERFACE
class Collection:
    """
    Thread-safe access to one collection.

    Stores hold ``locked()`` across the whole read-mutate-write cycle so two
    requests never interleave their cycles and lose an update.
    """

    def __init__(self, backend: CollectionBackend) -> None:
        self._backend = backend
        self._lock = RLock()

    @property
    def name(self) -> str:
        return self._backend.name

    @property
    def backend(self) -> CollectionBackend:
        return self._backend

    @contextmanager
    def locked(self) -> Iterator[None]:
        with self._lock:
            yield

    def read(self) -> List[Record]:
        """Return all records; an unreadable collection reads as empty."""
        with self._lock:
            try:
                return self._backend.load()
            except PersistenceError as e:
                logger.warning("Reading collection {} failed, treating it as empty: {}", self.name, e)
                return []

    def write(self, records: List[Record]) -> None:
        """Replace all records. Raises PersistenceError when the save did not happen."""
        with self._lock:
            try:
                self._backend.save(records)
            except PersistenceError as e:
                logger.error("Writing collection {} failed: {}", self.name, e)
                raise
            logger.debug("Wrote collection {} ({} records)", self.name, len(records))


# PUBLIC_INTERFACE
def build_backend(settings: Settings, name: str) -> CollectionBackend:
    """
    Factory to return the configured backend for collection ``name`` ('users' or 'tasks').
    - file: JsonFileBackend on USERS_FILE / TASKS_FILE
    - sqlite: SQLiteCollectionBackend on SQLITE_DB_PATH
    - memory: InMemoryBackend
    """
    if settings.persistence_backend == "sqlite":
        from .db import SQLiteCollectionBackend

        return SQLiteCollectionBackend(name, settings.sqlite_db_path)
    if settings.persistence_backend == "memory":
        return InMemoryBackend(name)
    path = settings.users_file if name == "users" else settings.tasks_file
    return JsonFileBackend(name, path)
