from __future__ import annotations

import json
import os
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Generator, List

from .persistence import CollectionBackend, Record, _check_records
from .results import PersistenceError


@dataclass(frozen=True)
class _Cols:
    table: str = "collections"
    name: str = "name"
    payload: str = "payload"
    updated_at: str = "updated_at"


_COLS = _Cols()


class SQLiteCollectionBackend(CollectionBackend):
    """
    Embedded SQLite backend. Each collection lives in one row holding its JSON
    payload, so a save is a single-row replacement inside one transaction.
    """

    def __init__(self, name: str, db_path: str) -> None:
        self.name = name
        self._db_path = db_path
        try:
            os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
            self._init_db()
        except (OSError, sqlite3.Error) as e:
            raise PersistenceError(f"cannot open {db_path}: {e}") from e

    @contextmanager
    def _conn(self) -> Generator[sqlite3.Connection, None, None]:
        conn = sqlite3.connect(self._db_path, timeout=30.0)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except BaseException:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_db(self) -> None:
        with self._conn() as conn:
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {_COLS.table} (
                    {_COLS.name} TEXT PRIMARY KEY,
                    {_COLS.payload} TEXT NOT NULL,
                    {_COLS.updated_at} TEXT NOT NULL
                )
                """
            )

    def load(self) -> List[Record]:
        try:
            with self._conn() as conn:
                row = conn.execute(
                    f"SELECT {_COLS.payload} FROM {_COLS.table} WHERE {_COLS.name} = ?", (self.name,)
                ).fetchone()
        except sqlite3.Error as e:
            raise PersistenceError(f"cannot read {self.name} from {self._db_path}: {e}") from e
        if row is None:
            return []
        try:
            payload = json.loads(row[_COLS.payload])
        except ValueError as e:
            raise PersistenceError(f"corrupt payload for {self.name}: {e}") from e
        return _check_records(payload, f"sqlite:{self.name}")

    def save(self, records: List[Record]) -> None:
        try:
            payload = json.dumps(records, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise PersistenceError(f"cannot serialize {self.name}: {e}") from e
        now = datetime.now(timezone.utc).isoformat()
        try:
            with self._conn() as conn:
                conn.execute(
                    f"""
                    INSERT INTO {_COLS.table} ({_COLS.name}, {_COLS.payload}, {_COLS.updated_at})
                    VALUES (?, ?, ?)
                    ON CONFLICT({_COLS.name}) DO UPDATE SET
                        {_COLS.payload} = excluded.{_COLS.payload},
                        {_COLS.updated_at} = excluded.{_COLS.updated_at}
                    """,
                    (self.name, payload, now),
                )
        except (sqlite3.Error, UnicodeError) as e:
            raise PersistenceError(f"cannot write {self.name} to {self._db_path}: {e}") from e
