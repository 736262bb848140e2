from __future__ import annotations

import os
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Generator, Optional

from .kv import KeyValueMedium, StorageUnavailableError


@dataclass(frozen=True)
class _Cols:
    table: str = "kv_store"
    key: str = "key"
    value: str = "value"
    updated_at: str = "updated_at"


_COLS = _Cols()


class SQLiteKeyValueStore(KeyValueMedium):
    """
    Durable key-value medium backed by a single SQLite table.
    """

    def __init__(self, db_path: str) -> None:
        try:
            os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
        except OSError as exc:
            raise StorageUnavailableError(str(exc)) from exc
        self._db_path = db_path
        self._init_db()

    @property
    def db_path(self) -> str:
        return self._db_path

    @contextmanager
    def _conn(self) -> Generator[sqlite3.Connection, None, None]:
        try:
            conn = sqlite3.connect(self._db_path)
        except sqlite3.Error as exc:
            raise StorageUnavailableError(str(exc)) from exc
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as exc:
            raise StorageUnavailableError(str(exc)) from exc
        finally:
            conn.close()

    def _init_db(self) -> None:
        with self._conn() as conn:
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {_COLS.table} (
                    {_COLS.key} TEXT PRIMARY KEY,
                    {_COLS.value} TEXT NOT NULL,
                    {_COLS.updated_at} TEXT NOT NULL
                )
                """
            )

    def get_item(self, key: str) -> Optional[str]:
        with self._conn() as conn:
            row = conn.execute(
                f"SELECT {_COLS.value} FROM {_COLS.table} WHERE {_COLS.key} = ?", (key,)
            ).fetchone()
            return str(row[_COLS.value]) if row else None

    def set_item(self, key: str, value: str) -> None:
        now = datetime.now().isoformat()
        with self._conn() as conn:
            conn.execute(
                f"""
                INSERT INTO {_COLS.table} ({_COLS.key}, {_COLS.value}, {_COLS.updated_at})
                VALUES (?, ?, ?)
                ON CONFLICT({_COLS.key}) DO UPDATE SET
                    {_COLS.value} = excluded.{_COLS.value},
                    {_COLS.updated_at} = excluded.{_COLS.updated_at}
                """,
                (key, value, now),
            )

    def remove_item(self, key: str) -> None:
        with self._conn() as conn:
            conn.execute(f"DELETE FROM {_COLS.table} WHERE {_COLS.key} = ?", (key,))
