from __future__ import annotations

import logging
import os
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Generator, List, Mapping, Optional

from .errors import StoreError
from .models import TodoEntity
from .repositories import Repository, checked_fields, utcnow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Cols:
    table: str = "todos"
    id: str = "id"
    title: str = "title"
    completed: str = "completed"
    created_at: str = "created_at"


_COLS = _Cols()


def _format_ts(value: datetime) -> str:
    # Fixed-width ISO text so ORDER BY on the column is chronological
    return value.isoformat(timespec="microseconds")


class SQLiteRepository(Repository):
    """
    SQLite repository implementing the Repository interface.

    A connection is opened per operation; each mutation runs in its own
    transaction, so concurrent writers race and the last write wins.
    """

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path
        self.initialize()

    @contextmanager
    def _conn(self, action: str) -> Generator[sqlite3.Connection, None, None]:
        conn: Optional[sqlite3.Connection] = None
        try:
            conn = sqlite3.connect(self._db_path)
            conn.row_factory = sqlite3.Row
            yield conn
            conn.commit()
        except sqlite3.Error as exc:
            if conn is not None:
                conn.rollback()
            raise StoreError(action) from exc
        finally:
            if conn is not None:
                conn.close()

    def initialize(self) -> None:
        try:
            os.makedirs(os.path.dirname(self._db_path) or ".", exist_ok=True)
        except OSError as exc:
            raise StoreError("initialize database") from exc
        with self._conn("initialize database") as conn:
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {_COLS.table} (
                    {_COLS.id} INTEGER PRIMARY KEY AUTOINCREMENT,
                    {_COLS.title} TEXT NOT NULL,
                    {_COLS.completed} INTEGER NOT NULL DEFAULT 0,
                    {_COLS.created_at} TEXT NOT NULL
                )
                """
            )
            conn.execute(
                f"CREATE INDEX IF NOT EXISTS idx_{_COLS.table}_created_at ON {_COLS.table}({_COLS.created_at})"
            )
        logger.info("Database initialized successfully")

    def _row_to_entity(self, row: sqlite3.Row) -> TodoEntity:
        return {
            "id": int(row[_COLS.id]),
            "title": str(row[_COLS.title]),
            "completed": bool(row[_COLS.completed]),
            "created_at": datetime.fromisoformat(row[_COLS.created_at]),
        }

    def _select_one(self, conn: sqlite3.Connection, todo_id: int) -> Optional[sqlite3.Row]:
        return conn.execute(
            f"SELECT * FROM {_COLS.table} WHERE {_COLS.id} = ?", (todo_id,)
        ).fetchone()

    def insert(self, title: str) -> TodoEntity:
        with self._conn("create todo") as conn:
            cur = conn.execute(
                f"INSERT INTO {_COLS.table} ({_COLS.title}, {_COLS.completed}, {_COLS.created_at}) VALUES (?, 0, ?)",
                (title, _format_ts(utcnow())),
            )
            row = self._select_one(conn, int(cur.lastrowid))
            assert row is not None
            return self._row_to_entity(row)

    def select_all(self) -> List[TodoEntity]:
        with self._conn("fetch todos") as conn:
            rows = conn.execute(
                f"SELECT * FROM {_COLS.table} ORDER BY {_COLS.created_at} DESC, {_COLS.id} DESC"
            ).fetchall()
            return [self._row_to_entity(r) for r in rows]

    def update_fields(self, todo_id: int, fields: Mapping[str, Any]) -> Optional[TodoEntity]:
        changes = checked_fields(fields)
        # Column names come from the UPDATABLE_FIELDS whitelist, values are bound
        assignments = ", ".join(f"{name} = ?" for name in changes)
        params = [int(v) if isinstance(v, bool) else v for v in changes.values()]
        with self._conn("update todo") as conn:
            conn.execute("BEGIN IMMEDIATE")
            cur = conn.execute(
                f"UPDATE {_COLS.table} SET {assignments} WHERE {_COLS.id} = ?",
                [*params, todo_id],
            )
            if cur.rowcount == 0:
                return None
            row = self._select_one(conn, todo_id)
            return self._row_to_entity(row) if row else None

    def delete_by_id(self, todo_id: int) -> Optional[TodoEntity]:
        with self._conn("delete todo") as conn:
            conn.execute("BEGIN IMMEDIATE")
            row = self._select_one(conn, todo_id)
            if row is None:
                return None
            conn.execute(f"DELETE FROM {_COLS.table} WHERE {_COLS.id} = ?", (todo_id,))
            return self._row_to_entity(row)
