# src/task_dispatcher/tasks/task_store.py

from __future__ import annotations

import contextlib
import json
import logging
import sqlite3
import time
from datetime import datetime
from pathlib import Path
from typing import Any

from .task_models import Task, TaskListItem
from .timeutil import format_timestamp, from_epoch, to_epoch

logger = logging.getLogger(__name__)


class TaskStore:
    """
    SQLite task store.

    Records are immutable once written: there is no update API.
    Re-scheduling is delete + add, which assigns a fresh id.

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(self, db_path: str | Path = "tasks.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        try:
            total = self.count_tasks()
        except Exception:
            total = -1
        logger.info("TaskStore ready db=%s total=%s", self._db_path, total)

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS tasks (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    task_type TEXT NOT NULL,
                    due_at REAL,
                    created_at REAL NOT NULL,
                    data TEXT NOT NULL
                )
                """
            )
            conn.execute("CREATE INDEX IF NOT EXISTS idx_tasks_due ON tasks(due_at)")
            conn.commit()
        finally:
            conn.close()

    @staticmethod
    def _data_to_str(data: Any) -> str:
        try:
            return json.dumps(data, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise ValueError(f"task data is not JSON-serializable: {e}") from e

    @staticmethod
    def _row_to_item(row: sqlite3.Row) -> TaskListItem:
        due_at = row["due_at"]
        return TaskListItem(
            id=int(row["id"]),
            task_type=str(row["task_type"] or ""),
            due_time=from_epoch(due_at) if due_at is not None else None,
        )

    # ---- public API ----

    def count_tasks(self) -> int:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute("SELECT COUNT(*) FROM tasks")
            (n,) = cur.fetchone()
            return int(n)
        finally:
            conn.close()

    def add_task(
        self,
        *,
        task_type: str,
        data: Any,
        due_time: datetime | None = None,
    ) -> int:
        if not isinstance(task_type, str) or not task_type.strip():
            raise ValueError("task_type is required")
        if data is None:
            raise ValueError("data is required")

        now = time.time()
        due_at = to_epoch(due_time) if due_time is not None else now
        data_str = self._data_to_str(data)

        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(
                "INSERT INTO tasks(task_type, due_at, created_at, data) VALUES (?, ?, ?, ?)",
                (task_type.strip(), due_at, now, data_str),
            )
            conn.commit()
            rowid = cur.lastrowid
            if rowid is None:
                raise RuntimeError("SQLite did not return lastrowid for tasks insert")
            task_id = int(rowid)
            logger.debug(
                "Task added id=%s type=%s due=%s",
                task_id,
                task_type,
                format_timestamp(from_epoch(due_at)),
            )
            return task_id
        finally:
            conn.close()

    def list_tasks(self) -> list[TaskListItem | None]:
        """
        Return every stored task in creation order, without payloads.

        Rows that cannot be decoded are returned as None so that callers can
        report them without aborting the listing.
        """
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute("SELECT id, task_type, due_at FROM tasks ORDER BY id ASC")
            rows = cur.fetchall()
        finally:
            conn.close()

        out: list[TaskListItem | None] = []
        for row in rows:
            try:
                out.append(self._row_to_item(row))
            except (TypeError, ValueError, OverflowError):
                logger.warning("Unreadable task row id=%r", row["id"])
                out.append(None)
        return out

    def get_task(self, task_id: int) -> Task | None:
        """Full record including payload, or None if missing or undecodable."""
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(
                "SELECT id, task_type, due_at, data FROM tasks WHERE id = ?",
                (int(task_id),),
            )
            row = cur.fetchone()
        finally:
            conn.close()

        if row is None:
            return None

        try:
            item = self._row_to_item(row)
            data = json.loads(row["data"])
        except (TypeError, ValueError, OverflowError):
            logger.warning("Task id=%s has an undecodable record", task_id)
            return None

        return Task(id=item.id, task_type=item.task_type, due_time=item.due_time, data=data)

    def delete_task(self, task_id: int) -> bool:
        conn = self._get_conn()
        try:
            cur = conn.execute("DELETE FROM tasks WHERE id = ?", (int(task_id),))
            conn.commit()
            deleted = cur.rowcount == 1
        finally:
            conn.close()
        if deleted:
            logger.debug("Task deleted id=%s", task_id)
        return deleted
