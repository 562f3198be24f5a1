# src/task_planner/tasks/task_store.py

from __future__ import annotations

import contextlib
import json
import logging
import sqlite3
import time
import uuid
from collections.abc import AsyncIterator, Mapping
from pathlib import Path
from typing import Any

from ..core.feed import SnapshotFeed
from ..errors import StaleWriteError, StoreWriteError, ValidationError
from .task_models import Task, TaskDraft, TaskStatus

logger = logging.getLogger(__name__)

# Fields a caller may overwrite through patch_task(); id and bookkeeping are store-owned.
PATCHABLE_FIELDS = frozenset(
    {
        "date",
        "start_time",
        "end_time",
        "code",
        "action",
        "channel",
        "type",
        "participants",
        "status",
        "audit_request",
        "audit_requested_by",
        "audit_requested_at",
        "audit_approved_by",
        "audit_approved_at",
    }
)


class TaskStore:
    """
    SQLite task store.

    The schema is migration-safe in the same way everywhere in this project:
    - create table if missing
    - use PRAGMA table_info to detect missing columns
    - add columns with ALTER TABLE only when needed

    Every successful write bumps the row's version and publishes a fresh
    snapshot to live subscribers.

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(self, db_path: str | Path = "tasks.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        self._feed: SnapshotFeed[list[Task]] = SnapshotFeed("tasks", self.list_tasks)
        logger.info("TaskStore ready db=%s total=%s", self._db_path, self.count_tasks())

    def close(self) -> None:
        """Compatibility hook for shutdown (no persistent connections to close)."""
        return

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS tasks (
                    id TEXT PRIMARY KEY,
                    date TEXT NOT NULL,
                    start_time TEXT NOT NULL DEFAULT '',
                    end_time TEXT NOT NULL DEFAULT '',
                    code TEXT NOT NULL DEFAULT '',
                    action TEXT NOT NULL DEFAULT '',
                    channel TEXT NOT NULL DEFAULT '',
                    type TEXT NOT NULL DEFAULT '',
                    participants TEXT NOT NULL DEFAULT '[]',
                    status TEXT NOT NULL DEFAULT 'Beklemede',
                    audit_request INTEGER NOT NULL DEFAULT 0,
                    audit_requested_by TEXT,
                    audit_approved_by TEXT,
                    audit_approved_at TEXT,
                    created_at REAL NOT NULL,
                    updated_at REAL NOT NULL
                )
                """
            )

            cur.execute("PRAGMA table_info(tasks)")
            cols = {row["name"] for row in cur.fetchall()}

            def add_col(name: str, decl: str) -> None:
                if name in cols:
                    return
                cur.execute(f"ALTER TABLE tasks ADD COLUMN {name} {decl}")
                logger.info("TaskStore migration: added column %s", name)

            add_col("audit_requested_at", "TEXT")
            add_col("version", "INTEGER NOT NULL DEFAULT 1")

            cur.execute("CREATE INDEX IF NOT EXISTS idx_tasks_date ON tasks(date)")
            cur.execute("CREATE INDEX IF NOT EXISTS idx_tasks_status ON tasks(status)")
            conn.commit()
        finally:
            conn.close()

    @staticmethod
    def _encode(name: str, value: Any) -> Any:
        if name == "participants":
            return json.dumps([str(p) for p in (value or [])], ensure_ascii=False)
        if name == "status":
            return TaskStatus(value).value
        if name == "audit_request":
            return 1 if value else 0
        return value

    @staticmethod
    def _participants_from_db(raw: str | None) -> list[str]:
        if not raw:
            return []
        try:
            val = json.loads(raw)
        except ValueError:
            return []
        return [str(p) for p in val] if isinstance(val, list) else []

    def _row_to_task(self, row: sqlite3.Row) -> Task:
        return Task(
            id=str(row["id"]),
            date=str(row["date"] or ""),
            start_time=str(row["start_time"] or ""),
            end_time=str(row["end_time"] or ""),
            code=str(row["code"] or ""),
            action=str(row["action"] or ""),
            channel=str(row["channel"] or ""),
            type=str(row["type"] or ""),
            participants=self._participants_from_db(row["participants"]),
            status=TaskStatus.from_db(row["status"]),
            audit_request=bool(row["audit_request"]),
            audit_requested_by=row["audit_requested_by"],
            audit_requested_at=row["audit_requested_at"],
            audit_approved_by=row["audit_approved_by"],
            audit_approved_at=row["audit_approved_at"],
            version=int(row["version"] or 1),
            created_at=float(row["created_at"] or 0.0),
            updated_at=float(row["updated_at"] or 0.0),
        )

    # ---- reads ----

    def count_tasks(self) -> int:
        conn = self._get_conn()
        try:
            (n,) = conn.execute("SELECT COUNT(*) FROM tasks").fetchone()
            return int(n)
        finally:
            conn.close()

    def list_tasks(self) -> list[Task]:
        """Full task collection ordered by date, then insertion order."""
        conn = self._get_conn()
        try:
            rows = conn.execute("SELECT * FROM tasks ORDER BY date ASC, rowid ASC").fetchall()
            return [self._row_to_task(r) for r in rows]
        finally:
            conn.close()

    def get_task(self, task_id: str) -> Task | None:
        if not task_id:
            return None
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT * FROM tasks WHERE id = ?", (str(task_id),)).fetchone()
            return self._row_to_task(row) if row else None
        finally:
            conn.close()

    def subscribe(self) -> AsyncIterator[list[Task]]:
        return self._feed.subscribe()

    # ---- writes ----

    def create_task(self, draft: TaskDraft) -> str:
        task_id = uuid.uuid4().hex
        now = time.time()

        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO tasks(
                    id, date, start_time, end_time,
                    code, action, channel, type, participants,
                    status, audit_request, version, created_at, updated_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, 1, ?, ?)
                """,
                (
                    task_id,
                    draft.date,
                    draft.start_time,
                    draft.end_time,
                    draft.code,
                    draft.action,
                    draft.channel,
                    draft.type,
                    self._encode("participants", draft.participants),
                    self._encode("status", draft.status),
                    self._encode("audit_request", draft.audit_request),
                    now,
                    now,
                ),
            )
            conn.commit()
        except sqlite3.Error as e:
            raise StoreWriteError(f"failed to create task: {e}") from e
        finally:
            conn.close()

        logger.debug("Task added id=%s date=%s participants=%s", task_id, draft.date, draft.participants)
        self._feed.publish()
        return task_id

    def patch_task(
        self,
        task_id: str,
        fields: Mapping[str, Any],
        *,
        expected_version: int | None = None,
    ) -> None:
        """
        Overwrite only the named fields. A value of None clears the column.

        With expected_version the update only applies if the row is still at
        that version; otherwise StaleWriteError is raised.
        """
        unknown = set(fields) - PATCHABLE_FIELDS
        if unknown:
            raise ValidationError(f"cannot patch field(s): {', '.join(sorted(unknown))}")
        if not fields:
            return

        assignments = [f"{name} = ?" for name in fields]
        params: list[Any] = [self._encode(name, value) for name, value in fields.items()]
        assignments.append("version = version + 1")
        assignments.append("updated_at = ?")
        params.append(time.time())

        sql = f"UPDATE tasks SET {', '.join(assignments)} WHERE id = ?"
        params.append(str(task_id))
        if expected_version is not None:
            sql += " AND version = ?"
            params.append(int(expected_version))

        conn = self._get_conn()
        try:
            cur = conn.execute(sql, params)
            conn.commit()
            updated = cur.rowcount
        except sqlite3.Error as e:
            raise StoreWriteError(f"failed to update task {task_id}: {e}") from e
        finally:
            conn.close()

        if updated != 1:
            if expected_version is not None and self.get_task(task_id) is not None:
                raise StaleWriteError(str(task_id), int(expected_version))
            raise StoreWriteError(f"task {task_id} does not exist")

        logger.debug("Task patched id=%s fields=%s", task_id, sorted(fields))
        self._feed.publish()

    def delete_task(self, task_id: str) -> None:
        conn = self._get_conn()
        try:
            cur = conn.execute("DELETE FROM tasks WHERE id = ?", (str(task_id),))
            conn.commit()
            deleted = cur.rowcount
        except sqlite3.Error as e:
            raise StoreWriteError(f"failed to delete task {task_id}: {e}") from e
        finally:
            conn.close()

        if deleted:
            logger.debug("Task deleted id=%s", task_id)
            self._feed.publish()
