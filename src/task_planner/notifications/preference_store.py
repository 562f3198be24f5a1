# src/task_planner/notifications/preference_store.py

from __future__ import annotations

import contextlib
import logging
import sqlite3
import time
from collections.abc import AsyncIterator
from pathlib import Path

from ..core.feed import SnapshotFeed
from ..errors import StoreWriteError, ValidationError
from ..tasks.task_models import NotificationPreference

logger = logging.getLogger(__name__)


class PreferenceStore:
    """
    Per-user notification preferences ({enabled, reminder_minutes}).

    One row per user, created on first put(); a put only touches that user's
    row, so saving one user's preference never clobbers another's.
    """

    def __init__(self, db_path: str | Path = "tasks.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        self._feed: SnapshotFeed[dict[str, NotificationPreference]] = SnapshotFeed(
            "notification_preferences", self.get_all
        )

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS notification_preferences (
                    user_id TEXT PRIMARY KEY,
                    enabled INTEGER NOT NULL DEFAULT 1,
                    reminder_minutes INTEGER NOT NULL DEFAULT 15,
                    updated_at REAL NOT NULL
                )
                """
            )
            conn.commit()
        finally:
            conn.close()

    @staticmethod
    def _row_to_pref(row: sqlite3.Row) -> NotificationPreference:
        return NotificationPreference(
            enabled=bool(row["enabled"]),
            reminder_minutes=max(0, int(row["reminder_minutes"] or 0)),
        )

    def get_all(self) -> dict[str, NotificationPreference]:
        conn = self._get_conn()
        try:
            rows = conn.execute("SELECT * FROM notification_preferences ORDER BY user_id").fetchall()
            return {str(r["user_id"]): self._row_to_pref(r) for r in rows}
        finally:
            conn.close()

    def get(self, user_id: str) -> NotificationPreference | None:
        """Stored preference for user_id, or None if the user never saved one."""
        if not user_id:
            return None
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT * FROM notification_preferences WHERE user_id = ?", (user_id,)
            ).fetchone()
            return self._row_to_pref(row) if row else None
        finally:
            conn.close()

    def subscribe(self) -> AsyncIterator[dict[str, NotificationPreference]]:
        return self._feed.subscribe()

    def put(self, user_id: str, pref: NotificationPreference) -> None:
        if not user_id:
            raise ValidationError("user_id is required")
        if pref.reminder_minutes < 0:
            raise ValidationError("reminder_minutes must be >= 0")

        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO notification_preferences(user_id, enabled, reminder_minutes, updated_at)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(user_id) DO UPDATE SET
                    enabled = excluded.enabled,
                    reminder_minutes = excluded.reminder_minutes,
                    updated_at = excluded.updated_at
                """,
                (user_id, 1 if pref.enabled else 0, int(pref.reminder_minutes), time.time()),
            )
            conn.commit()
        except sqlite3.Error as e:
            raise StoreWriteError(f"failed to save notification preference for {user_id}: {e}") from e
        finally:
            conn.close()

        logger.info(
            "Notification preference saved user=%s enabled=%s reminder_minutes=%s",
            user_id,
            pref.enabled,
            pref.reminder_minutes,
        )
        self._feed.publish()
