# src/task_planner/tasks/lookup_store.py

from __future__ import annotations

import contextlib
import json
import logging
import sqlite3
import time
from collections.abc import AsyncIterator
from pathlib import Path

from ..core.feed import SnapshotFeed
from ..errors import StoreWriteError, ValidationError
from .task_models import LOOKUP_KINDS, LookupSettings

logger = logging.getLogger(__name__)

_KEY = "app"

DEFAULT_LOOKUP_SETTINGS = LookupSettings(
    codes=["KK18", "DT5", "GK21", "28C", "61B", "70C&SS"],
    channels=["KK18", "DT5", "GK21", "OZG34", "OZG35"],
    types=[
        "Toplantı",
        "Saha",
        "Sunum",
        "Görev",
        "Belge",
        "Rapor",
        "Kontrol",
        "Değerlendirme",
        "Planlama",
        "Güncelleme",
        "Denetim",
        "Teknik",
    ],
)


class LookupSettingsStore:
    """
    Key-value store for the allowed codes / channels / types.

    The whole value is written at once (put) and read back as one document;
    add_value/remove_value are read-modify-write helpers on top of it.
    """

    def __init__(self, db_path: str | Path = "tasks.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        self._feed: SnapshotFeed[LookupSettings] = SnapshotFeed("lookup_settings", self.get)

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
                CREATE TABLE IF NOT EXISTS app_settings (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL DEFAULT '{}',
                    updated_at REAL NOT NULL
                )
                """
            )
            conn.commit()
        finally:
            conn.close()

    @staticmethod
    def _decode(raw: str | None) -> LookupSettings | None:
        if not raw:
            return None
        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("app_settings row is not valid JSON; using defaults")
            return None
        if not isinstance(data, dict):
            return None
        return LookupSettings(**{kind: [str(v) for v in data.get(kind) or []] for kind in LOOKUP_KINDS})

    def get(self) -> LookupSettings:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT value FROM app_settings WHERE key = ?", (_KEY,)).fetchone()
        finally:
            conn.close()

        stored = self._decode(row["value"]) if row else None
        if stored is None:
            return LookupSettings(
                codes=list(DEFAULT_LOOKUP_SETTINGS.codes),
                channels=list(DEFAULT_LOOKUP_SETTINGS.channels),
                types=list(DEFAULT_LOOKUP_SETTINGS.types),
            )
        return stored

    def subscribe(self) -> AsyncIterator[LookupSettings]:
        return self._feed.subscribe()

    def put(self, value: LookupSettings) -> None:
        payload = json.dumps({kind: value.values_for(kind) for kind in LOOKUP_KINDS}, ensure_ascii=False)
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO app_settings(key, value, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
                """,
                (_KEY, payload, time.time()),
            )
            conn.commit()
        except sqlite3.Error as e:
            raise StoreWriteError(f"failed to save settings: {e}") from e
        finally:
            conn.close()
        self._feed.publish()

    def add_value(self, kind: str, value: str) -> LookupSettings:
        value = (value or "").strip()
        if kind not in LOOKUP_KINDS:
            raise ValidationError(f"unknown settings list {kind!r}; expected one of {', '.join(LOOKUP_KINDS)}")
        if not value:
            raise ValidationError("value is required")

        current = self.get()
        values = current.values_for(kind)
        if value in values:
            return current
        values.append(value)
        self.put(current)
        logger.info("Settings: added %r to %s", value, kind)
        return current

    def remove_value(self, kind: str, value: str) -> LookupSettings:
        if kind not in LOOKUP_KINDS:
            raise ValidationError(f"unknown settings list {kind!r}; expected one of {', '.join(LOOKUP_KINDS)}")

        current = self.get()
        values = current.values_for(kind)
        if value not in values:
            return current
        setattr(current, kind, [v for v in values if v != value])
        self.put(current)
        logger.info("Settings: removed %r from %s", value, kind)
        return current
