# src/task_planner/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires concrete stores, the audit workflow and a notifier into AppState.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..connectors.console_notifier import ConsoleNotifier
from ..core.ports import Notifier
from ..core.state import AppState
from ..notifications.preference_store import PreferenceStore
from ..seed import seed_demo_data
from ..tasks.audit import AuditWorkflow
from ..tasks.lookup_store import LookupSettingsStore
from ..tasks.task_store import TaskStore
from ..users import UserDirectory

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.tasks_db_path.parent.mkdir(parents=True, exist_ok=True)


def _build_notifier(settings) -> Notifier:
    if getattr(settings, "matrix_enabled", False):
        # Imported lazily: the console-only setup never touches nio.
        from ..connectors.matrix_notifier import MatrixNotifier

        logger.info("Reminders will be posted to Matrix room %s", settings.matrix_notify_room or "(unset)")
        return MatrixNotifier(settings)
    return ConsoleNotifier()


def create_initial_state(*, settings=None, notifier: Notifier | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    task_store = TaskStore(settings.tasks_db_path)
    lookup_store = LookupSettingsStore(settings.tasks_db_path)

    if getattr(settings, "seed_demo_data", False):
        seed_demo_data(task_store, lookup_store)

    return AppState(
        settings=settings,
        task_store=task_store,
        lookup_store=lookup_store,
        preferences=PreferenceStore(settings.tasks_db_path),
        users=UserDirectory(),
        workflow=AuditWorkflow(task_store),
        notifier=notifier if notifier is not None else _build_notifier(settings),
    )
