# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from task_planner.cli.bootstrap import create_initial_state
from task_planner.core.state import AppState
from task_planner.notifications.preference_store import PreferenceStore
from task_planner.tasks.lookup_store import LookupSettingsStore
from task_planner.tasks.task_store import TaskStore

from .fakes import FakeNotifier


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="task-planner-test",
        data_dir=tmp_path,
        tasks_db_path=tmp_path / "tasks.sqlite3",
        console_enabled=False,
        matrix_enabled=False,
        reminder_interval_seconds=3600.0,
        default_reminder_minutes=15,
        seed_demo_data=False,
    )


@pytest.fixture()
def task_store(tmp_path: Path) -> TaskStore:
    return TaskStore(tmp_path / "tasks.sqlite3")


@pytest.fixture()
def lookup_store(tmp_path: Path) -> LookupSettingsStore:
    return LookupSettingsStore(tmp_path / "tasks.sqlite3")


@pytest.fixture()
def preferences(tmp_path: Path) -> PreferenceStore:
    return PreferenceStore(tmp_path / "tasks.sqlite3")


@pytest.fixture()
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture()
def state(settings: SimpleNamespace, notifier: FakeNotifier) -> AppState:
    """
    AppState wired with a fake notifier.

    NOTE: We keep the real SQLite stores here because their correctness is
    part of what we want to test.
    """
    return create_initial_state(settings=settings, notifier=notifier)
