# src/task_planner/seed.py

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from .core.ports import LookupSettingsRepo, TaskRepo
from .tasks.task_models import TaskDraft

logger = logging.getLogger(__name__)


def demo_tasks(now: datetime | None = None) -> list[TaskDraft]:
    """
    A reminder smoke-test task starting in six minutes plus two fixed examples.

    With the default 15-minute lead the first one is already inside its
    reminder window, so it only fires for a user with a shorter lead.
    """
    now = now or datetime.now()
    start = now + timedelta(minutes=6)
    end = now + timedelta(minutes=36)

    return [
        TaskDraft(
            date=start.strftime("%Y-%m-%d"),
            start_time=start.strftime("%H:%M"),
            end_time=end.strftime("%H:%M") if end.date() == start.date() else "23:59",
            code="TEST",
            action="Bildirim Test Görevi",
            channel="TEST",
            type="Test",
            participants=["yce", "hia"],
        ),
        TaskDraft(
            date="2024-03-07",
            start_time="09:00",
            end_time="11:00",
            code="KK18",
            action="Saha denetimi",
            channel="KK18",
            type="Denetim",
            participants=["kns", "mg", "dt"],
        ),
        TaskDraft(
            date="2024-03-11",
            start_time="13:30",
            end_time="15:30",
            code="DT5",
            action="Veri analizi toplantısı",
            channel="DT5",
            type="Toplantı",
            participants=["kns", "re", "yy"],
        ),
    ]


def seed_demo_data(task_store: TaskRepo, lookup_store: LookupSettingsRepo) -> int:
    """Persist default lookup lists and, on an empty task store, the demo tasks."""
    # get() falls back to the defaults on a fresh database.
    lookup_store.put(lookup_store.get())

    if task_store.list_tasks():
        return 0

    drafts = demo_tasks()
    for draft in drafts:
        task_store.create_task(draft)
    logger.info("Seeded %d demo task(s)", len(drafts))
    return len(drafts)
