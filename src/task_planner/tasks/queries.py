# src/task_planner/tasks/queries.py

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, timedelta

from .task_models import Task, TaskStatus


def pending_audits(tasks: Iterable[Task]) -> list[Task]:
    """Tasks with an outstanding audit request and no approver yet."""
    return [t for t in tasks if t.audit_request and not t.audit_approved_by]


def completed_tasks(tasks: Iterable[Task]) -> list[Task]:
    """Completed tasks, most recent date first."""
    done = [t for t in tasks if t.status == TaskStatus.COMPLETED]
    return sorted(done, key=lambda t: t.date, reverse=True)


def tasks_for_user(tasks: Iterable[Task], user_id: str) -> list[Task]:
    return [t for t in tasks if t.has_participant(user_id)]


def upcoming_tasks_for_user(
    tasks: Iterable[Task],
    user_id: str,
    days: int = 7,
    *,
    today: date | None = None,
) -> list[Task]:
    """Open tasks for user_id dated between today and today + days (inclusive)."""
    start = today or date.today()
    end = start + timedelta(days=max(0, int(days)))
    lo, hi = start.isoformat(), end.isoformat()

    out = [
        t
        for t in tasks
        if lo <= t.date <= hi and t.has_participant(user_id) and t.status != TaskStatus.COMPLETED
    ]
    return sorted(out, key=lambda t: t.date)


def team_calendar(tasks: Iterable[Task]) -> list[Task]:
    return sorted((t for t in tasks if t.status != TaskStatus.COMPLETED), key=lambda t: t.date)
