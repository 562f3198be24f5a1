# tests/test_queries.py

from __future__ import annotations

from datetime import date

from task_planner.tasks import queries
from task_planner.tasks.task_models import Task, TaskStatus


def _task(task_id: str, day: str, participants: list[str], **extra) -> Task:
    return Task(
        id=task_id,
        date=day,
        start_time="09:00",
        end_time="10:00",
        code="C",
        action="a",
        channel="c",
        type="t",
        participants=participants,
        **extra,
    )


TASKS = [
    _task("old-done", "2024-03-01", ["kns"], status=TaskStatus.COMPLETED, audit_approved_by="admin"),
    _task("awaiting", "2024-03-07", ["KNS", "mk"], status=TaskStatus.AWAITING_AUDIT, audit_request=True),
    _task("new-done", "2024-03-09", ["yce"], status=TaskStatus.COMPLETED, audit_request=True, audit_approved_by="admin"),
    _task("later", "2024-03-20", ["kns"]),
    _task("soon", "2024-03-08", ["kns"]),
]


def test_pending_audits_excludes_approved() -> None:
    assert [t.id for t in queries.pending_audits(TASKS)] == ["awaiting"]


def test_completed_tasks_newest_first() -> None:
    assert [t.id for t in queries.completed_tasks(TASKS)] == ["new-done", "old-done"]


def test_tasks_for_user_is_case_insensitive() -> None:
    assert [t.id for t in queries.tasks_for_user(TASKS, "kns")] == ["old-done", "awaiting", "later", "soon"]


def test_upcoming_window_and_order() -> None:
    upcoming = queries.upcoming_tasks_for_user(TASKS, "kns", 7, today=date(2024, 3, 5))
    assert [t.id for t in upcoming] == ["awaiting", "soon"]


def test_team_calendar_hides_completed() -> None:
    assert [t.id for t in queries.team_calendar(TASKS)] == ["awaiting", "soon", "later"]
