# tests/fakes.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from task_planner.errors import PermissionDenied
from task_planner.tasks.task_models import TaskDraft


def make_draft(
    date: str = "2024-03-07",
    participants: list[str] | None = None,
    *,
    start_time: str = "09:00",
    end_time: str = "11:00",
    code: str = "KK18",
    action: str = "Saha denetimi",
) -> TaskDraft:
    return TaskDraft(
        date=date,
        start_time=start_time,
        end_time=end_time,
        code=code,
        action=action,
        channel="KK18",
        type="Denetim",
        participants=list(participants if participants is not None else ["A", "B"]),
    )


@dataclass(slots=True)
class FiredNotification:
    title: str
    body: str


@dataclass(slots=True)
class FakeNotifier:
    """
    Notifier used by reminder and command tests.

    - Captures fired notifications for assertions
    - fail_on: bodies containing this text raise instead of being recorded
    """

    granted: bool = True
    fail_on: str | None = None
    fired: list[FiredNotification] = field(default_factory=list)
    permission_requests: int = 0

    async def request_permission(self) -> bool:
        self.permission_requests += 1
        return self.granted

    async def fire(self, title: str, body: str) -> None:
        if not self.granted:
            raise PermissionDenied("not granted")
        if self.fail_on is not None and self.fail_on in body:
            raise RuntimeError("transport down")
        self.fired.append(FiredNotification(title=title, body=body))


class FakeClock:
    """Callable clock whose time only moves when a test says so."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now
