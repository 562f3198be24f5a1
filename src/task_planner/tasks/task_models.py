# src/task_planner/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum


class TaskStatus(StrEnum):
    """
    Task lifecycle status.

    Values are the persisted (Turkish) labels. Once a task leaves PENDING no
    workflow transition brings it back: reopen lands in IN_PROGRESS.
    """

    PENDING = "Beklemede"
    IN_PROGRESS = "Devam Ediyor"
    AWAITING_AUDIT = "Denetim Bekliyor"
    COMPLETED = "Tamamlandı"

    @classmethod
    def from_db(cls, raw: str | None) -> TaskStatus:
        if not raw:
            return cls.PENDING
        try:
            return cls(raw)
        except ValueError:
            return cls.PENDING


DATE_FORMAT = "%Y-%m-%d"
TIME_FORMAT = "%H:%M"


@dataclass(slots=True)
class Task:
    id: str
    date: str
    start_time: str
    end_time: str

    code: str
    action: str
    channel: str
    type: str
    participants: list[str]

    status: TaskStatus = TaskStatus.PENDING

    audit_request: bool = False
    audit_requested_by: str | None = None
    audit_requested_at: str | None = None
    audit_approved_by: str | None = None
    audit_approved_at: str | None = None

    version: int = 1
    created_at: float = 0.0
    updated_at: float = 0.0

    def starts_at(self) -> datetime | None:
        """Local wall-clock start, or None when date/start_time cannot be parsed."""
        if not self.date or not self.start_time:
            return None
        try:
            return datetime.strptime(f"{self.date} {self.start_time}", f"{DATE_FORMAT} {TIME_FORMAT}")
        except ValueError:
            return None

    def has_participant(self, user_id: str) -> bool:
        wanted = (user_id or "").lower()
        return any(p.lower() == wanted for p in self.participants)


@dataclass(slots=True)
class TaskDraft:
    """A task before the store has assigned it an id."""

    date: str
    start_time: str
    end_time: str
    code: str
    action: str
    channel: str
    type: str
    participants: list[str]
    status: TaskStatus = TaskStatus.PENDING
    audit_request: bool = False

    # Set when an existing task is re-checked for conflicts while editing.
    id: str | None = None


@dataclass(slots=True, frozen=True)
class ConflictResult:
    has_conflict: bool
    conflicting_tasks: list[Task] = field(default_factory=list)


@dataclass(slots=True, frozen=True)
class NotificationPreference:
    enabled: bool = True
    reminder_minutes: int = 15


@dataclass(slots=True)
class LookupSettings:
    """Allowed values for a task's code / channel / type."""

    codes: list[str] = field(default_factory=list)
    channels: list[str] = field(default_factory=list)
    types: list[str] = field(default_factory=list)

    def values_for(self, kind: str) -> list[str]:
        if kind not in LOOKUP_KINDS:
            raise KeyError(kind)
        return getattr(self, kind)


LOOKUP_KINDS = ("codes", "channels", "types")
