# src/task_planner/tasks/task_api.py

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime

from ..core.ports import TaskRepo
from ..errors import ValidationError
from ..users import UserDirectory
from .conflicts import detect_conflicts
from .task_models import DATE_FORMAT, TIME_FORMAT, ConflictResult, LookupSettings, TaskDraft

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("date", "code", "action", "channel", "type")


@dataclass(slots=True, frozen=True)
class CreateResult:
    """task_id is None when the draft was held back because of conflicts."""

    task_id: str | None
    conflicts: ConflictResult


def validate_draft(draft: TaskDraft, lookup: LookupSettings | None = None) -> None:
    """Raise ValidationError for anything the store should never see."""
    missing = [name for name in REQUIRED_FIELDS if not str(getattr(draft, name) or "").strip()]
    if not draft.participants:
        missing.append("participants")
    if missing:
        raise ValidationError(f"missing required field(s): {', '.join(missing)}")

    try:
        datetime.strptime(draft.date, DATE_FORMAT)
    except ValueError as e:
        raise ValidationError(f"date must be YYYY-MM-DD, got {draft.date!r}") from e

    for name in ("start_time", "end_time"):
        value = getattr(draft, name)
        if not value:
            continue
        try:
            datetime.strptime(value, TIME_FORMAT)
        except ValueError as e:
            raise ValidationError(f"{name} must be HH:MM, got {value!r}") from e

    if draft.start_time and draft.end_time and draft.end_time <= draft.start_time:
        raise ValidationError("end_time must be after start_time (same day)")

    if lookup is not None:
        for kind, value in (("codes", draft.code), ("channels", draft.channel), ("types", draft.type)):
            allowed = lookup.values_for(kind)
            if value not in allowed:
                raise ValidationError(f"{value!r} is not one of the configured {kind}")


def canonical_participants(names: list[str], users: UserDirectory) -> list[str]:
    """
    Map every name to its directory username, dropping repeats.

    Conflict detection compares exact strings; one person maps to one id.
    """
    resolved: list[str] = []
    unknown: list[str] = []
    for name in names:
        user = users.resolve(name)
        if user is None:
            unknown.append(name)
        elif user.username not in resolved:
            resolved.append(user.username)
    if unknown:
        raise ValidationError(f"unknown participant(s): {', '.join(unknown)}")
    return resolved


def create_task(
    task_store: TaskRepo,
    draft: TaskDraft,
    *,
    lookup: LookupSettings | None = None,
    users: UserDirectory | None = None,
    allow_conflicts: bool = False,
) -> CreateResult:
    """
    Validate a draft, check it against the current task set, then insert it.

    When the draft double-books someone and allow_conflicts is False the
    store is not touched and the conflicts are returned for the caller to show.
    """
    validate_draft(draft, lookup)
    if users is not None:
        draft = replace(draft, participants=canonical_participants(draft.participants, users))

    conflicts = detect_conflicts(draft, task_store.list_tasks())
    if conflicts.has_conflict and not allow_conflicts:
        logger.info(
            "Task not created: %d conflict(s) on %s for %s",
            len(conflicts.conflicting_tasks),
            draft.date,
            draft.participants,
        )
        return CreateResult(task_id=None, conflicts=conflicts)

    task_id = task_store.create_task(draft)
    logger.info("Task created id=%s date=%s code=%s", task_id, draft.date, draft.code)
    return CreateResult(task_id=task_id, conflicts=conflicts)
