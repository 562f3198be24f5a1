# src/task_planner/tasks/conflicts.py

from __future__ import annotations

"""
Double-booking check.

A task conflicts with a candidate when both are on the same calendar day and
they share at least one participant. Start/end times are ignored unless the
caller opts into overlapping_hours.
"""

from collections.abc import Iterable

from .task_models import ConflictResult, Task, TaskDraft


def _overlaps(a_start: str, a_end: str, b_start: str, b_end: str) -> bool:
    # "HH:MM" strings compare correctly as text. Missing times count as overlapping.
    if not (a_start and a_end and b_start and b_end):
        return True
    return a_start < b_end and b_start < a_end


def detect_conflicts(
    candidate: Task | TaskDraft,
    existing_tasks: Iterable[Task],
    *,
    overlapping_hours: bool = False,
) -> ConflictResult:
    """
    Return every task in existing_tasks that double-books a participant of candidate.

    Order follows existing_tasks. A task with the candidate's own id is skipped
    so an edited task does not conflict with its stored copy.
    """
    wanted = set(candidate.participants or [])
    if not wanted or not candidate.date:
        return ConflictResult(has_conflict=False, conflicting_tasks=[])

    conflicting: list[Task] = []
    for task in existing_tasks:
        if candidate.id is not None and task.id == candidate.id:
            continue
        if task.date != candidate.date:
            continue
        if wanted.isdisjoint(task.participants):
            continue
        if overlapping_hours and not _overlaps(
            candidate.start_time, candidate.end_time, task.start_time, task.end_time
        ):
            continue
        conflicting.append(task)

    return ConflictResult(has_conflict=bool(conflicting), conflicting_tasks=conflicting)
