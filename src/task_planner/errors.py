# src/task_planner/errors.py

"""Exception taxonomy shared by the stores, the workflow and the notifiers."""

from __future__ import annotations


class PlannerError(Exception):
    """Base class for domain-specific errors."""

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class ValidationError(PlannerError):
    """A required field is missing or malformed; raised before any store call."""


class StoreWriteError(PlannerError):
    """The persistence layer rejected a create/patch/delete."""


class StaleWriteError(StoreWriteError):
    """A conditional write found a newer version of the row."""

    def __init__(self, task_id: str, expected_version: int) -> None:
        super().__init__(f"task {task_id} changed since version {expected_version}")
        self.task_id = task_id
        self.expected_version = expected_version


class PermissionDenied(PlannerError):
    """Notification dispatch is not authorized (or not available) for this notifier."""


__all__ = [
    "PermissionDenied",
    "PlannerError",
    "StaleWriteError",
    "StoreWriteError",
    "ValidationError",
]
