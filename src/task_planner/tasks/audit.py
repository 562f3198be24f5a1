# src/task_planner/tasks/audit.py

from __future__ import annotations

"""
Audit workflow.

Drives a task's status and audit fields through four transitions:

    request_audit   -> Denetim Bekliyor
    approve_audit   -> Tamamlandı
    cancel_approval -> Devam Ediyor (audit_request flag untouched)
    reopen_task     -> Devam Ediyor (all audit fields cleared)

The workflow keeps no state of its own: it reads the task from the store,
checks the precondition and writes the change through patch_task(). A task
that does not exist or is in the wrong state is a no-op (None is returned).
Store failures propagate to the caller; nothing is retried or rolled back.

Who may approve, cancel or reopen is decided by the caller (see
cli/commands.py), not here.
"""

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any

from ..core.ports import TaskRepo
from .task_models import Task, TaskStatus

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _local_now() -> datetime:
    return datetime.now().astimezone()


class AuditWorkflow:
    def __init__(self, task_store: TaskRepo, *, clock: Clock = _local_now) -> None:
        self._store = task_store
        self._clock = clock

    def _now_iso(self) -> str:
        return self._clock().isoformat()

    def _apply(
        self,
        task: Task,
        fields: dict[str, Any],
        transition: str,
        expected_version: int | None,
    ) -> Task | None:
        self._store.patch_task(task.id, fields, expected_version=expected_version)
        logger.info("Task %s %s -> %s", task.id, transition, fields.get("status", task.status))
        return self._store.get_task(task.id)

    def request_audit(
        self, task_id: str, requesting_user: str, *, expected_version: int | None = None
    ) -> Task | None:
        task = self._store.get_task(task_id)
        if task is None or task.status == TaskStatus.COMPLETED:
            logger.debug("request_audit skipped task_id=%s", task_id)
            return None

        return self._apply(
            task,
            {
                "audit_request": True,
                "audit_requested_by": requesting_user,
                "audit_requested_at": self._now_iso(),
                "status": TaskStatus.AWAITING_AUDIT,
            },
            "request_audit",
            expected_version,
        )

    def approve_audit(
        self, task_id: str, approving_user: str, *, expected_version: int | None = None
    ) -> Task | None:
        # Approving without a prior request is allowed.
        task = self._store.get_task(task_id)
        if task is None:
            logger.debug("approve_audit skipped task_id=%s (missing)", task_id)
            return None

        return self._apply(
            task,
            {
                "audit_approved_by": approving_user,
                "audit_approved_at": self._now_iso(),
                "status": TaskStatus.COMPLETED,
            },
            "approve_audit",
            expected_version,
        )

    def cancel_approval(self, task_id: str, *, expected_version: int | None = None) -> Task | None:
        task = self._store.get_task(task_id)
        if task is None or task.status != TaskStatus.COMPLETED or not task.audit_approved_by:
            logger.debug("cancel_approval skipped task_id=%s", task_id)
            return None

        return self._apply(
            task,
            {
                "audit_approved_by": None,
                "audit_approved_at": None,
                "status": TaskStatus.IN_PROGRESS,
            },
            "cancel_approval",
            expected_version,
        )

    def reopen_task(self, task_id: str, *, expected_version: int | None = None) -> Task | None:
        task = self._store.get_task(task_id)
        if task is None:
            logger.debug("reopen_task skipped task_id=%s (missing)", task_id)
            return None

        return self._apply(
            task,
            {
                "audit_request": False,
                "audit_requested_by": None,
                "audit_requested_at": None,
                "audit_approved_by": None,
                "audit_approved_at": None,
                "status": TaskStatus.IN_PROGRESS,
            },
            "reopen_task",
            expected_version,
        )
