# tests/test_audit_workflow.py

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from task_planner.errors import StaleWriteError, StoreWriteError
from task_planner.tasks.audit import AuditWorkflow
from task_planner.tasks.task_models import TaskStatus
from task_planner.tasks.task_store import TaskStore

from .fakes import FakeClock, make_draft

APPROVED_AT = datetime(2024, 3, 7, 12, 0, tzinfo=timezone.utc)


@pytest.fixture()
def workflow(task_store: TaskStore) -> AuditWorkflow:
    return AuditWorkflow(task_store, clock=FakeClock(APPROVED_AT))


def test_request_audit_moves_to_awaiting(task_store: TaskStore, workflow: AuditWorkflow) -> None:
    task_id = task_store.create_task(make_draft())

    task = workflow.request_audit(task_id, "kns")

    assert task is not None
    assert task.status == TaskStatus.AWAITING_AUDIT
    assert task.audit_request is True
    assert task.audit_requested_by == "kns"
    assert task.audit_requested_at == APPROVED_AT.isoformat()


def test_approve_sets_completed_and_timestamp(task_store: TaskStore, workflow: AuditWorkflow) -> None:
    task_id = task_store.create_task(make_draft())
    workflow.request_audit(task_id, "kns")

    task = workflow.approve_audit(task_id, "admin")

    assert task is not None
    assert task.status == TaskStatus.COMPLETED
    assert task.audit_approved_by == "admin"
    assert task.audit_approved_at == APPROVED_AT.isoformat()


def test_approve_without_prior_request_is_allowed(task_store: TaskStore, workflow: AuditWorkflow) -> None:
    task_id = task_store.create_task(make_draft())

    task = workflow.approve_audit(task_id, "admin")

    assert task is not None
    assert task.status == TaskStatus.COMPLETED
    assert task.audit_approved_at
    assert task.audit_request is False


def test_request_on_completed_task_is_a_noop(task_store: TaskStore, workflow: AuditWorkflow) -> None:
    task_id = task_store.create_task(make_draft())
    workflow.approve_audit(task_id, "admin")

    assert workflow.request_audit(task_id, "kns") is None
    task = task_store.get_task(task_id)
    assert task is not None and task.status == TaskStatus.COMPLETED


def test_cancel_approval_keeps_request_flag(task_store: TaskStore, workflow: AuditWorkflow) -> None:
    task_id = task_store.create_task(make_draft())
    workflow.request_audit(task_id, "kns")
    workflow.approve_audit(task_id, "admin")

    task = workflow.cancel_approval(task_id)

    assert task is not None
    assert task.status == TaskStatus.IN_PROGRESS
    assert task.audit_approved_by is None
    assert task.audit_approved_at is None
    assert task.audit_request is True
    assert task.audit_requested_by == "kns"


def test_cancel_approval_requires_completed_task(task_store: TaskStore, workflow: AuditWorkflow) -> None:
    task_id = task_store.create_task(make_draft())
    workflow.request_audit(task_id, "kns")

    assert workflow.cancel_approval(task_id) is None
    task = task_store.get_task(task_id)
    assert task is not None and task.status == TaskStatus.AWAITING_AUDIT


@pytest.mark.parametrize(
    "steps",
    [
        [],
        ["request"],
        ["request", "approve"],
        ["approve", "cancel"],
        ["request", "approve", "cancel", "request"],
    ],
)
def test_reopen_always_clears_audit_state(
    task_store: TaskStore, workflow: AuditWorkflow, steps: list[str]
) -> None:
    task_id = task_store.create_task(make_draft())
    for step in steps:
        if step == "request":
            workflow.request_audit(task_id, "kns")
        elif step == "approve":
            workflow.approve_audit(task_id, "admin")
        else:
            workflow.cancel_approval(task_id)

    task = workflow.reopen_task(task_id)

    assert task is not None
    assert task.status == TaskStatus.IN_PROGRESS
    assert task.audit_request is False
    assert task.audit_requested_by is None
    assert task.audit_approved_by is None
    assert task.audit_approved_at is None


def test_missing_task_is_a_noop(workflow: AuditWorkflow) -> None:
    assert workflow.request_audit("nope", "kns") is None
    assert workflow.approve_audit("nope", "admin") is None
    assert workflow.cancel_approval("nope") is None
    assert workflow.reopen_task("nope") is None


class _RejectingStore:
    """Reads from a real store, refuses every write."""

    def __init__(self, inner: TaskStore) -> None:
        self._inner = inner

    def __getattr__(self, name: str):
        return getattr(self._inner, name)

    def patch_task(self, task_id, fields, *, expected_version=None) -> None:
        raise StoreWriteError("permission denied by backend")


def test_store_failure_propagates_and_nothing_changes(task_store: TaskStore) -> None:
    task_id = task_store.create_task(make_draft())
    workflow = AuditWorkflow(_RejectingStore(task_store), clock=FakeClock(APPROVED_AT))

    with pytest.raises(StoreWriteError):
        workflow.approve_audit(task_id, "admin")

    task = task_store.get_task(task_id)
    assert task is not None
    assert task.status == TaskStatus.PENDING
    assert task.audit_approved_by is None


def test_stale_version_is_rejected(task_store: TaskStore, workflow: AuditWorkflow) -> None:
    task_id = task_store.create_task(make_draft())
    seen = task_store.get_task(task_id)
    assert seen is not None

    workflow.approve_audit(task_id, "admin", expected_version=seen.version)

    with pytest.raises(StaleWriteError):
        workflow.cancel_approval(task_id, expected_version=seen.version)
