# tests/test_task_store.py

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from task_planner.errors import StaleWriteError, StoreWriteError, ValidationError
from task_planner.tasks.task_models import TaskStatus
from task_planner.tasks.task_store import TaskStore

from .fakes import make_draft


def test_create_get_patch_delete(task_store: TaskStore) -> None:
    task_id = task_store.create_task(make_draft(participants=["KNS", "MK"]))
    assert task_id

    task = task_store.get_task(task_id)
    assert task is not None
    assert task.participants == ["KNS", "MK"]
    assert task.status == TaskStatus.PENDING
    assert task.audit_request is False
    assert task.version == 1

    task_store.patch_task(task_id, {"action": "Rapor", "audit_requested_by": "kns"})
    patched = task_store.get_task(task_id)
    assert patched is not None
    assert patched.action == "Rapor"
    assert patched.audit_requested_by == "kns"
    # untouched keys survive
    assert patched.code == "KK18"
    assert patched.version == 2

    task_store.patch_task(task_id, {"audit_requested_by": None})
    cleared = task_store.get_task(task_id)
    assert cleared is not None and cleared.audit_requested_by is None

    task_store.delete_task(task_id)
    assert task_store.get_task(task_id) is None
    assert task_store.count_tasks() == 0


def test_list_is_ordered_by_date_then_insertion(task_store: TaskStore) -> None:
    late = task_store.create_task(make_draft("2024-03-11"))
    early_a = task_store.create_task(make_draft("2024-03-07"))
    early_b = task_store.create_task(make_draft("2024-03-07"))

    assert [t.id for t in task_store.list_tasks()] == [early_a, early_b, late]


def test_patch_rejects_unknown_fields_and_missing_rows(task_store: TaskStore) -> None:
    task_id = task_store.create_task(make_draft())

    with pytest.raises(ValidationError):
        task_store.patch_task(task_id, {"id": "other"})

    with pytest.raises(StoreWriteError):
        task_store.patch_task("missing", {"action": "x"})


def test_expected_version_rejects_stale_writes(task_store: TaskStore) -> None:
    task_id = task_store.create_task(make_draft())
    task_store.patch_task(task_id, {"action": "first"}, expected_version=1)

    with pytest.raises(StaleWriteError):
        task_store.patch_task(task_id, {"action": "second"}, expected_version=1)

    task = task_store.get_task(task_id)
    assert task is not None
    assert task.action == "first"
    assert task.version == 2


def test_data_survives_reopen(tmp_path: Path) -> None:
    db = tmp_path / "tasks.sqlite3"
    task_id = TaskStore(db).create_task(make_draft(participants=["HİA"]))

    task = TaskStore(db).get_task(task_id)
    assert task is not None
    assert task.participants == ["HİA"]


@pytest.mark.asyncio
async def test_subscribe_yields_snapshot_then_changes(task_store: TaskStore) -> None:
    existing = task_store.create_task(make_draft())
    feed = task_store.subscribe()

    first = await anext(feed)
    assert [t.id for t in first] == [existing]

    added = task_store.create_task(make_draft("2024-03-08"))
    second = await asyncio.wait_for(anext(feed), timeout=1.0)
    assert [t.id for t in second] == [existing, added]

    task_store.patch_task(added, {"status": TaskStatus.IN_PROGRESS})
    third = await asyncio.wait_for(anext(feed), timeout=1.0)
    assert third[1].status == TaskStatus.IN_PROGRESS

    await feed.aclose()
    assert task_store._feed.subscriber_count == 0
