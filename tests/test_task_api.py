# tests/test_task_api.py

from __future__ import annotations

import pytest

from task_planner.errors import ValidationError
from task_planner.tasks.lookup_store import LookupSettingsStore
from task_planner.tasks.task_api import canonical_participants, create_task
from task_planner.tasks.task_store import TaskStore
from task_planner.users import UserDirectory

from .fakes import make_draft


def test_create_task_inserts_when_free(task_store: TaskStore) -> None:
    result = create_task(task_store, make_draft())

    assert result.task_id is not None
    assert result.conflicts.has_conflict is False
    assert task_store.get_task(result.task_id) is not None


def test_conflicting_draft_is_held_back(task_store: TaskStore) -> None:
    existing = create_task(task_store, make_draft("2024-03-07", ["A", "B"])).task_id

    result = create_task(task_store, make_draft("2024-03-07", ["B", "C"]))

    assert result.task_id is None
    assert [t.id for t in result.conflicts.conflicting_tasks] == [existing]
    assert task_store.count_tasks() == 1


def test_allow_conflicts_inserts_and_reports(task_store: TaskStore) -> None:
    create_task(task_store, make_draft("2024-03-07", ["A"]))

    result = create_task(task_store, make_draft("2024-03-07", ["A"]), allow_conflicts=True)

    assert result.task_id is not None
    assert result.conflicts.has_conflict is True
    assert task_store.count_tasks() == 2


@pytest.mark.parametrize(
    "changes",
    [
        {"participants": []},
        {"action": " "},
        {"date": ""},
        {"date": "07.03.2024"},
        {"start_time": "9"},
        {"start_time": "11:00", "end_time": "10:00"},
    ],
)
def test_invalid_drafts_never_reach_the_store(task_store: TaskStore, changes: dict) -> None:
    draft = make_draft()
    for name, value in changes.items():
        setattr(draft, name, value)

    with pytest.raises(ValidationError):
        create_task(task_store, draft)
    assert task_store.count_tasks() == 0


def test_lookup_lists_are_enforced_when_given(task_store: TaskStore, lookup_store: LookupSettingsStore) -> None:
    with pytest.raises(ValidationError):
        create_task(task_store, make_draft(code="NOPE"), lookup=lookup_store.get())

    assert create_task(task_store, make_draft(), lookup=lookup_store.get()).task_id is not None


def test_participants_resolve_to_usernames() -> None:
    users = UserDirectory()

    assert canonical_participants(["KNS", "HİA", "kns", " yce "], users) == ["kns", "hia", "yce"]
    with pytest.raises(ValidationError, match="unknown participant"):
        canonical_participants(["kns", "MK"], users)


def test_same_person_in_other_case_is_a_conflict(task_store: TaskStore) -> None:
    users = UserDirectory()
    first = create_task(task_store, make_draft(participants=["KNS"]), users=users)
    assert first.task_id is not None
    stored = task_store.get_task(first.task_id)
    assert stored is not None and stored.participants == ["kns"]

    second = create_task(task_store, make_draft(participants=["kns"], start_time="13:00", end_time="14:00"), users=users)

    assert second.task_id is None
    assert [t.id for t in second.conflicts.conflicting_tasks] == [first.task_id]
