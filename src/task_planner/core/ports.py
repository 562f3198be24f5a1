# src/task_planner/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The workflow, the conflict check and the reminder scheduler depend on these
Protocols instead of concrete stores or transports. This keeps storage and
notification channels swappable and makes testing easier.
"""

from collections.abc import AsyncIterator, Mapping
from typing import Any, Awaitable, Protocol

from ..tasks.task_models import LookupSettings, NotificationPreference, Task, TaskDraft


class TaskRepo(Protocol):
    # Reads
    def list_tasks(self) -> list[Task]: ...
    def get_task(self, task_id: str) -> Task | None: ...
    def subscribe(self) -> AsyncIterator[list[Task]]: ...

    # Writes (raise StoreWriteError)
    def create_task(self, draft: TaskDraft) -> str: ...
    def patch_task(
            self,
            task_id: str,
            fields: Mapping[str, Any],
            *,
            expected_version: int | None = None,
    ) -> None: ...
    def delete_task(self, task_id: str) -> None: ...


class LookupSettingsRepo(Protocol):
    def get(self) -> LookupSettings: ...
    def subscribe(self) -> AsyncIterator[LookupSettings]: ...
    def put(self, value: LookupSettings) -> None: ...
    def add_value(self, kind: str, value: str) -> LookupSettings: ...
    def remove_value(self, kind: str, value: str) -> LookupSettings: ...


class PreferenceRepo(Protocol):
    def get_all(self) -> dict[str, NotificationPreference]: ...
    def get(self, user_id: str) -> NotificationPreference | None: ...
    def subscribe(self) -> AsyncIterator[dict[str, NotificationPreference]]: ...
    def put(self, user_id: str, pref: NotificationPreference) -> None: ...


class Notifier(Protocol):
    """
    Connector-side port: how the reminder scheduler reaches the user.

    fire() is best-effort: no acknowledgment, no retry. It raises
    PermissionDenied when the channel was never authorized.
    """

    def request_permission(self) -> Awaitable[bool]: ...
    def fire(self, title: str, body: str) -> Awaitable[None]: ...
