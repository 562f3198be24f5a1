# src/task_planner/core/state.py

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any

from ..notifications.reminder import ReminderScheduler
from ..tasks.audit import AuditWorkflow
from ..users import User, UserDirectory
from .ports import LookupSettingsRepo, Notifier, PreferenceRepo, TaskRepo


@dataclass
class AppState:
    """
    Runtime state shared by the CLI commands.

    Stores are explicit handles; nothing in tasks/ or notifications/ reads
    this object, they receive the handles they need.
    """

    settings: Any
    task_store: TaskRepo
    lookup_store: LookupSettingsRepo
    preferences: PreferenceRepo
    users: UserDirectory
    workflow: AuditWorkflow
    notifier: Notifier

    current_user: User | None = None
    reminder: ReminderScheduler | None = None
    reminder_task: asyncio.Task[None] | None = None
