# src/task_planner/core/session.py

from __future__ import annotations

"""
Login / logout for the interactive session.

Logging in starts the user's reminder loop on the running event loop;
logging out (or shutdown) cancels it so no reminder is dispatched for a user
who is no longer signed in.
"""

import asyncio
import logging

from ..notifications.reminder import ReminderScheduler
from ..users import User
from .state import AppState

logger = logging.getLogger(__name__)


def _start_reminders(state: AppState, user: User) -> None:
    scheduler = ReminderScheduler(
        state.task_store,
        state.preferences,
        state.notifier,
        user.username,
        interval_seconds=float(getattr(state.settings, "reminder_interval_seconds", 60.0)),
    )
    state.reminder = scheduler

    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        logger.debug("No running event loop; reminders for %s are not scheduled", user.username)
        return

    state.reminder_task = loop.create_task(scheduler.run(), name=f"reminders:{user.username}")


def stop_reminders(state: AppState) -> None:
    task = state.reminder_task
    state.reminder_task = None
    state.reminder = None
    if task is not None and not task.done():
        task.cancel()


def login(state: AppState, username: str) -> User | None:
    user = state.users.login(username)
    if user is None:
        logger.info("Login rejected for %r", username)
        return None

    logout(state)
    state.current_user = user
    _start_reminders(state, user)
    logger.info("Logged in as %s (role=%s)", user.username, user.role)
    return user


def logout(state: AppState) -> None:
    stop_reminders(state)
    if state.current_user is not None:
        logger.info("Logged out %s", state.current_user.username)
    state.current_user = None
