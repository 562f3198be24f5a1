# src/task_planner/notifications/reminder.py

from __future__ import annotations

"""
Reminder scheduler.

A small polling loop that, for one logged-in user:
- reads the user's notification preference (disabled => no scan at all),
- finds tasks whose "remind me N minutes before" threshold was crossed since
  the previous tick,
- fires one notification per such task through the injected notifier.

Duplicate suppression comes from the crossing check alone:
a task fires when last_checked_at < notify_at <= now. last_checked_at lives
in memory only and starts at "now", so thresholds crossed while the process
was not running are skipped. That gap is accepted: reminders are best-effort.
"""

import asyncio
import logging
from collections.abc import Callable, Iterable
from datetime import datetime, timedelta

from ..core.ports import Notifier, PreferenceRepo, TaskRepo
from ..errors import PermissionDenied
from ..tasks.task_models import NotificationPreference, Task

logger = logging.getLogger(__name__)

REMINDER_TITLE = "Yaklaşan Görev Hatırlatması"

DEFAULT_PREFERENCE = NotificationPreference(enabled=True, reminder_minutes=15)


def reminder_body(task: Task) -> str:
    return f"{task.code} - {task.action}\nBaşlangıç: {task.start_time}"


def due_reminders(
    tasks: Iterable[Task],
    user_id: str,
    reminder_minutes: int,
    last_checked_at: datetime,
    now: datetime,
) -> list[Task]:
    """
    Tasks of user_id whose notify_at = start - reminder_minutes falls in (last_checked_at, now].

    Tasks without a usable date/start_time are skipped.
    """
    lead = timedelta(minutes=max(0, int(reminder_minutes)))
    out: list[Task] = []

    for task in tasks:
        if not task.has_participant(user_id):
            continue
        start = task.starts_at()
        if start is None:
            logger.debug("Task %s has no usable start (date=%r start=%r); skipped", task.id, task.date, task.start_time)
            continue
        notify_at = start - lead
        if last_checked_at < notify_at <= now:
            out.append(task)

    return out


class ReminderScheduler:
    def __init__(
        self,
        task_store: TaskRepo,
        preferences: PreferenceRepo,
        notifier: Notifier,
        user_id: str,
        *,
        interval_seconds: float = 60.0,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._tasks = task_store
        self._preferences = preferences
        self._notifier = notifier
        self.user_id = user_id
        self.interval_seconds = max(0.01, float(interval_seconds))
        self._clock = clock
        self.last_checked_at: datetime = clock()

    async def _dispatch(self, task: Task) -> bool:
        try:
            await self._notifier.fire(REMINDER_TITLE, reminder_body(task))
        except PermissionDenied as e:
            logger.warning("Reminder for task %s not delivered: %s", task.id, e.detail)
            return False
        except Exception:
            logger.exception("Reminder dispatch failed task_id=%s user=%s", task.id, self.user_id)
            return False
        logger.info("Reminder sent task_id=%s user=%s start=%s %s", task.id, self.user_id, task.date, task.start_time)
        return True

    async def tick(self, now: datetime | None = None) -> list[Task]:
        """
        Evaluate one interval and return the tasks a reminder was fired for.

        Store read errors propagate and leave last_checked_at untouched, so
        the next successful tick still covers the missed interval.
        """
        if now is None:
            now = self._clock()

        pref = self._preferences.get(self.user_id)
        if pref is None or not pref.enabled:
            self.last_checked_at = now
            return []

        due = due_reminders(
            self._tasks.list_tasks(),
            self.user_id,
            pref.reminder_minutes,
            self.last_checked_at,
            now,
        )

        fired: list[Task] = []
        for task in due:
            if await self._dispatch(task):
                fired.append(task)

        self.last_checked_at = now
        return fired

    async def run(self) -> None:
        """
        Tick every interval_seconds until cancelled.

        To stop the scheduler (logout, shutdown), cancel the coroutine/task.
        """
        logger.info("Reminder scheduler started user=%s interval=%ss", self.user_id, self.interval_seconds)
        try:
            while True:
                await asyncio.sleep(self.interval_seconds)
                try:
                    await self.tick()
                except Exception:
                    logger.exception("Reminder tick failed user=%s", self.user_id)
        finally:
            logger.info("Reminder scheduler stopped user=%s", self.user_id)


async def enable_notifications(
    notifier: Notifier,
    preferences: PreferenceRepo,
    user_id: str,
    *,
    default: NotificationPreference = DEFAULT_PREFERENCE,
) -> NotificationPreference:
    """Ask the notifier for permission; on success store the default preference for user_id."""
    granted = await notifier.request_permission()
    if not granted:
        raise PermissionDenied("notifications are not available on this channel")

    preferences.put(user_id, default)
    return default
