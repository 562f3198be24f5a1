# src/task_planner/connectors/console_notifier.py

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from ..errors import PermissionDenied

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


class ConsoleNotifier:
    """Prints reminders into the interactive console."""

    def __init__(self, emit: Callable[[str], None] | None = None, *, granted: bool = True) -> None:
        self._emit = emit or (lambda text: print(text, flush=True))
        self._granted = granted

    async def request_permission(self) -> bool:
        self._granted = True
        return True

    async def fire(self, title: str, body: str) -> None:
        if not self._granted:
            raise PermissionDenied("console notifications were not enabled")
        lines = body.splitlines() or [""]
        self._emit(f"[{_ts_local()}] [{title}] " + "\n    ".join(lines))
        logger.debug("Console reminder shown: %s", lines[0])
