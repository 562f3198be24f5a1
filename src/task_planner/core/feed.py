# src/task_planner/core/feed.py

"""
In-process live subscription feed.

Stores publish a full snapshot after every successful write. Each subscriber
holds at most one pending snapshot and a newer one replaces it unread.
Publishing goes through loop.call_soon_threadsafe so a write made from a
worker thread still reaches subscribers on the event loop.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import AsyncIterator, Callable
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _offer_latest(queue: asyncio.Queue[T], snapshot: T) -> None:
    if queue.full():
        queue.get_nowait()
    queue.put_nowait(snapshot)


class SnapshotFeed(Generic[T]):
    def __init__(self, name: str, load_snapshot: Callable[[], T]) -> None:
        self._name = name
        self._load_snapshot = load_snapshot
        self._lock = threading.Lock()
        self._subscribers: list[tuple[asyncio.AbstractEventLoop, asyncio.Queue[T]]] = []

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def publish(self) -> None:
        with self._lock:
            subscribers = list(self._subscribers)
        if not subscribers:
            return

        snapshot = self._load_snapshot()
        for loop, queue in subscribers:
            if loop.is_closed():
                continue
            loop.call_soon_threadsafe(_offer_latest, queue, snapshot)
        logger.debug("%s feed published to %d subscriber(s)", self._name, len(subscribers))

    async def subscribe(self) -> AsyncIterator[T]:
        """
        Yield the current snapshot, then the newest snapshot after each publish.

        The stream never ends on its own; stop iterating (or close the
        generator) to unsubscribe.
        """
        loop = asyncio.get_running_loop()
        queue: asyncio.Queue[T] = asyncio.Queue(maxsize=1)
        entry = (loop, queue)

        # Register before the first read so no write slips between the two.
        with self._lock:
            self._subscribers.append(entry)
        try:
            yield self._load_snapshot()
            while True:
                yield await queue.get()
        finally:
            with self._lock:
                if entry in self._subscribers:
                    self._subscribers.remove(entry)
