# tests/test_feed.py

from __future__ import annotations

import asyncio

import pytest

from task_planner.core.feed import SnapshotFeed


@pytest.mark.asyncio
async def test_idle_subscriber_holds_only_newest_snapshot() -> None:
    counter = {"n": 0}
    feed: SnapshotFeed[int] = SnapshotFeed("counter", lambda: counter["n"])

    stream = feed.subscribe()
    assert await anext(stream) == 0

    for _ in range(50):
        counter["n"] += 1
        feed.publish()
    await asyncio.sleep(0)

    assert await asyncio.wait_for(anext(stream), timeout=1.0) == 50

    counter["n"] += 1
    feed.publish()
    assert await asyncio.wait_for(anext(stream), timeout=1.0) == 51

    await stream.aclose()
    assert feed.subscriber_count == 0


def test_publish_without_subscribers_skips_loading() -> None:
    loads = []
    feed: SnapshotFeed[list[int]] = SnapshotFeed("empty", lambda: loads.append(1) or [])

    feed.publish()

    assert loads == []
