# src/task_planner/connectors/matrix_notifier.py

from __future__ import annotations

import logging

from nio import AsyncClient, RoomSendResponse

from ..errors import PermissionDenied
from .matrix_client import create_matrix_client

logger = logging.getLogger(__name__)


class MatrixNotifier:
    """
    Posts reminders as plain-text messages into one Matrix room.

    Permission is granted once a client session exists and a target room is
    configured. Sending is best-effort: a rejected send is logged, not retried.
    """

    def __init__(self, settings, *, client: AsyncClient | None = None) -> None:
        self._settings = settings
        self._client = client
        self._room_id = (getattr(settings, "matrix_notify_room", "") or "").strip()

    async def request_permission(self) -> bool:
        if not self._room_id:
            logger.error("Matrix notifications need PLANNER_MATRIX_NOTIFY_ROOM")
            return False
        if self._client is None:
            self._client = await create_matrix_client(self._settings)
        return self._client is not None

    async def fire(self, title: str, body: str) -> None:
        if self._client is None or not self._room_id:
            raise PermissionDenied("Matrix notifier has no session or room")

        resp = await self._client.room_send(
            room_id=self._room_id,
            message_type="m.room.message",
            content={"msgtype": "m.notice", "body": f"{title}\n{body}"},
            ignore_unverified_devices=True,
        )
        if not isinstance(resp, RoomSendResponse):
            logger.warning("Matrix room_send rejected room=%s: %r", self._room_id, resp)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None
