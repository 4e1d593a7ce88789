"""Connection management helpers for broadcast websockets."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, DefaultDict, Set

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class BroadcastConnectionManager:
    """Manage active websocket connections grouped by channel name."""

    def __init__(self) -> None:
        self._connections: DefaultDict[str, Set[WebSocket]] = defaultdict(set)

    async def connect(self, channel: str, websocket: WebSocket) -> None:
        """Accept the websocket connection and subscribe it to ``channel``."""

        await websocket.accept()
        self._connections[channel].add(websocket)
        logger.debug("Websocket subscribed to %s", channel)

    def disconnect(self, channel: str, websocket: WebSocket) -> None:
        """Remove ``websocket`` from the subscribers of ``channel``."""

        connections = self._connections.get(channel)
        if connections is None:
            return
        connections.discard(websocket)
        if not connections:
            self._connections.pop(channel, None)

    def subscriber_count(self, channel: str) -> int:
        return len(self._connections.get(channel, ()))

    async def publish(self, channel: str, message: dict[str, Any]) -> int:
        """Send ``message`` to every subscriber of ``channel``.

        Returns the number of connections that received the message. A
        connection that fails is dropped; the others still receive it.
        """

        delivered = 0
        for connection in list(self._connections.get(channel, set())):
            try:
                await connection.send_json(message)
            except Exception:
                logger.warning("Dropping broken websocket on %s", channel, exc_info=True)
                self.disconnect(channel, connection)
            else:
                delivered += 1
        return delivered


broadcast_manager = BroadcastConnectionManager()


__all__ = ["BroadcastConnectionManager", "broadcast_manager"]
