"""Channel subscriptions for the client-side notification store."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any
from urllib.parse import urlencode

import websockets
from websockets.exceptions import ConnectionClosed, WebSocketException

logger = logging.getLogger(__name__)

EventHandler = Callable[[Any], None]


class ChannelListeners:
    """Named event handlers registered on one channel."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._handlers: dict[str, EventHandler] = {}

    def listen(self, event: str, handler: EventHandler) -> "ChannelListeners":
        """Register ``handler`` for ``event``, replacing any previous one."""

        self._handlers[event] = handler
        return self

    def stop_listening(self, event: str, handler: EventHandler | None = None) -> None:
        """Remove the handler of ``event``.

        With ``handler`` given, only that exact handler is removed; a handler
        registered later by someone else stays in place.
        """

        if handler is not None and self._handlers.get(event) is not handler:
            return
        self._handlers.pop(event, None)

    def listening_to(self) -> list[str]:
        return list(self._handlers)

    def emit(self, event: str, data: Any) -> bool:
        """Call the handler of ``event``; returns ``False`` when none is set."""

        handler = self._handlers.get(event)
        if handler is None:
            return False
        handler(data)
        return True


class WebSocketChannel(ChannelListeners):
    """Receive broadcast envelopes from the API websocket endpoint."""

    def __init__(self, url: str, token: str, *, name: str = "notifications") -> None:
        super().__init__(name)
        self._url = f"{url}?{urlencode({'token': token})}"
        self._connection: Any = None

    async def run(self) -> None:
        """Connect and dispatch envelopes until the connection closes.

        A refused connection or a rejected handshake is logged and ends the
        call without raising.
        """

        try:
            async with websockets.connect(self._url) as connection:
                self._connection = connection
                async for raw in connection:
                    self.dispatch_raw(raw)
        except ConnectionClosed as exc:
            logger.warning("Notification channel %s closed: %s", self.name, exc)
        except (OSError, WebSocketException) as exc:
            logger.warning("Notification channel %s could not connect: %s", self.name, exc)
        finally:
            self._connection = None

    def dispatch_raw(self, raw: str | bytes) -> bool:
        """Decode one envelope and hand its data to the matching handler."""

        try:
            message = json.loads(raw)
        except ValueError:
            logger.warning("Ignoring malformed message on %s", self.name)
            return False
        if not isinstance(message, Mapping):
            return False
        event = message.get("type")
        if not isinstance(event, str) or event == "pong":
            return False
        return self.emit(event, message.get("data"))

    async def ping(self) -> None:
        await self._send({"type": "ping"})

    async def acknowledge(self, notification_ids: Iterable[str]) -> None:
        """Ask the server to mark ``notification_ids`` read over the socket."""

        await self._send({"type": "ack", "ids": list(notification_ids)})

    async def close(self) -> None:
        if self._connection is not None:
            await self._connection.close()

    async def _send(self, message: dict[str, Any]) -> None:
        if self._connection is None:
            raise RuntimeError(f"Channel {self.name} is not connected")
        await self._connection.send(json.dumps(message))


__all__ = ["ChannelListeners", "EventHandler", "WebSocketChannel"]
