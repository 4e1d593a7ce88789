"""Publish named events on broadcast channels."""

from __future__ import annotations

import copy
import logging
from typing import Any, Iterable

from scholarhub.config import get_settings
from scholarhub.domain.broadcast import (
    NOTIFICATION_BROADCAST_EVENT,
    NOTIFICATION_CREATED_EVENT,
)

from .manager import BroadcastConnectionManager, broadcast_manager
from .scheduling import schedule_delivery

logger = logging.getLogger(__name__)


def recipient_channel(user_id: int) -> str:
    """Return the private broadcast channel of ``user_id``."""

    return f"{get_settings().broadcast_channel_prefix}.{user_id}"


class BroadcastPublisher:
    """Wrap payloads in event envelopes and schedule their delivery."""

    def __init__(self, manager: BroadcastConnectionManager) -> None:
        self._manager = manager

    def publish(self, channel: str, event: str, payload: Any) -> None:
        """Schedule ``event`` with ``payload`` on ``channel``."""

        message = {"type": event, "channel": channel, "data": copy.deepcopy(payload)}
        schedule_delivery(self._send, channel, message)

    def publish_to_users(
        self, user_ids: Iterable[int | None], event: str, payload: Any
    ) -> None:
        """Publish the same event on the private channel of each user."""

        seen: set[int] = set()
        for user_id in user_ids:
            if not user_id or user_id in seen:
                continue
            seen.add(user_id)
            self.publish(recipient_channel(user_id), event, payload)

    async def _send(self, channel: str, message: dict[str, Any]) -> None:
        delivered = await self._manager.publish(channel, message)
        logger.debug(
            "Broadcast %s on %s reached %d connection(s)",
            message["type"],
            channel,
            delivered,
        )


broadcast_publisher = BroadcastPublisher(broadcast_manager)


__all__ = [
    "NOTIFICATION_BROADCAST_EVENT",
    "NOTIFICATION_CREATED_EVENT",
    "BroadcastPublisher",
    "broadcast_publisher",
    "recipient_channel",
]
