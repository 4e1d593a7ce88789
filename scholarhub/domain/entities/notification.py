"""Domain entities describing user notifications."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

DEFAULT_NOTIFICATION_TYPE = "info"


@dataclass(frozen=True)
class NotificationMessage:
    """Content of a notification before it is addressed to a recipient.

    ``type`` is an open tag used by clients for styling only.
    """

    title: str
    message: str
    type: str = DEFAULT_NOTIFICATION_TYPE
    action_url: str | None = None

    def to_payload(self) -> dict[str, Any]:
        """Return the broadcast payload shape for this message."""

        return {
            "title": self.title,
            "message": self.message,
            "type": self.type,
            "action_url": self.action_url,
        }


@dataclass
class Notification:
    """Information message delivered to a specific user."""

    id: str | None
    user_id: int
    title: str
    message: str
    type: str = DEFAULT_NOTIFICATION_TYPE
    action_url: str | None = None
    created_at: datetime | None = None
    read_at: datetime | None = None

    @property
    def is_read(self) -> bool:
        return self.read_at is not None

    def content(self) -> NotificationMessage:
        return NotificationMessage(
            title=self.title,
            message=self.message,
            type=self.type,
            action_url=self.action_url,
        )


__all__ = ["DEFAULT_NOTIFICATION_TYPE", "Notification", "NotificationMessage"]
