"""Domain entity representing a push registration token."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class PushSubscription:
    """Browser or device token able to receive push messages for a user."""

    id: int | None
    user_id: int
    token: str
    created_at: datetime | None = None


__all__ = ["PushSubscription"]
