"""Pydantic schemas used by the API layer."""

from .auth import Token
from .notification import (
    BroadcastTestRequest,
    MarkAllReadResponse,
    NotificationRead,
    PushSubscriptionCreate,
    PushSubscriptionRead,
    TestNotificationRequest,
)

__all__ = [
    "BroadcastTestRequest",
    "MarkAllReadResponse",
    "NotificationRead",
    "PushSubscriptionCreate",
    "PushSubscriptionRead",
    "TestNotificationRequest",
    "Token",
]
