"""Pydantic models describing notification payloads."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class NotificationRead(BaseModel):
    """Representation of a notification delivered to the client."""

    id: str
    user_id: int
    title: str
    message: str
    type: str
    action_url: str | None = None
    read_at: datetime | None = None
    created_at: datetime


class MarkAllReadResponse(BaseModel):
    """Number of notifications that switched from unread to read."""

    updated: int


class TestNotificationRequest(BaseModel):
    """Optional overrides for the test notification sent to the caller."""

    title: str = Field(default="Test Notification", min_length=1, max_length=255)
    message: str = Field(default="This is a test notification", min_length=1)
    type: str = Field(default="info", min_length=1, max_length=50)
    action_url: str | None = Field(default=None, max_length=2048)


class BroadcastTestRequest(BaseModel):
    """Message published to every active user by the broadcast check."""

    message: str = Field(default="Hello World", min_length=1)


class PushSubscriptionCreate(BaseModel):
    """Push token registered by a browser or device."""

    token: str = Field(..., min_length=1, max_length=512)


class PushSubscriptionRead(BaseModel):
    id: int
    user_id: int
    token: str
    created_at: datetime | None = None


__all__ = [
    "BroadcastTestRequest",
    "MarkAllReadResponse",
    "NotificationRead",
    "PushSubscriptionCreate",
    "PushSubscriptionRead",
    "TestNotificationRequest",
]
