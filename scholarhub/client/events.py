"""Parse broadcast events into one client-side notification shape.

Two producers publish notifications: the dispatcher sends the persisted
record wrapped as ``{"id", "data": {...}}`` and the application-level event
path sends the bare payload. Both are parsed here, at the transport boundary,
into a tagged union and normalized in a single place.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any, Literal, Union
from uuid import uuid4

from scholarhub.domain.broadcast import (
    NOTIFICATION_BROADCAST_EVENT,
    NOTIFICATION_CREATED_EVENT,
)

DEFAULT_TITLE = "Notification"
DEFAULT_TYPE = "info"


class UnknownEventError(ValueError):
    """Raised for event names no notification producer emits."""


@dataclass(frozen=True)
class ClientNotification:
    """In-memory mirror of a notification."""

    id: str
    type: str
    title: str
    message: str
    created_at: datetime
    action_url: str | None = None
    read_at: datetime | None = None

    @property
    def is_read(self) -> bool:
        return self.read_at is not None

    def mark_read(self, at: datetime) -> "ClientNotification":
        """Return a read copy; an already read entry is returned unchanged."""

        if self.read_at is not None:
            return self
        return replace(self, read_at=at)


@dataclass(frozen=True)
class DirectNotificationEvent:
    payload: Mapping[str, Any]
    kind: Literal["direct"] = "direct"


@dataclass(frozen=True)
class WrappedNotificationEvent:
    id: str | None
    payload: Mapping[str, Any]
    kind: Literal["wrapped"] = "wrapped"


NotificationEvent = Union[DirectNotificationEvent, WrappedNotificationEvent]


def parse_event(event_name: str, data: Any) -> NotificationEvent:
    """Classify a raw broadcast event by name."""

    if not isinstance(data, Mapping):
        data = {}
    if event_name == NOTIFICATION_BROADCAST_EVENT:
        return DirectNotificationEvent(payload=dict(data))
    if event_name == NOTIFICATION_CREATED_EVENT:
        nested = data.get("data")
        record_id = data.get("id")
        return WrappedNotificationEvent(
            id=str(record_id) if record_id else None,
            payload=dict(nested) if isinstance(nested, Mapping) else {},
        )
    raise UnknownEventError(f"Unsupported notification event '{event_name}'")


def normalize_event(event: NotificationEvent, *, now: datetime | None = None) -> ClientNotification:
    """Turn either event shape into a :class:`ClientNotification`.

    Missing fields fall back to display defaults instead of rejecting the event.
    """

    if isinstance(event, WrappedNotificationEvent):
        notification_id = event.id or uuid4().hex
    elif isinstance(event, DirectNotificationEvent):
        notification_id = uuid4().hex
    else:
        raise TypeError(f"Unexpected notification event {event!r}")

    payload = event.payload
    return ClientNotification(
        id=notification_id,
        type=_text(payload.get("type")) or DEFAULT_TYPE,
        title=_text(payload.get("title")) or DEFAULT_TITLE,
        message=_text(payload.get("message")),
        action_url=_text(payload.get("action_url")) or None,
        created_at=now or datetime.now(timezone.utc),
    )


def notification_from_record(record: Mapping[str, Any]) -> ClientNotification:
    """Build a :class:`ClientNotification` from a ``GET /notifications`` item."""

    if not isinstance(record, Mapping):
        raise ValueError(f"Expected a notification object, got {type(record).__name__}")
    return ClientNotification(
        id=str(record["id"]),
        type=_text(record.get("type")) or DEFAULT_TYPE,
        title=_text(record.get("title")) or DEFAULT_TITLE,
        message=_text(record.get("message")),
        action_url=_text(record.get("action_url")) or None,
        read_at=_parse_datetime(record.get("read_at")),
        created_at=_parse_datetime(record.get("created_at")) or datetime.now(timezone.utc),
    )


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _parse_datetime(value: Any) -> datetime | None:
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


__all__ = [
    "ClientNotification",
    "DirectNotificationEvent",
    "NotificationEvent",
    "UnknownEventError",
    "WrappedNotificationEvent",
    "normalize_event",
    "notification_from_record",
    "parse_event",
]
