"""Client-side notification state: subscription, normalization and read state."""

from .api import NotificationApi
from .events import (
    ClientNotification,
    DirectNotificationEvent,
    NotificationEvent,
    UnknownEventError,
    WrappedNotificationEvent,
    normalize_event,
    notification_from_record,
    parse_event,
)
from .store import Alert, AlertAction, NotificationStore
from .subscription import ChannelListeners, WebSocketChannel

__all__ = [
    "Alert",
    "AlertAction",
    "ChannelListeners",
    "ClientNotification",
    "DirectNotificationEvent",
    "NotificationApi",
    "NotificationEvent",
    "NotificationStore",
    "UnknownEventError",
    "WebSocketChannel",
    "WrappedNotificationEvent",
    "normalize_event",
    "notification_from_record",
    "parse_event",
]
