"""Domain entities exposed by the application."""

from .notification import (
    DEFAULT_NOTIFICATION_TYPE,
    Notification,
    NotificationMessage,
)
from .push_subscription import PushSubscription
from .user import ROLE_ADMIN, ROLE_STUDENT, User

__all__ = [
    "DEFAULT_NOTIFICATION_TYPE",
    "Notification",
    "NotificationMessage",
    "PushSubscription",
    "ROLE_ADMIN",
    "ROLE_STUDENT",
    "User",
]
