"""Public helpers for emitting and reconciling notifications."""

from .events import (
    broadcast_notification_event,
    notify_application_status_changed,
    notify_community_service_entry_status_changed,
    notify_community_service_report_status_changed,
    send_notification,
    status_label,
)
from .push_subscriptions import register_push_token, remove_push_token
from .read_state import (
    NotificationNotFoundError,
    delete_all_notifications,
    delete_notification,
    list_notifications,
    mark_all_notifications_as_read,
    mark_notification_as_read,
    mark_notifications_as_read,
)

__all__ = [
    "NotificationNotFoundError",
    "broadcast_notification_event",
    "delete_all_notifications",
    "delete_notification",
    "list_notifications",
    "mark_all_notifications_as_read",
    "mark_notification_as_read",
    "mark_notifications_as_read",
    "notify_application_status_changed",
    "notify_community_service_entry_status_changed",
    "notify_community_service_report_status_changed",
    "register_push_token",
    "remove_push_token",
    "send_notification",
    "status_label",
]
