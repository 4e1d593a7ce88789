"""Realtime and push notification helpers for the infrastructure layer."""

from .broadcast import (
    NOTIFICATION_BROADCAST_EVENT,
    NOTIFICATION_CREATED_EVENT,
    BroadcastPublisher,
    broadcast_publisher,
    recipient_channel,
)
from .channels import (
    BroadcastChannel,
    DatabaseChannel,
    NotificationChannel,
    PushChannel,
    build_channels,
    wrapped_payload,
)
from .dispatcher import (
    NotificationDispatcher,
    dispatch_notification,
    get_notification_dispatcher,
    set_notification_dispatcher,
)
from .manager import BroadcastConnectionManager, broadcast_manager
from .push import FirebasePushSender, PushMessage, PushNotifier, push_notifier
from .scheduling import bind_delivery_loop, drain_pending_deliveries, schedule_delivery

__all__ = [
    "NOTIFICATION_BROADCAST_EVENT",
    "NOTIFICATION_CREATED_EVENT",
    "BroadcastChannel",
    "BroadcastConnectionManager",
    "BroadcastPublisher",
    "DatabaseChannel",
    "FirebasePushSender",
    "NotificationChannel",
    "NotificationDispatcher",
    "PushChannel",
    "PushMessage",
    "PushNotifier",
    "broadcast_manager",
    "bind_delivery_loop",
    "broadcast_publisher",
    "build_channels",
    "dispatch_notification",
    "drain_pending_deliveries",
    "get_notification_dispatcher",
    "push_notifier",
    "recipient_channel",
    "schedule_delivery",
    "set_notification_dispatcher",
    "wrapped_payload",
]
