"""Names shared by the broadcast publisher and its subscribers."""

# Carries a persisted record: {"id": ..., "data": {title, message, type, action_url}}.
NOTIFICATION_CREATED_EVENT = "notification.created"
# Carries the bare payload: {title, message, type, action_url}.
NOTIFICATION_BROADCAST_EVENT = "notification.broadcast"

NOTIFICATION_EVENTS = (NOTIFICATION_CREATED_EVENT, NOTIFICATION_BROADCAST_EVENT)

__all__ = [
    "NOTIFICATION_BROADCAST_EVENT",
    "NOTIFICATION_CREATED_EVENT",
    "NOTIFICATION_EVENTS",
]
