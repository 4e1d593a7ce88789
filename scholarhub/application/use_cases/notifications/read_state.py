"""Read, acknowledge and clear the notifications of a user."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from sqlalchemy.orm import Session

from scholarhub.domain.entities import Notification
from scholarhub.infrastructure.repositories import NotificationRepository


class NotificationNotFoundError(LookupError):
    """Raised when a notification does not exist for the requesting user."""

    def __init__(self, notification_id: str) -> None:
        super().__init__(f"Notification {notification_id} not found")
        self.notification_id = notification_id


def list_notifications(
    session: Session, *, user_id: int, limit: int | None = None
) -> Sequence[Notification]:
    """Return the notifications of ``user_id``, newest first."""

    return NotificationRepository(session).list_for_user(user_id, limit=limit)


def mark_notification_as_read(
    session: Session, *, user_id: int, notification_id: str
) -> Notification:
    """Mark one notification read; an already read one keeps its ``read_at``."""

    notification = NotificationRepository(session).mark_as_read(
        notification_id, user_id=user_id
    )
    if notification is None:
        raise NotificationNotFoundError(notification_id)
    return notification


def mark_notifications_as_read(
    session: Session, *, user_id: int, notification_ids: Iterable[str]
) -> int:
    """Mark a batch of the user's notifications read, ignoring unknown ids."""

    return NotificationRepository(session).mark_many_as_read(notification_ids, user_id=user_id)


def mark_all_notifications_as_read(session: Session, *, user_id: int) -> int:
    """Mark every unread notification of ``user_id`` read."""

    return NotificationRepository(session).mark_all_as_read(user_id)


def delete_notification(session: Session, *, user_id: int, notification_id: str) -> None:
    if not NotificationRepository(session).delete_for_user(notification_id, user_id=user_id):
        raise NotificationNotFoundError(notification_id)


def delete_all_notifications(session: Session, *, user_id: int) -> int:
    return NotificationRepository(session).delete_all_for_user(user_id)


__all__ = [
    "NotificationNotFoundError",
    "delete_all_notifications",
    "delete_notification",
    "list_notifications",
    "mark_all_notifications_as_read",
    "mark_notification_as_read",
    "mark_notifications_as_read",
]
