"""Fan a notification out to every configured delivery channel."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from sqlalchemy.orm import Session

from scholarhub.config import get_settings
from scholarhub.domain.entities import Notification, NotificationMessage

from .channels import NotificationChannel, build_channels

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """Deliver one message to many recipients through independent channels.

    A failure in one channel is logged and never prevents the remaining
    channels from running. Nothing is retried here.
    """

    def __init__(self, channels: Sequence[NotificationChannel]) -> None:
        self._channels = list(channels)

    def dispatch(
        self,
        session: Session,
        recipients: Iterable[int | None],
        message: NotificationMessage,
    ) -> list[Notification]:
        """Send ``message`` to ``recipients``; returns the persisted records."""

        saved: list[Notification] = []
        for recipient_id in _unique_recipients(recipients):
            record: Notification | None = None
            for channel in self._channels:
                try:
                    result = channel.send(session, recipient_id, message, record)
                except Exception:
                    logger.exception(
                        "Delivery through the %s channel failed for user %s",
                        channel.name,
                        recipient_id,
                    )
                    continue
                if result is not None:
                    record = result
                    saved.append(result)
            logger.debug("Dispatched %r to user %s", message.title, recipient_id)
        return saved


def _unique_recipients(recipients: Iterable[int | None]) -> list[int]:
    unique: list[int] = []
    for recipient in recipients:
        if recipient and recipient not in unique:
            unique.append(recipient)
    return unique


_dispatcher: NotificationDispatcher | None = None


def get_notification_dispatcher() -> NotificationDispatcher:
    """Return the dispatcher built from the configured channel list."""

    global _dispatcher
    if _dispatcher is None:
        _dispatcher = NotificationDispatcher(
            build_channels(get_settings().notification_channels)
        )
    return _dispatcher


def set_notification_dispatcher(dispatcher: NotificationDispatcher | None) -> None:
    """Replace the shared dispatcher; ``None`` rebuilds it from settings."""

    global _dispatcher
    _dispatcher = dispatcher


def dispatch_notification(
    session: Session,
    recipients: Iterable[int | None],
    message: NotificationMessage,
) -> list[Notification]:
    """Public helper that delegates to the shared dispatcher."""

    return get_notification_dispatcher().dispatch(session, recipients, message)


__all__ = [
    "NotificationDispatcher",
    "dispatch_notification",
    "get_notification_dispatcher",
    "set_notification_dispatcher",
]
