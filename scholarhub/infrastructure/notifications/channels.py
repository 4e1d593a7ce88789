"""Delivery channels used by the notification dispatcher."""

from __future__ import annotations

import logging
from typing import Protocol

from sqlalchemy.orm import Session

from scholarhub.domain.entities import Notification, NotificationMessage
from scholarhub.infrastructure.repositories import (
    NotificationRepository,
    PushSubscriptionRepository,
)
from scholarhub.utils import now_in_app_timezone

from .broadcast import (
    NOTIFICATION_BROADCAST_EVENT,
    NOTIFICATION_CREATED_EVENT,
    BroadcastPublisher,
    broadcast_publisher,
    recipient_channel,
)
from .push import PushMessage, PushNotifier, push_notifier
from .scheduling import schedule_delivery

logger = logging.getLogger(__name__)


class NotificationChannel(Protocol):
    """A way of getting a notification in front of its recipient."""

    name: str

    def send(
        self,
        session: Session,
        recipient_id: int,
        message: NotificationMessage,
        record: Notification | None,
    ) -> Notification | None:
        """Deliver ``message``; return a record only when one was persisted."""


class DatabaseChannel:
    """Persist one :class:`Notification` row per recipient."""

    name = "database"

    def send(
        self,
        session: Session,
        recipient_id: int,
        message: NotificationMessage,
        record: Notification | None,
    ) -> Notification:
        notification = Notification(
            id=None,
            user_id=recipient_id,
            title=message.title,
            message=message.message,
            type=message.type,
            action_url=message.action_url,
            created_at=now_in_app_timezone(),
            read_at=None,
        )
        try:
            return NotificationRepository(session).create(notification)
        except Exception:
            session.rollback()
            raise


class BroadcastChannel:
    """Publish the notification on the recipient's private channel."""

    name = "broadcast"

    def __init__(self, publisher: BroadcastPublisher) -> None:
        self._publisher = publisher

    def send(
        self,
        session: Session,
        recipient_id: int,
        message: NotificationMessage,
        record: Notification | None,
    ) -> None:
        channel = recipient_channel(recipient_id)
        if record is not None:
            self._publisher.publish(
                channel,
                NOTIFICATION_CREATED_EVENT,
                wrapped_payload(record),
            )
        else:
            self._publisher.publish(channel, NOTIFICATION_BROADCAST_EVENT, message.to_payload())


class PushChannel:
    """Send a web push message to every token registered by the recipient."""

    name = "push"

    def __init__(self, notifier: PushNotifier) -> None:
        self._notifier = notifier

    def send(
        self,
        session: Session,
        recipient_id: int,
        message: NotificationMessage,
        record: Notification | None,
    ) -> None:
        tokens = [
            subscription.token
            for subscription in PushSubscriptionRepository(session).list_for_user(recipient_id)
        ]
        if not tokens:
            logger.debug("User %s has no push tokens", recipient_id)
            return
        schedule_delivery(
            self._notifier.deliver,
            recipient_id,
            tokens,
            PushMessage.from_notification(message),
        )


def wrapped_payload(notification: Notification) -> dict[str, object]:
    """Return the record-wrapped broadcast payload for ``notification``."""

    return {"id": notification.id, "data": notification.content().to_payload()}


def build_channels(names: list[str]) -> list[NotificationChannel]:
    """Instantiate the channels named in the settings, keeping their order."""

    available = {
        DatabaseChannel.name: DatabaseChannel,
        BroadcastChannel.name: lambda: BroadcastChannel(broadcast_publisher),
        PushChannel.name: lambda: PushChannel(push_notifier),
    }
    channels: list[NotificationChannel] = [available[name]() for name in names]
    # The record has to exist before the realtime channels reference its id.
    channels.sort(key=lambda channel: channel.name != DatabaseChannel.name)
    return channels


__all__ = [
    "BroadcastChannel",
    "DatabaseChannel",
    "NotificationChannel",
    "PushChannel",
    "build_channels",
    "wrapped_payload",
]
