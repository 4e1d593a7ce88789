"""Client-side notification store.

The store mirrors the server's notification list for one recipient. It is
driven from a single event loop: fetch responses, broadcast events and user
actions all mutate the list from callbacks on that loop, so no locking is
involved. The server stays authoritative; the mirror may lag until the next
:meth:`NotificationStore.load`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from functools import partial
from typing import Any

import httpx

from scholarhub.domain.broadcast import NOTIFICATION_EVENTS

from .api import NotificationApi
from .events import (
    ClientNotification,
    UnknownEventError,
    normalize_event,
    notification_from_record,
    parse_event,
)
from .subscription import ChannelListeners

logger = logging.getLogger(__name__)

ALERT_DURATION_SECONDS = 5.0
_REQUEST_ERRORS = (httpx.HTTPError, ValueError)


@dataclass(frozen=True)
class AlertAction:
    label: str
    url: str


@dataclass(frozen=True)
class Alert:
    """Transient toast raised when a notification arrives."""

    title: str
    description: str
    action: AlertAction | None = None
    duration: float = ALERT_DURATION_SECONDS


class NotificationStore:
    """Hold notifications newest first and reconcile their read state."""

    def __init__(
        self,
        api: NotificationApi,
        *,
        on_alert: Callable[[Alert], None] | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._api = api
        self._on_alert = on_alert
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._notifications: list[ClientNotification] = []
        self._channel: ChannelListeners | None = None
        self._installed: dict[str, Callable[[Any], Any]] = {}

    @property
    def notifications(self) -> list[ClientNotification]:
        return list(self._notifications)

    @property
    def unread_count(self) -> int:
        return sum(1 for notification in self._notifications if notification.read_at is None)

    @property
    def subscribed(self) -> bool:
        return self._channel is not None

    async def load(self) -> bool:
        """Replace local state with the server's list.

        Entries received over the channel before this resolves are
        overwritten.
        """

        try:
            records = await self._api.list_notifications()
            notifications = [notification_from_record(record) for record in records]
        except _REQUEST_ERRORS + (KeyError,):
            logger.exception("Failed to load notifications")
            return False
        self._notifications = notifications
        return True

    def subscribe(self, channel: ChannelListeners) -> None:
        """Listen for both notification events on ``channel``.

        Any previous subscription is released first so handlers never
        accumulate across re-subscriptions.
        """

        self.unsubscribe()
        for event in NOTIFICATION_EVENTS:
            handler = partial(self.handle_event, event)
            channel.listen(event, handler)
            self._installed[event] = handler
        self._channel = channel

    def unsubscribe(self) -> None:
        if self._channel is None:
            return
        for event, handler in self._installed.items():
            self._channel.stop_listening(event, handler)
        self._installed = {}
        self._channel = None

    def handle_event(self, event_name: str, data: Any) -> ClientNotification | None:
        """Prepend the notification carried by a broadcast event and alert."""

        try:
            event = parse_event(event_name, data)
        except UnknownEventError:
            logger.warning("Ignoring unexpected event %s", event_name)
            return None

        notification = normalize_event(event, now=self._clock())
        self._notifications.insert(0, notification)
        self._alert(notification)
        return notification

    async def mark_as_read(self, notification_id: str) -> bool:
        try:
            await self._api.mark_as_read(notification_id)
        except _REQUEST_ERRORS:
            logger.exception("Failed to mark notification %s as read", notification_id)
            return False

        now = self._clock()
        self._notifications = [
            notification.mark_read(now) if notification.id == notification_id else notification
            for notification in self._notifications
        ]
        return True

    async def mark_all_as_read(self) -> bool:
        try:
            await self._api.mark_all_as_read()
        except _REQUEST_ERRORS:
            logger.exception("Failed to mark all notifications as read")
            return False

        now = self._clock()
        self._notifications = [notification.mark_read(now) for notification in self._notifications]
        return True

    async def clear_notification(self, notification_id: str) -> bool:
        try:
            await self._api.delete(notification_id)
        except _REQUEST_ERRORS:
            logger.exception("Failed to delete notification %s", notification_id)
            return False

        self._notifications = [
            notification
            for notification in self._notifications
            if notification.id != notification_id
        ]
        return True

    async def clear_all_notifications(self) -> bool:
        try:
            await self._api.delete_all()
        except _REQUEST_ERRORS:
            logger.exception("Failed to clear notifications")
            return False

        self._notifications = []
        return True

    def _alert(self, notification: ClientNotification) -> None:
        if self._on_alert is None:
            return
        action = (
            AlertAction(label="View", url=notification.action_url)
            if notification.action_url
            else None
        )
        self._on_alert(
            Alert(
                title=notification.title,
                description=notification.message,
                action=action,
            )
        )


__all__ = ["ALERT_DURATION_SECONDS", "Alert", "AlertAction", "NotificationStore"]
