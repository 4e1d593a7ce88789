"""Push delivery through Firebase Cloud Messaging web push."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any

import firebase_admin
from anyio import to_thread
from firebase_admin import credentials, messaging

from scholarhub.config import get_settings
from scholarhub.domain.entities import NotificationMessage
from scholarhub.infrastructure.database import SessionLocal
from scholarhub.infrastructure.repositories import PushSubscriptionRepository

logger = logging.getLogger(__name__)

PUSH_ACTION_TITLE = "View Action"
PUSH_ACTION_ID = "view_action"
_FIREBASE_APP_NAME = "scholarhub-push"


@dataclass(frozen=True)
class PushMessage:
    """Web push payload: title, icon, body, one action and a TTL option."""

    title: str
    body: str
    icon: str
    action: tuple[str, str] = (PUSH_ACTION_TITLE, PUSH_ACTION_ID)
    options: dict[str, Any] = field(default_factory=lambda: {"TTL": 1000})
    data: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_notification(cls, message: NotificationMessage) -> "PushMessage":
        settings = get_settings()
        data = {"type": message.type}
        if message.action_url:
            data["action_url"] = message.action_url
        return cls(
            title=message.title,
            body=message.message,
            icon=settings.push_icon,
            options={"TTL": settings.push_ttl},
            data=data,
        )

    def to_webpush_config(self) -> messaging.WebpushConfig:
        label, action_id = self.action
        return messaging.WebpushConfig(
            headers={"TTL": str(self.options["TTL"])},
            notification=messaging.WebpushNotification(
                title=self.title,
                body=self.body,
                icon=self.icon,
                actions=[messaging.WebpushNotificationAction(action=action_id, title=label)],
            ),
            data=dict(self.data),
        )


class StalePushTokenError(Exception):
    """Raised when the push service no longer recognises a token."""


class FirebasePushSender:
    """Send :class:`PushMessage` instances through ``firebase_admin``."""

    def __init__(self, credentials_source: str | None = None) -> None:
        self._credentials_source = credentials_source
        self._app: firebase_admin.App | None = None

    @property
    def configured(self) -> bool:
        return bool(self._credentials_source or get_settings().firebase_credentials)

    def _get_app(self) -> firebase_admin.App:
        if self._app is not None:
            return self._app
        try:
            self._app = firebase_admin.get_app(_FIREBASE_APP_NAME)
        except ValueError:
            source = self._credentials_source or get_settings().firebase_credentials
            self._app = firebase_admin.initialize_app(
                _load_credentials(source), name=_FIREBASE_APP_NAME
            )
        return self._app

    def send(self, token: str, push_message: PushMessage) -> str:
        """Send ``push_message`` to ``token`` and return the message id."""

        message = messaging.Message(token=token, webpush=push_message.to_webpush_config())
        try:
            return messaging.send(message, app=self._get_app())
        except messaging.UnregisteredError as exc:
            raise StalePushTokenError(token) from exc


def _load_credentials(source: str | None) -> credentials.Certificate:
    if not source:
        raise RuntimeError("FIREBASE_CREDENTIALS is not configured")
    if os.path.exists(source):
        return credentials.Certificate(source)
    try:
        return credentials.Certificate(json.loads(source))
    except json.JSONDecodeError as exc:
        raise RuntimeError(
            "FIREBASE_CREDENTIALS must be a service account file path or JSON document"
        ) from exc


class PushNotifier:
    """Deliver a push message to every token registered by a user."""

    def __init__(self, sender: FirebasePushSender) -> None:
        self._sender = sender

    async def deliver(self, user_id: int, tokens: list[str], push_message: PushMessage) -> int:
        """Send ``push_message`` to ``tokens``; returns how many were accepted."""

        if not self._sender.configured:
            logger.info("Push credentials missing; skipping push for user %s", user_id)
            return 0

        accepted = 0
        for token in tokens:
            try:
                await to_thread.run_sync(self._sender.send, token, push_message)
            except StalePushTokenError:
                logger.warning("Removing unregistered push token for user %s", user_id)
                await to_thread.run_sync(_forget_token, token)
            except Exception:
                logger.exception("Push delivery to user %s failed", user_id)
            else:
                accepted += 1
        return accepted


def _forget_token(token: str) -> None:
    session = SessionLocal()
    try:
        PushSubscriptionRepository(session).delete_token(token)
    finally:
        session.close()


push_notifier = PushNotifier(FirebasePushSender())


__all__ = [
    "PUSH_ACTION_ID",
    "PUSH_ACTION_TITLE",
    "FirebasePushSender",
    "PushMessage",
    "PushNotifier",
    "StalePushTokenError",
    "push_notifier",
]
