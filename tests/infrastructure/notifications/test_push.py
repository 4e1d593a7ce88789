"""Tests for the push message payload and the push notifier."""

from __future__ import annotations

import logging

import pytest

from scholarhub.domain.entities import NotificationMessage
from scholarhub.infrastructure.notifications import PushMessage, PushNotifier
from scholarhub.infrastructure.notifications import push as push_module
from scholarhub.infrastructure.notifications.push import StalePushTokenError


class FakeSender:
    def __init__(self, *, configured: bool = True, failures=None) -> None:
        self.configured = configured
        self.failures = failures or {}
        self.sent = []

    def send(self, token, push_message):
        error = self.failures.get(token)
        if error is not None:
            raise error
        self.sent.append((token, push_message))
        return f"projects/test/messages/{len(self.sent)}"


MESSAGE = NotificationMessage(
    title="Approved",
    message="Your application was approved",
    type="success",
    action_url="/student/applications/5",
)


def test_push_message_uses_fixed_icon_action_and_ttl():
    push_message = PushMessage.from_notification(MESSAGE)

    assert push_message.title == "Approved"
    assert push_message.body == "Your application was approved"
    assert push_message.icon == "/images/notification-icon.png"
    assert push_message.action == ("View Action", "view_action")
    assert push_message.options == {"TTL": 1000}
    assert push_message.data == {"type": "success", "action_url": "/student/applications/5"}


def test_webpush_config_carries_ttl_header_and_action():
    config = PushMessage.from_notification(MESSAGE).to_webpush_config()

    assert config.headers == {"TTL": "1000"}
    assert config.notification.title == "Approved"
    assert config.notification.icon == "/images/notification-icon.png"
    (action,) = config.notification.actions
    assert action.action == "view_action"
    assert action.title == "View Action"


@pytest.mark.anyio
async def test_notifier_skips_when_push_is_not_configured(caplog):
    sender = FakeSender(configured=False)

    with caplog.at_level(logging.INFO):
        accepted = await PushNotifier(sender).deliver(1, ["token-a"], PushMessage.from_notification(MESSAGE))

    assert accepted == 0
    assert sender.sent == []
    assert "skipping push" in caplog.text


@pytest.mark.anyio
async def test_notifier_isolates_token_failures(monkeypatch):
    forgotten = []
    monkeypatch.setattr(push_module, "_forget_token", forgotten.append)
    sender = FakeSender(
        failures={
            "stale": StalePushTokenError("stale"),
            "flaky": ConnectionError("push endpoint unreachable"),
        }
    )

    accepted = await PushNotifier(sender).deliver(
        1, ["stale", "flaky", "good"], PushMessage.from_notification(MESSAGE)
    )

    assert accepted == 1
    assert [token for token, _ in sender.sent] == ["good"]
    assert forgotten == ["stale"]
