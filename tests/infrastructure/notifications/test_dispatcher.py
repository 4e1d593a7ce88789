"""Tests for the notification dispatcher fan-out."""

from __future__ import annotations

import logging

import pytest

from scholarhub.domain.entities import NotificationMessage
from scholarhub.infrastructure.notifications import (
    NOTIFICATION_BROADCAST_EVENT,
    NOTIFICATION_CREATED_EVENT,
    BroadcastChannel,
    DatabaseChannel,
    NotificationDispatcher,
    build_channels,
    recipient_channel,
)
from scholarhub.infrastructure.repositories import NotificationRepository


class RecordingChannel:
    def __init__(self, name: str) -> None:
        self.name = name
        self.calls = []

    def send(self, session, recipient_id, message, record):
        self.calls.append((recipient_id, message, record))
        return None


class FailingChannel:
    name = "push"

    def send(self, session, recipient_id, message, record):
        raise ConnectionError("push endpoint unreachable")


class RecordingPublisher:
    def __init__(self) -> None:
        self.published = []

    def publish(self, channel, event, payload):
        self.published.append((channel, event, payload))


MESSAGE = NotificationMessage(
    title="Approved",
    message="Your application was approved",
    type="success",
    action_url="/student/applications/5",
)


def test_dispatch_persists_one_unread_record_per_recipient(db_session, make_user):
    first = make_user()
    second = make_user()
    dispatcher = NotificationDispatcher([DatabaseChannel()])

    saved = dispatcher.dispatch(db_session, [first.id, second.id, first.id, None], MESSAGE)

    assert [notification.user_id for notification in saved] == [first.id, second.id]
    for user in (first, second):
        (record,) = NotificationRepository(db_session).list_for_user(user.id)
        assert record.title == "Approved"
        assert record.type == "success"
        assert record.action_url == "/student/applications/5"
        assert record.read_at is None
        assert record.created_at is not None


def test_realtime_channels_receive_the_persisted_record(db_session, student):
    realtime = RecordingChannel("broadcast")
    dispatcher = NotificationDispatcher([DatabaseChannel(), realtime])

    (saved,) = dispatcher.dispatch(db_session, [student.id], MESSAGE)

    ((recipient_id, message, record),) = realtime.calls
    assert recipient_id == student.id
    assert message == MESSAGE
    assert record.id == saved.id


def test_failing_channel_does_not_block_other_channels(db_session, student, caplog):
    after = RecordingChannel("broadcast")
    dispatcher = NotificationDispatcher([DatabaseChannel(), FailingChannel(), after])

    with caplog.at_level(logging.ERROR):
        saved = dispatcher.dispatch(db_session, [student.id], MESSAGE)

    assert len(saved) == 1
    assert len(after.calls) == 1
    assert "push channel failed" in caplog.text


def test_broadcast_channel_wraps_persisted_records(db_session, student):
    publisher = RecordingPublisher()
    dispatcher = NotificationDispatcher([DatabaseChannel(), BroadcastChannel(publisher)])

    (saved,) = dispatcher.dispatch(db_session, [student.id], MESSAGE)

    assert publisher.published == [
        (
            recipient_channel(student.id),
            NOTIFICATION_CREATED_EVENT,
            {"id": saved.id, "data": MESSAGE.to_payload()},
        )
    ]


def test_broadcast_channel_falls_back_to_direct_payload_without_record(db_session, student):
    publisher = RecordingPublisher()
    dispatcher = NotificationDispatcher([BroadcastChannel(publisher)])

    assert dispatcher.dispatch(db_session, [student.id], MESSAGE) == []
    assert publisher.published == [
        (recipient_channel(student.id), NOTIFICATION_BROADCAST_EVENT, MESSAGE.to_payload())
    ]


def test_database_failure_still_broadcasts(db_session, student, monkeypatch):
    publisher = RecordingPublisher()

    def _broken_create(self, notification):
        raise RuntimeError("database unavailable")

    monkeypatch.setattr(NotificationRepository, "create", _broken_create)
    dispatcher = NotificationDispatcher([DatabaseChannel(), BroadcastChannel(publisher)])

    assert dispatcher.dispatch(db_session, [student.id], MESSAGE) == []
    assert [event for _, event, _ in publisher.published] == [NOTIFICATION_BROADCAST_EVENT]


def test_build_channels_puts_database_first():
    channels = build_channels(["broadcast", "push", "database"])

    assert [channel.name for channel in channels] == ["database", "broadcast", "push"]


def test_build_channels_rejects_unknown_names():
    with pytest.raises(KeyError):
        build_channels(["carrier-pigeon"])
