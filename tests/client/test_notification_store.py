"""Tests for the client-side notification store."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

import httpx
import pytest

from scholarhub.application.use_cases.notifications import send_notification
from scholarhub.client import ChannelListeners, NotificationApi, NotificationStore
from scholarhub.domain.broadcast import NOTIFICATION_BROADCAST_EVENT, NOTIFICATION_CREATED_EVENT
from scholarhub.infrastructure.notifications import (
    DatabaseChannel,
    NotificationDispatcher,
    set_notification_dispatcher,
)
from scholarhub.infrastructure.security import create_access_token

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def _record(notification_id, *, read_at=None, title="Approved"):
    return {
        "id": notification_id,
        "user_id": 1,
        "title": title,
        "message": "Your application was approved",
        "type": "success",
        "action_url": "/student/applications/5",
        "read_at": read_at,
        "created_at": "2024-05-01T10:00:00+00:00",
    }


class FakeApi:
    """In-memory stand-in for :class:`NotificationApi`."""

    def __init__(self, records=None, *, fail=False):
        self.records = list(records or [])
        self.fail = fail
        self.calls = []

    def _request(self, name, *args):
        self.calls.append((name, *args))
        if self.fail:
            raise httpx.ConnectError("offline")

    async def list_notifications(self):
        self._request("list")
        return list(self.records)

    async def mark_as_read(self, notification_id):
        self._request("mark", notification_id)
        if notification_id not in {record["id"] for record in self.records}:
            request = httpx.Request("POST", f"http://test/notifications/{notification_id}/read")
            raise httpx.HTTPStatusError(
                "Not found", request=request, response=httpx.Response(404, request=request)
            )
        return {}

    async def mark_all_as_read(self):
        self._request("mark_all")
        return len(self.records)

    async def delete(self, notification_id):
        self._request("delete", notification_id)

    async def delete_all(self):
        self._request("delete_all")


@pytest.fixture
def alerts():
    return []


def _store(api, alerts):
    return NotificationStore(api, on_alert=alerts.append, clock=lambda: NOW)


@pytest.mark.anyio
async def test_load_replaces_state_and_derives_unread_count(alerts):
    api = FakeApi([_record("a"), _record("b", read_at="2024-05-01T11:00:00+00:00")])
    store = _store(api, alerts)
    store.handle_event(NOTIFICATION_BROADCAST_EVENT, {"title": "Early"})

    assert await store.load() is True

    assert [n.id for n in store.notifications] == ["a", "b"]
    assert store.unread_count == 1


@pytest.mark.anyio
async def test_failed_load_keeps_state(alerts, caplog):
    store = _store(FakeApi(fail=True), alerts)
    store.handle_event(NOTIFICATION_BROADCAST_EVENT, {"title": "Kept"})

    with caplog.at_level(logging.ERROR):
        assert await store.load() is False

    assert [n.title for n in store.notifications] == ["Kept"]
    assert "Failed to load notifications" in caplog.text


def test_broadcast_prepends_one_entry_and_alerts(alerts):
    store = _store(FakeApi(), alerts)
    channel = ChannelListeners("private-notifications.1")
    store.subscribe(channel)

    channel.emit(
        NOTIFICATION_CREATED_EVENT,
        {
            "id": "n1",
            "data": {
                "title": "Approved",
                "message": "Your application was approved",
                "type": "success",
                "action_url": "/student/applications/5",
            },
        },
    )
    channel.emit(NOTIFICATION_BROADCAST_EVENT, {"title": "Hello", "message": "World"})

    assert [n.title for n in store.notifications] == ["Hello", "Approved"]
    assert store.unread_count == 2
    assert len(alerts) == 2
    first_alert = alerts[0]
    assert first_alert.title == "Approved"
    assert first_alert.description == "Your application was approved"
    assert first_alert.action.label == "View"
    assert first_alert.action.url == "/student/applications/5"
    assert first_alert.duration == 5.0
    assert alerts[1].action is None


def test_repeated_events_are_not_deduplicated(alerts):
    store = _store(FakeApi(), alerts)
    event = {"id": "n1", "data": {"title": "Approved"}}

    store.handle_event(NOTIFICATION_CREATED_EVENT, event)
    store.handle_event(NOTIFICATION_CREATED_EVENT, event)

    assert [n.id for n in store.notifications] == ["n1", "n1"]


def test_resubscribing_does_not_accumulate_handlers(alerts):
    store = _store(FakeApi(), alerts)
    first = ChannelListeners("private-notifications.1")
    second = ChannelListeners("private-notifications.1")

    store.subscribe(first)
    store.subscribe(second)
    store.subscribe(second)
    second.emit(NOTIFICATION_BROADCAST_EVENT, {"title": "Once"})

    assert first.listening_to() == []
    assert first.emit(NOTIFICATION_BROADCAST_EVENT, {}) is False
    assert len(store.notifications) == 1


def test_unsubscribe_stops_delivery(alerts):
    store = _store(FakeApi(), alerts)
    channel = ChannelListeners("private-notifications.1")
    store.subscribe(channel)

    store.unsubscribe()

    assert store.subscribed is False
    assert channel.emit(NOTIFICATION_BROADCAST_EVENT, {}) is False
    assert store.notifications == []


def test_unknown_event_is_ignored(alerts):
    store = _store(FakeApi(), alerts)

    assert store.handle_event("user.updated", {"title": "x"}) is None
    assert store.notifications == []
    assert alerts == []


@pytest.mark.anyio
async def test_mark_as_read_updates_only_that_entry(alerts):
    store = _store(FakeApi([_record("a"), _record("b")]), alerts)
    await store.load()

    assert await store.mark_as_read("a") is True

    read = {n.id: n.read_at for n in store.notifications}
    assert read == {"a": NOW, "b": None}
    assert store.unread_count == 1


@pytest.mark.anyio
async def test_mark_as_read_keeps_existing_timestamp(alerts):
    earlier = "2024-04-01T00:00:00+00:00"
    store = _store(FakeApi([_record("a", read_at=earlier)]), alerts)
    await store.load()

    await store.mark_as_read("a")

    assert store.notifications[0].read_at == datetime(2024, 4, 1, tzinfo=timezone.utc)


@pytest.mark.anyio
async def test_mark_as_read_missing_id_leaves_state_unchanged(alerts, caplog):
    store = _store(FakeApi([_record("a")]), alerts)
    await store.load()
    before = store.notifications

    with caplog.at_level(logging.ERROR):
        assert await store.mark_as_read("missing") is False

    assert store.notifications == before
    assert "Failed to mark notification missing as read" in caplog.text


@pytest.mark.anyio
async def test_mark_all_as_read(alerts):
    store = _store(FakeApi([_record("a"), _record("b")]), alerts)
    await store.load()

    assert await store.mark_all_as_read() is True

    assert store.unread_count == 0
    assert all(n.read_at == NOW for n in store.notifications)


@pytest.mark.anyio
async def test_failed_requests_leave_state_unchanged(alerts):
    api = FakeApi([_record("a")])
    store = _store(api, alerts)
    await store.load()
    api.fail = True

    assert await store.mark_all_as_read() is False
    assert await store.clear_notification("a") is False
    assert await store.clear_all_notifications() is False

    assert store.unread_count == 1
    assert [n.id for n in store.notifications] == ["a"]


@pytest.mark.anyio
async def test_clear_notifications(alerts):
    store = _store(FakeApi([_record("a"), _record("b")]), alerts)
    await store.load()

    assert await store.clear_notification("a") is True
    assert [n.id for n in store.notifications] == ["b"]
    assert await store.clear_all_notifications() is True
    assert store.notifications == []


@pytest.mark.anyio
async def test_two_tabs_reconcile_only_on_reload(app, db_session, student):
    set_notification_dispatcher(NotificationDispatcher([DatabaseChannel()]))
    send_notification(db_session, [student.id], title="One", message="First")
    send_notification(db_session, [student.id], title="Two", message="Second")
    token = create_access_token({"sub": student.email})
    transport = httpx.ASGITransport(app=app)

    def _api():
        return NotificationApi(
            httpx.AsyncClient(
                transport=transport,
                base_url="http://testserver",
                headers={"Authorization": f"Bearer {token}"},
            )
        )

    async with _api() as first_api, _api() as second_api:
        first_tab = NotificationStore(first_api)
        second_tab = NotificationStore(second_api)
        await first_tab.load()
        await second_tab.load()

        assert await first_tab.mark_all_as_read() is True

        assert first_tab.unread_count == 0
        assert second_tab.unread_count == 2

        await second_tab.load()
        assert second_tab.unread_count == 0


@pytest.mark.anyio
async def test_load_with_malformed_items_keeps_state(alerts, caplog):
    store = _store(FakeApi(["not-a-record"]), alerts)
    store.handle_event(NOTIFICATION_BROADCAST_EVENT, {"title": "Kept"})

    with caplog.at_level(logging.ERROR):
        assert await store.load() is False

    assert [n.title for n in store.notifications] == ["Kept"]


def _mock_api(handler):
    return NotificationApi(
        httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://testserver")
    )


@pytest.mark.anyio
async def test_mark_all_with_unexpected_body_keeps_state(alerts):
    def handler(request):
        if request.method == "GET":
            return httpx.Response(200, json=[_record("a")])
        return httpx.Response(200, json=[1, 2])

    async with _mock_api(handler) as api:
        store = _store(api, alerts)
        await store.load()

        assert await store.mark_all_as_read() is False

    assert store.unread_count == 1


@pytest.mark.anyio
async def test_load_rejects_non_object_items_from_the_server(alerts):
    async with _mock_api(lambda request: httpx.Response(200, json=[_record("a"), 5])) as api:
        with pytest.raises(ValueError):
            await api.list_notifications()

        store = _store(api, alerts)
        assert await store.load() is False

    assert store.notifications == []


def test_unsubscribe_keeps_handlers_installed_by_others(alerts):
    store = _store(FakeApi(), alerts)
    channel = ChannelListeners("private-notifications.1")
    received = []
    store.subscribe(channel)
    channel.listen(NOTIFICATION_BROADCAST_EVENT, received.append)

    store.unsubscribe()

    assert channel.listening_to() == [NOTIFICATION_BROADCAST_EVENT]
    assert channel.emit(NOTIFICATION_BROADCAST_EVENT, {"title": "Other"}) is True
    assert received == [{"title": "Other"}]
    assert store.notifications == []
