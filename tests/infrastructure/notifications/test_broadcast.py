"""Tests for the broadcast connection manager and publisher."""

from __future__ import annotations

import asyncio
import threading

import anyio
import pytest
from anyio import to_thread

from scholarhub.infrastructure.notifications import (
    NOTIFICATION_BROADCAST_EVENT,
    BroadcastConnectionManager,
    BroadcastPublisher,
    bind_delivery_loop,
    drain_pending_deliveries,
    recipient_channel,
)


class FakeWebSocket:
    def __init__(self, *, broken: bool = False) -> None:
        self.accepted = False
        self.sent = []
        self.broken = broken

    async def accept(self) -> None:
        self.accepted = True

    async def send_json(self, message) -> None:
        if self.broken:
            raise RuntimeError("socket closed")
        self.sent.append(message)


def test_recipient_channel_is_private_per_user():
    assert recipient_channel(7) == "private-notifications.7"
    assert recipient_channel(7) != recipient_channel(8)


@pytest.mark.anyio
async def test_publish_reaches_only_the_channel_subscribers():
    manager = BroadcastConnectionManager()
    mine, other = FakeWebSocket(), FakeWebSocket()
    await manager.connect("private-notifications.1", mine)
    await manager.connect("private-notifications.2", other)

    delivered = await manager.publish("private-notifications.1", {"type": "x"})

    assert delivered == 1
    assert mine.accepted
    assert mine.sent == [{"type": "x"}]
    assert other.sent == []


@pytest.mark.anyio
async def test_broken_connection_is_dropped_and_others_still_receive():
    manager = BroadcastConnectionManager()
    healthy, broken = FakeWebSocket(), FakeWebSocket(broken=True)
    await manager.connect("chan", healthy)
    await manager.connect("chan", broken)

    delivered = await manager.publish("chan", {"type": "x"})

    assert delivered == 1
    assert manager.subscriber_count("chan") == 1


@pytest.mark.anyio
async def test_disconnect_removes_empty_channels():
    manager = BroadcastConnectionManager()
    websocket = FakeWebSocket()
    await manager.connect("chan", websocket)

    manager.disconnect("chan", websocket)
    manager.disconnect("chan", websocket)

    assert manager.subscriber_count("chan") == 0


@pytest.mark.anyio
async def test_publisher_schedules_envelopes_without_blocking():
    manager = BroadcastConnectionManager()
    publisher = BroadcastPublisher(manager)
    websocket = FakeWebSocket()
    await manager.connect(recipient_channel(3), websocket)
    payload = {"title": "Hi", "message": "There", "type": "info", "action_url": None}

    publisher.publish_to_users([3, 3, None], NOTIFICATION_BROADCAST_EVENT, payload)
    assert websocket.sent == []

    await drain_pending_deliveries()

    assert websocket.sent == [
        {
            "type": NOTIFICATION_BROADCAST_EVENT,
            "channel": recipient_channel(3),
            "data": payload,
        }
    ]


@pytest.mark.anyio
async def test_plain_thread_delivers_on_the_bound_loop():
    manager = BroadcastConnectionManager()
    publisher = BroadcastPublisher(manager)
    websocket = FakeWebSocket()
    await manager.connect(recipient_channel(4), websocket)
    bind_delivery_loop(asyncio.get_running_loop())
    try:
        thread = threading.Thread(
            target=publisher.publish_to_users,
            args=([4], NOTIFICATION_BROADCAST_EVENT, {"title": "From a thread"}),
        )
        thread.start()
        await to_thread.run_sync(thread.join)

        with anyio.fail_after(5):
            while not websocket.sent:
                await anyio.sleep(0.01)
    finally:
        bind_delivery_loop(None)

    assert websocket.sent[0]["data"] == {"title": "From a thread"}
    assert manager.subscriber_count(recipient_channel(4)) == 1
