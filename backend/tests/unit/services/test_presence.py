"""
Unit Tests for the Presence Registry and Notification Dispatcher
"""
import pytest
from datetime import datetime

from taskportal.services.presence import EventType, NotificationDispatcher, PresenceRegistry


class FakeConnection:
    """Records frames like a WebSocket would send them"""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent = []

    async def send_json(self, data):
        if self.fail:
            raise RuntimeError("connection closed")
        self.sent.append(data)


class TestPresenceRegistry:

    def test_register_and_lookup(self, presence):
        conn = FakeConnection()
        assert presence.register("u1", conn) is None
        assert presence.lookup("u1") is conn
        assert "u1" in presence
        assert len(presence) == 1

    def test_last_session_wins(self, presence):
        first, second = FakeConnection(), FakeConnection()
        presence.register("u1", first)

        displaced = presence.register("u1", second)

        assert displaced is first
        assert presence.lookup("u1") is second

    def test_stale_unregister_keeps_newer_connection(self, presence):
        first, second = FakeConnection(), FakeConnection()
        presence.register("u1", first)
        presence.register("u1", second)

        assert presence.unregister("u1", first) is False
        assert presence.lookup("u1") is second
        assert presence.unregister("u1", second) is True
        assert presence.lookup("u1") is None

    def test_online_user_ids_and_clear(self, presence):
        presence.register("u1", FakeConnection())
        presence.register("u2", FakeConnection())
        assert sorted(presence.online_user_ids()) == ["u1", "u2"]

        presence.clear()
        assert len(presence) == 0


class TestNotificationDispatcher:

    @pytest.mark.asyncio
    async def test_dispatch_to_online_user(self, presence):
        conn = FakeConnection()
        presence.register("u1", conn)

        await NotificationDispatcher(presence).dispatch(
            "u1", EventType.TASK_REVIEWED, {"id": "t1", "deadline": datetime(2024, 3, 2)}
        )

        assert len(conn.sent) == 1
        frame = conn.sent[0]
        assert frame["type"] == "taskReviewed"
        assert frame["data"] == {"id": "t1", "deadline": "2024-03-02T00:00:00"}
        assert "timestamp" in frame

    @pytest.mark.asyncio
    async def test_dispatch_to_absent_user_is_noop(self, presence):
        await NotificationDispatcher(presence).dispatch("nobody", EventType.NEW_MESSAGE, {"x": 1})
        assert len(presence) == 0

    @pytest.mark.asyncio
    async def test_failed_send_unregisters_connection(self, presence):
        presence.register("u1", FakeConnection(fail=True))

        await NotificationDispatcher(presence).dispatch("u1", EventType.NEW_MESSAGE, {"x": 1})

        assert "u1" not in presence

    @pytest.mark.asyncio
    async def test_dispatch_many_skips_offline(self, presence):
        online = FakeConnection()
        presence.register("u1", online)

        await NotificationDispatcher(presence).dispatch_many(["u1", "u2"], EventType.TASK_ASSIGNED, {})

        assert [f["type"] for f in online.sent] == ["taskAssigned"]
