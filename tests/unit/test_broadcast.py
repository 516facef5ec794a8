"""
Tests for consultancy.core.realtime.broadcast — connection table and fan-out.
"""

import asyncio

from consultancy.core.realtime import BroadcastContext


class TestConnectionTable:
    def test_connect_and_disconnect(self):
        context = BroadcastContext()
        context.connect("window-1", lambda event, data: None)
        context.connect("mobile-1", lambda event, data: None)

        assert context.connection_count == 2
        assert context.is_connected("window-1")

        assert context.disconnect("window-1") is True
        assert context.disconnect("window-1") is False
        assert context.connection_count == 1

    def test_reconnect_replaces_connection(self):
        context = BroadcastContext()
        context.connect("window-1", lambda event, data: None)
        context.connect("window-1", lambda event, data: None)

        assert context.connection_count == 1

    def test_contexts_do_not_share_state(self):
        first, second = BroadcastContext(), BroadcastContext()
        first.connect("window-1", lambda event, data: None)

        assert second.connection_count == 0


class TestBroadcast:
    def test_delivers_to_sync_and_async_clients(self):
        sync_received, async_received = [], []

        async def async_send(event, data):
            async_received.append((event, data))

        async def scenario():
            context = BroadcastContext()
            context.connect("sync", lambda event, data: sync_received.append((event, data)))
            connection = context.connect("async", async_send)
            delivered = await context.broadcast("record-saved", {"session_id": "candidate:1"})
            return delivered, connection

        delivered, connection = asyncio.run(scenario())
        assert delivered == 2
        assert sync_received == [("record-saved", {"session_id": "candidate:1"})]
        assert async_received == sync_received
        assert connection.events_delivered == 1

    def test_failing_client_is_dropped(self):
        received = []

        def dead(event, data):
            raise ConnectionResetError("socket closed")

        async def scenario():
            context = BroadcastContext()
            context.connect("dead", dead)
            context.connect("alive", lambda event, data: received.append(event))
            delivered = await context.broadcast("record-saved", {})
            return context, delivered

        context, delivered = asyncio.run(scenario())
        assert delivered == 1
        assert received == ["record-saved"]
        assert not context.is_connected("dead")
        assert context.is_connected("alive")

    def test_no_clients(self):
        assert asyncio.run(BroadcastContext().broadcast("record-saved", {})) == 0
