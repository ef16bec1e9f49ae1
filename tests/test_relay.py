import asyncio

from groupchat.modules.realtime.relay import GROUP_MESSAGE_EVENT, RealtimeRelay


class FakeConnection:
    def __init__(self, fail: bool = False):
        self.sent = []
        self.fail = fail
        self.closed_with = None

    async def send_json(self, data):
        if self.fail:
            raise ConnectionResetError("peer went away")
        self.sent.append(data)

    async def close(self, code: int = 1000):
        self.closed_with = code


def test_subscriber_receives_broadcast_until_unsubscribed():
    async def scenario():
        relay = RealtimeRelay()
        conn = FakeConnection()
        await relay.subscribe(conn, "g1")

        assert await relay.broadcast("g1", {"text": "first"}) == 1
        await relay.unsubscribe(conn, "g1")
        assert await relay.broadcast("g1", {"text": "second"}) == 0
        return conn

    conn = asyncio.run(scenario())

    assert conn.sent == [{"event": GROUP_MESSAGE_EVENT, "data": {"text": "first"}}]


def test_broadcast_only_reaches_the_target_group():
    async def scenario():
        relay = RealtimeRelay()
        a, b = FakeConnection(), FakeConnection()
        await relay.subscribe(a, "g1")
        await relay.subscribe(b, "g2")
        await relay.broadcast("g1", {"n": 1})
        return a, b

    a, b = asyncio.run(scenario())

    assert len(a.sent) == 1
    assert b.sent == []


def test_unsubscribe_is_idempotent():
    async def scenario():
        relay = RealtimeRelay()
        conn = FakeConnection()
        await relay.unsubscribe(conn, "never-joined")
        await relay.subscribe(conn, "g1")
        await relay.unsubscribe(conn, "g1")
        await relay.unsubscribe(conn, "g1")
        return await relay.subscribers("g1"), await relay.groups_for(conn)

    subscribers, groups = asyncio.run(scenario())

    assert subscribers == set()
    assert groups == set()


def test_disconnect_drops_every_subscription():
    async def scenario():
        relay = RealtimeRelay()
        conn, other = FakeConnection(), FakeConnection()
        for gid in ("g1", "g2", "g3"):
            await relay.subscribe(conn, gid)
        await relay.subscribe(other, "g2")
        await relay.disconnect(conn)
        delivered = [await relay.broadcast(gid, {"gid": gid}) for gid in ("g1", "g2", "g3")]
        return conn, other, delivered, await relay.groups_for(conn)

    conn, other, delivered, groups = asyncio.run(scenario())

    assert conn.sent == []
    assert delivered == [0, 1, 0]
    assert other.sent == [{"event": GROUP_MESSAGE_EVENT, "data": {"gid": "g2"}}]
    assert groups == set()


def test_failed_delivery_is_swallowed_and_others_still_receive():
    async def scenario():
        relay = RealtimeRelay()
        stale, healthy = FakeConnection(fail=True), FakeConnection()
        await relay.subscribe(stale, "g1")
        await relay.subscribe(healthy, "g1")
        return await relay.broadcast("g1", {"text": "hi"}), healthy

    delivered, healthy = asyncio.run(scenario())

    assert delivered == 1
    assert healthy.sent == [{"event": GROUP_MESSAGE_EVENT, "data": {"text": "hi"}}]


def test_subscribing_twice_delivers_once():
    async def scenario():
        relay = RealtimeRelay()
        conn = FakeConnection()
        await relay.subscribe(conn, "g1")
        await relay.subscribe(conn, "g1")
        await relay.broadcast("g1", {})
        return conn

    assert len(asyncio.run(scenario()).sent) == 1


def test_close_shuts_connections_and_clears_state():
    async def scenario():
        relay = RealtimeRelay()
        conn = FakeConnection()
        await relay.connect(conn)
        await relay.subscribe(conn, "g1")
        await relay.close()
        return relay, conn, await relay.subscribers("g1")

    relay, conn, subscribers = asyncio.run(scenario())

    assert conn.closed_with == 1001
    assert subscribers == set()


def test_concurrent_mutations_keep_maps_consistent():
    async def scenario():
        relay = RealtimeRelay()
        conns = [FakeConnection() for _ in range(20)]
        await asyncio.gather(*(relay.subscribe(c, "g1") for c in conns))
        await asyncio.gather(*(relay.disconnect(c) for c in conns[::2]))
        await relay.broadcast("g1", {"n": 1})
        return conns

    conns = asyncio.run(scenario())

    assert [len(c.sent) for c in conns] == [0, 1] * 10


class StalledConnection(FakeConnection):
    """A peer that never drains its send buffer."""

    async def send_json(self, data):
        await asyncio.Event().wait()


def test_stalled_subscriber_does_not_block_the_others():
    async def scenario():
        relay = RealtimeRelay(send_timeout=0.1)
        stalled, healthy = StalledConnection(), FakeConnection()
        await relay.subscribe(stalled, "g1")
        await relay.subscribe(healthy, "g1")

        delivered = await asyncio.wait_for(relay.broadcast("g1", {"text": "hi"}), timeout=2)
        return delivered, healthy

    delivered, healthy = asyncio.run(scenario())

    assert delivered == 1
    assert healthy.sent == [{"event": GROUP_MESSAGE_EVENT, "data": {"text": "hi"}}]
