"""Tests for broadcast fanout."""
import pytest

from game_relay.errors import ChannelError
from game_relay.fanout import Broadcaster
from .conftest import FakeChannel


class FailingChannel(FakeChannel):
    async def send(self, message):
        raise ChannelError("send timed out")


@pytest.fixture
def channels():
    return [FakeChannel(name) for name in "abc"]


@pytest.fixture
def broadcaster(channels):
    broadcaster = Broadcaster()
    for channel in channels:
        broadcaster.add(channel)
    return broadcaster


@pytest.mark.asyncio
async def test_broadcast_reaches_all(broadcaster, channels):
    delivered = await broadcaster.broadcast({"type": "ping"})

    assert delivered == 3
    for channel in channels:
        assert channel.sent == [{"type": "ping"}]


@pytest.mark.asyncio
async def test_broadcast_excludes_channel(broadcaster, channels):
    a, b, c = channels

    delivered = await broadcaster.broadcast({"type": "ping"}, exclude=a)

    assert delivered == 2
    assert a.sent == []
    assert b.sent == c.sent == [{"type": "ping"}]


@pytest.mark.asyncio
async def test_broadcast_skips_closed_channels(broadcaster, channels):
    a, b, c = channels
    b.is_open = False

    delivered = await broadcaster.broadcast({"type": "ping"})

    assert delivered == 2
    assert b.sent == []
    assert a.sent == c.sent == [{"type": "ping"}]


@pytest.mark.asyncio
async def test_failing_channel_does_not_affect_others(broadcaster, channels):
    broken = FailingChannel("broken")
    broadcaster.add(broken)

    delivered = await broadcaster.broadcast({"type": "ping"})

    assert delivered == 3
    assert all(channel.sent == [{"type": "ping"}] for channel in channels)


@pytest.mark.asyncio
async def test_channel_closing_during_fanout(broadcaster, channels):
    a, b, c = channels

    class ClosingChannel(FakeChannel):
        async def send(self, message):
            broadcaster.discard(b)
            b.is_open = False
            await super().send(message)

    closer = ClosingChannel("closer")
    broadcaster.add(closer)

    await broadcaster.broadcast({"type": "ping"})

    assert closer.sent == [{"type": "ping"}]
    assert len(broadcaster) == 4 - 1


@pytest.mark.asyncio
async def test_send_to_single_channel(broadcaster, channels):
    a, b, c = channels

    assert await broadcaster.send(a, {"type": "hello"}) is True
    a.is_open = False
    assert await broadcaster.send(a, {"type": "again"}) is False

    assert a.sent == [{"type": "hello"}]
    assert b.sent == c.sent == []


@pytest.mark.asyncio
async def test_discard_stops_delivery(broadcaster, channels):
    a, b, c = channels
    broadcaster.discard(a)
    broadcaster.discard(a)

    await broadcaster.broadcast({"type": "ping"})

    assert a.sent == []
    assert len(broadcaster) == 2


@pytest.mark.asyncio
async def test_broadcast_with_no_channels():
    assert await Broadcaster().broadcast({"type": "ping"}) == 0


@pytest.mark.asyncio
async def test_unexpected_send_error_is_skipped(broadcaster, channels):
    class BrokenChannel(FakeChannel):
        async def send(self, message):
            raise RuntimeError("transport exploded")

    broadcaster.add(BrokenChannel("broken"))

    delivered = await broadcaster.broadcast({"type": "ping"})

    assert delivered == 3
    assert all(channel.sent == [{"type": "ping"}] for channel in channels)
