"""Test configuration and fixtures."""
import json

import pytest

from game_relay.errors import ChannelClosed
from game_relay.game import GameRelay
from game_relay.registry import SessionRegistry


class FakeChannel:
    """In-memory channel recording every message sent to it."""

    def __init__(self, name="client"):
        self.name = name
        self.is_open = True
        self.sent = []

    def __repr__(self):
        return f"<FakeChannel {self.name}>"

    async def send(self, message):
        if not self.is_open:
            raise ChannelClosed(f"{self.name} is closed")
        self.sent.append(json.loads(message))

    def events(self, kind=None):
        return [e for e in self.sent if kind is None or e["type"] == kind]

    def clear(self):
        self.sent.clear()


@pytest.fixture
def registry():
    return SessionRegistry()


@pytest.fixture
def relay(registry):
    return GameRelay(registry)


async def join(relay, player_id, **fields):
    """Connect a fake client and join it with id `player_id`."""
    channel = FakeChannel(player_id)
    session = await relay.connect(channel)
    await relay.handle(session, json.dumps({"type": "join", "id": player_id, **fields}))
    return channel, session
