import enum
import logging
from dataclasses import dataclass
from typing import Optional

from . import protocol
from .errors import SessionFullError
from .fanout import Broadcaster, Channel
from .registry import SessionRegistry

logger = logging.getLogger(__name__)


def _coordinate(value):
    return value if protocol.is_coordinate(value) else None


def _text(value):
    return value if isinstance(value, str) and value else None


class SessionState(enum.Enum):
    UNJOINED = "unjoined"
    JOINED = "joined"


@dataclass
class ClientSession:
    """Protocol state of one connection."""
    channel: Channel
    state: SessionState = SessionState.UNJOINED
    player_id: Optional[str] = None

    @property
    def joined(self) -> bool:
        return self.state is SessionState.JOINED

    def bind(self, player_id: str):
        if self.joined:
            raise RuntimeError(f"session already bound to {self.player_id}")
        self.player_id = player_id
        self.state = SessionState.JOINED


class GameRelay:
    """Applies client messages to the registry and fans out the results.

    The transport calls connect() once per connection, handle() for every
    inbound frame in arrival order, and disconnect() when the channel closes.
    """

    def __init__(self, registry: Optional[SessionRegistry] = None, broadcaster: Optional[Broadcaster] = None):
        self.registry = registry if registry is not None else SessionRegistry()
        self.broadcaster = broadcaster if broadcaster is not None else Broadcaster()

    async def connect(self, channel: Channel) -> ClientSession:
        session = ClientSession(channel)
        self.broadcaster.add(channel)
        try:
            await self.broadcaster.send(channel, protocol.players_list(self.registry.snapshot()))
        except BaseException:
            self.broadcaster.discard(channel)
            raise
        return session

    async def handle(self, session: ClientSession, raw):
        decoded = protocol.decode_message(raw)
        if not decoded.ok:
            logger.warning("Error processing message: %s", decoded.error)
            return
        data = decoded.message
        kind = data.get("type")
        if kind == "join":
            await self._join(session, data)
        elif kind == "position":
            await self._position(session, data)
        elif kind == "message":
            await self._chat(session, data)
        else:
            logger.debug("Ignoring message of type %r", kind)

    async def disconnect(self, session: ClientSession):
        self.broadcaster.discard(session.channel)
        if not session.joined:
            return
        player = self.registry.remove(session.player_id)
        if player is None:
            return
        logger.info("Player %s (%s) disconnected", player.name, player.id)
        await self.broadcaster.broadcast(protocol.player_left(player.id))

    async def _join(self, session: ClientSession, data: dict):
        if session.joined:
            logger.debug("Ignoring join from already joined player %s", session.player_id)
            return
        try:
            player = self.registry.try_register(
                str(data["id"]) if data.get("id") else None,
                x=_coordinate(data.get("x")),
                y=_coordinate(data.get("y")),
                color=_text(data.get("color")),
                name=_text(data.get("name")),
            )
        except SessionFullError:
            logger.info("Rejected join, server is full (%d players)", self.registry.capacity)
            await self.broadcaster.send(session.channel, protocol.error(protocol.FULL_MESSAGE))
            return
        session.bind(player.id)
        await self.broadcaster.send(session.channel, protocol.joined(player, self.registry.snapshot()))
        await self.broadcaster.broadcast(protocol.player_joined(player), exclude=session.channel)
        logger.info("Player %s (%s) joined", player.name, player.id)

    async def _position(self, session: ClientSession, data: dict):
        x, y = data.get("x"), data.get("y")
        if not session.joined or not (protocol.is_coordinate(x) and protocol.is_coordinate(y)):
            logger.debug("Dropping position update from %s", session.player_id or "unjoined client")
            return
        if not self.registry.update_position(session.player_id, x, y):
            return
        await self.broadcaster.broadcast(protocol.position_update(session.player_id, x, y), exclude=session.channel)

    async def _chat(self, session: ClientSession, data: dict):
        text = data.get("text")
        if not session.joined or not isinstance(text, str) or not text:
            return
        player = self.registry.get(session.player_id)
        if player is None:
            return
        await self.broadcaster.broadcast(protocol.chat_message(player, text))
