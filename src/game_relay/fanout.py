"""Best-effort delivery of events to connected channels."""
import asyncio
import logging
from typing import Optional, Protocol, Set

from .errors import ChannelError
from .protocol import encode_event

logger = logging.getLogger(__name__)


class Channel(Protocol):
    @property
    def is_open(self) -> bool: ...

    async def send(self, message: str) -> None: ...


class Broadcaster:
    def __init__(self):
        self._channels: Set[Channel] = set()

    def __len__(self):
        return len(self._channels)

    def add(self, channel: Channel):
        self._channels.add(channel)

    def discard(self, channel: Channel):
        self._channels.discard(channel)

    async def send(self, channel: Channel, event: dict) -> bool:
        return await self._deliver(channel, encode_event(event))

    async def broadcast(self, event: dict, exclude: Optional[Channel] = None) -> int:
        """Send event to every open channel except `exclude`.

        Returns the number of channels that accepted the message. Closed or
        failing channels are skipped, never retried.
        """
        targets = [c for c in list(self._channels) if c is not exclude and c.is_open]
        if not targets:
            return 0
        message = encode_event(event)
        results = await asyncio.gather(*(asyncio.create_task(self._deliver(c, message)) for c in targets))
        return sum(results)

    async def _deliver(self, channel: Channel, message: str) -> bool:
        if not channel.is_open:
            return False
        try:
            await channel.send(message)
        except ChannelError as e:
            logger.debug("Skipping delivery to %r: %s", channel, e)
            return False
        except Exception:
            logger.exception("Unexpected error sending to %r", channel)
            return False
        return True
