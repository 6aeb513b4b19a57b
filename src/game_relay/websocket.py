import asyncio
import http
import logging

from websockets.asyncio.server import serve
from websockets.exceptions import ConnectionClosed
from websockets.protocol import State

from .config import Settings
from .errors import ChannelClosed, ChannelError
from .game import GameRelay
from .registry import SessionRegistry

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class WebSocketChannel:
    """Channel backed by a websockets server connection."""

    def __init__(self, connection, send_timeout: float = 5.0):
        self.connection = connection
        self.send_timeout = send_timeout

    def __repr__(self):
        return f"<WebSocketChannel {self.connection.remote_address}>"

    @property
    def is_open(self) -> bool:
        return self.connection.state is State.OPEN

    async def send(self, message: str):
        try:
            await asyncio.wait_for(self.connection.send(message), self.send_timeout)
        except ConnectionClosed as e:
            raise ChannelClosed(str(e)) from e
        except asyncio.TimeoutError as e:
            logger.warning("Send to %s timed out after %.1fs", self.connection.remote_address, self.send_timeout)
            raise ChannelError("send timed out") from e


def make_handler(relay: GameRelay, send_timeout: float = 5.0):
    async def handler(websocket):
        logger.info("A player connected from %s", websocket.remote_address)
        session = await relay.connect(WebSocketChannel(websocket, send_timeout))
        try:
            async for message in websocket:
                await relay.handle(session, message)
        except ConnectionClosed:
            pass
        except Exception:
            logger.exception("Unexpected error handling %s", websocket.remote_address)
        finally:
            await relay.disconnect(session)

    return handler


def status_page(relay: GameRelay):
    def process_request(connection, request):
        if request.path != "/" or "Upgrade" in request.headers:
            return None
        host = request.headers.get("Host", "localhost")
        body = (
            "16-Bit Multiplayer Game Server\n"
            "Server Status: Running\n"
            f"Active Players: {len(relay.registry)}/{relay.registry.capacity}\n"
            f"Connect your game client to ws://{host}\n"
        )
        return connection.respond(http.HTTPStatus.OK, body)

    return process_request


def create_server(relay: GameRelay, host: str, port: int, send_timeout: float = 5.0):
    return serve(make_handler(relay, send_timeout), host, port, process_request=status_page(relay))


async def run(settings: Settings):
    relay = GameRelay(SessionRegistry(settings.max_players))
    async with create_server(relay, settings.host, settings.port, settings.send_timeout):
        logger.info("Server is running on %s:%d", settings.host, settings.port)
        await asyncio.Future()


def main():
    settings = Settings.from_env()
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)
    try:
        asyncio.run(run(settings))
    except KeyboardInterrupt:
        logger.info("Server stopped")


if __name__ == "__main__":
    main()
