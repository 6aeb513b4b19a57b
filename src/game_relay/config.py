import os
from dataclasses import dataclass

MAX_PLAYERS = 16
PORT = 3000


@dataclass(frozen=True)
class Settings:
    host: str = "0.0.0.0"
    port: int = PORT
    max_players: int = MAX_PLAYERS
    send_timeout: float = 5.0
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ=None) -> "Settings":
        env = os.environ if environ is None else environ
        settings = cls(
            host=env.get("HOST", cls.host),
            port=int(env.get("PORT", cls.port)),
            max_players=int(env.get("MAX_PLAYERS", cls.max_players)),
            send_timeout=float(env.get("SEND_TIMEOUT", cls.send_timeout)),
            log_level=env.get("LOG_LEVEL", cls.log_level).upper(),
        )
        if settings.max_players < 1:
            raise ValueError(f"MAX_PLAYERS must be positive, got {settings.max_players}")
        if settings.send_timeout <= 0:
            raise ValueError(f"SEND_TIMEOUT must be positive, got {settings.send_timeout}")
        return settings
