"""JSON wire format: inbound decoding and outbound event builders."""
import json
import math
from numbers import Real
from typing import Dict, NamedTuple, Optional

from .registry import Participant

FULL_MESSAGE = "Server is full. Try again later."


class Decoded(NamedTuple):
    message: Optional[dict] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _reject_constant(name):
    raise ValueError(f"non-finite number {name}")


def decode_message(raw) -> Decoded:
    try:
        data = json.loads(raw, parse_constant=_reject_constant)
    except (TypeError, ValueError) as e:
        return Decoded(error=f"invalid JSON: {e}")
    if not isinstance(data, dict):
        return Decoded(error=f"expected an object, got {type(data).__name__}")
    return Decoded(message=data)


def encode_event(event: dict) -> str:
    return json.dumps(event, allow_nan=False)


def is_coordinate(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, Real):
        return False
    return isinstance(value, int) or math.isfinite(value)


def _players(players: Dict[str, Participant]) -> dict:
    return {player_id: player.to_dict() for player_id, player in players.items()}


def players_list(players: Dict[str, Participant]) -> dict:
    return {"type": "players_list", "players": _players(players)}


def joined(player: Participant, players: Dict[str, Participant]) -> dict:
    return {"type": "joined", "id": player.id, "player": player.to_dict(), "players": _players(players)}


def error(message: str) -> dict:
    return {"type": "error", "message": message}


def player_joined(player: Participant) -> dict:
    return {"type": "player_joined", "player": player.to_dict()}


def position_update(player_id: str, x, y) -> dict:
    return {"type": "position_update", "id": player_id, "x": x, "y": y}


def chat_message(player: Participant, text: str) -> dict:
    return {"type": "chat_message", "id": player.id, "name": player.name, "text": text}


def player_left(player_id: str) -> dict:
    return {"type": "player_left", "id": player_id}
