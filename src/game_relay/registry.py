"""Authoritative in-memory registry of joined players."""
import random
import string
import threading
from dataclasses import asdict, dataclass, replace
from typing import Dict, Optional

from .config import MAX_PLAYERS
from .errors import SessionFullError

COLORS = ("#FF6384", "#36A2EB", "#FFCE56", "#4BC0C0", "#9966FF", "#FF9F40", "#C9CBCF")
ID_ALPHABET = string.ascii_lowercase + string.digits
ID_LENGTH = 7


@dataclass
class Participant:
    id: str
    x: float
    y: float
    color: str
    name: str

    def to_dict(self) -> dict:
        return asdict(self)


def random_id() -> str:
    return "".join(random.choices(ID_ALPHABET, k=ID_LENGTH))


def random_color() -> str:
    return random.choice(COLORS)


class SessionRegistry:
    """Maps player id to Participant.

    Every read hands out a copy, so callers can never mutate an entry
    without going through the registry.
    """

    def __init__(self, capacity: int = MAX_PLAYERS):
        self.capacity = capacity
        self._players: Dict[str, Participant] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._players)

    def __contains__(self, player_id) -> bool:
        with self._lock:
            return player_id in self._players

    @property
    def is_full(self) -> bool:
        return len(self) >= self.capacity

    def try_register(self, requested_id: Optional[str] = None, x=None, y=None,
                     color: Optional[str] = None, name: Optional[str] = None) -> Participant:
        with self._lock:
            if len(self._players) >= self.capacity:
                raise SessionFullError(self.capacity)
            player_id = requested_id or random_id()
            player = Participant(
                id=player_id,
                x=x if x is not None else random.randrange(50, 750),
                y=y if y is not None else random.randrange(50, 550),
                color=color or random_color(),
                name=name or f"Player {len(self._players) + 1}",
            )
            # an already-taken id is overwritten, last join wins
            self._players[player_id] = player
            return replace(player)

    def update_position(self, player_id: str, x, y) -> bool:
        with self._lock:
            player = self._players.get(player_id)
            if player is None:
                return False
            player.x = x
            player.y = y
            return True

    def remove(self, player_id: str) -> Optional[Participant]:
        with self._lock:
            return self._players.pop(player_id, None)

    def get(self, player_id: str) -> Optional[Participant]:
        with self._lock:
            player = self._players.get(player_id)
            return replace(player) if player is not None else None

    def snapshot(self) -> Dict[str, Participant]:
        with self._lock:
            return {player_id: replace(player) for player_id, player in self._players.items()}
