from .config import Settings
from .errors import ChannelClosed, ChannelError, RelayError, SessionFullError
from .fanout import Broadcaster, Channel
from .game import ClientSession, GameRelay, SessionState
from .registry import Participant, SessionRegistry

__version__ = "0.1.0"
