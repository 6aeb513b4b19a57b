class RelayError(Exception):
    """Base class for relay errors."""


class SessionFullError(RelayError):
    def __init__(self, capacity: int):
        super().__init__(f"session is full ({capacity} players)")
        self.capacity = capacity


class ChannelError(RelayError):
    """A send to a single channel failed."""


class ChannelClosed(ChannelError):
    pass
