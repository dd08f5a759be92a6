"""Exceptions raised by the relay."""


class RelayError(Exception):
    """Base class for relay errors."""


class RelayStartupError(RelayError):
    """The relay cannot start, e.g. the local flag directory cannot be created."""

    def __init__(self, message: str, path: str = ""):
        self.message = message
        self.path = path
        super().__init__(self.message)
