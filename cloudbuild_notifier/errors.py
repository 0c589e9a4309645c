"""Error types raised by the notifier."""


class NotifierError(Exception):
    """Base class for notifier errors."""


class ConfigurationError(NotifierError):
    """Required configuration is missing or invalid."""


class DecodeError(NotifierError):
    """Incoming event payload could not be decoded into a build."""


class DeliveryError(NotifierError):
    """Sending a message to one or more channels failed."""

    def __init__(self, message: str, channels: list[str] | None = None):
        super().__init__(message)
        self.channels = channels or []
