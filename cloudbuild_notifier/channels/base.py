"""Base class for notification channels."""

from abc import ABC, abstractmethod

from cloudbuild_notifier.models.message import RenderedMessage


class BaseChannel(ABC):
    """Abstract base class for notification channels."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Channel name for logging."""
        ...

    @property
    @abstractmethod
    def enabled(self) -> bool:
        """Whether the channel is enabled."""
        ...

    @abstractmethod
    async def send(self, message: RenderedMessage) -> None:
        """Send message to the channel, raising DeliveryError on failure."""
        ...
