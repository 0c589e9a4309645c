"""Base class for build event sources."""

from abc import ABC, abstractmethod
from typing import Any

from cloudbuild_notifier.models.build import BuildEvent


class BaseSource(ABC):
    """Abstract base class for event source decoders."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Source name identifier."""
        ...

    @abstractmethod
    def parse(self, message: dict[str, Any]) -> BuildEvent:
        """Parse an incoming message into a BuildEvent."""
        ...
