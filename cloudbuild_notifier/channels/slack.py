"""Slack incoming-webhook channel implementation."""

import logging

import httpx

from cloudbuild_notifier.channels.base import BaseChannel
from cloudbuild_notifier.errors import DeliveryError
from cloudbuild_notifier.models.message import RenderedMessage

logger = logging.getLogger(__name__)


class SlackChannel(BaseChannel):
    """Slack incoming webhook. The URL is a secret and is never logged."""

    def __init__(
        self,
        webhook_url: str,
        name: str = "slack",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._webhook_url = webhook_url
        self._name = name
        self._timeout = timeout
        self._transport = transport

    @property
    def name(self) -> str:
        return self._name

    @property
    def enabled(self) -> bool:
        return bool(self._webhook_url)

    async def send(self, message: RenderedMessage) -> None:
        if not self.enabled:
            raise DeliveryError(f"Channel {self.name} has no webhook URL", [self.name])

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(self._webhook_url, json=message.to_payload())
        except httpx.HTTPError as e:
            raise DeliveryError(
                f"Request to {self.name} failed: {type(e).__name__}", [self.name]
            ) from e

        if response.is_error:
            raise DeliveryError(
                f"{self.name} responded {response.status_code}: {response.text[:200]}",
                [self.name],
            )

        logger.info(f"Message sent to {self.name}")
