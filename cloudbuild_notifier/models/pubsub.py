"""Pub/Sub message envelopes."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class PubSubMessage(BaseModel):
    """A single Pub/Sub message; ``data`` is the base64 encoded build."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    data: str = Field(default="", description="Base64 encoded payload")
    attributes: dict[str, str] = Field(default_factory=dict)
    message_id: str = Field(default="", alias="messageId")
    publish_time: str = Field(default="", alias="publishTime")


class PushEnvelope(BaseModel):
    """Body of a Pub/Sub push subscription request."""

    model_config = ConfigDict(extra="ignore")

    message: PubSubMessage
    subscription: str = ""

    def event(self) -> dict[str, Any]:
        """Return the message in the background-function event shape."""
        return {
            "data": self.message.data,
            "attributes": dict(self.message.attributes),
            "message_id": self.message.message_id,
        }
