"""Rendered notification message."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class RenderedMessage(BaseModel):
    """A summary line plus ordered Block Kit blocks."""

    model_config = ConfigDict(frozen=True)

    text: str
    color: str
    blocks: list[dict[str, Any]] = Field(default_factory=list)

    def to_payload(self) -> dict[str, Any]:
        """Slack incoming-webhook body; the attachment carries the color bar."""
        return {
            "text": self.text,
            "attachments": [{"color": self.color, "blocks": self.blocks}],
        }
