"""Cloud Build Pub/Sub notification decoder."""

import base64
import binascii
import json
import logging
from typing import Any

from pydantic import ValidationError

from cloudbuild_notifier.errors import DecodeError
from cloudbuild_notifier.models.build import BuildEvent
from cloudbuild_notifier.sources.base import BaseSource

logger = logging.getLogger(__name__)


def decode(data: str | bytes) -> BuildEvent:
    """Decode a base64 JSON payload from the ``cloud-builds`` topic."""
    try:
        text = base64.b64decode(data, validate=True).decode("utf-8")
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"Payload is not base64 encoded UTF-8: {e}") from e

    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        raise DecodeError(f"Payload is not valid JSON: {e}") from e

    if not isinstance(payload, dict):
        raise DecodeError(f"Expected a JSON object, got {type(payload).__name__}")

    logger.debug(f"Decoded build payload: {text}")

    try:
        return BuildEvent.model_validate(payload)
    except ValidationError as e:
        raise DecodeError(f"Payload is not a valid build: {e}") from e


class CloudBuildSource(BaseSource):
    """Parser for Cloud Build notifications delivered through Pub/Sub."""

    @property
    def name(self) -> str:
        return "cloudbuild"

    def parse(self, message: dict[str, Any]) -> BuildEvent:
        data = message.get("data")
        if not isinstance(data, (str, bytes)) or not data:
            raise DecodeError("Pub/Sub message has no data")
        return decode(data)
