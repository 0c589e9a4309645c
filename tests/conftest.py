"""Shared pytest fixtures for notifier tests."""

import base64
import json
from typing import Any

import pytest

from cloudbuild_notifier.channels.base import BaseChannel
from cloudbuild_notifier.models.build import BuildEvent
from cloudbuild_notifier.models.message import RenderedMessage


def encode_build(build: dict[str, Any]) -> str:
    """Base64 encode a build the way Cloud Build publishes it."""
    return base64.b64encode(json.dumps(build).encode("utf-8")).decode("ascii")


class RecordingChannel(BaseChannel):
    """Channel that records messages instead of posting them."""

    def __init__(self, name: str, error: Exception | None = None):
        self._name = name
        self.error = error
        self.sent: list[RenderedMessage] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def enabled(self) -> bool:
        return True

    async def send(self, message: RenderedMessage) -> None:
        self.sent.append(message)
        if self.error:
            raise self.error


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's environment out of settings."""
    for name in (
        "SLACK_WEBHOOK_URL",
        "SLACK_WEBHOOK_URL_FAILURE",
        "SLACK_NOTIFY_STATUSES",
        "SLACK_FAILURE_STATUSES",
        "SLACK_IGNORE_TAGS",
        "SLACK_SCHEDULE_TAG",
        "FUNCTION_TARGET",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def build_data():
    """The build from a typical source-triggered run."""
    return {
        "id": "b-123",
        "status": "SUCCESS",
        "logUrl": "https://x/log",
        "startTime": "2024-01-01T00:00:00Z",
        "finishTime": "2024-01-01T00:10:00Z",
        "images": [],
        "substitutions": {
            "REPO_NAME": "svc",
            "BRANCH_NAME": "main",
            "COMMIT_SHA": "abcdef1234567",
        },
        "tags": [],
    }


@pytest.fixture
def build(build_data):
    return BuildEvent.model_validate(build_data)


@pytest.fixture
def general_channel():
    return RecordingChannel("slack")


@pytest.fixture
def failure_channel():
    return RecordingChannel("slack-failure")
