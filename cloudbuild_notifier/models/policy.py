"""Notification policy models."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class BuildStatus(str, Enum):
    """Cloud Build statuses the notifier knows how to describe."""

    QUEUED = "QUEUED"
    WORKING = "WORKING"
    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    TIMEOUT = "TIMEOUT"
    CANCELLED = "CANCELLED"


DEFAULT_NOTIFY_STATUSES = frozenset({
    BuildStatus.SUCCESS.value,
    BuildStatus.FAILURE.value,
    BuildStatus.INTERNAL_ERROR.value,
    BuildStatus.TIMEOUT.value,
    BuildStatus.CANCELLED.value,
})

DEFAULT_FAILURE_STATUSES = frozenset({
    BuildStatus.FAILURE.value,
    BuildStatus.INTERNAL_ERROR.value,
    BuildStatus.TIMEOUT.value,
})

DEFAULT_SCHEDULE_TAG = "schedule"


class NotificationPolicy(BaseModel):
    """Which builds are announced, and where."""

    model_config = ConfigDict(frozen=True)

    notify_statuses: frozenset[str] = Field(default=DEFAULT_NOTIFY_STATUSES)
    failure_statuses: frozenset[str] = Field(default=DEFAULT_FAILURE_STATUSES)
    ignore_tags: frozenset[str] = Field(default=frozenset({DEFAULT_SCHEDULE_TAG}))
    schedule_tag: str = Field(default=DEFAULT_SCHEDULE_TAG)
    failure_channel_configured: bool = False


class NotificationDecision(BaseModel):
    """Outcome of evaluating a build against the policy."""

    model_config = ConfigDict(frozen=True)

    send: bool
    send_to_failure_channel: bool = False
    reason: str = ""
