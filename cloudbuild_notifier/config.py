"""Configuration management for the Cloud Build notifier."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from cloudbuild_notifier.errors import ConfigurationError
from cloudbuild_notifier.models.policy import (
    DEFAULT_FAILURE_STATUSES,
    DEFAULT_NOTIFY_STATUSES,
    DEFAULT_SCHEDULE_TAG,
    NotificationPolicy,
)


def split_list(value: str, upper: bool = False) -> frozenset[str]:
    """Split a comma separated option, dropping blank items."""
    items = (item.strip() for item in value.split(","))
    return frozenset(item.upper() if upper else item for item in items if item)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
    )

    # Server settings
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8080)
    log_level: str = Field(default="INFO")

    # Slack destinations
    slack_webhook_url: str | None = Field(default=None)
    slack_webhook_url_failure: str | None = Field(default=None)
    slack_timeout: float = Field(default=30.0)

    # Notification policy
    slack_notify_statuses: str = Field(default=",".join(sorted(DEFAULT_NOTIFY_STATUSES)))
    slack_failure_statuses: str = Field(default=",".join(sorted(DEFAULT_FAILURE_STATUSES)))
    slack_ignore_tags: str = Field(default=DEFAULT_SCHEDULE_TAG)
    slack_schedule_tag: str = Field(default=DEFAULT_SCHEDULE_TAG)

    def require_webhook_url(self) -> str:
        if not self.slack_webhook_url:
            raise ConfigurationError("SLACK_WEBHOOK_URL is not set")
        return self.slack_webhook_url

    def notification_policy(self) -> NotificationPolicy:
        return NotificationPolicy(
            notify_statuses=split_list(self.slack_notify_statuses, upper=True),
            failure_statuses=split_list(self.slack_failure_statuses, upper=True),
            ignore_tags=split_list(self.slack_ignore_tags),
            schedule_tag=self.slack_schedule_tag.strip(),
            failure_channel_configured=bool(self.slack_webhook_url_failure),
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
