"""Build notification policy and channel routing."""

import asyncio
import logging

from cloudbuild_notifier.channels.base import BaseChannel
from cloudbuild_notifier.channels.slack import SlackChannel
from cloudbuild_notifier.config import Settings
from cloudbuild_notifier.errors import DeliveryError
from cloudbuild_notifier.formatter import render
from cloudbuild_notifier.models.build import BuildEvent
from cloudbuild_notifier.models.message import RenderedMessage
from cloudbuild_notifier.models.policy import (
    BuildStatus,
    NotificationDecision,
    NotificationPolicy,
)

logger = logging.getLogger(__name__)


def should_notify(build: BuildEvent, policy: NotificationPolicy) -> NotificationDecision:
    """Decide whether a build is announced and whether it also goes to the failure channel."""
    status = build.status
    if status not in policy.notify_statuses:
        return NotificationDecision(
            send=False, reason=f"status {status} is not in the notify list"
        )

    ignored = policy.ignore_tags.intersection(build.tags)
    if ignored and status == BuildStatus.SUCCESS.value:
        return NotificationDecision(
            send=False,
            reason=f"successful build tagged {', '.join(sorted(ignored))}",
        )

    return NotificationDecision(
        send=True,
        send_to_failure_channel=(
            policy.failure_channel_configured and status in policy.failure_statuses
        ),
    )


def create_router(settings: Settings) -> "NotificationRouter":
    """Create the router and its channels from settings."""
    channel = SlackChannel(
        webhook_url=settings.require_webhook_url(),
        name="slack",
        timeout=settings.slack_timeout,
    )
    failure_channel = None
    if settings.slack_webhook_url_failure:
        failure_channel = SlackChannel(
            webhook_url=settings.slack_webhook_url_failure,
            name="slack-failure",
            timeout=settings.slack_timeout,
        )
    return NotificationRouter(settings.notification_policy(), channel, failure_channel)


class NotificationRouter:
    """Routes builds to the general channel and, for failures, the failure channel."""

    def __init__(
        self,
        policy: NotificationPolicy,
        channel: BaseChannel,
        failure_channel: BaseChannel | None = None,
    ):
        self._policy = policy.model_copy(
            update={"failure_channel_configured": failure_channel is not None}
        )
        self._channel = channel
        self._failure_channel = failure_channel

        logger.info(
            f"Router initialized: notify={sorted(self._policy.notify_statuses)}, "
            f"failure channel={'on' if failure_channel else 'off'}"
        )

    @property
    def policy(self) -> NotificationPolicy:
        return self._policy

    def decide(self, build: BuildEvent) -> NotificationDecision:
        return should_notify(build, self._policy)

    async def dispatch(
        self, message: RenderedMessage, decision: NotificationDecision
    ) -> list[str]:
        """Send to every channel the decision selects; raise if any failed."""
        channels = [self._channel]
        if decision.send_to_failure_channel and self._failure_channel:
            channels.append(self._failure_channel)

        results = await asyncio.gather(
            *(channel.send(message) for channel in channels),
            return_exceptions=True,
        )

        delivered: list[str] = []
        failed: list[str] = []
        unexpected: BaseException | None = None
        first_failure: DeliveryError | None = None
        for channel, result in zip(channels, results):
            if isinstance(result, DeliveryError):
                logger.error(f"Failed to send message to {channel.name}: {result}")
                failed.append(channel.name)
                first_failure = first_failure or result
            elif isinstance(result, BaseException):
                logger.error(f"Unexpected error sending to {channel.name}", exc_info=result)
                unexpected = unexpected or result
            else:
                delivered.append(channel.name)

        if unexpected is not None:
            raise unexpected
        if failed:
            raise DeliveryError(
                f"Delivery failed for {', '.join(failed)}"
                + (f" (delivered to {', '.join(delivered)})" if delivered else ""),
                failed,
            ) from first_failure
        return delivered

    async def route_build(self, build: BuildEvent) -> list[str]:
        """Filter, render and deliver a build. Returns the channels delivered to."""
        decision = self.decide(build)
        if not decision.send:
            logger.info(f"Build {build.id} not announced: {decision.reason}")
            return []

        message = render(build, schedule_tag=self._policy.schedule_tag)
        logger.debug(f"Rendered message: {message.to_payload()}")
        return await self.dispatch(message, decision)
