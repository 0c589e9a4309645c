"""
Slack Block Kit rendering of Cloud Build events.

Creates the summary line and blocks posted for a build notification.
"""

import re
from datetime import datetime, timezone
from typing import Any

from cloudbuild_notifier.models.build import BuildEvent
from cloudbuild_notifier.models.message import RenderedMessage
from cloudbuild_notifier.models.policy import DEFAULT_SCHEDULE_TAG, BuildStatus

NOT_AVAILABLE = "n/a"
EMPTY = "—"

SOURCE_REPO_URL = "https://source.cloud.google.com/{project_id}/{repo_name}/+/{commit_sha}"
TRIGGER_TAG_PREFIX = "trigger-"

STATUS_DISPLAY: dict[str, tuple[str, str]] = {
    BuildStatus.QUEUED.value: ("New build queued", "#fbbc05"),
    BuildStatus.WORKING.value: ("New build in progress", "#34a853"),
    BuildStatus.SUCCESS.value: ("Build successfully completed", "#34a853"),
    BuildStatus.FAILURE.value: ("Build failed", "#ea4335"),
    BuildStatus.INTERNAL_ERROR.value: ("Internal error encountered during build", "#ea4335"),
    BuildStatus.TIMEOUT.value: ("Build timed out", "#ea4335"),
    BuildStatus.CANCELLED.value: ("Build cancelled", "#fbbc05"),
}
UNKNOWN_STATUS_DISPLAY = ("Unknown build status", "#444444")

# Cloud Build reports nanoseconds; datetime keeps at most microseconds.
_FRACTION = re.compile(r"\.(\d{6})\d+")


def status_display(status: str | None) -> tuple[str, str]:
    """Return (description, color) for a build status."""
    return STATUS_DISPLAY.get(status or "", UNKNOWN_STATUS_DISPLAY)


def _mrkdwn(text: str) -> dict[str, Any]:
    return {"type": "mrkdwn", "text": text}


def _section(text: str) -> dict[str, Any]:
    return {"type": "section", "text": _mrkdwn(text)}


def _fields(fields: list[str]) -> dict[str, Any]:
    return {"type": "section", "fields": [_mrkdwn(f) for f in fields]}


def _context(elements: list[str]) -> dict[str, Any]:
    return {"type": "context", "elements": [_mrkdwn(e) for e in elements]}


def _field(key: str, value: str) -> str:
    return f"*{key}:*\n{value}"


def _link(href: str, text: str | None = None) -> str:
    if text:
        return f"<{href}|{text}>"
    return f"<{href}>"


def _code(text: str) -> str:
    return f"`{text}`"


def parse_timestamp(value: str) -> datetime | None:
    """Parse an RFC 3339 timestamp; naive values are taken as UTC."""
    value = _FRACTION.sub(r".\1", value.strip().replace("Z", "+00:00"))
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_timestamp(value: str | None) -> str:
    """Render a Slack date token that falls back to the original text."""
    if not value:
        return NOT_AVAILABLE
    parsed = parse_timestamp(value)
    if parsed is None:
        return value
    return f"<!date^{int(parsed.timestamp())}^{{date_short_pretty}} {{time_secs}}|{value}>"


def commit_link(build: BuildEvent) -> str:
    """Link to the commit in Cloud Source Repositories, or ``n/a``."""
    project_id = build.repo_project_id
    repo_name = build.repo_name
    commit_sha = build.commit_sha
    if not (project_id and repo_name and commit_sha):
        return NOT_AVAILABLE
    url = SOURCE_REPO_URL.format(
        project_id=project_id, repo_name=repo_name, commit_sha=commit_sha
    )
    return _link(url, _code(commit_sha[:7]))


def display_tags(tags: list[str]) -> list[str]:
    """Tags worth showing; trigger ids are noise."""
    return [t for t in tags if not t.startswith(TRIGGER_TAG_PREFIX)]


def organization_id(tags: list[str], schedule_tag: str = DEFAULT_SCHEDULE_TAG) -> str:
    return ", ".join(t for t in display_tags(tags) if t != schedule_tag)


def render(build: BuildEvent, schedule_tag: str = DEFAULT_SCHEDULE_TAG) -> RenderedMessage:
    """
    Render a build into a Slack message.

    Args:
        build: Decoded Cloud Build event
        schedule_tag: Tag marking builds started by a scheduler

    Returns:
        RenderedMessage with summary text, status color and blocks
    """
    description, color = status_display(build.status)
    tags = build.tags
    is_schedule = schedule_tag in tags
    build_type = "Schedule" if is_schedule else "Build"
    org_id = organization_id(tags, schedule_tag) if is_schedule else ""

    subject = org_id or build.branch_name or build.id or NOT_AVAILABLE
    text = f"{description}: {build_type} for {subject}"

    blocks: list[dict[str, Any]] = []

    log_link = _link(build.log_url, "*Build Logs*") if build.log_url else f"*Build Logs:* {NOT_AVAILABLE}"
    blocks.append(_context([log_link]))

    images = " ".join(_code(i) for i in build.images) or EMPTY
    blocks.append(_context([
        f"*Type:* {build_type}",
        f"*Status:* {description} ({build.status or NOT_AVAILABLE})",
        f"*Start:* {format_timestamp(build.start_time)}",
        f"*Finish:* {format_timestamp(build.finish_time)}",
        f"*Images:* {images}",
    ]))

    if is_schedule:
        blocks.append(_section(f"*Organization:* {org_id or NOT_AVAILABLE}"))

    if build.repo_name or build.branch_name or build.commit_sha:
        blocks.append(_fields([
            _field("Repo", build.repo_name or NOT_AVAILABLE),
            _field("Branch", build.branch_name or NOT_AVAILABLE),
            _field("Commit", commit_link(build)),
            _field("Tag", build.tag_name or NOT_AVAILABLE),
        ]))

    shown_tags = display_tags(tags)
    if shown_tags:
        blocks.append(_context([f"*Tags:* {' '.join(_code(t) for t in shown_tags)}"]))

    return RenderedMessage(text=text, color=color, blocks=blocks)
