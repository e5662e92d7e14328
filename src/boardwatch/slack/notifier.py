"""Status-change notifications posted to Slack."""

from __future__ import annotations

import asyncio

import structlog
from slack_sdk import WebClient

logger = structlog.get_logger()

# Slack rejects header blocks with longer text
HEADER_MAX_LENGTH = 150


def fallback_text(title: str, status: str, username: str) -> str:
    """Plain-text line shown in notifications and clients without Block Kit."""
    return f"'{title}' moved to '{status}' by {username}"


def build_status_blocks(
    *,
    title: str,
    url: str,
    status: str,
    project_title: str,
    project_url: str,
    username: str,
) -> list[dict]:
    """Block Kit layout for an item moving to a new status."""
    header = f"{title} moved to {status}"
    if len(header) > HEADER_MAX_LENGTH:
        header = header[: HEADER_MAX_LENGTH - 1] + "\u2026"

    return [
        {
            "type": "header",
            "text": {"type": "plain_text", "text": header},
        },
        {
            "type": "section",
            "text": {
                "type": "mrkdwn",
                "text": f"*<{url}|{title}>* moved to status *{status}* in *<{project_url}|{project_title}>*",
            },
        },
        {
            "type": "context",
            "elements": [
                {
                    "type": "image",
                    "image_url": f"https://github.com/{username}.png",
                    "alt_text": f"{username} profile picture",
                },
                {
                    "type": "mrkdwn",
                    "text": f"Performed by *<https://github.com/{username}|{username}>*",
                },
            ],
        },
    ]


class SlackNotifier:
    """Posts status-change messages to a single Slack channel."""

    def __init__(self, client: WebClient, channel: str) -> None:
        self._client = client
        self._channel = channel

    async def send_status_change(
        self,
        *,
        title: str,
        url: str,
        status: str,
        project_title: str,
        project_url: str,
        username: str,
        fallback: str,
    ) -> None:
        """Send the notification.  Slack API errors propagate to the caller."""
        blocks = build_status_blocks(
            title=title,
            url=url,
            status=status,
            project_title=project_title,
            project_url=project_url,
            username=username,
        )
        result = await asyncio.to_thread(
            self._client.chat_postMessage,
            channel=self._channel,
            text=fallback,
            blocks=blocks,
        )
        logger.info("slack.posted", channel=self._channel, ts=result.get("ts"), message=fallback[:80])
