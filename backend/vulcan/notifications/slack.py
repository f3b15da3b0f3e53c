"""Slack delivery through the ``chat.postMessage`` Web API."""

import json
from typing import Any, Optional

import httpx

from vulcan.config import Settings, get_settings
from vulcan.logging_config import get_logger
from vulcan.notifications.base import Notification

logger = get_logger(__name__)


def build_blocks(notification: Notification) -> list[dict[str, Any]]:
    """Block Kit layout: header section, divider, one section per field, divider."""

    def section(text: str) -> dict[str, Any]:
        return {"type": "section", "text": {"type": "mrkdwn", "text": text}}

    blocks = [section(f"{notification.icon} *{notification.header}*"), {"type": "divider"}]
    blocks.extend(section(f"*{f.label}:* {f.value}") for f in notification.fields)
    blocks.append({"type": "divider"})
    return blocks


class SlackNotifier:
    """Posts notifications to one Slack channel.

    Delivery problems are logged and swallowed; callers are never affected.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.settings = settings or get_settings()
        self._client = client

    async def send(self, notification: Notification) -> None:
        channel = self.settings.slack_channel
        payload = {"channel": channel, "blocks": json.dumps(build_blocks(notification))}
        headers = {"Authorization": f"Bearer {self.settings.slack_api_token}"}
        try:
            if self._client is not None:
                response = await self._client.post(
                    self.settings.slack_api_url, json=payload, headers=headers
                )
            else:
                async with httpx.AsyncClient(timeout=self.settings.slack_timeout) as client:
                    response = await client.post(
                        self.settings.slack_api_url, json=payload, headers=headers
                    )
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as e:
            logger.error("Slack API error", status_code=e.response.status_code)
            return
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Slack API error", error=str(e))
            return

        if not body.get("ok", False):
            error = body.get("error", "unknown_error")
            if error == "channel_not_found":
                logger.error("Slack channel not found", channel=channel)
            else:
                logger.error("Slack API error", error=error)
            return
        logger.debug("Slack notification sent", header=notification.header)
