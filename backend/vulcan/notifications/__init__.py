"""Outbound lifecycle notifications."""

from typing import Optional

from vulcan.config import Settings, get_settings
from vulcan.notifications.base import (
    Notification,
    NotificationField,
    NotificationType,
    Notifier,
    NullNotifier,
    slack_headers_icons,
)
from vulcan.notifications.slack import SlackNotifier


def get_notifier(settings: Optional[Settings] = None) -> Notifier:
    """Slack when configured, otherwise a no-op notifier."""
    settings = settings or get_settings()
    if settings.notifications_configured:
        return SlackNotifier(settings)
    return NullNotifier()


__all__ = [
    "Notification",
    "NotificationField",
    "NotificationType",
    "Notifier",
    "NullNotifier",
    "SlackNotifier",
    "get_notifier",
    "slack_headers_icons",
]
