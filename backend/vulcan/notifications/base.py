"""Notification types and the notifier interface the services call."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol, Sequence


class NotificationType(str, Enum):
    """Lifecycle events that can be announced."""

    CREATE_COMPONENT = "create_component"
    REMOVE_COMPONENT = "remove_component"
    RELEASE_COMPONENT = "release_component"
    CREATE_PROJECT = "create_project"
    REMOVE_PROJECT = "remove_project"
    UPLOAD_SRG = "upload_srg"
    REMOVE_SRG = "remove_srg"
    APPROVE = "approve"
    REVOKE_REVIEW_REQUEST = "revoke_review_request"


HEADERS: dict[NotificationType, str] = {
    NotificationType.CREATE_COMPONENT: "Vulcan New Component Creation",
    NotificationType.REMOVE_COMPONENT: "Vulcan Component Removal",
    NotificationType.RELEASE_COMPONENT: "Vulcan Component Release",
    NotificationType.CREATE_PROJECT: "Vulcan New Project Creation",
    NotificationType.REMOVE_PROJECT: "Vulcan Project Removal",
    NotificationType.UPLOAD_SRG: "Vulcan New SRG (Security Requirement Guide) Upload",
    NotificationType.REMOVE_SRG: "Vulcan SRG (Security Requirement Guide) Removal",
    NotificationType.APPROVE: "Control Reviewed and Locked",
    NotificationType.REVOKE_REVIEW_REQUEST: "Revoking Review Request",
}

# Action prefix of a notification type -> icon
ICONS: dict[str, str] = {
    "assign": ":white_check_mark:",
    "upload": ":white_check_mark:",
    "create": ":white_check_mark:",
    "approve": ":white_check_mark:",
    "release": ":white_check_mark:",
    "rename": ":loudspeaker:",
    "update": ":loudspeaker:",
    "request_review": ":loudspeaker:",
    "change_visibility": ":loudspeaker:",
    "remove": ":x:",
    "revoke": ":x:",
    "request_changes": ":x:",
}


def slack_headers_icons(
    notification_type: NotificationType,
    prefix: str,
) -> tuple[Optional[str], Optional[str]]:
    """Icon and header text for a notification."""
    return ICONS.get(prefix), HEADERS.get(notification_type)


@dataclass(frozen=True)
class NotificationField:
    label: str
    value: str


@dataclass(frozen=True)
class Notification:
    """What gets handed to a notifier: icon, header and labelled fields."""

    icon: Optional[str]
    header: Optional[str]
    fields: Sequence[NotificationField] = ()

    @classmethod
    def build(
        cls,
        notification_type: NotificationType,
        fields: dict[str, str],
    ) -> "Notification":
        prefix = notification_type.value.split("_", 1)[0]
        icon, header = slack_headers_icons(notification_type, prefix)
        return cls(
            icon=icon,
            header=header,
            fields=tuple(NotificationField(k, v) for k, v in fields.items()),
        )


class Notifier(Protocol):
    """Delivers notifications. Implementations never raise."""

    async def send(self, notification: Notification) -> None: ...


class NullNotifier:
    """Notifier used when no delivery channel is configured."""

    async def send(self, notification: Notification) -> None:
        return None
