"""FastAPI dependencies for dependency injection."""

from typing import Annotated
from uuid import UUID

from fastapi import Depends

from vulcan.api.exceptions import ValidationError_
from vulcan.notifications import Notifier, get_notifier


def notifier_dependency() -> Notifier:
    """Notifier for the configured delivery channel."""
    return get_notifier()


Notifications = Annotated[Notifier, Depends(notifier_dependency)]


def parse_uuid(value: str, field: str) -> UUID:
    """Parse a UUID from request input, rejecting malformed values."""
    try:
        return UUID(value)
    except ValueError as e:
        raise ValidationError_(f"Invalid UUID: {value}", field=field) from e
