"""Base model definitions and common mixins."""

from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import DateTime, String, TypeDecorator, func
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.engine import Dialect
from sqlalchemy.orm import Mapped, mapped_column

from vulcan.database import Base
from vulcan.errors import ErrorSet


class UUIDType(TypeDecorator):
    """A UUID type that works with both PostgreSQL and SQLite.

    Uses native UUID on PostgreSQL and stores as string on SQLite.
    """

    impl = String(36)
    cache_ok = True

    def load_dialect_impl(self, dialect: Dialect):
        """Load the appropriate implementation for the database dialect."""
        if dialect.name == "postgresql":
            return dialect.type_descriptor(PG_UUID(as_uuid=True))
        return dialect.type_descriptor(String(36))

    def process_bind_param(self, value: Any, dialect: Dialect) -> Any:
        """Process value before sending to database."""
        if value is None:
            return value
        if dialect.name == "postgresql":
            return value
        return str(value)

    def process_result_value(self, value: Any, dialect: Dialect) -> Any:
        """Process value from database."""
        if value is None:
            return value
        if isinstance(value, UUID):
            return value
        return UUID(value)


class TimestampMixin:
    """Mixin for created_at and updated_at timestamps."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class UUIDMixin:
    """Mixin for UUID primary key."""

    id: Mapped[UUID] = mapped_column(
        UUIDType(),
        primary_key=True,
        default=uuid4,
    )


class ErrorsMixin:
    """Gives a record an attached, non-persistent error collection."""

    @property
    def errors(self) -> ErrorSet:
        errors = self.__dict__.get("_errors")
        if errors is None:
            errors = ErrorSet()
            self.__dict__["_errors"] = errors
        return errors

    @property
    def is_valid(self) -> bool:
        return not self.errors


class VulcanBase(Base, UUIDMixin, TimestampMixin):
    """Base class for all Vulcan models with common columns."""

    __abstract__ = True
    # Fetch server-generated timestamps during flush; async sessions cannot lazy-load them later
    __mapper_args__ = {"eager_defaults": True}
