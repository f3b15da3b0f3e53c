"""Project model: the scope that owns components."""

from typing import TYPE_CHECKING, Optional

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from vulcan.models.base import VulcanBase

if TYPE_CHECKING:
    from vulcan.models.component import Component


class Project(VulcanBase):
    """A named collection of components."""

    __tablename__ = "projects"

    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    components: Mapped[list["Component"]] = relationship(
        back_populates="project",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
