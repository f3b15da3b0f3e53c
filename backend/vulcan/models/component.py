"""Component model: a prefixed container of rules scoped to a project."""

from typing import TYPE_CHECKING, Optional
from uuid import UUID

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from vulcan.models.base import ErrorsMixin, VulcanBase

if TYPE_CHECKING:
    from vulcan.models.guide import SecurityRequirementsGuide
    from vulcan.models.project import Project
    from vulcan.models.rule import Rule


class Component(ErrorsMixin, VulcanBase):
    """Rules derived from a guide, optionally overlaid on a released component.

    ``component_id`` is the overlay base. A component never overlays itself and
    once ``released`` is set it stays set.
    """

    __tablename__ = "components"
    __table_args__ = (
        CheckConstraint(
            "component_id IS NULL OR component_id != id", name="ck_components_not_own_overlay"
        ),
    )

    project_id: Mapped[UUID] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    security_requirements_guide_id: Mapped[Optional[UUID]] = mapped_column(
        ForeignKey("security_requirements_guides.id", ondelete="RESTRICT"),
        nullable=True,
        index=True,
    )
    component_id: Mapped[Optional[UUID]] = mapped_column(
        ForeignKey("components.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    prefix: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    version: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    release: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    title: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    released: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    rules_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    project: Mapped["Project"] = relationship(back_populates="components")
    based_on: Mapped[Optional["SecurityRequirementsGuide"]] = relationship(
        back_populates="components",
        lazy="joined",
    )
    overlay_base: Mapped[Optional["Component"]] = relationship(
        remote_side="Component.id",
        back_populates="overlays",
    )
    overlays: Mapped[list["Component"]] = relationship(
        back_populates="overlay_base",
        passive_deletes=True,
    )
    rules: Mapped[list["Rule"]] = relationship(
        back_populates="component",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @validates("prefix")
    def _normalize_prefix(self, key: str, value: Optional[str]) -> Optional[str]:
        return value.upper() if value else value

    @property
    def is_overlay(self) -> bool:
        return self.component_id is not None

    @property
    def based_on_title(self) -> Optional[str]:
        return self.based_on.title if self.based_on else None

    @property
    def based_on_version(self) -> Optional[str]:
        return self.based_on.version if self.based_on else None

    def __repr__(self) -> str:
        return f"<Component {self.prefix} {self.name}>"
