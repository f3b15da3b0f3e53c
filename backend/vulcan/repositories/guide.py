"""Repositories for security requirements guides and their canonical rules."""

from typing import Optional, Sequence
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import undefer

from vulcan.models.component import Component
from vulcan.models.guide import SecurityRequirementsGuide
from vulcan.models.rule import CanonicalRule
from vulcan.repositories.base import BaseRepository


class GuideRepository(BaseRepository[SecurityRequirementsGuide]):
    """Repository for guide operations."""

    model_class = SecurityRequirementsGuide

    async def get_with_document(self, id: UUID) -> Optional[SecurityRequirementsGuide]:
        """Get a guide with its raw XML loaded."""
        stmt = (
            select(SecurityRequirementsGuide)
            .options(undefer(SecurityRequirementsGuide.xml))
            .where(SecurityRequirementsGuide.id == id)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_srg_id_and_version(
        self,
        srg_id: str,
        version: str,
    ) -> Optional[SecurityRequirementsGuide]:
        stmt = select(SecurityRequirementsGuide).where(
            SecurityRequirementsGuide.srg_id == srg_id,
            SecurityRequirementsGuide.version == version,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_guides(self, offset: int = 0, limit: int = 100) -> Sequence[SecurityRequirementsGuide]:
        stmt = (
            select(SecurityRequirementsGuide)
            .order_by(SecurityRequirementsGuide.title, SecurityRequirementsGuide.version)
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def latest(self) -> Sequence[SecurityRequirementsGuide]:
        """For each title, the guide carrying the greatest version string."""
        newest = (
            select(
                SecurityRequirementsGuide.title.label("title"),
                func.max(SecurityRequirementsGuide.version).label("version"),
            )
            .group_by(SecurityRequirementsGuide.title)
            .subquery()
        )
        stmt = (
            select(SecurityRequirementsGuide)
            .join(
                newest,
                (SecurityRequirementsGuide.title == newest.c.title)
                & (SecurityRequirementsGuide.version == newest.c.version),
            )
            .order_by(SecurityRequirementsGuide.title)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def count_components(self, guide_id: UUID) -> int:
        """Number of components based on a guide."""
        stmt = select(func.count()).select_from(Component).where(
            Component.security_requirements_guide_id == guide_id
        )
        result = await self.session.execute(stmt)
        return result.scalar() or 0


class CanonicalRuleRepository(BaseRepository[CanonicalRule]):
    """Repository for canonical (SRG) rules."""

    model_class = CanonicalRule

    async def get_by_guide(self, guide_id: UUID) -> Sequence[CanonicalRule]:
        """All canonical rules of a guide in benchmark order."""
        stmt = (
            select(CanonicalRule)
            .where(CanonicalRule.security_requirements_guide_id == guide_id)
            .order_by(CanonicalRule.position)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def count_by_guide(self, guide_id: UUID) -> int:
        stmt = select(func.count()).select_from(CanonicalRule).where(
            CanonicalRule.security_requirements_guide_id == guide_id
        )
        result = await self.session.execute(stmt)
        return result.scalar() or 0
