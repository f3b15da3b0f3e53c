"""Repository for components."""

from typing import Sequence
from uuid import UUID

from sqlalchemy import func, select

from vulcan.models.component import Component
from vulcan.models.rule import Rule
from vulcan.repositories.base import BaseRepository


class ComponentRepository(BaseRepository[Component]):
    """Repository for component operations."""

    model_class = Component

    async def get_by_project(
        self,
        project_id: UUID,
        offset: int = 0,
        limit: int = 100,
    ) -> Sequence[Component]:
        stmt = (
            select(Component)
            .where(Component.project_id == project_id)
            .order_by(Component.name, Component.version)
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def get_overlays(self, component_id: UUID) -> Sequence[Component]:
        """Components that use this component as their overlay base."""
        stmt = select(Component).where(Component.component_id == component_id)
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def count_rules(self, component_id: UUID) -> int:
        stmt = select(func.count()).select_from(Rule).where(Rule.component_id == component_id)
        result = await self.session.execute(stmt)
        return result.scalar() or 0

    async def count_unlocked_rules(self, component_id: UUID) -> int:
        stmt = select(func.count()).select_from(Rule).where(
            Rule.component_id == component_id,
            Rule.locked.is_(False),
        )
        result = await self.session.execute(stmt)
        return result.scalar() or 0

    async def largest_rule_id(self, component_id: UUID) -> int:
        """Highest numeric rule identifier in a component, 0 when there is none."""
        stmt = select(Rule.rule_id).where(Rule.component_id == component_id)
        result = await self.session.execute(stmt)
        numbers = [int(r) for r in result.scalars().all() if r and r.isdigit()]
        return max(numbers, default=0)
