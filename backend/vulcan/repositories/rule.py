"""Repository for component rules and the satisfies graph."""

from typing import Sequence
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.orm import aliased, selectinload

from vulcan.models.rule import Rule, RuleSatisfaction
from vulcan.repositories.base import BaseRepository


class RuleRepository(BaseRepository[Rule]):
    """Repository for rule operations."""

    model_class = Rule

    async def get_by_component(self, component_id: UUID) -> Sequence[Rule]:
        """Rules of a component ordered by (version, rule_id)."""
        stmt = (
            select(Rule)
            .where(Rule.component_id == component_id)
            .order_by(Rule.version, Rule.rule_id)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def get_by_component_for_export(self, component_id: UUID) -> Sequence[Rule]:
        """Like ``get_by_component`` with the canonical rule eagerly loaded."""
        stmt = (
            select(Rule)
            .options(selectinload(Rule.srg_rule))
            .where(Rule.component_id == component_id)
            .order_by(Rule.version, Rule.rule_id)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def get_satisfaction_edges(self, component_id: UUID) -> list[tuple[str, str]]:
        """Every satisfies edge of a component as (satisfying rule_id, satisfied rule_id)."""
        satisfying = aliased(Rule)
        satisfied = aliased(Rule)
        stmt = (
            select(satisfying.rule_id, satisfied.rule_id)
            .select_from(RuleSatisfaction)
            .join(satisfying, satisfying.id == RuleSatisfaction.satisfying_rule_id)
            .join(satisfied, satisfied.id == RuleSatisfaction.satisfied_rule_id)
            .where(satisfying.component_id == component_id)
            .order_by(satisfying.rule_id, satisfied.rule_id)
        )
        result = await self.session.execute(stmt)
        return [(a, b) for a, b in result.all()]

    async def count_satisfaction_edges(self, component_id: UUID) -> int:
        stmt = (
            select(func.count())
            .select_from(RuleSatisfaction)
            .join(Rule, Rule.id == RuleSatisfaction.satisfying_rule_id)
            .where(Rule.component_id == component_id)
        )
        result = await self.session.execute(stmt)
        return result.scalar() or 0

    async def get_satisfies(self, rule_id: UUID) -> Sequence[Rule]:
        """Rules the given rule satisfies."""
        stmt = (
            select(Rule)
            .join(RuleSatisfaction, RuleSatisfaction.satisfied_rule_id == Rule.id)
            .where(RuleSatisfaction.satisfying_rule_id == rule_id)
            .order_by(Rule.rule_id)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def get_satisfied_by(self, rule_id: UUID) -> Sequence[Rule]:
        """Rules that satisfy the given rule."""
        stmt = (
            select(Rule)
            .join(RuleSatisfaction, RuleSatisfaction.satisfying_rule_id == Rule.id)
            .where(RuleSatisfaction.satisfied_rule_id == rule_id)
            .order_by(Rule.rule_id)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def satisfaction_exists(self, satisfying_id: UUID, satisfied_id: UUID) -> bool:
        return await self.session.get(RuleSatisfaction, (satisfying_id, satisfied_id)) is not None

    async def add_satisfactions(self, edges: list[tuple[UUID, UUID]]) -> int:
        """Insert (satisfying id, satisfied id) edges. Returns the number added."""
        self.session.add_all(
            RuleSatisfaction(satisfying_rule_id=a, satisfied_rule_id=b) for a, b in edges
        )
        await self.session.flush()
        return len(edges)

    async def remove_satisfaction(self, satisfying_id: UUID, satisfied_id: UUID) -> bool:
        stmt = delete(RuleSatisfaction).where(
            RuleSatisfaction.satisfying_rule_id == satisfying_id,
            RuleSatisfaction.satisfied_rule_id == satisfied_id,
        )
        result = await self.session.execute(stmt)
        return (result.rowcount or 0) > 0
