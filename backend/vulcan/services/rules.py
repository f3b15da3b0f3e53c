"""Rule mutations gated by the rule's lock and its component's release."""

from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from vulcan.constants import STATUSES, Severity
from vulcan.errors import RuleMutationError
from vulcan.logging_config import get_logger
from vulcan.models.component import Component
from vulcan.models.rule import Check, DisaRuleDescription, Rule
from vulcan.notifications import Notification, NotificationType, Notifier, NullNotifier
from vulcan.repositories import ComponentRepository, RuleRepository

logger = get_logger(__name__)

RELEASED_COMPONENT_MESSAGE = "Cannot modify a rule in a released component"
LOCKED_RULE_MESSAGE = "Cannot modify a locked rule"

EDITABLE_ATTRIBUTES = frozenset(
    {
        "title",
        "fixtext",
        "artifact_description",
        "status_justification",
        "vendor_comments",
        "status",
        "rule_severity",
    }
)
# Editable values that live on the first DISA description / check
VULN_DISCUSSION = "vuln_discussion"
CHECK_CONTENT = "check_content"


class RuleService:
    """Lock, unlock, edit and link rules."""

    def __init__(self, session: AsyncSession, notifier: Optional[Notifier] = None):
        self.session = session
        self.notifier = notifier or NullNotifier()
        self.rule_repo = RuleRepository(session)
        self.component_repo = ComponentRepository(session)

    async def _component(self, rule: Rule) -> Component:
        component = await self.component_repo.get_by_id(rule.component_id)
        if component is None:
            raise RuleMutationError(f"Component of rule {rule.rule_id} does not exist")
        return component

    async def _ensure_unreleased(self, rule: Rule) -> Component:
        component = await self._component(rule)
        if component.released:
            raise RuleMutationError(RELEASED_COMPONENT_MESSAGE)
        return component

    async def lock(self, rule: Rule) -> Rule:
        """Mark a rule as reviewed and locked."""
        component = await self._ensure_unreleased(rule)
        if rule.locked:
            return rule
        rule.locked = True
        await self.rule_repo.update(rule)
        logger.info("Rule locked", component_id=str(rule.component_id), rule_id=rule.rule_id)
        await self.notifier.send(
            Notification.build(
                NotificationType.APPROVE,
                {"Component": f"{component.name} ({component.prefix})", "Rule": rule.rule_id},
            )
        )
        return rule

    async def unlock(self, rule: Rule) -> Rule:
        """Reopen a locked rule. Not possible once the component is released."""
        await self._ensure_unreleased(rule)
        if not rule.locked:
            return rule
        rule.locked = False
        await self.rule_repo.update(rule)
        logger.info("Rule unlocked", component_id=str(rule.component_id), rule_id=rule.rule_id)
        return rule

    async def update(self, rule: Rule, changes: dict[str, Any]) -> Rule:
        """Edit an unlocked rule of an unreleased component.

        Raises:
            RuleMutationError: the rule or its component is frozen
            ValueError: unknown attribute or value outside its enumeration
        """
        await self._ensure_unreleased(rule)
        if rule.locked:
            raise RuleMutationError(LOCKED_RULE_MESSAGE)

        allowed = EDITABLE_ATTRIBUTES | {VULN_DISCUSSION, CHECK_CONTENT}
        unknown = set(changes) - allowed
        if unknown:
            raise ValueError(f"Unknown rule attributes: {', '.join(sorted(unknown))}")
        if "status" in changes and changes["status"] not in STATUSES:
            raise ValueError(f"Status must be one of: {', '.join(STATUSES)}")
        severities = [s.value for s in Severity]
        if "rule_severity" in changes and changes["rule_severity"] not in severities:
            raise ValueError(f"Severity must be one of: {', '.join(severities)}")

        for name, value in changes.items():
            if name == VULN_DISCUSSION:
                if not rule.disa_rule_descriptions:
                    rule.disa_rule_descriptions.append(DisaRuleDescription())
                rule.disa_rule_descriptions[0].vuln_discussion = value
            elif name == CHECK_CONTENT:
                if not rule.checks:
                    rule.checks.append(Check())
                rule.checks[0].content = value
            else:
                setattr(rule, name, value)
        await self.rule_repo.update(rule)
        logger.info("Rule updated", rule_id=rule.rule_id, fields=sorted(changes))
        return rule

    async def add_satisfaction(self, rule: Rule, satisfied: Rule) -> bool:
        """Record that ``rule`` satisfies ``satisfied``. Returns False if already recorded."""
        self._check_pair(rule, satisfied)
        await self._ensure_unreleased(rule)
        if await self.rule_repo.satisfaction_exists(rule.id, satisfied.id):
            return False
        await self.rule_repo.add_satisfactions([(rule.id, satisfied.id)])
        logger.info("Satisfaction added", rule_id=rule.rule_id, satisfies=satisfied.rule_id)
        return True

    async def remove_satisfaction(self, rule: Rule, satisfied: Rule) -> bool:
        """Drop the edge ``rule`` -> ``satisfied``. Returns False if it did not exist."""
        self._check_pair(rule, satisfied)
        await self._ensure_unreleased(rule)
        removed = await self.rule_repo.remove_satisfaction(rule.id, satisfied.id)
        if removed:
            logger.info("Satisfaction removed", rule_id=rule.rule_id, satisfies=satisfied.rule_id)
        return removed

    @staticmethod
    def _check_pair(rule: Rule, satisfied: Rule) -> None:
        if rule.id == satisfied.id:
            raise RuleMutationError("A rule cannot satisfy itself")
        if rule.component_id != satisfied.component_id:
            raise RuleMutationError("Rules can only satisfy rules of the same component")
