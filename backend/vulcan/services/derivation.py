"""Component derivation engine.

Creates a component together with the rules it owns. Every entry point runs
as one SAVEPOINT: either the component, all of its rules with their
sub-entities and all satisfies edges are written, or nothing is. Failures
are attached to ``component.errors``.

Duplication and overlay copy rules in two phases. All rule clones are
flushed first and indexed by rule identifier; only then is each source edge
replayed through that index, so an edge never points at a source rule.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Sequence

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from vulcan.constants import RULE_ID_WIDTH
from vulcan.errors import BASE, RuleImportError, SpreadsheetImportError
from vulcan.logging_config import get_logger
from vulcan.models.component import Component
from vulcan.models.guide import SecurityRequirementsGuide
from vulcan.models.rule import Rule
from vulcan.notifications import Notification, NotificationType, Notifier, NullNotifier
from vulcan.parsers.spreadsheet import SpreadsheetTable
from vulcan.repositories import CanonicalRuleRepository, ComponentRepository, RuleRepository
from vulcan.services.cloning import clone_rule, rule_from_canonical
from vulcan.services.release import ReleaseLockEngine
from vulcan.services.spreadsheet_import import TabularOverrideImporter

logger = get_logger(__name__)

GUIDE_BULK_REJECTION_MESSAGE = "Some rules failed to import successfully for the component."
GUIDE_CONTEXT = "from the SRG"
COMPONENT_CONTEXT = "from the component"

# Attributes a caller may set when duplicating or overlaying
COPYABLE_ATTRIBUTES = (
    "project_id",
    "name",
    "prefix",
    "version",
    "release",
    "title",
    "description",
)


class CreationMode(str, Enum):
    """How a new component gets its rules."""

    FRESH_FROM_GUIDE = "fresh_from_guide"
    FROM_SPREADSHEET = "from_spreadsheet"
    FROM_DUPLICATION = "from_duplication"
    FROM_OVERLAY = "from_overlay"


@dataclass
class DerivationResult:
    """Outcome of one component creation."""

    component: Component
    mode: CreationMode
    rules_created: int = 0
    edges_created: int = 0

    @property
    def success(self) -> bool:
        return self.component.is_valid

    def to_dict(self) -> dict[str, Any]:
        return {
            "mode": self.mode.value,
            "rules_created": self.rules_created,
            "edges_created": self.edges_created,
            "errors": self.component.errors.full_messages(),
        }


def format_rule_id(number: int) -> str:
    return str(number).zfill(RULE_ID_WIDTH)


class ComponentDerivationService:
    """Creates components from guides, spreadsheets or other components."""

    def __init__(self, session: AsyncSession, notifier: Optional[Notifier] = None):
        self.session = session
        self.notifier = notifier or NullNotifier()
        self.component_repo = ComponentRepository(session)
        self.canonical_repo = CanonicalRuleRepository(session)
        self.rule_repo = RuleRepository(session)
        self.release_engine = ReleaseLockEngine(session)

    async def create(
        self,
        mode: CreationMode,
        *,
        component: Optional[Component] = None,
        guide: Optional[SecurityRequirementsGuide] = None,
        source: Optional[Component] = None,
        table: Optional[SpreadsheetTable] = None,
        overrides: Optional[dict[str, Any]] = None,
    ) -> DerivationResult:
        """Dispatch to the entry point for ``mode``."""
        if mode is CreationMode.FRESH_FROM_GUIDE:
            return await self.derive_from_guide(component, guide)
        if mode is CreationMode.FROM_SPREADSHEET:
            return await self.derive_from_spreadsheet(component, guide, table)
        if mode is CreationMode.FROM_DUPLICATION:
            return await self.duplicate(source, overrides)
        return await self.overlay(source, overrides)

    async def derive_from_guide(
        self,
        component: Component,
        guide: SecurityRequirementsGuide,
    ) -> DerivationResult:
        """Clone every canonical rule of ``guide`` into ``component``."""
        result = DerivationResult(component, CreationMode.FRESH_FROM_GUIDE)
        component.security_requirements_guide_id = guide.id
        component.released = False
        if not await self.release_engine.validate(component):
            return result

        try:
            async with self.session.begin_nested():
                await self.component_repo.create(component)
                canonical = await self.canonical_repo.get_by_guide(guide.id)
                rules = [
                    rule_from_canonical(rule, component.id, format_rule_id(number))
                    for number, rule in enumerate(canonical, start=1)
                ]
                await self._store_rules(component, rules)
        except IntegrityError:
            logger.warning("Rule insert rejected", name=component.name)
            component.errors.add(BASE, GUIDE_BULK_REJECTION_MESSAGE)
            return result
        except Exception as e:
            logger.error("Component derivation failed", name=component.name, exc_info=True)
            component.errors.add(BASE, RuleImportError.wrap(GUIDE_CONTEXT, e).message)
            return result

        result.rules_created = len(rules)
        await self._created(result, guide)
        return result

    async def derive_from_spreadsheet(
        self,
        component: Component,
        guide: SecurityRequirementsGuide,
        table: SpreadsheetTable,
    ) -> DerivationResult:
        """Clone canonical rules of ``guide`` selected and overridden by spreadsheet rows."""
        result = DerivationResult(component, CreationMode.FROM_SPREADSHEET)
        component.security_requirements_guide_id = guide.id
        component.released = False

        canonical = await self.canonical_repo.get_by_guide(guide.id)
        try:
            rules = TabularOverrideImporter(canonical).apply_overrides(component, table)
        except SpreadsheetImportError as e:
            component.errors.add(BASE, e.message)
            return result

        if not await self.release_engine.validate(component):
            return result

        try:
            async with self.session.begin_nested():
                await self.component_repo.create(component)
                for rule in rules:
                    rule.component_id = component.id
                await self._store_rules(component, rules)
        except IntegrityError:
            logger.warning("Rule insert rejected", name=component.name)
            component.errors.add(BASE, GUIDE_BULK_REJECTION_MESSAGE)
            return result
        except Exception as e:
            logger.error("Spreadsheet import failed", name=component.name, exc_info=True)
            component.errors.add(BASE, RuleImportError.wrap(GUIDE_CONTEXT, e).message)
            return result

        result.rules_created = len(rules)
        await self._created(result, guide)
        return result

    async def duplicate(
        self,
        source: Component,
        overrides: Optional[dict[str, Any]] = None,
    ) -> DerivationResult:
        """Copy ``source`` with all of its rules and satisfies edges.

        The copy keeps the source's overlay base and always starts unreleased.
        """
        component = self._copy_component(source, overrides)
        component.component_id = source.component_id
        return await self._clone_from(source, component, CreationMode.FROM_DUPLICATION)

    async def overlay(
        self,
        base: Component,
        overrides: Optional[dict[str, Any]] = None,
    ) -> DerivationResult:
        """Like ``duplicate`` but the copy records ``base`` as its overlay base."""
        component = self._copy_component(base, overrides)
        component.component_id = base.id
        return await self._clone_from(base, component, CreationMode.FROM_OVERLAY)

    def _copy_component(self, source: Component, overrides: Optional[dict[str, Any]]) -> Component:
        values = {name: getattr(source, name) for name in COPYABLE_ATTRIBUTES}
        for name, value in (overrides or {}).items():
            if name not in COPYABLE_ATTRIBUTES:
                raise ValueError(f"Unknown component attribute: {name}")
            if value is not None:
                values[name] = value
        return Component(
            security_requirements_guide_id=source.security_requirements_guide_id,
            released=False,
            **values,
        )

    async def _clone_from(
        self,
        source: Component,
        component: Component,
        mode: CreationMode,
    ) -> DerivationResult:
        result = DerivationResult(component, mode)
        if not await self.release_engine.validate(component):
            return result

        try:
            async with self.session.begin_nested():
                source_rules = await self.rule_repo.get_by_component(source.id)
                source_edges = await self.rule_repo.get_satisfaction_edges(source.id)

                await self.component_repo.create(component)
                clones = {rule.rule_id: clone_rule(rule, component.id) for rule in source_rules}
                await self._store_rules(component, list(clones.values()))

                edges = []
                for satisfying, satisfied in source_edges:
                    if satisfying not in clones or satisfied not in clones:
                        raise RuleImportError(
                            f"Satisfies edge {satisfying} -> {satisfied} has no cloned endpoint"
                        )
                    edges.append((clones[satisfying].id, clones[satisfied].id))
                await self.rule_repo.add_satisfactions(edges)

                await self._check_cardinality(source, component, len(source_rules), len(source_edges))
        except RuleImportError as e:
            logger.error("Component clone rejected", source=str(source.id), error=e.message)
            component.errors.add(BASE, RuleImportError.wrap(COMPONENT_CONTEXT, e).message)
            return result
        except Exception as e:
            logger.error("Component clone failed", source=str(source.id), exc_info=True)
            component.errors.add(BASE, RuleImportError.wrap(COMPONENT_CONTEXT, e).message)
            return result

        result.rules_created = len(source_rules)
        result.edges_created = len(source_edges)
        await self._created(result, None, source=source)
        return result

    async def _check_cardinality(
        self,
        source: Component,
        component: Component,
        rule_count: int,
        edge_count: int,
    ) -> None:
        """Re-read both sides so a source changed mid-copy aborts the clone."""
        if await self.component_repo.count_rules(source.id) != rule_count:
            raise RuleImportError("Source rules changed while cloning")
        if await self.rule_repo.count_satisfaction_edges(source.id) != edge_count:
            raise RuleImportError("Source satisfies edges changed while cloning")
        if await self.component_repo.count_rules(component.id) != rule_count:
            raise RuleImportError("Cloned rule count does not match the source")
        if await self.rule_repo.count_satisfaction_edges(component.id) != edge_count:
            raise RuleImportError("Cloned edge count does not match the source")

    async def _store_rules(self, component: Component, rules: Sequence[Rule]) -> None:
        await self.rule_repo.create_many(list(rules))
        component.rules_count = len(rules)
        await self.component_repo.update(component)

    async def _created(
        self,
        result: DerivationResult,
        guide: Optional[SecurityRequirementsGuide],
        source: Optional[Component] = None,
    ) -> None:
        component = result.component
        await self.session.refresh(component, attribute_names=["based_on"])
        logger.info(
            "Component created",
            component_id=str(component.id),
            prefix=component.prefix,
            mode=result.mode.value,
            rules=result.rules_created,
            edges=result.edges_created,
        )
        fields = {"Component Name": component.name, "Prefix": component.prefix or ""}
        if guide is not None:
            fields["Based On"] = guide.full_title
        if source is not None:
            fields["Copied From"] = f"{source.name} ({source.prefix})"
        await self.notifier.send(Notification.build(NotificationType.CREATE_COMPONENT, fields))
