"""Release lock engine.

A component moves from unreleased to released exactly once, and only when
every rule it owns is locked. Overlays may only sit on a released base that
is not itself an overlay.
"""

from typing import Optional

from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import AsyncSession

from vulcan.constants import PREFIX_PATTERN
from vulcan.errors import BASE
from vulcan.models.component import Component
from vulcan.repositories import ComponentRepository

UNRELEASE_MESSAGE = "Cannot unrelease a released component"
UNLOCKED_RULES_MESSAGE = "Cannot release a component that contains rules that are not yet locked"
UNRELEASED_BASE_MESSAGE = "Cannot overlay a component that has not been released"
NESTED_OVERLAY_MESSAGE = "Cannot overlay a component that is itself an overlay"
OVERLAY_SELF_MESSAGE = "cannot overlay itself"
OVERLAID_COMPONENT_MESSAGE = "Cannot turn a component that has overlays into an overlay"
PREFIX_FORMAT_MESSAGE = "must be of the form AAAA-00"


def released_was(component: Component) -> bool:
    """The persisted value of ``released`` before any pending change."""
    state = inspect(component)
    if state.transient or state.pending:
        return False
    history = state.attrs.released.history
    if history.deleted:
        return bool(history.deleted[0])
    if history.unchanged:
        return bool(history.unchanged[0])
    return bool(component.released)


class ReleaseLockEngine:
    """Guards for release transitions and overlay attachment."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.component_repo = ComponentRepository(session)

    async def releasable(self, component: Component) -> bool:
        """False once released; otherwise True only when no owned rule is unlocked."""
        if released_was(component):
            return False
        if component.id is None:
            return True
        with self.session.no_autoflush:
            return await self.component_repo.count_unlocked_rules(component.id) == 0

    async def validate(self, component: Component) -> bool:
        """Attach every guard violation to ``component.errors``.

        Returns:
            True when the component passed all guards
        """
        errors = component.errors
        if not component.name:
            errors.add("name", "can't be blank")
        if component.project_id is None:
            errors.add("project", "must exist")
        if not component.prefix:
            errors.add("prefix", "can't be blank")
        elif not PREFIX_PATTERN.match(component.prefix):
            errors.add("prefix", PREFIX_FORMAT_MESSAGE)
        if component.security_requirements_guide_id is None:
            errors.add("based_on", "can't be blank")

        await self._check_overlay(component)

        was_released = released_was(component)
        if was_released and not component.released:
            errors.add(BASE, UNRELEASE_MESSAGE)
        if component.released and not was_released:
            if not await self.releasable(component):
                errors.add(BASE, UNLOCKED_RULES_MESSAGE)

        return component.is_valid

    async def _check_overlay(self, component: Component) -> None:
        if not component.is_overlay:
            return
        if component.id is not None and component.component_id == component.id:
            component.errors.add("component_id", OVERLAY_SELF_MESSAGE)
            return

        base = await self._load(component.component_id)
        if base is None:
            component.errors.add("component_id", "does not exist")
            return
        if not base.released:
            component.errors.add(BASE, UNRELEASED_BASE_MESSAGE)
        if base.is_overlay:
            component.errors.add(BASE, NESTED_OVERLAY_MESSAGE)
        if component.id is not None:
            with self.session.no_autoflush:
                overlays = await self.component_repo.get_overlays(component.id)
            if overlays:
                component.errors.add(BASE, OVERLAID_COMPONENT_MESSAGE)

    async def _load(self, component_id) -> Optional[Component]:
        with self.session.no_autoflush:
            return await self.component_repo.get_by_id(component_id)
