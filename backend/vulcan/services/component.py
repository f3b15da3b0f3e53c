"""Component lifecycle after creation: update, release and removal."""

from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from vulcan.logging_config import get_logger
from vulcan.models.component import Component
from vulcan.notifications import Notification, NotificationType, Notifier, NullNotifier
from vulcan.repositories import ComponentRepository
from vulcan.services.release import ReleaseLockEngine

logger = get_logger(__name__)

UPDATABLE_ATTRIBUTES = frozenset(
    {
        "name",
        "prefix",
        "version",
        "release",
        "title",
        "description",
        "released",
        "component_id",
    }
)


class ComponentService:
    """Applies guarded changes to existing components."""

    def __init__(self, session: AsyncSession, notifier: Optional[Notifier] = None):
        self.session = session
        self.notifier = notifier or NullNotifier()
        self.component_repo = ComponentRepository(session)
        self.release_engine = ReleaseLockEngine(session)

    async def releasable(self, component: Component) -> bool:
        return await self.release_engine.releasable(component)

    async def update(self, component: Component, changes: dict[str, Any]) -> bool:
        """Apply ``changes`` and re-run every release-lock guard.

        On failure the changed attributes are reloaded from the database and
        the errors stay on ``component.errors``.
        """
        unknown = set(changes) - UPDATABLE_ATTRIBUTES
        if unknown:
            raise ValueError(f"Unknown component attributes: {', '.join(sorted(unknown))}")

        component.errors.clear()
        was_released = component.released
        with self.session.no_autoflush:
            for name, value in changes.items():
                setattr(component, name, value)
            valid = await self.release_engine.validate(component)

        if not valid:
            with self.session.no_autoflush:
                await self.session.refresh(component, attribute_names=list(changes))
            return False

        async with self.session.begin_nested():
            await self.component_repo.update(component)

        if component.released and not was_released:
            logger.info("Component released", component_id=str(component.id), prefix=component.prefix)
            await self.notifier.send(
                Notification.build(
                    NotificationType.RELEASE_COMPONENT,
                    {"Component Name": component.name, "Prefix": component.prefix or ""},
                )
            )
        else:
            logger.info("Component updated", component_id=str(component.id), fields=sorted(changes))
        return True

    async def release(self, component: Component) -> bool:
        """Move an unreleased component to released."""
        return await self.update(component, {"released": True})

    async def destroy(self, component: Component) -> None:
        """Delete a component with its rules, sub-entities and overlays."""
        name, prefix = component.name, component.prefix or ""
        async with self.session.begin_nested():
            await self.component_repo.delete(component)
        logger.info("Component deleted", name=name, prefix=prefix)
        await self.notifier.send(
            Notification.build(
                NotificationType.REMOVE_COMPONENT,
                {"Component Name": name, "Prefix": prefix},
            )
        )
