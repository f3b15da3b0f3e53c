"""API routers for Vulcan."""

from vulcan.api.routers import components, guides, health, projects, rules

__all__ = [
    "components",
    "guides",
    "health",
    "projects",
    "rules",
]
