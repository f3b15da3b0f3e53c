"""Repository layer for data access."""

from vulcan.repositories.base import BaseRepository
from vulcan.repositories.component import ComponentRepository
from vulcan.repositories.guide import CanonicalRuleRepository, GuideRepository
from vulcan.repositories.project import ProjectRepository
from vulcan.repositories.rule import RuleRepository

__all__ = [
    "BaseRepository",
    "CanonicalRuleRepository",
    "ComponentRepository",
    "GuideRepository",
    "ProjectRepository",
    "RuleRepository",
]
