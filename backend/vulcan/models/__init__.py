"""SQLAlchemy models for Vulcan."""

from vulcan.models.base import Base, ErrorsMixin, VulcanBase
from vulcan.models.component import Component
from vulcan.models.guide import SecurityRequirementsGuide
from vulcan.models.project import Project
from vulcan.models.rule import (
    CanonicalRule,
    Check,
    DisaRuleDescription,
    Rule,
    RuleSatisfaction,
)

__all__ = [
    "Base",
    "ErrorsMixin",
    "VulcanBase",
    "CanonicalRule",
    "Check",
    "Component",
    "DisaRuleDescription",
    "Project",
    "Rule",
    "RuleSatisfaction",
    "SecurityRequirementsGuide",
]
