"""Pydantic schemas for API request/response validation."""

from vulcan.api.schemas.component import (
    ComponentCopyRequest,
    ComponentCreate,
    ComponentCreateResponse,
    ComponentDetail,
    ComponentListResponse,
    ComponentUpdate,
)
from vulcan.api.schemas.guide import (
    GuideDetail,
    GuideImportResponse,
    GuideListResponse,
    GuideSummary,
)
from vulcan.api.schemas.project import ProjectCreate, ProjectDetail
from vulcan.api.schemas.rule import (
    RuleDetail,
    RuleListResponse,
    RuleSummary,
    RuleUpdate,
    SatisfactionRequest,
)

__all__ = [
    "ComponentCopyRequest",
    "ComponentCreate",
    "ComponentCreateResponse",
    "ComponentDetail",
    "ComponentListResponse",
    "ComponentUpdate",
    "GuideDetail",
    "GuideImportResponse",
    "GuideListResponse",
    "GuideSummary",
    "ProjectCreate",
    "ProjectDetail",
    "RuleDetail",
    "RuleListResponse",
    "RuleSummary",
    "RuleUpdate",
    "SatisfactionRequest",
]
