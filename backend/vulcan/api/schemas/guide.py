"""Pydantic schemas for security requirements guides."""

from typing import Optional

from pydantic import BaseModel, Field

from vulcan.models.guide import SecurityRequirementsGuide


class GuideSummary(BaseModel):
    """Summary view of a guide."""

    id: str
    srg_id: str
    title: str
    version: str
    full_title: str
    filename: Optional[str] = None
    created_at: str

    @classmethod
    def from_model(cls, guide: SecurityRequirementsGuide) -> "GuideSummary":
        return cls(
            id=str(guide.id),
            srg_id=guide.srg_id,
            title=guide.title,
            version=guide.version,
            full_title=guide.full_title,
            filename=guide.filename,
            created_at=guide.created_at.isoformat(),
        )


class GuideDetail(GuideSummary):
    """Guide with the number of canonical rules it owns."""

    rules_count: int = Field(0, description="Number of canonical rules")
    components_count: int = Field(0, description="Number of components based on this guide")


class GuideImportResponse(BaseModel):
    """Result of uploading a benchmark document."""

    guide: GuideSummary
    rules_imported: int


class GuideListResponse(BaseModel):
    """List of guides."""

    data: list[GuideSummary]
    total: int
