"""Pydantic schemas for projects."""

from typing import Optional

from pydantic import BaseModel, Field

from vulcan.models.project import Project


class ProjectCreate(BaseModel):
    """Schema for creating a project."""

    name: str = Field(..., min_length=1, max_length=255, description="Unique project name")
    description: Optional[str] = Field(None, description="Project description")


class ProjectDetail(BaseModel):
    """Detailed view of a project."""

    id: str
    name: str
    description: Optional[str] = None
    created_at: str
    updated_at: str

    @classmethod
    def from_model(cls, project: Project) -> "ProjectDetail":
        return cls(
            id=str(project.id),
            name=project.name,
            description=project.description,
            created_at=project.created_at.isoformat(),
            updated_at=project.updated_at.isoformat(),
        )
