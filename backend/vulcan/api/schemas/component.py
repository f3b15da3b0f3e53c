"""Pydantic schemas for components."""

from typing import Optional

from pydantic import BaseModel, Field

from vulcan.models.component import Component


class ComponentBase(BaseModel):
    """Attributes a caller may set on a component."""

    name: str = Field(..., min_length=1, max_length=255, description="Component name")
    prefix: Optional[str] = Field(None, max_length=10, description="Rule prefix, form AAAA-00")
    version: Optional[int] = Field(None, ge=0, description="Component version")
    release: Optional[int] = Field(None, ge=0, description="Component release")
    title: Optional[str] = Field(None, max_length=500)
    description: Optional[str] = None


class ComponentCreate(ComponentBase):
    """Schema for creating a component from a guide."""

    project_id: str = Field(..., description="Owning project ID (UUID)")
    security_requirements_guide_id: str = Field(..., description="Guide ID (UUID) to derive rules from")


class ComponentCopyRequest(BaseModel):
    """Overrides applied when duplicating or overlaying a component."""

    project_id: Optional[str] = Field(None, description="Target project ID; defaults to the source's")
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    prefix: Optional[str] = Field(None, max_length=10)
    version: Optional[int] = Field(None, ge=0)
    release: Optional[int] = Field(None, ge=0)
    title: Optional[str] = Field(None, max_length=500)
    description: Optional[str] = None


class ComponentUpdate(BaseModel):
    """Schema for updating a component."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    prefix: Optional[str] = Field(None, max_length=10)
    version: Optional[int] = Field(None, ge=0)
    release: Optional[int] = Field(None, ge=0)
    title: Optional[str] = Field(None, max_length=500)
    description: Optional[str] = None
    released: Optional[bool] = None
    component_id: Optional[str] = Field(None, description="Overlay base component ID (UUID)")


class ComponentDetail(BaseModel):
    """Detailed view of a component."""

    id: str
    project_id: str
    name: str
    prefix: Optional[str] = None
    version: Optional[int] = None
    release: Optional[int] = None
    title: Optional[str] = None
    description: Optional[str] = None
    released: bool
    releasable: bool
    rules_count: int
    component_id: Optional[str] = None
    security_requirements_guide_id: Optional[str] = None
    based_on_title: Optional[str] = None
    based_on_version: Optional[str] = None
    created_at: str
    updated_at: str

    @classmethod
    def from_model(cls, component: Component, releasable: bool) -> "ComponentDetail":
        return cls(
            id=str(component.id),
            project_id=str(component.project_id),
            name=component.name,
            prefix=component.prefix,
            version=component.version,
            release=component.release,
            title=component.title,
            description=component.description,
            released=component.released,
            releasable=releasable,
            rules_count=component.rules_count,
            component_id=str(component.component_id) if component.component_id else None,
            security_requirements_guide_id=(
                str(component.security_requirements_guide_id)
                if component.security_requirements_guide_id
                else None
            ),
            based_on_title=component.based_on_title,
            based_on_version=component.based_on_version,
            created_at=component.created_at.isoformat(),
            updated_at=component.updated_at.isoformat(),
        )


class ComponentCreateResponse(BaseModel):
    """A created component and how its rules were produced."""

    component: ComponentDetail
    mode: str
    rules_created: int
    edges_created: int


class ComponentListResponse(BaseModel):
    """List of components."""

    data: list[ComponentDetail]
    total: int
