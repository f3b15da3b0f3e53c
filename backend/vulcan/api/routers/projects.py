"""Project endpoints."""

from uuid import UUID

from fastapi import APIRouter, Query, status

from vulcan.api.exceptions import ConflictError, NotFoundError
from vulcan.api.middleware import validate_pagination
from vulcan.api.schemas.component import ComponentDetail, ComponentListResponse
from vulcan.api.schemas.project import ProjectCreate, ProjectDetail
from vulcan.database import DbSession
from vulcan.models import Project
from vulcan.repositories import ComponentRepository, ProjectRepository
from vulcan.services import ReleaseLockEngine

router = APIRouter(prefix="/projects")


@router.post("", response_model=ProjectDetail, status_code=status.HTTP_201_CREATED)
async def create_project(db: DbSession, project: ProjectCreate) -> ProjectDetail:
    """Create a project to hold components."""
    repo = ProjectRepository(db)
    if await repo.get_by_name(project.name):
        raise ConflictError(f"Project already exists: {project.name}", details={"name": project.name})

    created = await repo.create(Project(name=project.name, description=project.description))
    await db.commit()
    return ProjectDetail.from_model(created)


@router.get("/{project_id}", response_model=ProjectDetail)
async def get_project(db: DbSession, project_id: UUID) -> ProjectDetail:
    """Get a project by ID."""
    project = await ProjectRepository(db).get_by_id(project_id)
    if not project:
        raise NotFoundError("Project", str(project_id))
    return ProjectDetail.from_model(project)


@router.get("/{project_id}/components", response_model=ComponentListResponse)
async def list_project_components(
    db: DbSession,
    project_id: UUID,
    offset: int = Query(0, ge=0),
    limit: int = Query(50, le=100),
) -> ComponentListResponse:
    """List the components of a project."""
    if not await ProjectRepository(db).exists(project_id):
        raise NotFoundError("Project", str(project_id))

    offset, limit = validate_pagination(offset, limit)
    components = await ComponentRepository(db).get_by_project(project_id, offset, limit)
    engine = ReleaseLockEngine(db)
    data = [ComponentDetail.from_model(c, await engine.releasable(c)) for c in components]
    return ComponentListResponse(data=data, total=len(data))
