"""Component endpoints: creation in every mode, lifecycle and export."""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, File, Form, Query, UploadFile, status
from fastapi.responses import Response

from vulcan.api.dependencies import Notifications, parse_uuid
from vulcan.api.exceptions import NotFoundError, RecordInvalidError, ValidationError_
from vulcan.api.middleware import validate_pagination
from vulcan.api.schemas.component import (
    ComponentCopyRequest,
    ComponentCreate,
    ComponentCreateResponse,
    ComponentDetail,
    ComponentUpdate,
)
from vulcan.api.schemas.rule import RuleListResponse, RuleSummary
from vulcan.config import get_settings
from vulcan.database import DbSession
from vulcan.errors import SpreadsheetImportError
from vulcan.models import Component, SecurityRequirementsGuide
from vulcan.parsers import read_spreadsheet
from vulcan.repositories import ComponentRepository, GuideRepository, ProjectRepository, RuleRepository
from vulcan.services import (
    ComponentDerivationService,
    ComponentService,
    CreationMode,
    DerivationResult,
    ReleaseLockEngine,
    export_component_csv,
)

router = APIRouter(prefix="/components")
settings = get_settings()


async def _get_component(db: DbSession, component_id: UUID) -> Component:
    component = await ComponentRepository(db).get_by_id(component_id)
    if not component:
        raise NotFoundError("Component", str(component_id))
    return component


async def _get_guide(db: DbSession, guide_id: str) -> SecurityRequirementsGuide:
    guide = await GuideRepository(db).get_by_id(parse_uuid(guide_id, "security_requirements_guide_id"))
    if not guide:
        raise NotFoundError("SecurityRequirementsGuide", guide_id)
    return guide


async def _ensure_project(db: DbSession, project_id: str) -> UUID:
    parsed = parse_uuid(project_id, "project_id")
    if not await ProjectRepository(db).exists(parsed):
        raise NotFoundError("Project", project_id)
    return parsed


async def _detail(db: DbSession, component: Component) -> ComponentDetail:
    return ComponentDetail.from_model(component, await ReleaseLockEngine(db).releasable(component))


async def _created(db: DbSession, result: DerivationResult) -> ComponentCreateResponse:
    if not result.success:
        raise RecordInvalidError("Component", result.component.errors)
    await db.commit()
    return ComponentCreateResponse(
        component=await _detail(db, result.component),
        mode=result.mode.value,
        rules_created=result.rules_created,
        edges_created=result.edges_created,
    )


@router.post("", response_model=ComponentCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_component(
    db: DbSession,
    notifier: Notifications,
    body: ComponentCreate,
) -> ComponentCreateResponse:
    """Create a component whose rules are derived from a guide."""
    project_id = await _ensure_project(db, body.project_id)
    guide = await _get_guide(db, body.security_requirements_guide_id)

    component = Component(
        project_id=project_id,
        **body.model_dump(exclude={"project_id", "security_requirements_guide_id"}),
    )
    result = await ComponentDerivationService(db, notifier).create(
        CreationMode.FRESH_FROM_GUIDE, component=component, guide=guide
    )
    return await _created(db, result)


@router.post("/spreadsheet", response_model=ComponentCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_component_from_spreadsheet(
    db: DbSession,
    notifier: Notifications,
    project_id: str = Form(...),
    security_requirements_guide_id: str = Form(...),
    name: str = Form(...),
    version: Optional[int] = Form(None),
    release: Optional[int] = Form(None),
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    file: UploadFile = File(..., description="Spreadsheet (.xlsx or .csv)"),
) -> ComponentCreateResponse:
    """Create a component from a guide with rule values taken from a spreadsheet."""
    parsed_project_id = await _ensure_project(db, project_id)
    guide = await _get_guide(db, security_requirements_guide_id)

    data = await file.read()
    if len(data) > settings.max_spreadsheet_size_bytes:
        raise ValidationError_("Spreadsheet is too large", field="file")
    try:
        table = read_spreadsheet(data, filename=file.filename)
    except SpreadsheetImportError as e:
        raise ValidationError_(e.message, field="file") from e

    component = Component(
        project_id=parsed_project_id,
        name=name,
        version=version,
        release=release,
        title=title,
        description=description,
    )
    result = await ComponentDerivationService(db, notifier).create(
        CreationMode.FROM_SPREADSHEET, component=component, guide=guide, table=table
    )
    return await _created(db, result)


@router.post(
    "/{component_id}/duplicate",
    response_model=ComponentCreateResponse,
    status_code=status.HTTP_201_CREATED,
)
async def duplicate_component(
    db: DbSession,
    notifier: Notifications,
    component_id: UUID,
    body: ComponentCopyRequest,
) -> ComponentCreateResponse:
    """Copy a component with its rules and satisfies edges."""
    source = await _get_component(db, component_id)
    overrides = body.model_dump(exclude_none=True)
    if "project_id" in overrides:
        overrides["project_id"] = await _ensure_project(db, overrides["project_id"])
    result = await ComponentDerivationService(db, notifier).create(
        CreationMode.FROM_DUPLICATION, source=source, overrides=overrides
    )
    return await _created(db, result)


@router.post(
    "/{component_id}/overlay",
    response_model=ComponentCreateResponse,
    status_code=status.HTTP_201_CREATED,
)
async def overlay_component(
    db: DbSession,
    notifier: Notifications,
    component_id: UUID,
    body: ComponentCopyRequest,
) -> ComponentCreateResponse:
    """Create an overlay of a released component."""
    base = await _get_component(db, component_id)
    overrides = body.model_dump(exclude_none=True)
    if "project_id" in overrides:
        overrides["project_id"] = await _ensure_project(db, overrides["project_id"])
    result = await ComponentDerivationService(db, notifier).create(
        CreationMode.FROM_OVERLAY, source=base, overrides=overrides
    )
    return await _created(db, result)


@router.get("/{component_id}", response_model=ComponentDetail)
async def get_component(db: DbSession, component_id: UUID) -> ComponentDetail:
    """Get a component by ID."""
    return await _detail(db, await _get_component(db, component_id))


@router.patch("/{component_id}", response_model=ComponentDetail)
async def update_component(
    db: DbSession,
    notifier: Notifications,
    component_id: UUID,
    body: ComponentUpdate,
) -> ComponentDetail:
    """Update a component, enforcing the release and overlay guards."""
    component = await _get_component(db, component_id)
    changes = body.model_dump(exclude_unset=True)
    if changes.get("component_id") is not None:
        changes["component_id"] = parse_uuid(changes["component_id"], "component_id")

    if not await ComponentService(db, notifier).update(component, changes):
        raise RecordInvalidError("Component", component.errors)
    await db.commit()
    return await _detail(db, component)


@router.post("/{component_id}/release", response_model=ComponentDetail)
async def release_component(
    db: DbSession,
    notifier: Notifications,
    component_id: UUID,
) -> ComponentDetail:
    """Release a component whose rules are all locked."""
    component = await _get_component(db, component_id)
    if not await ComponentService(db, notifier).release(component):
        raise RecordInvalidError("Component", component.errors)
    await db.commit()
    return await _detail(db, component)


@router.get("/{component_id}/rules", response_model=RuleListResponse)
async def list_component_rules(
    db: DbSession,
    component_id: UUID,
    offset: int = Query(0, ge=0),
    limit: int = Query(100, le=1000),
) -> RuleListResponse:
    """List a component's rules ordered by (version, rule_id)."""
    await _get_component(db, component_id)
    offset, limit = validate_pagination(offset, limit)
    rules = await RuleRepository(db).get_by_component(component_id)
    return RuleListResponse(
        data=[RuleSummary.from_model(r) for r in rules[offset:offset + limit]],
        total=len(rules),
    )


@router.get("/{component_id}/export")
async def export_component(db: DbSession, component_id: UUID) -> Response:
    """Download the component's rules as CSV."""
    component = await _get_component(db, component_id)
    content = await export_component_csv(db, component)
    filename = f"{component.name}-V{component.version or 0}R{component.release or 0}.csv"
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.delete("/{component_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_component(db: DbSession, notifier: Notifications, component_id: UUID) -> None:
    """Delete a component with its rules and overlays."""
    component = await _get_component(db, component_id)
    await ComponentService(db, notifier).destroy(component)
    await db.commit()
