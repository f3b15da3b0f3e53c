"""Security requirements guide endpoints."""

from uuid import UUID

from fastapi import APIRouter, File, Query, UploadFile, status
from fastapi.responses import Response

from vulcan.api.dependencies import Notifications
from vulcan.api.exceptions import ConflictError, NotFoundError, RecordInvalidError
from vulcan.api.middleware import validate_pagination
from vulcan.api.schemas.guide import (
    GuideDetail,
    GuideImportResponse,
    GuideListResponse,
    GuideSummary,
)
from vulcan.database import DbSession
from vulcan.repositories import CanonicalRuleRepository, GuideRepository
from vulcan.services import GuideImportService

router = APIRouter(prefix="/guides")


@router.post("", response_model=GuideImportResponse, status_code=status.HTTP_201_CREATED)
async def upload_guide(
    db: DbSession,
    notifier: Notifications,
    file: UploadFile = File(..., description="XCCDF benchmark document"),
) -> GuideImportResponse:
    """Import a guide and its canonical rules from an uploaded benchmark."""
    document = await file.read()
    result = await GuideImportService(db, notifier).import_guide(document, filename=file.filename)
    if not result.success:
        raise RecordInvalidError("SecurityRequirementsGuide", result.guide.errors)

    await db.commit()
    return GuideImportResponse(
        guide=GuideSummary.from_model(result.guide),
        rules_imported=result.rules_imported,
    )


@router.get("", response_model=GuideListResponse)
async def list_guides(
    db: DbSession,
    offset: int = Query(0, ge=0),
    limit: int = Query(50, le=100),
) -> GuideListResponse:
    """List guides ordered by title and version."""
    offset, limit = validate_pagination(offset, limit)
    repo = GuideRepository(db)
    guides = await repo.list_guides(offset, limit)
    return GuideListResponse(
        data=[GuideSummary.from_model(g) for g in guides],
        total=await repo.count(),
    )


@router.get("/latest", response_model=GuideListResponse)
async def latest_guides(db: DbSession) -> GuideListResponse:
    """The newest version of every guide title."""
    guides = await GuideRepository(db).latest()
    return GuideListResponse(data=[GuideSummary.from_model(g) for g in guides], total=len(guides))


@router.get("/{guide_id}", response_model=GuideDetail)
async def get_guide(db: DbSession, guide_id: UUID) -> GuideDetail:
    """Get a guide by ID."""
    repo = GuideRepository(db)
    guide = await repo.get_by_id(guide_id)
    if not guide:
        raise NotFoundError("SecurityRequirementsGuide", str(guide_id))

    summary = GuideSummary.from_model(guide)
    return GuideDetail(
        **summary.model_dump(),
        rules_count=await CanonicalRuleRepository(db).count_by_guide(guide.id),
        components_count=await repo.count_components(guide.id),
    )


@router.get("/{guide_id}/document")
async def download_guide_document(db: DbSession, guide_id: UUID) -> Response:
    """Download the benchmark document the guide was imported from."""
    guide = await GuideRepository(db).get_with_document(guide_id)
    if not guide:
        raise NotFoundError("SecurityRequirementsGuide", str(guide_id))

    filename = guide.filename or f"{guide.srg_id}-{guide.version}.xml"
    return Response(
        content=guide.xml,
        media_type="application/xml",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.delete("/{guide_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_guide(db: DbSession, notifier: Notifications, guide_id: UUID) -> None:
    """Delete a guide that no component is based on."""
    guide = await GuideRepository(db).get_by_id(guide_id)
    if not guide:
        raise NotFoundError("SecurityRequirementsGuide", str(guide_id))

    if not await GuideImportService(db, notifier).delete_guide(guide):
        raise ConflictError(guide.errors.full_messages()[0], details={"guide_id": str(guide_id)})
    await db.commit()
