"""Rule endpoints: review locks, edits and the satisfies graph."""

from uuid import UUID

from fastapi import APIRouter, status

from vulcan.api.dependencies import Notifications, parse_uuid
from vulcan.api.exceptions import NotFoundError, ValidationError_
from vulcan.api.schemas.rule import RuleDetail, RuleUpdate, SatisfactionRequest
from vulcan.database import DbSession
from vulcan.models import Rule
from vulcan.repositories import RuleRepository
from vulcan.services import RuleService

router = APIRouter(prefix="/rules")


async def _get_rule(db: DbSession, rule_id: UUID) -> Rule:
    rule = await RuleRepository(db).get_by_id(rule_id)
    if not rule:
        raise NotFoundError("Rule", str(rule_id))
    return rule


async def _detail(db: DbSession, rule: Rule) -> RuleDetail:
    repo = RuleRepository(db)
    return RuleDetail.from_rule(
        rule,
        satisfies=list(await repo.get_satisfies(rule.id)),
        satisfied_by=list(await repo.get_satisfied_by(rule.id)),
    )


@router.get("/{rule_id}", response_model=RuleDetail)
async def get_rule(db: DbSession, rule_id: UUID) -> RuleDetail:
    """Get a rule by ID."""
    return await _detail(db, await _get_rule(db, rule_id))


@router.patch("/{rule_id}", response_model=RuleDetail)
async def update_rule(db: DbSession, rule_id: UUID, body: RuleUpdate) -> RuleDetail:
    """Edit an unlocked rule."""
    rule = await _get_rule(db, rule_id)
    try:
        await RuleService(db).update(rule, body.model_dump(exclude_unset=True))
    except ValueError as e:
        raise ValidationError_(str(e)) from e
    await db.commit()
    return await _detail(db, rule)


@router.post("/{rule_id}/lock", response_model=RuleDetail)
async def lock_rule(db: DbSession, notifier: Notifications, rule_id: UUID) -> RuleDetail:
    """Lock a reviewed rule."""
    rule = await _get_rule(db, rule_id)
    await RuleService(db, notifier).lock(rule)
    await db.commit()
    return await _detail(db, rule)


@router.post("/{rule_id}/unlock", response_model=RuleDetail)
async def unlock_rule(db: DbSession, rule_id: UUID) -> RuleDetail:
    """Unlock a rule of an unreleased component."""
    rule = await _get_rule(db, rule_id)
    await RuleService(db).unlock(rule)
    await db.commit()
    return await _detail(db, rule)


@router.post("/{rule_id}/satisfies", response_model=RuleDetail, status_code=status.HTTP_201_CREATED)
async def add_satisfaction(db: DbSession, rule_id: UUID, body: SatisfactionRequest) -> RuleDetail:
    """Record that this rule satisfies another rule of the same component."""
    rule = await _get_rule(db, rule_id)
    satisfied = await _get_rule(db, parse_uuid(body.satisfied_rule_id, "satisfied_rule_id"))
    await RuleService(db).add_satisfaction(rule, satisfied)
    await db.commit()
    return await _detail(db, rule)


@router.delete("/{rule_id}/satisfies/{satisfied_rule_id}", response_model=RuleDetail)
async def remove_satisfaction(db: DbSession, rule_id: UUID, satisfied_rule_id: UUID) -> RuleDetail:
    """Remove a satisfies edge."""
    rule = await _get_rule(db, rule_id)
    satisfied = await _get_rule(db, satisfied_rule_id)
    if not await RuleService(db).remove_satisfaction(rule, satisfied):
        raise NotFoundError("Satisfaction", f"{rule_id} -> {satisfied_rule_id}")
    await db.commit()
    return await _detail(db, rule)
