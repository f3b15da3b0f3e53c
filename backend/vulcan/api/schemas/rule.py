"""Pydantic schemas for component rules."""

from typing import Optional

from pydantic import BaseModel, Field

from vulcan.models.rule import Rule


class RuleSummary(BaseModel):
    """Summary view of a rule."""

    id: str
    component_id: str
    rule_id: str
    version: Optional[str] = None
    title: Optional[str] = None
    status: str
    rule_severity: str
    locked: bool

    @classmethod
    def from_model(cls, rule: Rule) -> "RuleSummary":
        return cls(
            id=str(rule.id),
            component_id=str(rule.component_id),
            rule_id=rule.rule_id,
            version=rule.version,
            title=rule.title,
            status=rule.status,
            rule_severity=rule.rule_severity,
            locked=rule.locked,
        )


class RuleDetail(RuleSummary):
    """Detailed view of a rule including its satisfies graph neighbours."""

    fixtext: Optional[str] = None
    ident: Optional[str] = None
    artifact_description: Optional[str] = None
    status_justification: Optional[str] = None
    vendor_comments: Optional[str] = None
    vuln_discussion: Optional[str] = None
    check_content: Optional[str] = None
    srg_rule_id: Optional[str] = None
    satisfies: list[str] = Field(default_factory=list, description="Rule ids this rule satisfies")
    satisfied_by: list[str] = Field(default_factory=list, description="Rule ids satisfying this rule")

    @classmethod
    def from_rule(
        cls,
        rule: Rule,
        satisfies: Optional[list[Rule]] = None,
        satisfied_by: Optional[list[Rule]] = None,
    ) -> "RuleDetail":
        summary = RuleSummary.from_model(rule)
        return cls(
            **summary.model_dump(),
            fixtext=rule.fixtext,
            ident=rule.ident,
            artifact_description=rule.artifact_description,
            status_justification=rule.status_justification,
            vendor_comments=rule.vendor_comments,
            vuln_discussion=(
                rule.disa_rule_description.vuln_discussion if rule.disa_rule_description else None
            ),
            check_content=rule.check.content if rule.check else None,
            srg_rule_id=str(rule.srg_rule_id) if rule.srg_rule_id else None,
            satisfies=[r.rule_id for r in satisfies or []],
            satisfied_by=[r.rule_id for r in satisfied_by or []],
        )


class RuleUpdate(BaseModel):
    """Schema for editing an unlocked rule."""

    title: Optional[str] = None
    fixtext: Optional[str] = None
    artifact_description: Optional[str] = None
    status_justification: Optional[str] = None
    vendor_comments: Optional[str] = None
    status: Optional[str] = None
    rule_severity: Optional[str] = None
    vuln_discussion: Optional[str] = None
    check_content: Optional[str] = None


class SatisfactionRequest(BaseModel):
    """Schema for linking two rules of one component."""

    satisfied_rule_id: str = Field(..., description="ID (UUID) of the rule being satisfied")


class RuleListResponse(BaseModel):
    """List of rules."""

    data: list[RuleSummary]
    total: int
