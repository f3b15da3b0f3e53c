"""Explicit copies of rules and their sub-entities.

Only the columns listed here take part in a copy; relationships are never
followed implicitly.
"""

from typing import Any, Optional, Union
from uuid import UUID

from vulcan.constants import DEFAULT_SEVERITY, DEFAULT_STATUS
from vulcan.models.rule import CanonicalRule, Check, DisaRuleDescription, Rule
from vulcan.parsers.base import RawRule

RULE_CONTENT_FIELDS = (
    "version",
    "title",
    "ident",
    "ident_system",
    "fixtext",
    "fixtext_fixref",
    "fix_id",
    "rule_severity",
    "rule_weight",
)

RULE_REVIEW_FIELDS = (
    "status",
    "status_justification",
    "artifact_description",
    "vendor_comments",
    "locked",
    "srg_rule_id",
)

DISA_DESCRIPTION_FIELDS = (
    "vuln_discussion",
    "false_positives",
    "false_negatives",
    "documentable",
    "mitigations",
    "severity_override_guidance",
    "potential_impacts",
    "third_party_tools",
    "mitigation_control",
    "responsibility",
    "ia_controls",
)

CHECK_FIELDS = ("system", "content_ref_name", "content_ref_href", "content")


def _columns(source: Any, fields: tuple[str, ...]) -> dict[str, Any]:
    return {name: getattr(source, name) for name in fields}


def copy_sub_entities(
    source: Union[CanonicalRule, Rule],
) -> tuple[list[DisaRuleDescription], list[Check]]:
    """Fresh copies of a rule's DISA descriptions and checks."""
    descriptions = [
        DisaRuleDescription(**_columns(d, DISA_DESCRIPTION_FIELDS))
        for d in source.disa_rule_descriptions
    ]
    checks = [Check(**_columns(c, CHECK_FIELDS)) for c in source.checks]
    return descriptions, checks


def rule_from_canonical(canonical: CanonicalRule, component_id: Optional[UUID], rule_id: str) -> Rule:
    """Derive a component rule from a canonical rule."""
    descriptions, checks = copy_sub_entities(canonical)
    return Rule(
        component_id=component_id,
        srg_rule_id=canonical.id,
        rule_id=rule_id,
        status=DEFAULT_STATUS,
        locked=False,
        disa_rule_descriptions=descriptions,
        checks=checks,
        **_columns(canonical, RULE_CONTENT_FIELDS),
    )


def clone_rule(source: Rule, component_id: UUID) -> Rule:
    """Copy a component rule, keeping its identifier, into another component."""
    descriptions, checks = copy_sub_entities(source)
    return Rule(
        component_id=component_id,
        rule_id=source.rule_id,
        disa_rule_descriptions=descriptions,
        checks=checks,
        **_columns(source, RULE_CONTENT_FIELDS),
        **_columns(source, RULE_REVIEW_FIELDS),
    )


def canonical_from_raw(raw: RawRule, guide_id: UUID) -> CanonicalRule:
    """Map a parsed benchmark rule onto a canonical rule record."""
    description = raw.disa_description
    checks = []
    if raw.check is not None:
        checks.append(Check(**_columns(raw.check, CHECK_FIELDS)))
    return CanonicalRule(
        security_requirements_guide_id=guide_id,
        position=raw.position,
        rule_id=raw.rule_id,
        version=raw.version,
        title=raw.title,
        ident=raw.ident,
        ident_system=raw.ident_system,
        fixtext=raw.fixtext,
        fixtext_fixref=raw.fixtext_fixref,
        fix_id=raw.fix_id,
        rule_severity=raw.severity or DEFAULT_SEVERITY,
        rule_weight=raw.weight,
        disa_rule_descriptions=[
            DisaRuleDescription(**_columns(description, DISA_DESCRIPTION_FIELDS))
        ],
        checks=checks,
    )
