"""CSV export of a component's rules in the DISA column layout."""

import csv
import io
from typing import Optional, Union

from sqlalchemy.ext.asyncio import AsyncSession

from vulcan.constants import DISA_EXPORT_HEADERS, SEVERITIES_MAP
from vulcan.models.component import Component
from vulcan.models.rule import CanonicalRule, Rule
from vulcan.repositories import RuleRepository


def _vuln_discussion(rule: Optional[Union[Rule, CanonicalRule]]) -> Optional[str]:
    if rule is None or not rule.disa_rule_descriptions:
        return None
    return rule.disa_rule_descriptions[0].vuln_discussion


def _check_content(rule: Optional[Union[Rule, CanonicalRule]]) -> Optional[str]:
    if rule is None or not rule.checks:
        return None
    return rule.checks[0].content


def csv_attributes(component: Component, rule: Rule) -> list[Optional[str]]:
    """One export row, in ``DISA_EXPORT_HEADERS`` order."""
    srg_rule = rule.srg_rule
    description = rule.disa_rule_description
    return [
        description.ia_controls if description else None,
        rule.ident,
        rule.version,
        f"{component.prefix}-{rule.rule_id}",
        srg_rule.title if srg_rule else None,
        rule.title,
        _vuln_discussion(srg_rule),
        _vuln_discussion(rule),
        rule.status,
        _check_content(srg_rule),
        _check_content(rule),
        srg_rule.fixtext if srg_rule else None,
        rule.fixtext,
        SEVERITIES_MAP.get(rule.rule_severity, rule.rule_severity),
        description.mitigations if description else None,
        rule.artifact_description,
        rule.status_justification,
        rule.vendor_comments,
    ]


async def export_component_csv(session: AsyncSession, component: Component) -> str:
    """Render the component's rules ordered by (version, rule_id)."""
    rules = await RuleRepository(session).get_by_component_for_export(component.id)
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(DISA_EXPORT_HEADERS)
    for rule in rules:
        writer.writerow(csv_attributes(component, rule))
    return buffer.getvalue()
