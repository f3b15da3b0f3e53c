"""Tabular override importer.

Maps spreadsheet rows onto rules cloned from a guide's canonical rules. Every
check on the table runs before any rule is built, so a rejected table never
leaves half-populated rules behind.
"""

import re
from typing import Optional, Sequence

from vulcan.constants import (
    DEFAULT_STATUS,
    IMPORT_MAPPING,
    PREFIX_LENGTH,
    REQUIRED_HEADERS,
    SEVERITIES_BY_CATEGORY,
    STATUSES,
)
from vulcan.errors import (
    ID_LIST_DISPLAY_LIMIT,
    MissingHeadersError,
    MissingPrefixError,
    MissingSrgIdsError,
    SpreadsheetImportError,
    truncate,
)
from vulcan.models.component import Component
from vulcan.models.rule import CanonicalRule, Check, DisaRuleDescription, Rule
from vulcan.parsers.spreadsheet import Row, SpreadsheetTable
from vulcan.services.cloning import rule_from_canonical

NON_DIGITS = re.compile(r"\D")


def _cell(row: Row, attribute: str) -> Optional[str]:
    return row.get(IMPORT_MAPPING[attribute])


def missing_headers(table: SpreadsheetTable) -> list[str]:
    present = set(table.headers)
    return [header for header in REQUIRED_HEADERS if header not in present]


def missing_srg_ids(table: SpreadsheetTable, versions: set[str]) -> list[str]:
    """SRG ids referenced by rows but absent from the guide, in first-seen order."""
    missing: list[str] = []
    for row in table.rows:
        srg_id = _cell(row, "srg_id") or ""
        if srg_id not in versions and srg_id not in missing:
            missing.append(srg_id)
    return missing


def detect_prefix(table: SpreadsheetTable) -> Optional[str]:
    """First seven characters of the first non-blank STIGID."""
    for row in table.rows:
        stig_id = _cell(row, "stig_id")
        if stig_id and stig_id.strip():
            return stig_id.strip()[:PREFIX_LENGTH]
    return None


def rule_number(stig_id: Optional[str], prefix: str) -> str:
    """Strip the prefix from a STIGID and keep only its digits."""
    if not stig_id:
        return ""
    stripped = stig_id.strip()
    if stripped.upper().startswith(prefix.upper()):
        stripped = stripped[len(prefix):]
    return NON_DIGITS.sub("", stripped)


def resolve_status(value: Optional[str]) -> str:
    """Case-insensitive match against the status list, else the default status."""
    if value:
        wanted = value.strip().casefold()
        for status in STATUSES:
            if status.casefold() == wanted:
                return status
    return DEFAULT_STATUS


def resolve_severity(value: Optional[str]) -> Optional[str]:
    """Stored severity for a ``CAT`` display value, ``None`` when unrecognised."""
    if not value:
        return None
    return SEVERITIES_BY_CATEGORY.get(value.strip().upper())


class TabularOverrideImporter:
    """Builds a component's rules from a spreadsheet against one guide."""

    def __init__(self, canonical_rules: Sequence[CanonicalRule]):
        self.by_version = {rule.version: rule for rule in canonical_rules if rule.version}

    def validate(self, table: SpreadsheetTable) -> str:
        """Run the table checks in order and return the detected prefix.

        Raises:
            MissingHeadersError: required columns are absent
            MissingSrgIdsError: rows reference SRG ids the guide lacks
            MissingPrefixError: no row carries a STIGID
        """
        headers = missing_headers(table)
        if headers:
            raise MissingHeadersError(headers)

        srg_ids = missing_srg_ids(table, set(self.by_version))
        if srg_ids:
            raise MissingSrgIdsError(srg_ids)

        prefix = detect_prefix(table)
        if prefix is None:
            raise MissingPrefixError()
        return prefix

    def apply_overrides(self, component: Component, table: SpreadsheetTable) -> list[Rule]:
        """Set the component prefix and build one rule per row.

        The returned rules are not attached to a session.
        """
        prefix = self.validate(table)
        component.prefix = prefix

        rules = [self._build_rule(component, row, prefix) for row in table.rows]
        self._check_rule_ids(rules, table)
        return rules

    def _build_rule(self, component: Component, row: Row, prefix: str) -> Rule:
        canonical = self.by_version[_cell(row, "srg_id")]
        rule = rule_from_canonical(
            canonical,
            component.id,
            rule_number(_cell(row, "stig_id"), prefix),
        )
        rule.title = _cell(row, "title")
        rule.fixtext = _cell(row, "fixtext")
        rule.artifact_description = _cell(row, "artifact_description")
        rule.status_justification = _cell(row, "status_justification")
        rule.vendor_comments = _cell(row, "vendor_comments")
        rule.status = resolve_status(_cell(row, "status"))
        severity = resolve_severity(_cell(row, "rule_severity"))
        if severity:
            rule.rule_severity = severity
        rule.srg_rule_id = canonical.id

        if not rule.disa_rule_descriptions:
            rule.disa_rule_descriptions.append(DisaRuleDescription())
        rule.disa_rule_descriptions[0].vuln_discussion = _cell(row, "vuln_discussion")
        if not rule.checks:
            rule.checks.append(Check())
        rule.checks[0].content = _cell(row, "check_content")
        return rule

    @staticmethod
    def _check_rule_ids(rules: list[Rule], table: SpreadsheetTable) -> None:
        seen: set[str] = set()
        unusable: list[str] = []
        for rule, row in zip(rules, table.rows):
            if not rule.rule_id or rule.rule_id in seen:
                unusable.append(_cell(row, "stig_id") or "")
            seen.add(rule.rule_id)
        if unusable:
            raise SpreadsheetImportError(
                "The following STIGIDs do not produce a unique rule number "
                f"{truncate(', '.join(unusable), ID_LIST_DISPLAY_LIMIT)}. "
                "Please correct these rows and try again."
            )
