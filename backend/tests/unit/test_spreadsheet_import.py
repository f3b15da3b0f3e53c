"""Tests for the tabular override importer."""

import pytest

from tests.factories import spreadsheet_row, spreadsheet_table, srg_version
from vulcan.constants import DEFAULT_STATUS, REQUIRED_HEADERS
from vulcan.errors import (
    MissingHeadersError,
    MissingPrefixError,
    MissingSrgIdsError,
    SpreadsheetImportError,
)
from vulcan.models import CanonicalRule, Check, Component, DisaRuleDescription
from vulcan.services.spreadsheet_import import (
    TabularOverrideImporter,
    detect_prefix,
    missing_headers,
    missing_srg_ids,
    resolve_severity,
    resolve_status,
    rule_number,
)


def _canonical(number: int, severity: str = "medium") -> CanonicalRule:
    return CanonicalRule(
        rule_id=f"SV-{number}r1_rule",
        version=srg_version(number),
        title=f"Canonical title {number}",
        rule_severity=severity,
        position=number,
        disa_rule_descriptions=[DisaRuleDescription(vuln_discussion=f"Canonical discussion {number}")],
        checks=[Check(content=f"Canonical check {number}")],
    )


@pytest.fixture
def importer() -> TabularOverrideImporter:
    return TabularOverrideImporter([_canonical(n) for n in range(1, 4)])


class TestHelpers:
    """Tests for the row-level helpers."""

    def test_missing_headers_in_required_order(self):
        table = spreadsheet_table([], headers=["SRGID", "STIGID"])

        missing = missing_headers(table)

        assert missing == REQUIRED_HEADERS[2:]

    def test_missing_srg_ids_first_seen_order(self):
        table = spreadsheet_table(
            [spreadsheet_row(9), spreadsheet_row(1), spreadsheet_row(8), spreadsheet_row(9)]
        )

        assert missing_srg_ids(table, {srg_version(1)}) == [srg_version(9), srg_version(8)]

    def test_detect_prefix_skips_blank(self):
        table = spreadsheet_table([spreadsheet_row(1, STIGID=None), spreadsheet_row(2, prefix="QRST-09")])

        assert detect_prefix(table) == "QRST-09"

    def test_detect_prefix_none(self):
        assert detect_prefix(spreadsheet_table([spreadsheet_row(1, STIGID="  ")])) is None

    def test_rule_number(self):
        assert rule_number("ABCD-00-000123", "ABCD-00") == "000123"
        assert rule_number("abcd-00-000123", "ABCD-00") == "000123"
        assert rule_number("ABCD-00-V1R2", "ABCD-00") == "12"
        assert rule_number(None, "ABCD-00") == ""

    def test_resolve_status(self):
        assert resolve_status("applicable - DOES NOT meet") == "Applicable - Does Not Meet"
        assert resolve_status("") == DEFAULT_STATUS
        assert resolve_status(None) == DEFAULT_STATUS
        assert resolve_status("Approved") == DEFAULT_STATUS

    def test_resolve_severity(self):
        assert resolve_severity("cat ii") == "medium"
        assert resolve_severity(" CAT I ") == "high"
        assert resolve_severity("CAT III") == "low"
        assert resolve_severity("severe") is None
        assert resolve_severity(None) is None


class TestValidate:
    """Tests for whole-table checks."""

    def test_missing_severity_header(self, importer):
        headers = [h for h in REQUIRED_HEADERS if h != "Severity"]

        with pytest.raises(MissingHeadersError) as exc_info:
            importer.validate(spreadsheet_table([spreadsheet_row(1)], headers=headers))

        assert exc_info.value.missing == ["Severity"]

    def test_missing_srg_ids_listed_and_truncated(self, importer):
        """Test 500 unknown SRG ids are reported with the list cut to 300 characters."""
        rows = [spreadsheet_row(1000 + n) for n in range(500)]

        with pytest.raises(MissingSrgIdsError) as exc_info:
            importer.validate(spreadsheet_table(rows))

        error = exc_info.value
        assert len(error.missing) == 500
        listed = error.message.split("selected SRG ", 1)[1].split(". Please remove", 1)[0]
        assert len(listed) == 300
        assert listed.endswith("...")

    def test_missing_prefix(self, importer):
        rows = [spreadsheet_row(1, STIGID=None), spreadsheet_row(2, STIGID=None)]

        with pytest.raises(MissingPrefixError):
            importer.validate(spreadsheet_table(rows))

    def test_header_check_runs_first(self, importer):
        """Test headers are checked before SRG ids."""
        headers = [h for h in REQUIRED_HEADERS if h != "Check"]

        with pytest.raises(MissingHeadersError):
            importer.validate(spreadsheet_table([spreadsheet_row(99)], headers=headers))


class TestApplyOverrides:
    """Tests for rule construction from rows."""

    def test_blank_status_becomes_default(self, importer):
        component = Component(name="Photon", prefix=None)

        rules = importer.apply_overrides(component, spreadsheet_table([spreadsheet_row(1, Status=None)]))

        assert rules[0].status == DEFAULT_STATUS

    def test_cat_ii_becomes_medium(self):
        importer = TabularOverrideImporter([_canonical(1, severity="high")])
        component = Component(name="Photon")

        rules = importer.apply_overrides(component, spreadsheet_table([spreadsheet_row(1, Severity="cat ii")]))

        assert rules[0].rule_severity == "medium"

    def test_unknown_severity_keeps_canonical(self):
        importer = TabularOverrideImporter([_canonical(1, severity="high")])
        component = Component(name="Photon")

        rules = importer.apply_overrides(component, spreadsheet_table([spreadsheet_row(1, Severity="urgent")]))

        assert rules[0].rule_severity == "high"

    def test_prefix_and_fields(self, importer):
        component = Component(name="Photon", prefix="ZZZZ-99")

        rules = importer.apply_overrides(component, spreadsheet_table([spreadsheet_row(2)]))

        assert component.prefix == "ABCD-00"
        rule = rules[0]
        assert rule.rule_id == "000020"
        assert rule.version == srg_version(2)
        assert rule.title == "Component requirement 2"
        assert rule.fixtext == "Component fix 2"
        assert rule.locked is False
        assert rule.disa_rule_descriptions[0].vuln_discussion == "Component discussion 2"
        assert rule.checks[0].content == "Component check 2"

    def test_blank_stig_id_rejected(self, importer):
        component = Component(name="Photon")
        rows = [spreadsheet_row(1), spreadsheet_row(2, STIGID="ABCD-00-")]

        with pytest.raises(SpreadsheetImportError) as exc_info:
            importer.apply_overrides(component, spreadsheet_table(rows))

        assert "ABCD-00-" in exc_info.value.message
