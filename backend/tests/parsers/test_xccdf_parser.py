"""Tests for the XCCDF benchmark parser."""

import pytest

from tests.factories import XCCDF_12_NS, build_benchmark, srg_version
from vulcan.errors import BenchmarkParseError
from vulcan.parsers.xccdf import (
    extract_revision,
    parse_benchmark,
    parse_disa_description,
)


class TestBenchmarkMetadata:
    """Tests for best-effort metadata extraction."""

    def test_metadata_from_complete_document(self):
        """Test id, title and version are read from the benchmark."""
        parsed = parse_benchmark(build_benchmark())

        assert parsed.metadata.benchmark_id == "SRG-OS"
        assert parsed.metadata.title.startswith("General Purpose Operating System")
        assert parsed.metadata.version == "V2R4"

    def test_version_without_release_marker(self):
        """Test version has no revision suffix when no release text exists."""
        parsed = parse_benchmark(build_benchmark(release=None))

        assert parsed.metadata.version == "V2"

    def test_release_marker_read_from_first_plain_text_only(self):
        """Test a release marker in a later plain-text element is ignored."""
        document = build_benchmark().replace(
            '<plain-text id="release-info">',
            '<plain-text id="generator">Generated by the DISA content tool</plain-text>'
            '<plain-text id="release-info">',
        )

        parsed = parse_benchmark(document)

        assert parsed.metadata.version == "V2"

    def test_missing_version_is_none(self):
        """Test a missing version element yields None instead of failing."""
        parsed = parse_benchmark(build_benchmark(version=None))

        assert parsed.metadata.version is None

    def test_missing_title_is_none(self):
        """Test a missing title yields None."""
        parsed = parse_benchmark(build_benchmark(title=None))

        assert parsed.metadata.title is None

    def test_xccdf_12_namespace(self):
        """Test the 1.2 namespace parses the same way."""
        parsed = parse_benchmark(build_benchmark(namespace=XCCDF_12_NS))

        assert parsed.metadata.version == "V2R4"
        assert parsed.rule_count == 3

    def test_extract_revision(self):
        assert extract_revision("Release: 12 Benchmark Date: 01 Jan 2024") == "R12"
        assert extract_revision("Benchmark Date: 01 Jan 2024") == ""
        assert extract_revision(None) == ""


class TestRuleDescriptors:
    """Tests for rule descriptor extraction."""

    def test_rules_in_document_order(self):
        """Test rules are yielded in order with 1-based positions."""
        rules = list(parse_benchmark(build_benchmark(rule_count=4)).iter_rules())

        assert [r.position for r in rules] == [1, 2, 3, 4]
        assert [r.version for r in rules] == [srg_version(n) for n in range(1, 5)]

    def test_rule_fields(self):
        """Test a rule carries its identifiers, fix and check."""
        rule = next(parse_benchmark(build_benchmark(rule_count=1)).iter_rules())

        assert rule.rule_id == "SV-1r1_rule"
        assert rule.severity == "medium"
        assert rule.weight == "10.0"
        assert rule.ident == "CCI-000001"
        assert rule.ident_system == "http://cyber.mil/cci"
        assert rule.fixtext_fixref == "F-1r1_fix"
        assert rule.fix_id == "F-1r1_fix"
        assert rule.check.system == "C-1r1_chk"
        assert rule.check.content_ref_name == "M"
        assert rule.check.content.startswith("Verify")

    def test_rule_description_markup_is_split(self):
        """Test the DISA pseudo-markup in the description is parsed."""
        rule = next(parse_benchmark(build_benchmark(rule_count=1)).iter_rules())

        assert rule.disa_description.vuln_discussion == "Discussion for requirement 1."
        assert rule.disa_description.ia_controls == "AC-1"
        assert rule.disa_description.false_positives is None
        assert rule.disa_description.documentable is False

    def test_rule_without_id(self):
        """Test a rule missing its id attribute is still yielded."""
        rules = list(parse_benchmark(build_benchmark(rule_count=2, without_id=(2,))).iter_rules())

        assert rules[1].rule_id is None

    def test_rule_without_severity(self):
        rule = next(parse_benchmark(build_benchmark(rule_count=1, severities={1: None})).iter_rules())

        assert rule.severity is None


class TestDisaDescription:
    """Tests for the description pseudo-markup parser."""

    def test_empty_description(self):
        parsed = parse_disa_description(None)

        assert parsed.vuln_discussion is None
        assert parsed.documentable is False

    def test_documentable_true(self):
        parsed = parse_disa_description("<Documentable>true</Documentable>")

        assert parsed.documentable is True

    def test_multiline_values(self):
        parsed = parse_disa_description("<Mitigations>line one\nline two</Mitigations>")

        assert parsed.mitigations == "line one\nline two"


class TestParseErrors:
    """Tests for documents the parser must reject."""

    def test_empty_document(self):
        with pytest.raises(BenchmarkParseError):
            parse_benchmark("")

    def test_not_well_formed(self):
        """Test malformed XML raises with the xml field."""
        with pytest.raises(BenchmarkParseError) as exc_info:
            parse_benchmark("<Benchmark><title>broken")

        assert exc_info.value.field == "xml"
        assert "not valid XML" in exc_info.value.message

    def test_wrong_root_element(self):
        with pytest.raises(BenchmarkParseError) as exc_info:
            parse_benchmark("<Profile id='x'/>")

        assert "Benchmark" in exc_info.value.message

    def test_entities_are_not_expanded(self):
        """Test external entities are never resolved."""
        document = (
            '<?xml version="1.0"?>'
            '<!DOCTYPE Benchmark [<!ENTITY xxe SYSTEM "file:///etc/passwd">]>'
            '<Benchmark id="x"><title>&xxe;</title></Benchmark>'
        )

        parsed = parse_benchmark(document)

        assert parsed.metadata.title is None or "root:" not in parsed.metadata.title
