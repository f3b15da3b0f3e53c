"""XCCDF benchmark parser.

Reads SRG benchmark documents (XCCDF 1.1, 1.2 tolerated) into guide metadata
and a lazy sequence of rule descriptors. Element lookups ignore the namespace
so either schema revision parses the same way.

Metadata extraction is best-effort: each ``extract_*`` function returns
``None`` for a field it cannot find instead of failing the parse. Whether a
document missing its title or version should instead be rejected outright is
still an open product decision; the guide import validates presence
afterwards and reports missing fields as attached errors.

The rule list is not best-effort. A document that is not well-formed XML or
whose root is not a ``Benchmark`` raises ``BenchmarkParseError``.
"""

import re
from dataclasses import dataclass
from typing import Iterator, Optional, Union

import lxml.etree as etree  # nosec B410 - parser below disables entities and network access

from vulcan.errors import BenchmarkParseError, abbreviate
from vulcan.parsers.base import BenchmarkMetadata, RawCheck, RawDisaDescription, RawRule

RELEASE_MARKER = "Release: "

# Pseudo-markup tag in a rule description -> RawDisaDescription attribute
DISA_DESCRIPTION_TAGS: dict[str, str] = {
    "VulnDiscussion": "vuln_discussion",
    "FalsePositives": "false_positives",
    "FalseNegatives": "false_negatives",
    "Documentable": "documentable",
    "Mitigations": "mitigations",
    "SeverityOverrideGuidance": "severity_override_guidance",
    "PotentialImpacts": "potential_impacts",
    "ThirdPartyTools": "third_party_tools",
    "MitigationControl": "mitigation_control",
    "Responsibility": "responsibility",
    "IAControls": "ia_controls",
}


def _secure_parser() -> etree.XMLParser:
    return etree.XMLParser(
        resolve_entities=False,
        no_network=True,
        remove_comments=True,
        remove_pis=True,
        huge_tree=True,
    )


def _local_name(element: etree._Element) -> str:
    return etree.QName(element).localname


def _text(element: Optional[etree._Element]) -> Optional[str]:
    if element is None or element.text is None:
        return None
    text = element.text.strip()
    return text or None


def extract_benchmark_id(root: etree._Element) -> Optional[str]:
    """Best-effort: the benchmark ``id`` attribute."""
    return root.get("id") or None


def extract_title(root: etree._Element) -> Optional[str]:
    """Best-effort: text of the benchmark's first ``title`` child."""
    return _text(root.find("{*}title"))


def extract_revision(plain_text: Optional[str]) -> str:
    """``"R<N>"`` from a ``Release: N`` marker, or an empty string when there is none."""
    if not plain_text or RELEASE_MARKER not in plain_text:
        return ""
    match = re.match(r"\d+", plain_text.split(RELEASE_MARKER, 1)[1])
    return f"R{match.group(0)}" if match else ""


def extract_version(root: etree._Element) -> Optional[str]:
    """Best-effort: ``"V<version><revision>"``, ``None`` when there is no version element.

    Only the first ``plain-text`` element is consulted for the release marker.
    """
    major = _text(root.find("{*}version"))
    if major is None:
        return None
    plain_text = root.find("{*}plain-text")
    release_text = plain_text.text if plain_text is not None else None
    return f"V{major}{extract_revision(release_text)}"


def parse_disa_description(description: Optional[str]) -> RawDisaDescription:
    """Split the pseudo-markup carried inside a rule description."""
    parsed = RawDisaDescription()
    if not description:
        return parsed
    for tag, attribute in DISA_DESCRIPTION_TAGS.items():
        match = re.search(rf"<{tag}>(.*?)</{tag}>", description, re.DOTALL)
        if not match:
            continue
        value = match.group(1).strip()
        if attribute == "documentable":
            parsed.documentable = value.lower() == "true"
        else:
            setattr(parsed, attribute, value or None)
    return parsed


def _parse_check(rule: etree._Element) -> Optional[RawCheck]:
    check = rule.find("{*}check")
    if check is None:
        return None
    content_ref = check.find("{*}check-content-ref")
    return RawCheck(
        system=check.get("system"),
        content_ref_name=content_ref.get("name") if content_ref is not None else None,
        content_ref_href=content_ref.get("href") if content_ref is not None else None,
        content=_text(check.find("{*}check-content")),
    )


def parse_rule(rule: etree._Element, position: int) -> RawRule:
    """Map one ``Rule`` element onto a descriptor."""
    ident = rule.find("{*}ident")
    fixtext = rule.find("{*}fixtext")
    fix = rule.find("{*}fix")
    description = _text(rule.find("{*}description"))
    return RawRule(
        position=position,
        rule_id=rule.get("id") or None,
        version=_text(rule.find("{*}version")),
        title=_text(rule.find("{*}title")),
        severity=rule.get("severity"),
        weight=rule.get("weight"),
        ident=_text(ident),
        ident_system=ident.get("system") if ident is not None else None,
        fixtext=_text(fixtext),
        fixtext_fixref=fixtext.get("fixref") if fixtext is not None else None,
        fix_id=fix.get("id") if fix is not None else None,
        description=description,
        disa_description=parse_disa_description(description),
        check=_parse_check(rule),
    )


@dataclass
class ParsedBenchmark:
    """A parsed benchmark document."""

    root: etree._Element
    metadata: BenchmarkMetadata

    def iter_rules(self) -> Iterator[RawRule]:
        """Yield rule descriptors in document order, numbered from 1."""
        for position, element in enumerate(self.root.iterfind(".//{*}Rule"), start=1):
            yield parse_rule(element, position)

    @property
    def rule_count(self) -> int:
        return sum(1 for _ in self.root.iterfind(".//{*}Rule"))


def parse_benchmark(document: Union[str, bytes]) -> ParsedBenchmark:
    """Parse a benchmark document.

    Raises:
        BenchmarkParseError: if the document is empty, not well-formed, or
            not an XCCDF Benchmark.
    """
    if not document:
        raise BenchmarkParseError("The benchmark document is empty", field="xml")
    if isinstance(document, str):
        document = document.encode("utf-8")
    try:
        root = etree.fromstring(document, parser=_secure_parser())  # nosec B320
    except etree.XMLSyntaxError as e:
        raise BenchmarkParseError(
            f"The benchmark document is not valid XML: {abbreviate(str(e))}", field="xml"
        ) from e

    if _local_name(root) != "Benchmark":
        raise BenchmarkParseError(
            f"Expected an XCCDF Benchmark document but found <{_local_name(root)}>", field="xml"
        )

    metadata = BenchmarkMetadata(
        benchmark_id=extract_benchmark_id(root),
        title=extract_title(root),
        version=extract_version(root),
    )
    return ParsedBenchmark(root=root, metadata=metadata)
