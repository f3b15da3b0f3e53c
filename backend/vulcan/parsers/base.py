"""Raw records produced by the parsers before they become models."""

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class RawDisaDescription:
    """Fields carried in a rule's DISA description pseudo-markup."""

    vuln_discussion: Optional[str] = None
    false_positives: Optional[str] = None
    false_negatives: Optional[str] = None
    documentable: bool = False
    mitigations: Optional[str] = None
    severity_override_guidance: Optional[str] = None
    potential_impacts: Optional[str] = None
    third_party_tools: Optional[str] = None
    mitigation_control: Optional[str] = None
    responsibility: Optional[str] = None
    ia_controls: Optional[str] = None


@dataclass
class RawCheck:
    """Check block of a benchmark rule."""

    system: Optional[str] = None
    content_ref_name: Optional[str] = None
    content_ref_href: Optional[str] = None
    content: Optional[str] = None


@dataclass
class RawRule:
    """One rule descriptor read from a benchmark."""

    position: int
    rule_id: Optional[str]
    version: Optional[str] = None
    title: Optional[str] = None
    severity: Optional[str] = None
    weight: Optional[str] = None
    ident: Optional[str] = None
    ident_system: Optional[str] = None
    fixtext: Optional[str] = None
    fixtext_fixref: Optional[str] = None
    fix_id: Optional[str] = None
    description: Optional[str] = None
    disa_description: RawDisaDescription = field(default_factory=RawDisaDescription)
    check: Optional[RawCheck] = None


@dataclass
class BenchmarkMetadata:
    """Top-level guide metadata. Any field may be missing."""

    benchmark_id: Optional[str] = None
    title: Optional[str] = None
    version: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "benchmark_id": self.benchmark_id,
            "title": self.title,
            "version": self.version,
        }
