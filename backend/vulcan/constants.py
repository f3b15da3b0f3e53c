"""Fixed enumerations shared by rule import, derivation and export."""

import re
from enum import Enum


class RuleStatus(str, Enum):
    """Allowed rule statuses. Declaration order matters: the first one is the default."""

    NOT_YET_DETERMINED = "Not Yet Determined"
    APPLICABLE_CONFIGURABLE = "Applicable - Configurable"
    APPLICABLE_INHERENTLY_MEETS = "Applicable - Inherently Meets"
    APPLICABLE_DOES_NOT_MEET = "Applicable - Does Not Meet"
    NOT_APPLICABLE = "Not Applicable"


STATUSES: list[str] = [s.value for s in RuleStatus]
DEFAULT_STATUS = STATUSES[0]


class Severity(str, Enum):
    """Stored rule severities."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# Stored severity -> display category
SEVERITIES_MAP: dict[str, str] = {
    Severity.LOW.value: "CAT III",
    Severity.MEDIUM.value: "CAT II",
    Severity.HIGH.value: "CAT I",
}

# Display category -> stored severity
SEVERITIES_BY_CATEGORY: dict[str, str] = {v: k for k, v in SEVERITIES_MAP.items()}

DEFAULT_SEVERITY = Severity.MEDIUM.value

# Spreadsheet column for each rule attribute
IMPORT_MAPPING: dict[str, str] = {
    "srg_id": "SRGID",
    "stig_id": "STIGID",
    "title": "Requirement",
    "fixtext": "Fix",
    "artifact_description": "Artifact Description",
    "status_justification": "Status Justification",
    "vendor_comments": "Vendor Comments",
    "status": "Status",
    "rule_severity": "Severity",
    "vuln_discussion": "VulDiscussion",
    "check_content": "Check",
}

REQUIRED_HEADERS: list[str] = list(IMPORT_MAPPING.values())

DISA_EXPORT_HEADERS: list[str] = [
    "IA Control",
    "CCI",
    "SRGID",
    "STIGID",
    "SRG Requirement",
    "Requirement",
    "SRG VulDiscussion",
    "VulDiscussion",
    "Status",
    "SRG Check",
    "Check",
    "SRG Fix",
    "Fix",
    "Severity",
    "Mitigation",
    "Artifact Description",
    "Status Justification",
    "Vendor Comments",
]

# Component prefixes look like ABCD-00
PREFIX_PATTERN = re.compile(r"^\w{4}-\w{2}$")
PREFIX_LENGTH = 7

# Width of generated rule identifiers (000001, 000002, ...)
RULE_ID_WIDTH = 6
