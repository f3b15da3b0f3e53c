"""Builders for benchmark documents, spreadsheet rows and notification capture."""

import csv
import io
from typing import Optional

from vulcan.constants import REQUIRED_HEADERS
from vulcan.notifications import Notification
from vulcan.parsers import SpreadsheetTable

XCCDF_11_NS = "http://checklists.nist.gov/xccdf/1.1"
XCCDF_12_NS = "http://checklists.nist.gov/xccdf/1.2"

GUIDE_TITLE = "General Purpose Operating System Security Requirements Guide"


class RecordingNotifier:
    """Notifier that keeps every notification for assertions."""

    def __init__(self):
        self.sent: list[Notification] = []

    async def send(self, notification: Notification) -> None:
        self.sent.append(notification)

    @property
    def headers(self) -> list[Optional[str]]:
        return [n.header for n in self.sent]


def srg_version(number: int) -> str:
    """SRG identifier carried in a rule's ``version`` element."""
    return f"SRG-OS-{number:06d}-GPOS-{number:05d}"


def _rule_xml(number: int, severity: Optional[str], with_id: bool) -> str:
    rule_id = f' id="SV-{number}r1_rule"' if with_id else ""
    severity_attr = f' severity="{severity}"' if severity else ""
    return f"""
  <Group id="V-{number}">
    <title>{srg_version(number)}</title>
    <Rule{rule_id} weight="10.0"{severity_attr}>
      <version>{srg_version(number)}</version>
      <title>The operating system must enforce requirement {number}.</title>
      <description>&lt;VulnDiscussion&gt;Discussion for requirement {number}.&lt;/VulnDiscussion&gt;&lt;FalsePositives&gt;&lt;/FalsePositives&gt;&lt;Documentable&gt;false&lt;/Documentable&gt;&lt;IAControls&gt;AC-{number}&lt;/IAControls&gt;</description>
      <ident system="http://cyber.mil/cci">CCI-{number:06d}</ident>
      <fixtext fixref="F-{number}r1_fix">Configure the operating system for requirement {number}.</fixtext>
      <fix id="F-{number}r1_fix" />
      <check system="C-{number}r1_chk">
        <check-content-ref href="Test.xml" name="M" />
        <check-content>Verify the operating system meets requirement {number}.</check-content>
      </check>
    </Rule>
  </Group>"""


def build_benchmark(
    rule_count: int = 3,
    *,
    benchmark_id: str = "SRG-OS",
    title: Optional[str] = GUIDE_TITLE,
    version: Optional[str] = "2",
    release: Optional[str] = "4",
    namespace: str = XCCDF_11_NS,
    severities: Optional[dict[int, Optional[str]]] = None,
    without_id: tuple[int, ...] = (),
) -> str:
    """Render a small XCCDF benchmark with ``rule_count`` rules numbered from 1."""
    severities = severities or {}
    rules = "".join(
        _rule_xml(n, severities.get(n, "medium"), n not in without_id)
        for n in range(1, rule_count + 1)
    )
    title_xml = f"<title>{title}</title>" if title else ""
    version_xml = f"<version>{version}</version>" if version else ""
    release_xml = (
        f'<plain-text id="release-info">Release: {release} Benchmark Date: 26 Jul 2023</plain-text>'
        if release
        else ""
    )
    return f"""<?xml version="1.0" encoding="UTF-8"?>
<Benchmark xmlns="{namespace}" id="{benchmark_id}" xml:lang="en">
  <status date="2023-07-26">accepted</status>
  {title_xml}
  <description>This SRG is published as a tool to improve the security of systems.</description>
  {release_xml}
  {version_xml}{rules}
</Benchmark>
"""


def spreadsheet_row(number: int, prefix: str = "ABCD-00", **overrides: Optional[str]) -> dict[str, Optional[str]]:
    """One spreadsheet row for the canonical rule with SRG ``number``.

    Overrides are keyed by header; use ``**{"Status": None}`` style for headers with spaces.
    """
    row: dict[str, Optional[str]] = {
        "SRGID": srg_version(number),
        "STIGID": f"{prefix}-{number * 10:06d}",
        "Requirement": f"Component requirement {number}",
        "Fix": f"Component fix {number}",
        "Artifact Description": None,
        "Status Justification": None,
        "Vendor Comments": None,
        "Status": "Applicable - Configurable",
        "Severity": "CAT II",
        "VulDiscussion": f"Component discussion {number}",
        "Check": f"Component check {number}",
    }
    row.update(overrides)
    return row


def spreadsheet_table(
    rows: list[dict[str, Optional[str]]],
    headers: Optional[list[str]] = None,
) -> SpreadsheetTable:
    return SpreadsheetTable(headers=list(headers or REQUIRED_HEADERS), rows=rows)


def spreadsheet_csv(rows: list[dict[str, Optional[str]]], headers: Optional[list[str]] = None) -> bytes:
    """Serialize rows as CSV bytes the way a spreadsheet export would."""
    headers = list(headers or REQUIRED_HEADERS)
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(headers)
    for row in rows:
        writer.writerow([row.get(h) or "" for h in headers])
    return buffer.getvalue().encode("utf-8")
