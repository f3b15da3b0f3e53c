"""Parsers for benchmark documents and component spreadsheets."""

from vulcan.parsers.base import BenchmarkMetadata, RawCheck, RawDisaDescription, RawRule
from vulcan.parsers.spreadsheet import Row, SpreadsheetTable, read_spreadsheet
from vulcan.parsers.xccdf import (
    ParsedBenchmark,
    extract_benchmark_id,
    extract_revision,
    extract_title,
    extract_version,
    parse_benchmark,
    parse_disa_description,
)

__all__ = [
    "BenchmarkMetadata",
    "RawCheck",
    "RawDisaDescription",
    "RawRule",
    "ParsedBenchmark",
    "parse_benchmark",
    "parse_disa_description",
    "extract_benchmark_id",
    "extract_revision",
    "extract_title",
    "extract_version",
    "Row",
    "SpreadsheetTable",
    "read_spreadsheet",
]
