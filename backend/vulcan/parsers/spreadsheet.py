"""Spreadsheet reader for component imports.

Accepts ``.xlsx`` workbooks (first sheet) and ``.csv`` files. The first row
holds the headers; every following non-empty row becomes a dict keyed by
header.
"""

import csv
import io
import zipfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from vulcan.errors import UnreadableSpreadsheetError

Row = dict[str, Optional[str]]


@dataclass
class SpreadsheetTable:
    """Header row plus data rows of one sheet."""

    headers: list[str] = field(default_factory=list)
    rows: list[Row] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.rows)


def _cell_to_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value)
    return text if text.strip() else None


def _build_table(raw_rows: list[tuple[Any, ...]]) -> SpreadsheetTable:
    if not raw_rows:
        return SpreadsheetTable()
    headers = [str(h).strip() if h is not None else "" for h in raw_rows[0]]
    table = SpreadsheetTable(headers=[h for h in headers if h])
    for raw in raw_rows[1:]:
        values = [_cell_to_text(v) for v in raw]
        if not any(values):
            continue
        row: Row = {}
        for index, header in enumerate(headers):
            if header:
                row[header] = values[index] if index < len(values) else None
        table.rows.append(row)
    return table


def _read_xlsx(data: bytes) -> SpreadsheetTable:
    workbook = load_workbook(io.BytesIO(data), read_only=True, data_only=True)
    try:
        sheet = workbook.worksheets[0]
        return _build_table(list(sheet.iter_rows(values_only=True)))
    finally:
        workbook.close()


def _read_csv(data: bytes) -> SpreadsheetTable:
    text = data.decode("utf-8-sig")
    return _build_table([tuple(row) for row in csv.reader(io.StringIO(text))])


def read_spreadsheet(
    source: Union[bytes, str, Path],
    filename: Optional[str] = None,
) -> SpreadsheetTable:
    """Read the first sheet of a workbook or a CSV file.

    Args:
        source: File contents, or a path to the file
        filename: Original file name; its extension selects the format

    Raises:
        UnreadableSpreadsheetError: if the file cannot be decoded
    """
    if isinstance(source, (str, Path)):
        path = Path(source)
        filename = filename or path.name
        data = path.read_bytes()
    else:
        data = source

    suffix = Path(filename).suffix.lower() if filename else ".xlsx"
    try:
        if suffix == ".csv":
            return _read_csv(data)
        return _read_xlsx(data)
    except (
        InvalidFileException,
        zipfile.BadZipFile,
        UnicodeDecodeError,
        csv.Error,
        KeyError,
        ValueError,
        OSError,
    ) as e:
        raise UnreadableSpreadsheetError(str(e) or type(e).__name__, filename) from e
