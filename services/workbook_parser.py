"""
Workbook Parser - turn uploaded spreadsheet bytes into row grids.

Supports the zipped XML workbook (.xlsx/.xlsm, via openpyxl) and the legacy
binary workbook (.xls, via xlrd). The format is detected from the leading
bytes of the upload, never from the filename.
"""

import io
import logging
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, List, Tuple

import openpyxl
import xlrd

from services.errors import ProcessingError

logger = logging.getLogger(__name__)

XLSX_MAGIC = b'PK\x03\x04'
XLS_MAGIC = b'\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1'

FORMAT_XLSX = 'xlsx'
FORMAT_XLS = 'xls'

Row = List[Any]
ParsedSheet = Tuple[str, List[Row]]


def detect_format(content: bytes) -> str:
    """
    Detect workbook container format from magic bytes.

    Raises:
        ProcessingError: If the bytes match neither supported container
    """
    if content.startswith(XLSX_MAGIC):
        return FORMAT_XLSX
    if content.startswith(XLS_MAGIC):
        return FORMAT_XLS
    raise ProcessingError("Unrecognized spreadsheet format")


def normalize_cell(value: Any) -> Any:
    """Convert a parsed cell value into something JSON can store."""
    if isinstance(value, datetime):
        if value.time() == time(0, 0):
            return value.date().isoformat()
        return value.isoformat()
    if isinstance(value, (date, time)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def trim_row(row: Row) -> Row:
    """Drop trailing empty cells."""
    end = len(row)
    while end > 0 and row[end - 1] in (None, ''):
        end -= 1
    return row[:end]


def trim_grid(rows: List[Row]) -> List[Row]:
    """Trim each row and drop trailing fully-empty rows. Interior blank rows stay."""
    trimmed = [trim_row(row) for row in rows]
    while trimmed and not trimmed[-1]:
        trimmed.pop()
    return trimmed


class WorkbookParser:
    """Parse every worksheet of a workbook into an ordered row grid."""

    def parse(self, content: bytes) -> List[ParsedSheet]:
        """
        Parse workbook bytes.

        Args:
            content: Raw upload bytes

        Returns:
            List of (worksheet_name, rows) in workbook order

        Raises:
            ProcessingError: If the format is unknown or the parser fails
        """
        workbook_format = detect_format(content)
        logger.info(f"Parsing {workbook_format} workbook ({len(content)} bytes)")

        try:
            if workbook_format == FORMAT_XLSX:
                sheets = self._parse_xlsx(content)
            else:
                sheets = self._parse_xls(content)
        except ProcessingError:
            raise
        except Exception as e:
            logger.error(f"Workbook parsing failed: {e}", exc_info=True)
            raise ProcessingError("Failed to parse workbook", cause=e)

        logger.info(f"Parsed {len(sheets)} sheets: {[name for name, _ in sheets]}")
        return sheets

    def _parse_xlsx(self, content: bytes) -> List[ParsedSheet]:
        # data_only: cached formula results, not formula text
        wb = openpyxl.load_workbook(io.BytesIO(content), read_only=True, data_only=True)
        try:
            sheets = []
            for ws in wb.worksheets:
                rows = [
                    [normalize_cell(value) for value in row]
                    for row in ws.iter_rows(values_only=True)
                ]
                sheets.append((ws.title, trim_grid(rows)))
            return sheets
        finally:
            wb.close()

    def _parse_xls(self, content: bytes) -> List[ParsedSheet]:
        book = xlrd.open_workbook(file_contents=content)
        sheets = []
        for ws in book.sheets():
            rows = []
            for r in range(ws.nrows):
                rows.append([
                    self._xls_cell_value(ws.cell(r, c), book.datemode)
                    for c in range(ws.ncols)
                ])
            sheets.append((ws.name, trim_grid(rows)))
        return sheets

    @staticmethod
    def _xls_cell_value(cell, datemode: int) -> Any:
        """Map an xlrd cell to a plain value."""
        if cell.ctype in (xlrd.XL_CELL_EMPTY, xlrd.XL_CELL_BLANK):
            return None
        if cell.ctype == xlrd.XL_CELL_DATE:
            return normalize_cell(xlrd.xldate_as_datetime(cell.value, datemode))
        if cell.ctype == xlrd.XL_CELL_BOOLEAN:
            return bool(cell.value)
        if cell.ctype == xlrd.XL_CELL_ERROR:
            return xlrd.error_text_from_code.get(cell.value)
        return normalize_cell(cell.value)
