"""
Export in-memory table state to an .xlsx file.
"""

import logging
import re
from pathlib import Path
from typing import Any, List

import openpyxl

logger = logging.getLogger(__name__)

# Characters Excel rejects in sheet titles; titles are capped at 31 chars
_INVALID_TITLE_CHARS = re.compile(r'[\\/*?:\[\]]')
MAX_TITLE_LENGTH = 31


def safe_sheet_title(name: str) -> str:
    title = _INVALID_TITLE_CHARS.sub('_', name or '').strip()
    return (title or 'Sheet1')[:MAX_TITLE_LENGTH]


def export_rows(path: str, sheet_name: str, headers: List[Any], rows: List[List[Any]]) -> Path:
    """
    Write ``headers`` followed by ``rows`` to a single-sheet workbook.

    Returns:
        Path of the written file
    """
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = safe_sheet_title(sheet_name)

    if headers:
        ws.append(list(headers))
    for row in rows:
        ws.append(list(row))

    out = Path(path)
    wb.save(out)
    logger.info(f"Exported {len(rows)} rows of '{sheet_name}' to {out}")
    return out
