"""
Sheet Service - row-level operations on stored sheets.

Every mutation loads the whole sheet, edits a copy of its rows and writes the
full list back. There is no version column or lock, so two concurrent
mutations of the same sheet resolve as last-write-wins.
"""

import logging
from datetime import datetime
from typing import Any, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.models.schema import Sheet
from services.errors import (
    InvalidRowIndexError, MissingInputError, ProcessingError, SheetNotFoundError
)

logger = logging.getLogger(__name__)


class SheetService:
    """
    Framework-agnostic service for fetching sheets and mutating their rows.

    Rows are addressed by position only. When several documents share a
    name (the same worksheet imported twice), the earliest inserted one is
    read and mutated.
    """

    def __init__(self, db_session: Session):
        self.session = db_session

    def get_sheet(self, name: str) -> Sheet:
        """
        Fetch a sheet by name.

        Raises:
            SheetNotFoundError: If no document has that name
        """
        sheet = self.session.query(Sheet)\
            .filter(Sheet.name == name)\
            .order_by(Sheet.id.asc())\
            .first()

        if sheet is None:
            raise SheetNotFoundError(name)

        return sheet

    def list_sheets(
        self,
        page: int = 1,
        page_size: int = 50,
        search: Optional[str] = None
    ) -> Tuple[List[Sheet], int]:
        """
        List stored sheets, newest first.

        Returns:
            (sheets on the requested page, total matching count)
        """
        query = self.session.query(Sheet)

        if search:
            # % and _ in the search text match literally
            pattern = search.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
            query = query.filter(Sheet.name.ilike(f"%{pattern}%", escape="\\"))

        total = query.count()

        sheets = query.order_by(Sheet.id.desc())\
            .offset((page - 1) * page_size)\
            .limit(page_size)\
            .all()

        return sheets, total

    def append_row(self, name: str, row: Optional[List[Any]]) -> int:
        """
        Append a row to the end of a sheet. The row's shape is not checked.

        Returns:
            New row count
        """
        self._require_row(row)
        sheet = self.get_sheet(name)

        rows = list(sheet.rows or [])
        rows.append(row)
        self._save(sheet, rows)

        logger.info(f"Appended row to '{name}' (now {len(rows)} rows)")
        return len(rows)

    def replace_row(self, name: str, index: int, row: Optional[List[Any]]) -> None:
        """
        Overwrite the row at ``index`` in place.

        Raises:
            SheetNotFoundError: If the sheet does not exist
            InvalidRowIndexError: If index is outside [0, len(rows))
        """
        self._require_row(row)
        sheet = self.get_sheet(name)

        rows = list(sheet.rows or [])
        self._check_index(index, len(rows))

        rows[index] = row
        self._save(sheet, rows)

        logger.info(f"Replaced row {index} of '{name}'")

    def delete_row(self, name: str, index: int) -> int:
        """
        Remove the row at ``index``; later rows shift down by one.

        Returns:
            New row count
        """
        sheet = self.get_sheet(name)

        rows = list(sheet.rows or [])
        self._check_index(index, len(rows))

        del rows[index]
        self._save(sheet, rows)

        logger.info(f"Deleted row {index} of '{name}' (now {len(rows)} rows)")
        return len(rows)

    @staticmethod
    def _require_row(row: Optional[List[Any]]):
        if row is None:
            raise MissingInputError("Request body must include 'row'")

    @staticmethod
    def _check_index(index: int, length: int):
        if index < 0 or index >= length:
            raise InvalidRowIndexError(index, length)

    def _save(self, sheet: Sheet, rows: List[List[Any]]):
        """Write the full row list back (a new list, so the JSON column is flagged dirty)."""
        sheet.rows = rows
        sheet.updated_at = datetime.utcnow()
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Saving sheet '{sheet.name}' failed: {e}", exc_info=True)
            self.session.rollback()
            raise ProcessingError("Failed to save sheet", cause=e)
