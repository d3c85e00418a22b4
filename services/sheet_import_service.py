"""
Sheet Import Service - Framework-agnostic import workflow.

Parses an uploaded workbook and stores one Sheet document per worksheet.
Every call inserts new documents; worksheets whose name was imported
before are not merged or replaced.
"""

import logging
from typing import Any, Callable, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.models.schema import Sheet
from services.errors import MissingInputError, ProcessingError
from services.workbook_parser import WorkbookParser

logger = logging.getLogger(__name__)


class SheetImportService:
    """
    Import spreadsheet files into the sheet store.
    """

    def __init__(
        self,
        db_session: Session,
        parser: Optional[WorkbookParser] = None,
        progress_callback: Optional[Callable[[str, float, str], None]] = None
    ):
        """
        Initialize import service.

        Args:
            db_session: SQLAlchemy database session
            parser: Workbook parser (default: WorkbookParser())
            progress_callback: Optional callback for progress updates
                              Signature: callback(stage: str, percent: float, message: str)
        """
        self.session = db_session
        self.parser = parser or WorkbookParser()
        self.progress_callback = progress_callback or (lambda *args: None)

    def _emit_progress(self, stage: str, percent: float, message: str):
        """Emit progress update via callback."""
        self.progress_callback(stage, percent, message)
        logger.debug(f"Progress: {stage} ({percent:.1f}%) - {message}")

    def import_file(self, content: Optional[bytes], filename: Optional[str] = None) -> Dict[str, Any]:
        """
        Parse workbook bytes and persist every worksheet.

        Args:
            content: Raw bytes of the uploaded file
            filename: Original filename, for logging only

        Returns:
            {'sheet_names': [...], 'row_counts': {...}} in workbook order

        Raises:
            MissingInputError: If no bytes were provided
            ProcessingError: If parsing or persistence fails
        """
        if not content:
            raise MissingInputError("No file provided")

        logger.info(f"Starting import of {filename or '<upload>'} ({len(content)} bytes)")

        self._emit_progress('parsing', 10, 'Parsing workbook...')
        parsed = self.parser.parse(content)

        self._emit_progress('storing', 60, f'Storing {len(parsed)} sheets...')
        try:
            for sheet_name, rows in parsed:
                self.session.add(Sheet(name=sheet_name, rows=rows))
                logger.debug(f"Queued sheet '{sheet_name}' with {len(rows)} rows")

            self.session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Storing imported sheets failed: {e}", exc_info=True)
            self.session.rollback()
            raise ProcessingError("Failed to store sheets", cause=e)

        sheet_names = [name for name, _ in parsed]
        self._emit_progress('complete', 100, 'Import complete')
        logger.info(f"Imported {len(sheet_names)} sheets from {filename or '<upload>'}")

        return {
            'sheet_names': sheet_names,
            'row_counts': {name: len(rows) for name, rows in parsed}
        }
