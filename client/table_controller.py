"""
Editable table controller.

Holds the client's view of one active sheet as a single explicit state
value plus the data that state needs. The header row (server row 0) is kept
apart from the data rows, so local data row ``i`` is server row ``i + 1``.
On a sheet with no rows at all, the first row added becomes the header row.

Local rows change only after the server confirms a mutation. A failed edit
or add keeps the dialog open for a retry; a failed delete returns to the
table. Failures are surfaced through ``error``.
"""

import logging
from enum import Enum
from typing import Any, Callable, List, Optional

from client.api_client import ApiError
from client.exporter import export_rows
from client.row_validator import RowValidator

logger = logging.getLogger(__name__)

HEADER_OFFSET = 1


class ControllerState(str, Enum):
    """Controller states."""
    NO_FILE = 'no_file'
    UPLOADING = 'uploading'
    SHEETS_AVAILABLE = 'sheets_available'
    SHEET_LOADED = 'sheet_loaded'
    EDITING_ROW = 'editing_row'
    ADDING_ROW = 'adding_row'
    CONFIRMING_DELETE = 'confirming_delete'


# States in which a sheet's rows are in memory
_LOADED_STATES = {
    ControllerState.SHEET_LOADED,
    ControllerState.EDITING_ROW,
    ControllerState.ADDING_ROW,
    ControllerState.CONFIRMING_DELETE,
}


class InvalidTransitionError(Exception):
    """Operation is not allowed in the controller's current state."""

    def __init__(self, operation: str, state: ControllerState):
        super().__init__(f"Cannot {operation} while {state.value}")
        self.operation = operation
        self.state = state


class TableController:
    """
    State machine behind the editable table.

    Args:
        api: Object with upload/get_sheet/append_row/replace_row/delete_row
             (normally :class:`client.api_client.SheetsApiClient`)
        validator: Row validator (default: RowValidator() on the system clock)
        on_progress: Optional listener for upload progress (0-100)
    """

    def __init__(self, api, validator: Optional[RowValidator] = None,
                 on_progress: Optional[Callable[[int], None]] = None):
        self.api = api
        self.validator = validator or RowValidator()
        self.on_progress = on_progress

        self.state = ControllerState.NO_FILE
        self.file_name: Optional[str] = None
        self.upload_progress = 0
        self.sheet_names: List[str] = []
        self.active_sheet: Optional[str] = None
        self.headers: List[Any] = []
        self.data_rows: List[List[Any]] = []
        # Server rows above data row 0: 1 once the sheet has a header row
        self.header_offset = 0

        # Row being edited / added / deleted
        self.target_index: Optional[int] = None
        self.draft_row: List[Any] = []

        # Banner message and validation dialog contents
        self.error: Optional[str] = None
        self.validation_errors: List[str] = []

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _require(self, operation: str, *states: ControllerState):
        if self.state not in states:
            raise InvalidTransitionError(operation, self.state)

    def _check_row_index(self, index: int):
        if index < 0 or index >= len(self.data_rows):
            raise IndexError(f"Row {index} out of range (0-{len(self.data_rows) - 1})")

    def _set_progress(self, percent: int):
        self.upload_progress = max(0, min(100, int(percent)))
        if self.on_progress:
            self.on_progress(self.upload_progress)

    @property
    def validation_dialog_open(self) -> bool:
        return bool(self.validation_errors)

    def dismiss_error(self):
        self.error = None

    def dismiss_validation(self):
        self.validation_errors = []

    # ------------------------------------------------------------------
    # Upload and sheet selection
    # ------------------------------------------------------------------

    def select_file(self, file_path: str) -> bool:
        """
        Upload a file, then select and load its first sheet.

        Returns:
            True on success. On failure the error banner is set and the
            controller returns to the state it was in before.
        """
        self._require(
            'upload a file',
            ControllerState.NO_FILE, ControllerState.SHEETS_AVAILABLE, ControllerState.SHEET_LOADED
        )
        previous_state = self.state
        self.state = ControllerState.UPLOADING
        self.error = None
        self.upload_progress = 0

        try:
            sheet_names = self.api.upload(file_path, progress_callback=self._set_progress)
        except ApiError as e:
            logger.error(f"File upload failed: {e.message}")
            self.error = f"File upload failed: {e.message}"
            self.state = previous_state
            return False

        self.file_name = str(file_path)
        self.upload_progress = 100
        self.sheet_names = list(sheet_names)
        self.active_sheet = None
        self.headers = []
        self.data_rows = []
        self.header_offset = 0
        self.state = ControllerState.SHEETS_AVAILABLE

        if self.sheet_names:
            return self.select_sheet(self.sheet_names[0])
        return True

    def attach(self, sheet_names: List[str]):
        """Work with sheets already stored on the server, skipping the upload."""
        self._require('attach to sheets', ControllerState.NO_FILE, ControllerState.SHEETS_AVAILABLE)
        self.sheet_names = list(sheet_names)
        self.state = ControllerState.SHEETS_AVAILABLE

    def select_sheet(self, name: str) -> bool:
        """Fetch a sheet and make it the active one."""
        self._require('select a sheet', ControllerState.SHEETS_AVAILABLE, ControllerState.SHEET_LOADED)
        self.error = None

        try:
            sheet = self.api.get_sheet(name)
        except ApiError as e:
            logger.error(f"Error fetching sheet '{name}': {e.message}")
            self.error = f"Error fetching sheet data: {e.message}"
            return False

        rows = sheet.get('rows') or []
        self.active_sheet = name
        self.headers = list(rows[0]) if rows else []
        self.data_rows = [list(row) for row in rows[1:]]
        self.header_offset = HEADER_OFFSET if rows else 0
        self.state = ControllerState.SHEET_LOADED
        return True

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    def begin_edit(self, index: int):
        self._require('edit a row', ControllerState.SHEET_LOADED)
        self._check_row_index(index)
        self.target_index = index
        self.draft_row = list(self.data_rows[index])
        self.state = ControllerState.EDITING_ROW

    def set_edit_cell(self, column: int, value: Any):
        self._require('change a cell', ControllerState.EDITING_ROW)
        self._set_draft_cell(column, value)

    def submit_edit(self) -> bool:
        """Validate and send the edited row. Returns True once the server accepted it."""
        self._require('submit an edit', ControllerState.EDITING_ROW)
        if not self._validate_draft():
            return False

        try:
            self.api.replace_row(self.active_sheet, self.target_index + self.header_offset, self.draft_row)
        except ApiError as e:
            logger.error(f"Error updating row {self.target_index}: {e.message}")
            self.error = f"Error updating row: {e.message}"
            return False

        self.data_rows[self.target_index] = list(self.draft_row)
        self._close_dialog()
        return True

    def cancel_edit(self):
        self._require('cancel an edit', ControllerState.EDITING_ROW)
        self._close_dialog()

    # ------------------------------------------------------------------
    # Adding
    # ------------------------------------------------------------------

    def begin_add(self):
        self._require('add a row', ControllerState.SHEET_LOADED)
        self.target_index = None
        self.draft_row = [''] * len(self.headers)
        self.state = ControllerState.ADDING_ROW

    def set_new_cell(self, column: int, value: Any):
        self._require('change a cell', ControllerState.ADDING_ROW)
        self._set_draft_cell(column, value)

    def submit_add(self) -> bool:
        """Validate and append the new row. Returns True once the server accepted it."""
        self._require('submit a new row', ControllerState.ADDING_ROW)
        if not self._validate_draft():
            return False

        try:
            self.api.append_row(self.active_sheet, self.draft_row)
        except ApiError as e:
            logger.error(f"Error adding row: {e.message}")
            self.error = f"Error adding new row: {e.message}"
            return False

        if self.header_offset == 0:
            # Stored as server row 0, which is the header row on reload
            self.headers = list(self.draft_row)
            self.header_offset = HEADER_OFFSET
        else:
            self.data_rows.append(list(self.draft_row))
        self._close_dialog()
        return True

    def cancel_add(self):
        self._require('cancel adding a row', ControllerState.ADDING_ROW)
        self._close_dialog()

    # ------------------------------------------------------------------
    # Deleting
    # ------------------------------------------------------------------

    def request_delete(self, index: int):
        self._require('delete a row', ControllerState.SHEET_LOADED)
        self._check_row_index(index)
        self.target_index = index
        self.state = ControllerState.CONFIRMING_DELETE

    def confirm_delete(self) -> bool:
        self._require('confirm a delete', ControllerState.CONFIRMING_DELETE)
        index = self.target_index

        try:
            self.api.delete_row(self.active_sheet, index + self.header_offset)
        except ApiError as e:
            logger.error(f"Error deleting row {index}: {e.message}")
            self.error = f"Error deleting row: {e.message}"
            self._close_dialog()
            return False

        del self.data_rows[index]
        self._close_dialog()
        return True

    def cancel_delete(self):
        self._require('cancel a delete', ControllerState.CONFIRMING_DELETE)
        self._close_dialog()

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def export(self, path: Optional[str] = None):
        """
        Write the in-memory headers and rows to an .xlsx file.

        Uses local state only; nothing is fetched from the server.
        """
        if self.state not in _LOADED_STATES:
            raise InvalidTransitionError('export', self.state)

        path = path or f"{self.active_sheet}_export.xlsx"
        return export_rows(path, self.active_sheet, self.headers, self.data_rows)

    # ------------------------------------------------------------------

    def _set_draft_cell(self, column: int, value: Any):
        if column < 0:
            raise IndexError(f"Column {column} out of range")
        if column >= len(self.draft_row):
            self.draft_row.extend([''] * (column + 1 - len(self.draft_row)))
        self.draft_row[column] = value

    def _validate_draft(self) -> bool:
        errors = self.validator.validate(self.draft_row)
        if errors:
            logger.info(f"Row rejected by validation: {errors}")
            self.validation_errors = errors
            return False
        self.validation_errors = []
        self.error = None
        return True

    def _close_dialog(self):
        self.target_index = None
        self.draft_row = []
        self.state = ControllerState.SHEET_LOADED
