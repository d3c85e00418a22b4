"""
Error taxonomy for the sheet services.

Each error carries the HTTP status the API maps it to, so the service layer
stays framework-agnostic and the request boundary needs a single handler.
"""

from typing import Any, Dict, Optional


class SheetServiceError(Exception):
    """Base class for all sheet service failures."""

    status_code = 500
    error = "Sheet service error"

    def __init__(self, message: Optional[str] = None, detail: Optional[Dict[str, Any]] = None):
        self.message = message or self.error
        self.detail = detail
        super().__init__(self.message)


class MissingInputError(SheetServiceError):
    """A required file or body field was not provided."""

    status_code = 400
    error = "Missing input"


class SheetNotFoundError(SheetServiceError):
    """No sheet document matches the requested name."""

    status_code = 404
    error = "Sheet not found"

    def __init__(self, name: str):
        super().__init__("Sheet not found", detail={'name': name})
        self.name = name


class InvalidRowIndexError(SheetServiceError):
    """Row index is outside [0, len(rows))."""

    status_code = 400
    error = "Invalid row index"

    def __init__(self, index: int, length: int):
        super().__init__(
            "Invalid row index",
            detail={'index': index, 'row_count': length}
        )
        self.index = index
        self.length = length


class ProcessingError(SheetServiceError):
    """Parsing or persistence failed; ``cause`` holds the underlying exception."""

    status_code = 500
    error = "Failed to process file"

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        detail = {'cause': f"{type(cause).__name__}: {cause}"} if cause else None
        super().__init__(message, detail=detail)
        self.cause = cause
