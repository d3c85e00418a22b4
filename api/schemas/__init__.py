"""
Pydantic schemas for request/response validation.

This package contains all Pydantic models used for API request validation
and response serialization.
"""

from api.schemas.common import ErrorResponse, MessageResponse, PaginatedResponse, HealthCheckResponse
from api.schemas.import_schema import ImportResponse
from api.schemas.sheet_schema import RowPayload, SheetDetail, SheetListItem, SheetListResponse

__all__ = [
    # Common
    'ErrorResponse',
    'MessageResponse',
    'PaginatedResponse',
    'HealthCheckResponse',

    # Import
    'ImportResponse',

    # Sheet
    'RowPayload',
    'SheetDetail',
    'SheetListItem',
    'SheetListResponse',
]
