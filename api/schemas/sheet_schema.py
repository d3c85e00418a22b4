"""
Sheet-related Pydantic schemas.

This module contains schemas for reading sheets and mutating their rows.
"""

from typing import Any, List, Optional
from pydantic import BaseModel, Field
from datetime import datetime

from api.schemas.common import PaginatedResponse


class RowPayload(BaseModel):
    """Body for append and replace. Cell values are not validated."""

    row: Optional[List[Any]] = Field(None, description="Ordered cell values")

    class Config:
        json_schema_extra = {
            "example": {"row": ["A", 20, "2024-01-05"]}
        }


class SheetDetail(BaseModel):
    """Full sheet document."""

    id: int = Field(..., description="Sheet document ID")
    name: str = Field(..., description="Worksheet name")
    rows: List[List[Any]] = Field(..., description="Row grid; row 0 is the header row")
    created_at: Optional[datetime] = Field(None, description="Import timestamp")
    updated_at: Optional[datetime] = Field(None, description="Last mutation timestamp")

    class Config:
        from_attributes = True
        json_schema_extra = {
            "example": {
                "id": 1,
                "name": "Jan",
                "rows": [["Name", "Amt", "Date"], ["A", 10, "2024-01-05"]],
                "created_at": "2026-10-19T12:00:00Z",
                "updated_at": "2026-10-19T12:00:00Z"
            }
        }


class SheetListItem(BaseModel):
    """Sheet summary for list responses."""

    id: int = Field(..., description="Sheet document ID")
    name: str = Field(..., description="Worksheet name")
    row_count: int = Field(..., description="Number of stored rows, header included")
    created_at: Optional[datetime] = Field(None, description="Import timestamp")
    updated_at: Optional[datetime] = Field(None, description="Last mutation timestamp")

    class Config:
        from_attributes = True


class SheetListResponse(PaginatedResponse[SheetListItem]):
    """Paginated sheet list."""
