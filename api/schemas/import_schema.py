"""
Import-related Pydantic schemas.

This module contains schemas for spreadsheet upload responses.
"""

from typing import List
from pydantic import BaseModel, Field


class ImportResponse(BaseModel):
    """Response when an uploaded file has been parsed and stored."""

    message: str = Field(..., description="Outcome message")
    sheets: List[str] = Field(..., description="Worksheet names in file order")

    class Config:
        json_schema_extra = {
            "example": {
                "message": "File processed successfully",
                "sheets": ["Jan", "Feb"]
            }
        }
