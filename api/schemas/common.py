"""
Common Pydantic schemas used across the API.

This module contains shared schemas for pagination, errors, and
other common response patterns.
"""

from typing import Any, Dict, List, Optional, Generic, TypeVar
from pydantic import BaseModel, Field
from datetime import datetime

# Type variable for generic pagination
T = TypeVar('T')


class ErrorResponse(BaseModel):
    """Standard error response format."""

    error: str = Field(..., description="Error message")
    detail: Optional[Dict[str, Any]] = Field(None, description="Additional error details")
    timestamp: datetime = Field(default_factory=datetime.utcnow, description="Error timestamp")
    path: Optional[str] = Field(None, description="Request path that caused the error")

    class Config:
        json_schema_extra = {
            "example": {
                "error": "Sheet not found",
                "detail": {"name": "Jan"},
                "timestamp": "2026-10-19T12:00:00Z",
                "path": "/sheets/Jan"
            }
        }


class MessageResponse(BaseModel):
    """Plain acknowledgement returned by row mutations."""

    message: str = Field(..., description="Outcome message")

    class Config:
        json_schema_extra = {
            "example": {"message": "Row updated successfully"}
        }


class PaginatedResponse(BaseModel, Generic[T]):
    """Generic paginated response."""

    total: int = Field(..., description="Total number of items")
    page: int = Field(..., description="Current page number")
    page_size: int = Field(..., description="Items per page")
    total_pages: int = Field(..., description="Total number of pages")
    items: List[T] = Field(..., description="Items in current page")

    @classmethod
    def create(cls, items: List[T], total: int, page: int, page_size: int):
        """
        Create paginated response.

        Args:
            items: List of items for current page
            total: Total number of items
            page: Current page number
            page_size: Items per page

        Returns:
            PaginatedResponse instance
        """
        total_pages = (total + page_size - 1) // page_size  # Ceiling division

        return cls(
            total=total,
            page=page,
            page_size=page_size,
            total_pages=total_pages,
            items=items
        )


class HealthCheckResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Service status")
    timestamp: datetime = Field(default_factory=datetime.utcnow, description="Health check timestamp")
    version: str = Field(..., description="API version")
    database: str = Field(..., description="Database connection status")

    class Config:
        json_schema_extra = {
            "example": {
                "status": "healthy",
                "timestamp": "2026-10-19T12:00:00Z",
                "version": "1.0.0",
                "database": "connected"
            }
        }
