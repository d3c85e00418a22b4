"""
Sheets router - Row-level operations on imported sheets.

Rows are addressed by their position in the sheet. Row 0 is whatever the
first row of the worksheet was (normally the header row).
"""

import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query, status

from api.dependencies import get_sheet_service
from api.schemas.common import MessageResponse
from api.schemas.sheet_schema import RowPayload, SheetDetail, SheetListItem, SheetListResponse
from services.sheet_service import SheetService

logger = logging.getLogger(__name__)

# Create router
router = APIRouter(prefix='/sheets', tags=['sheets'])


@router.get('', response_model=SheetListResponse)
async def list_sheets(
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(50, ge=1, le=100, description="Items per page"),
    search: Optional[str] = Query(None, description="Search by sheet name"),
    service: SheetService = Depends(get_sheet_service)
):
    """
    List stored sheets with pagination, newest first.

    Repeated imports of the same worksheet show up as separate entries.

    **Example:**
    ```bash
    curl "http://localhost:5000/sheets?search=jan&page=1"
    ```
    """
    sheets, total = service.list_sheets(page=page, page_size=page_size, search=search)

    return SheetListResponse.create(
        items=[SheetListItem.model_validate(sheet) for sheet in sheets],
        total=total,
        page=page,
        page_size=page_size
    )


@router.get('/{name}', response_model=SheetDetail)
async def get_sheet(
    name: str,
    service: SheetService = Depends(get_sheet_service)
):
    """
    Get a sheet with all of its rows.

    **Example:**
    ```bash
    curl http://localhost:5000/sheets/Jan
    ```
    """
    return SheetDetail.model_validate(service.get_sheet(name))


@router.post('/{name}/rows', response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def append_row(
    name: str,
    payload: RowPayload,
    service: SheetService = Depends(get_sheet_service)
):
    """
    Append a row to the end of a sheet. The row's shape is not checked.

    **Example:**
    ```bash
    curl -X POST -H "Content-Type: application/json" \\
         -d '{"row": ["B", 5, "2024-01-09"]}' http://localhost:5000/sheets/Jan/rows
    ```
    """
    service.append_row(name, payload.row)
    return MessageResponse(message="Row added successfully")


@router.patch('/{name}/rows/{index}', response_model=MessageResponse)
async def replace_row(
    name: str,
    index: int,
    payload: RowPayload,
    service: SheetService = Depends(get_sheet_service)
):
    """
    Replace the row at ``index``. The row count does not change.

    **Returns:**
    - 200 on success
    - 400 if the index is out of range or ``row`` is missing
    - 404 if the sheet does not exist
    """
    service.replace_row(name, index, payload.row)
    return MessageResponse(message="Row updated successfully")


@router.delete('/{name}/rows/{index}', response_model=MessageResponse)
async def delete_row(
    name: str,
    index: int,
    service: SheetService = Depends(get_sheet_service)
):
    """
    Delete the row at ``index``; later rows move up by one position.

    **Returns:**
    - 200 on success
    - 400 if the index is out of range
    - 404 if the sheet does not exist
    """
    service.delete_row(name, index)
    return MessageResponse(message="Row deleted successfully")
