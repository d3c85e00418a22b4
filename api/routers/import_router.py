"""
Import router - Handle spreadsheet uploads.

This module provides the endpoint that parses an uploaded workbook and
stores one sheet document per worksheet.
"""

import logging
from typing import Optional

from fastapi import APIRouter, UploadFile, File, Depends, status

from api.dependencies import get_import_service, verify_file_size
from api.schemas.import_schema import ImportResponse
from services.errors import MissingInputError
from services.sheet_import_service import SheetImportService

logger = logging.getLogger(__name__)

# Create router
router = APIRouter(tags=['import'])


@router.post('/upload', response_model=ImportResponse, status_code=status.HTTP_201_CREATED)
async def upload_spreadsheet(
    file: Optional[UploadFile] = File(None, description="Spreadsheet file (.xlsx, .xlsm or .xls)"),
    service: SheetImportService = Depends(get_import_service)
):
    """
    Upload a spreadsheet and store each worksheet as a sheet.

    Parsing happens inside the request. Every upload inserts new sheet
    documents, even for worksheet names imported before.

    **Example:**
    ```bash
    curl -F "file=@budget.xlsx" http://localhost:5000/upload
    ```

    **Returns:**
    - 201 with the worksheet names in file order
    - 400 if no file was provided
    - 413 if the file exceeds MAX_FILE_SIZE_MB
    - 500 if the file cannot be parsed or stored
    """
    if file is None:
        raise MissingInputError("No file provided")

    content = await file.read()
    verify_file_size(len(content))

    logger.info(f"Upload received: {file.filename} ({len(content) / 1024:.1f} KB)")

    result = service.import_file(content, filename=file.filename)

    return ImportResponse(
        message="File processed successfully",
        sheets=result['sheet_names']
    )
