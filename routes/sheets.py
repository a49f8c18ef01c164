"""
Sheet API routes.

Upload, browse, preview, share, download and delete Excel workbooks held in
the sheets bucket. The inline preview and the shareable viewer return the
same payload from the same pipeline; the viewer router is mounted under its
own prefix.
"""

import asyncio
from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Query, Response, UploadFile
import structlog

from models.sheet import (
    StoredSheet,
    SheetListResponse,
    SheetPreviewResponse,
    ShareLinkResponse,
)
from services.sheet_service import SheetService
from routes.deps import get_sheet_service
from routes.errors import handle_error

logger = structlog.get_logger(__name__)

router = APIRouter()

# Mounted under its own prefix so viewer paths never collide with "/{name}/..."
viewer_router = APIRouter()

XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
XLS_CONTENT_TYPE = "application/vnd.ms-excel"


# ===================
# ROUTES
# ===================

@router.get("", response_model=SheetListResponse)
async def list_sheets(
    search: str = Query("", description="Filter by original filename"),
    page: int = Query(1, ge=1, description="Page number"),
    page_size: Optional[int] = Query(None, ge=1, le=100, description="Items per page"),
    service: SheetService = Depends(get_sheet_service)
):
    """
    List stored sheets, newest first.
    """
    try:
        return service.list_page(search=search, page=page, page_size=page_size)

    except Exception as e:
        return handle_error(e)


@router.post("", response_model=StoredSheet, status_code=201)
async def upload_sheet(
    file: UploadFile = File(...),
    service: SheetService = Depends(get_sheet_service)
):
    """
    Upload an Excel workbook (.xlsx or .xls).

    Raises:
        422: Not an Excel file
        502: Storage rejected the upload
    """
    logger.info(
        "sheet_upload_started",
        filename=file.filename,
        content_type=file.content_type
    )

    try:
        content = await file.read()
        return await asyncio.to_thread(
            service.upload,
            file.filename or "",
            content,
            file.content_type
        )

    except Exception as e:
        return handle_error(e)


@router.get("/{name}/preview", response_model=SheetPreviewResponse)
async def preview_sheet(name: str, service: SheetService = Depends(get_sheet_service)):
    """
    Preview the first sheet of a stored workbook.

    Raises:
        422: File is not a readable workbook
        502: File could not be fetched
    """
    try:
        return await asyncio.to_thread(service.preview, name)

    except Exception as e:
        return handle_error(e)


@router.get("/{name}/share", response_model=ShareLinkResponse)
async def share_sheet(name: str, service: SheetService = Depends(get_sheet_service)):
    """Viewer link and WhatsApp deep link for a stored sheet."""
    try:
        return service.share_link(name)

    except Exception as e:
        return handle_error(e)


@router.get("/{name}/download")
async def download_sheet(name: str, service: SheetService = Depends(get_sheet_service)):
    """
    Download a stored workbook under its original filename.

    Raises:
        502: File could not be fetched
    """
    try:
        content, filename = await asyncio.to_thread(service.download, name)
        media_type = XLS_CONTENT_TYPE if filename.lower().endswith(".xls") else XLSX_CONTENT_TYPE
        return Response(
            content=content,
            media_type=media_type,
            headers={"Content-Disposition": _attachment(filename)}
        )

    except Exception as e:
        return handle_error(e)


@router.delete("/{name}", status_code=204)
async def delete_sheet(name: str, service: SheetService = Depends(get_sheet_service)):
    """
    Delete a stored workbook.

    Raises:
        404: No such sheet
        502: Storage rejected the removal
    """
    try:
        service.delete(name)
        return Response(status_code=204)

    except Exception as e:
        return handle_error(e)


# ===================
# SHARED VIEWER
# ===================

@viewer_router.get("/{file_name}", response_model=SheetPreviewResponse)
async def view_shared_sheet(file_name: str, service: SheetService = Depends(get_sheet_service)):
    """
    Read-only viewer behind share links.

    Raises:
        422: File is not a readable workbook
        502: File could not be fetched
    """
    try:
        return await asyncio.to_thread(service.preview, file_name)

    except Exception as e:
        return handle_error(e)


def _attachment(filename: str) -> str:
    """Content-Disposition value that survives non-ASCII filenames."""
    fallback = filename.encode("ascii", "ignore").decode() or "sheet.xlsx"
    fallback = fallback.replace('"', "")
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename)}"
