"""
Sheet service for uploaded workbooks.

Workbooks are stored in the sheets bucket as "{epoch_millis}_{filename}".
The bucket is the only record of them: every listing is read fresh.
"""

from pathlib import PurePath
from typing import Optional
from urllib.parse import quote
import structlog

from integrations.remote_file import fetch_bytes
from models.sheet import (
    StoredSheet,
    SheetListResponse,
    SheetPreviewResponse,
    ShareLinkResponse,
    split_stored_name,
)
from services.storage_service import StorageService, timestamped_name
from services.sheet_preview_service import SheetPreviewService
from exceptions import SheetNotFoundError, UnsupportedFileTypeError

logger = structlog.get_logger(__name__)

ALLOWED_EXTENSIONS = [".xlsx", ".xls"]
SHEET_NAME_SEPARATOR = "_"
SHARE_MESSAGE = "رابط الملف للعرض فقط: {url}"
WHATSAPP_SHARE_URL = "https://wa.me/?text={text}"
VIEWER_PATH = "/dashboard/sheets/view/{name}"
# Characters left unescaped when encoding a URI component
URI_COMPONENT_SAFE = "!*'()"


class SheetService:
    """
    Stored sheet operations.

    Handles:
    - Uploading workbooks under collision-avoiding names
    - Listing with search and pagination, newest first
    - Deleting, downloading and previewing
    - Building shareable viewer links
    """

    def __init__(
        self,
        storage: StorageService,
        preview_service: Optional[SheetPreviewService] = None,
        public_app_url: str = "http://localhost:3000",
        list_limit: int = 100,
        page_size: int = 10,
        fetch_timeout: float = 30
    ):
        self.storage = storage
        self.preview_service = preview_service or SheetPreviewService(timeout=fetch_timeout)
        self.public_app_url = public_app_url.rstrip("/")
        self.list_limit = list_limit
        self.page_size = page_size
        self.fetch_timeout = fetch_timeout

    # ===================
    # READ OPERATIONS
    # ===================

    def get_all(self) -> list[StoredSheet]:
        """All stored sheets, newest first."""
        names = self.storage.list_names(limit=self.list_limit)

        sheets = [
            StoredSheet.from_name(name, self.storage.public_url(name))
            for name in names
        ]
        sheets.sort(key=lambda sheet: sheet.sort_key, reverse=True)

        logger.info("sheets_retrieved", count=len(sheets))

        return sheets

    def list_page(
        self,
        search: str = "",
        page: int = 1,
        page_size: Optional[int] = None
    ) -> SheetListResponse:
        """
        List stored sheets.

        Args:
            search: Case-insensitive match against the display name only
            page: Page number (1-indexed)
            page_size: Items per page (defaults to the configured size)

        Returns:
            SheetListResponse
        """
        page_size = page_size or self.page_size
        needle = search.strip().lower()

        sheets = self.get_all()
        if needle:
            sheets = [s for s in sheets if needle in s.display_name.lower()]

        offset = (page - 1) * page_size
        return SheetListResponse.create(
            data=sheets[offset:offset + page_size],
            total=len(sheets),
            page=page,
            page_size=page_size
        )

    def public_url(self, name: str) -> str:
        return self.storage.public_url(name)

    # ===================
    # WRITE OPERATIONS
    # ===================

    def upload(
        self,
        filename: str,
        content: bytes,
        content_type: Optional[str] = None
    ) -> StoredSheet:
        """
        Store a workbook.

        Raises:
            UnsupportedFileTypeError: If the file is not .xlsx or .xls
            StorageError: If the upload fails
        """
        if PurePath(filename).suffix.lower() not in ALLOWED_EXTENSIONS:
            raise UnsupportedFileTypeError(filename, ALLOWED_EXTENSIONS)

        name = timestamped_name(filename, SHEET_NAME_SEPARATOR)

        logger.info("uploading_sheet", name=name, size_bytes=len(content))

        self.storage.upload(name, content, content_type)

        logger.info("sheet_uploaded", name=name)

        return StoredSheet.from_name(name, self.storage.public_url(name))

    def delete(self, name: str) -> bool:
        """
        Delete a stored sheet.

        Raises:
            SheetNotFoundError: If nothing was removed
            StorageError: If the removal fails
        """
        logger.info("deleting_sheet", name=name)

        removed = self.storage.remove([name])
        if not removed:
            raise SheetNotFoundError(name)

        logger.info("sheet_deleted", name=name)
        return True

    # ===================
    # VIEWING
    # ===================

    def preview(self, name: str) -> SheetPreviewResponse:
        """
        Preview a stored sheet by name.

        Used by both the inline preview and the shareable viewer.
        """
        _, display_name = split_stored_name(name)
        return self.preview_service.preview(
            self.storage.public_url(name),
            name=name,
            display_name=display_name
        )

    def download(self, name: str) -> tuple[bytes, str]:
        """
        Fetch a stored sheet's bytes.

        Returns:
            (content, display filename)

        Raises:
            TransportError: If the file cannot be retrieved
        """
        _, display_name = split_stored_name(name)
        content = fetch_bytes(self.storage.public_url(name), timeout=self.fetch_timeout)

        logger.info("sheet_downloaded", name=name, size_bytes=len(content))

        return content, display_name

    def share_link(self, name: str) -> ShareLinkResponse:
        """Compose the viewer URL and a WhatsApp deep link. No request is made."""
        view_url = self.public_app_url + VIEWER_PATH.format(name=quote(name, safe=URI_COMPONENT_SAFE))
        message = SHARE_MESSAGE.format(url=view_url)
        whatsapp_url = WHATSAPP_SHARE_URL.format(text=quote(message, safe=URI_COMPONENT_SAFE))

        return ShareLinkResponse(name=name, view_url=view_url, whatsapp_url=whatsapp_url)
