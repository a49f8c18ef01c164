"""
Business logic services.

Each service handles one domain area and receives its store client from the
caller.
"""

from services.storage_service import StorageService, UploadItem, timestamped_name
from services.product_service import ProductService
from services.sheet_preview_service import SheetPreviewService, ingest
from services.sheet_service import SheetService

__all__ = [
    "StorageService",
    "UploadItem",
    "timestamped_name",
    "ProductService",
    "SheetPreviewService",
    "ingest",
    "SheetService",
]
