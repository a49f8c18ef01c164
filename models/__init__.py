"""
Pydantic models for validation and serialization.
"""

from models.base import (
    BaseSchema,
    TimestampMixin,
    PaginatedResponse
)
from models.product import (
    ProductCreate,
    ProductUpdate,
    ProductResponse,
    ProductListResponse,
    ImageUploadResponse,
)
from models.sheet import (
    CellValue,
    SheetRow,
    StoredSheet,
    SheetListResponse,
    SheetPreviewResponse,
    ShareLinkResponse,
    split_stored_name,
)

__all__ = [
    # Base
    "BaseSchema",
    "TimestampMixin",
    "PaginatedResponse",

    # Product
    "ProductCreate",
    "ProductUpdate",
    "ProductResponse",
    "ProductListResponse",
    "ImageUploadResponse",

    # Sheets
    "CellValue",
    "SheetRow",
    "StoredSheet",
    "SheetListResponse",
    "SheetPreviewResponse",
    "ShareLinkResponse",
    "split_stored_name",
]
