"""
Custom exceptions module.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    NotFoundError,
    ValidationError,
    ExternalServiceError,
    DatabaseError,
    GENERIC_NOTICE,

    # Product-specific
    ProductNotFoundError,
    ImageUploadError,

    # Sheets
    SheetNotFoundError,
    StorageError,
    TransportError,
    FormatError,
    UnsupportedFileTypeError,

    # Helpers
    store_message,
)

__all__ = [
    # Base
    "AppError",
    "NotFoundError",
    "ValidationError",
    "ExternalServiceError",
    "DatabaseError",
    "GENERIC_NOTICE",

    # Product
    "ProductNotFoundError",
    "ImageUploadError",

    # Sheets
    "SheetNotFoundError",
    "StorageError",
    "TransportError",
    "FormatError",
    "UnsupportedFileTypeError",

    # Helpers
    "store_message",
]
