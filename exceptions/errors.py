"""
Custom exception classes for the application.

Every error carries a short English message for logs and API clients and a
localized notice that the dashboard shows to staff as-is.
"""

from typing import Optional, Any
from datetime import datetime, timezone


GENERIC_NOTICE = "حدث خطأ غير متوقع"


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "PRODUCT_NOT_FOUND")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
        notice: Localized message for the dashboard
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None,
        notice: Optional[str] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.notice = notice or GENERIC_NOTICE
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "notice": self.notice,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class NotFoundError(AppError):
    """Resource not found (404)."""

    def __init__(
        self,
        resource: str,
        identifier: str,
        code: Optional[str] = None,
        notice: Optional[str] = None
    ):
        super().__init__(
            code=code or f"{resource.upper()}_NOT_FOUND",
            message=f"{resource} not found",
            status_code=404,
            details={"id": identifier},
            notice=notice
        )


class ValidationError(AppError):
    """Validation failed (422)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None,
        notice: Optional[str] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details,
            notice=notice
        )


class ExternalServiceError(AppError):
    """External service failure (502)."""

    def __init__(
        self,
        service: str,
        message: str,
        details: Optional[dict] = None,
        code: Optional[str] = None,
        notice: Optional[str] = None
    ):
        super().__init__(
            code=code or f"{service.upper()}_ERROR",
            message=message,
            status_code=502,
            details={"service": service, **(details or {})},
            notice=notice
        )


class DatabaseError(AppError):
    """Database operation failed (500)."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="DATABASE_ERROR",
            message=f"Database {operation} failed: {message}",
            status_code=500,
            details={"operation": operation, **(details or {})},
            notice=f"فشلت العملية: {message}" if message else None
        )


# ===================
# PRODUCT ERRORS
# ===================

class ProductNotFoundError(NotFoundError):
    """Product not found."""

    def __init__(self, product_id: str):
        super().__init__(
            resource="Product",
            identifier=product_id,
            code="PRODUCT_NOT_FOUND",
            notice="لم يتم العثور على المنتج"
        )


class ImageUploadError(ExternalServiceError):
    """One image of an upload batch failed; the batch is aborted."""

    def __init__(self, filename: str, message: str, uploaded: Optional[list[str]] = None):
        super().__init__(
            service="storage",
            code="IMAGE_UPLOAD_FAILED",
            message=f"Failed to upload image {filename}: {message}",
            details={"filename": filename, "uploaded": uploaded or []},
            notice=f"فشل رفع الصورة: {message}"
        )


# ===================
# SHEET ERRORS
# ===================

class SheetNotFoundError(NotFoundError):
    """Stored sheet not found."""

    def __init__(self, name: str):
        super().__init__(
            resource="Sheet",
            identifier=name,
            code="SHEET_NOT_FOUND",
            notice="الملف غير موجود"
        )


class StorageError(ExternalServiceError):
    """Object storage rejected a sheet operation."""

    def __init__(self, operation: str, message: str, details: Optional[dict] = None):
        super().__init__(
            service="storage",
            code="STORAGE_ERROR",
            message=f"Storage {operation} failed: {message}",
            details={"operation": operation, **(details or {})},
            notice=f"فشلت عملية التخزين: {message}"
        )


class TransportError(ExternalServiceError):
    """The remote file could not be retrieved."""

    def __init__(self, url: str, message: str, status: Optional[int] = None):
        super().__init__(
            service="transport",
            code="TRANSPORT_ERROR",
            message=f"Failed to fetch file: {message}",
            details={"url": url, "status": status},
            notice="تعذر تحميل الملف"
        )


class FormatError(ValidationError):
    """The retrieved bytes are not a readable workbook."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(
            code="SHEET_FORMAT_ERROR",
            message=message,
            details=details,
            notice="تعذر قراءة الملف أو الملف غير صالح"
        )


class UnsupportedFileTypeError(ValidationError):
    """Uploaded sheet is not an Excel workbook."""

    def __init__(self, filename: str, allowed: list[str]):
        super().__init__(
            code="UNSUPPORTED_FILE_TYPE",
            message=f"Only {', '.join(allowed)} files are accepted",
            details={"filename": filename, "allowed": allowed},
            notice="يجب أن يكون الملف بصيغة Excel (.xlsx أو .xls)"
        )


def store_message(error: Exception) -> str:
    """Message supplied by the store client, falling back to the exception text."""
    message = getattr(error, "message", None)
    if isinstance(message, str) and message:
        return message
    return str(error)
