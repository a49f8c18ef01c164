"""
Error responses shared by the route modules.
"""

from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
import structlog

from exceptions import AppError, GENERIC_NOTICE, ValidationError

logger = structlog.get_logger(__name__)


def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, PydanticValidationError):
        e = validation_error(e)
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    # Unexpected error
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred",
                "notice": GENERIC_NOTICE
            }
        }
    )


# Where FastAPI found the bad input; not part of the field name
REQUEST_LOCATIONS = {"body", "query", "path", "header", "cookie"}


def validation_error(e) -> ValidationError:
    """
    Flatten pydantic or request validation errors into the application's 422 format.

    Accepts anything exposing pydantic's errors() list, including FastAPI's
    RequestValidationError.
    """
    fields = []
    for err in e.errors():
        loc = list(err.get("loc", ()))
        if len(loc) > 1 and loc[0] in REQUEST_LOCATIONS:
            loc = loc[1:]
        fields.append({
            "field": ".".join(str(part) for part in loc),
            "error": err["msg"],
        })
    return ValidationError(
        message="Invalid input",
        details={"fields": fields},
        notice="يرجى التحقق من الحقول المطلوبة"
    )
