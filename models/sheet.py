"""
Stored sheet and preview schemas.

Stored names follow "{epoch_millis}_{original filename}". The prefix doubles
as the upload time and the listing sort key.
"""

from datetime import datetime, timezone
from typing import Any, Optional, Union

from pydantic import BaseModel, Field

from models.base import BaseSchema, PaginatedResponse


# A cell as produced by the workbook decoder
CellValue = Union[str, int, float, bool, datetime, None]
SheetRow = dict[str, CellValue]


def split_stored_name(name: str) -> tuple[Optional[int], str]:
    """
    Split a stored name into (timestamp_millis, display_name).

    Only the first underscore separates the prefix, so original filenames
    keep their own underscores. A non-numeric prefix yields (None, name).
    """
    prefix, sep, rest = name.partition("_")
    if not sep or not prefix.isdigit():
        return None, name
    return int(prefix), rest


class StoredSheet(BaseSchema):
    """A workbook held in the sheets bucket."""

    name: str = Field(..., description="Stored object name")
    display_name: str = Field(..., description="Original filename")
    uploaded_at: Optional[datetime] = Field(None, description="Parsed from the name prefix")
    url: str = Field(..., description="Public URL")

    @property
    def sort_key(self) -> int:
        millis, _ = split_stored_name(self.name)
        return millis if millis is not None else -1

    @classmethod
    def from_name(cls, name: str, url: str) -> "StoredSheet":
        millis, display_name = split_stored_name(name)
        uploaded_at = (
            datetime.fromtimestamp(millis / 1000, tz=timezone.utc)
            if millis is not None
            else None
        )
        return cls(name=name, display_name=display_name, uploaded_at=uploaded_at, url=url)


class SheetListResponse(PaginatedResponse):
    """Stored sheets, newest first, one page at a time."""

    data: list[StoredSheet]


class SheetPreviewResponse(BaseModel):
    """
    First sheet of a workbook, projected for a table view.

    `records` keeps native cell types; `rows` holds the display strings in
    `columns` order.
    """

    name: str
    display_name: str
    columns: list[str]
    records: list[dict[str, Any]]
    rows: list[list[str]]
    total_rows: int
    empty: bool
    notice: Optional[str] = None


class ShareLinkResponse(BaseModel):
    """Viewer link for a stored sheet plus a messaging deep link."""

    name: str
    view_url: str
    whatsapp_url: str
