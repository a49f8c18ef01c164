"""
Workbook ingestion and preview.

One pipeline serves both the inline preview and the shareable viewer:
fetch the bytes, decode the first sheet, project it into a table. Nothing
is cached; a failed attempt leaves nothing behind and the next call starts
from scratch.
"""

import structlog

from integrations.remote_file import fetch_bytes
from parsers.workbook_parser import parse_first_sheet
from parsers.sheet_table import SheetTable
from models.sheet import SheetRow, SheetPreviewResponse

logger = structlog.get_logger(__name__)


def ingest(url: str, timeout: float = 30) -> list[SheetRow]:
    """
    Fetch a workbook and return its first sheet as row records.

    Raises:
        TransportError: If the file cannot be retrieved (no decode is attempted)
        FormatError: If the bytes are not a readable workbook
    """
    data = fetch_bytes(url, timeout=timeout)
    return parse_first_sheet(data)


class SheetPreviewService:
    """Builds table previews of stored workbooks."""

    def __init__(self, timeout: float = 30):
        self.timeout = timeout

    def preview(self, url: str, name: str, display_name: str = "") -> SheetPreviewResponse:
        """
        Preview the workbook at url.

        Args:
            url: Public URL of the workbook
            name: Stored name, echoed back for the UI
            display_name: Label shown above the table

        Returns:
            SheetPreviewResponse; an empty sheet carries the "no data" notice

        Raises:
            TransportError: If the file cannot be retrieved
            FormatError: If the file cannot be decoded
        """
        logger.info("sheet_preview_started", name=name)

        records = ingest(url, timeout=self.timeout)
        table = SheetTable.from_records(records)

        logger.info(
            "sheet_preview_ready",
            name=name,
            rows=len(table.records),
            columns=len(table.columns)
        )

        return SheetPreviewResponse(
            name=name,
            display_name=display_name or name,
            columns=table.columns,
            records=table.records,
            rows=table.display_rows,
            total_rows=len(table.records),
            empty=table.is_empty,
            notice=table.notice
        )
