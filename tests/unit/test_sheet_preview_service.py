"""
Unit tests for workbook ingestion and preview.

The HTTP layer is patched; workbooks are built in memory.
"""

from unittest.mock import MagicMock, patch

import pytest
import requests

from services.sheet_preview_service import SheetPreviewService, ingest
from parsers.sheet_table import NO_DATA_NOTICE
from exceptions import TransportError, FormatError

from tests.factories import make_workbook


URL = "https://test-project.supabase.co/storage/v1/object/public/sheets/1735689600000_orders.xlsx"


def http_response(content: bytes = b"", status: int = 200, reason: str = "OK") -> MagicMock:
    response = MagicMock()
    response.ok = status < 400
    response.status_code = status
    response.reason = reason
    response.content = content
    return response


@pytest.fixture
def mock_get():
    with patch("integrations.remote_file.requests.get") as mock:
        yield mock


class TestIngest:

    def test_fetches_then_decodes(self, mock_get, scenario_a_workbook):
        mock_get.return_value = http_response(scenario_a_workbook)

        records = ingest(URL, timeout=5)

        mock_get.assert_called_once_with(URL, timeout=5)
        assert records == [
            {"Name": "Pen", "Qty": 10},
            {"Name": "Book", "Qty": None},
        ]

    def test_network_failure_skips_decode(self, mock_get):
        mock_get.side_effect = requests.ConnectionError("connection refused")

        with patch("services.sheet_preview_service.parse_first_sheet") as parse:
            with pytest.raises(TransportError) as exc_info:
                ingest(URL)

        parse.assert_not_called()
        assert exc_info.value.status_code == 502
        assert exc_info.value.details["url"] == URL

    def test_bad_status_is_transport_error(self, mock_get):
        mock_get.return_value = http_response(b"missing", status=404, reason="Not Found")

        with pytest.raises(TransportError) as exc_info:
            ingest(URL)

        assert exc_info.value.details["status"] == 404
        assert "404" in exc_info.value.message

    def test_timeout_is_transport_error(self, mock_get):
        mock_get.side_effect = requests.Timeout("read timed out")

        with pytest.raises(TransportError):
            ingest(URL)

    def test_undecodable_bytes_are_format_error(self, mock_get):
        mock_get.return_value = http_response(b"<html>not a workbook</html>")

        with pytest.raises(FormatError):
            ingest(URL)


class TestSheetPreviewService:

    def test_preview_builds_table(self, mock_get, scenario_a_workbook):
        mock_get.return_value = http_response(scenario_a_workbook)
        service = SheetPreviewService(timeout=10)

        preview = service.preview(URL, name="1735689600000_orders.xlsx", display_name="orders.xlsx")

        assert preview.display_name == "orders.xlsx"
        assert preview.columns == ["Name", "Qty"]
        assert preview.rows == [["Pen", "10"], ["Book", ""]]
        assert preview.records[1] == {"Name": "Book", "Qty": None}
        assert preview.total_rows == 2
        assert preview.empty is False
        assert preview.notice is None

    def test_header_only_workbook_shows_no_data_notice(self, mock_get):
        mock_get.return_value = http_response(make_workbook(("Sheet1", [["Name", "Qty"]])))
        service = SheetPreviewService()

        preview = service.preview(URL, name="1735689600000_orders.xlsx")

        assert preview.empty is True
        assert preview.records == []
        assert preview.rows == []
        assert preview.notice == NO_DATA_NOTICE
        assert preview.display_name == "1735689600000_orders.xlsx"

    def test_retry_after_failure_starts_fresh(self, mock_get, scenario_a_workbook):
        mock_get.side_effect = [
            requests.ConnectionError("connection reset"),
            http_response(scenario_a_workbook),
        ]
        service = SheetPreviewService()

        with pytest.raises(TransportError):
            service.preview(URL, name="orders")
        preview = service.preview(URL, name="orders")

        assert preview.total_rows == 2
        assert mock_get.call_count == 2
