"""
Shared test fixtures.
"""

import os
import sys
from pathlib import Path

# Add project directory to Python path
project_dir = Path(__file__).parent.parent
sys.path.insert(0, str(project_dir))

# Settings are loaded at import time; give them placeholder credentials
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")

import pytest
from datetime import datetime, timedelta, timezone
from typing import Optional
from urllib.parse import quote

from tests.factories import make_workbook

MOCK_STORAGE_URL = "https://test-project.supabase.co/storage/v1/object/public"


# ===================
# MOCK SUPABASE CLIENT
# ===================

class MockSupabaseResponse:
    """Mock Supabase query response."""

    def __init__(self, data: list = None, count: int = None):
        self.data = data if data is not None else []
        self.count = count if count is not None else len(self.data)


class MockStoreError(Exception):
    """Error shaped like the store client's API errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class MockSupabaseQuery:
    """Mock query builder; filters and ordering apply on execute()."""

    def __init__(self, table: "MockSupabaseTable", action: str, payload=None):
        self._table = table
        self._action = action
        self._payload = payload
        self._filters = []
        self._order: Optional[tuple[str, bool]] = None
        self._limit: Optional[int] = None

    def select(self, *args, **kwargs):
        return self

    def eq(self, column, value):
        self._filters.append((column, value))
        return self

    def order(self, column, desc: bool = False, **kwargs):
        self._order = (column, desc)
        return self

    def limit(self, count):
        self._limit = count
        return self

    def _matches(self, row: dict) -> bool:
        return all(str(row.get(column)) == str(value) for column, value in self._filters)

    def execute(self) -> MockSupabaseResponse:
        table = self._table
        table.calls.append((self._action, self._payload, list(self._filters)))

        if table.fail_on == self._action:
            raise MockStoreError(table.fail_message)

        if self._action == "insert":
            rows = self._payload if isinstance(self._payload, list) else [self._payload]
            inserted = []
            for row in rows:
                stored = {
                    "id": table.next_id(),
                    "created_at": table.next_timestamp(),
                    **row,
                }
                table.rows.append(stored)
                inserted.append(dict(stored))
            return MockSupabaseResponse(inserted)

        matched = [row for row in table.rows if self._matches(row)]

        if self._action == "update":
            for row in matched:
                row.update(self._payload)
            return MockSupabaseResponse([dict(row) for row in matched])

        if self._action == "delete":
            table.rows = [row for row in table.rows if row not in matched]
            return MockSupabaseResponse([dict(row) for row in matched])

        if self._order:
            column, desc = self._order
            matched = sorted(matched, key=lambda row: row.get(column) or "", reverse=desc)
        if self._limit is not None:
            matched = matched[:self._limit]
        return MockSupabaseResponse([dict(row) for row in matched], count=len(matched))


class MockSupabaseTable:
    """In-memory table shared by every query against it."""

    def __init__(self, rows: list = None):
        self.rows = [dict(row) for row in rows or []]
        self.calls = []
        self.fail_on: Optional[str] = None
        self.fail_message = "store unavailable"
        self._counter = 0
        self._clock = datetime(2025, 1, 1, tzinfo=timezone.utc)

    def next_id(self) -> str:
        self._counter += 1
        return f"product-{self._counter}"

    def next_timestamp(self) -> str:
        self._clock += timedelta(seconds=1)
        return self._clock.isoformat()

    def select(self, *args, **kwargs):
        return MockSupabaseQuery(self, "select")

    def insert(self, data):
        return MockSupabaseQuery(self, "insert", data)

    def update(self, data):
        return MockSupabaseQuery(self, "update", data)

    def delete(self):
        return MockSupabaseQuery(self, "delete")


class MockStorageBucket:
    """In-memory storage bucket."""

    def __init__(self, name: str):
        self.name = name
        self.objects: dict[str, bytes] = {}
        self.upload_calls: list[str] = []
        self.remove_calls: list[list[str]] = []
        self.fail_uploads_matching: Optional[str] = None
        self.fail_list = False
        self.fail_remove = False

    def upload(self, path, file, file_options=None):
        self.upload_calls.append(path)
        if self.fail_uploads_matching and self.fail_uploads_matching in path:
            raise MockStoreError("The object exceeded the maximum allowed size")
        self.objects[path] = file
        return {"path": path}

    def list(self, path="", options=None):
        if self.fail_list:
            raise MockStoreError("bucket not found")
        limit = (options or {}).get("limit", 100)
        return [{"name": name} for name in list(self.objects)[:limit]]

    def remove(self, paths):
        self.remove_calls.append(list(paths))
        if self.fail_remove:
            raise MockStoreError("permission denied")
        removed = []
        for path in paths:
            if path in self.objects:
                del self.objects[path]
                removed.append({"name": path})
        return removed

    def get_public_url(self, path):
        return f"{MOCK_STORAGE_URL}/{self.name}/{quote(path)}"


class MockStorage:
    def __init__(self):
        self.buckets: dict[str, MockStorageBucket] = {}

    def from_(self, bucket: str) -> MockStorageBucket:
        if bucket not in self.buckets:
            self.buckets[bucket] = MockStorageBucket(bucket)
        return self.buckets[bucket]


class MockSupabaseClient:
    """Mock Supabase client."""

    def __init__(self):
        self._tables: dict[str, MockSupabaseTable] = {}
        self.storage = MockStorage()

    def set_table_data(self, table_name: str, data: list):
        """Configure mock data for a table."""
        self._tables[table_name] = MockSupabaseTable(data)

    def table(self, name: str) -> MockSupabaseTable:
        """Get mock table."""
        if name not in self._tables:
            self._tables[name] = MockSupabaseTable()
        return self._tables[name]

    def bucket(self, name: str) -> MockStorageBucket:
        return self.storage.from_(name)


# ===================
# FIXTURES
# ===================

@pytest.fixture
def mock_supabase() -> MockSupabaseClient:
    """
    Create a mock Supabase client.

    Usage:
        def test_something(mock_supabase):
            mock_supabase.set_table_data("product", [
                {"id": "1", "title_ar": "...", ...}
            ])
    """
    return MockSupabaseClient()


@pytest.fixture
def sample_product_data() -> dict:
    """Sample product row for testing."""
    return {
        "id": "test-uuid-123",
        "title_ar": "قلم",
        "title_en": "Pen",
        "content_ar": "<p>قلم أزرق</p>",
        "content_en": "<p>Blue pen</p>",
        "images": [
            f"{MOCK_STORAGE_URL}/productsimgs/1735689600000-pen.jpg",
            f"{MOCK_STORAGE_URL}/productsimgs/1735689600001-pen-back.jpg",
        ],
        "yt_code": "abc123",
        "created_at": "2025-01-01T10:00:00+00:00",
    }


@pytest.fixture
def scenario_a_workbook() -> bytes:
    """Header Name/Qty, rows Pen/10 and Book/blank."""
    return make_workbook(("Sheet1", [["Name", "Qty"], ["Pen", 10], ["Book", None]]))


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def test_client_with_mock_db(mock_supabase):
    """
    Create FastAPI test client backed by the mock store.

    Usage:
        def test_endpoint(test_client_with_mock_db, mock_supabase):
            mock_supabase.set_table_data("product", [...])
            response = test_client_with_mock_db.get("/api/products")
    """
    from fastapi.testclient import TestClient
    from main import app
    from routes.deps import get_db

    app.dependency_overrides[get_db] = lambda: mock_supabase
    yield TestClient(app)
    app.dependency_overrides.clear()
