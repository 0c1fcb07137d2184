"""
Shared test fixtures.

The Supabase, S3 and Gemini clients are replaced by in-memory fakes that
record what they were asked to do.
"""

import sys
from pathlib import Path

# Add backend directory to Python path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

import pytest
from typing import Generator, Optional

from services.gemini_service import GeminiService, get_gemini_service
from services.product_service import ProductService, get_product_service
from services.storage_service import ObjectStorage
from tests.factories import CDN_BASE_URL, ProductFactory


# ===================
# MOCK SUPABASE CLIENT
# ===================

class MockSupabaseResponse:
    """Mock Supabase query response."""

    def __init__(self, data: list = None, count: int = None):
        self.data = data or []
        self.count = count if count is not None else len(self.data)


class MockSupabaseQuery:
    """Chainable query; eq() and limit() are applied on execute()."""

    def __init__(self, table: "MockSupabaseTable", operation: str, payload: Optional[dict] = None):
        self._table = table
        self._operation = operation
        self._payload = payload
        self._filters: dict = {}
        self._limit: Optional[int] = None

    def select(self, *args, **kwargs):
        return self

    def eq(self, column, value):
        self._filters[column] = value
        return self

    def order(self, column, **kwargs):
        return self

    def limit(self, count):
        self._limit = count
        return self

    def execute(self) -> MockSupabaseResponse:
        error = self._table.errors.get(self._operation)
        if error is not None:
            raise error

        rows = [
            row for row in self._table.rows
            if all(row.get(column) == value for column, value in self._filters.items())
        ]

        if self._operation == "update":
            self._table.updates.append({
                "data": dict(self._payload),
                "filters": dict(self._filters)
            })
            for row in rows:
                row.update(self._payload)

        if self._limit is not None:
            rows = rows[:self._limit]

        return MockSupabaseResponse(data=[dict(row) for row in rows])


class MockSupabaseTable:
    """In-memory table that records updates."""

    def __init__(self, rows: list = None):
        self.rows = [dict(row) for row in (rows or [])]
        self.updates: list = []
        self.errors: dict = {}

    def select(self, *args, **kwargs):
        return MockSupabaseQuery(self, "select")

    def update(self, data):
        return MockSupabaseQuery(self, "update", data)


class MockSupabaseClient:
    """Mock Supabase client."""

    def __init__(self):
        self._tables = {}

    def set_table_data(self, table_name: str, data: list):
        """Configure mock data for a table."""
        self._tables[table_name] = MockSupabaseTable(data)

    def set_table_error(self, table_name: str, error: Exception, operation: str = "select"):
        """Make every `operation` query on the table raise `error`."""
        self.table(table_name).errors[operation] = error

    def updates(self, table_name: str) -> list:
        return self.table(table_name).updates

    def rows(self, table_name: str) -> list:
        return self.table(table_name).rows

    def table(self, name: str) -> MockSupabaseTable:
        if name not in self._tables:
            self._tables[name] = MockSupabaseTable()
        return self._tables[name]


# ===================
# FAKE S3 / GEMINI CLIENTS
# ===================

class FakeS3Client:
    """Records put_object calls; optionally fails them."""

    def __init__(self):
        self.objects: dict = {}
        self.calls: list = []
        self.error: Optional[Exception] = None

    def put_object(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        self.objects[kwargs["Key"]] = kwargs
        return {"ETag": '"fake-etag"'}


class _FakeModels:
    def __init__(self, owner: "FakeGenaiClient"):
        self._owner = owner

    def generate_content(self, model, contents, **kwargs):
        self._owner.calls.append({"model": model, "contents": contents})
        if self._owner.error is not None:
            raise self._owner.error
        if not self._owner.responses:
            raise AssertionError("FakeGenaiClient has no queued response")
        return self._owner.responses.pop(0)


class FakeGenaiClient:
    """Stands in for google.genai.Client; returns queued responses in order."""

    def __init__(self):
        self.responses: list = []
        self.calls: list = []
        self.error: Optional[Exception] = None
        self.models = _FakeModels(self)

    def queue(self, *responses):
        self.responses.extend(responses)


# ===================
# FIXTURES
# ===================

@pytest.fixture
def mock_supabase() -> MockSupabaseClient:
    """
    Create a mock Supabase client.

    Usage:
        def test_something(mock_supabase):
            mock_supabase.set_table_data("products", [
                ProductFactory.create(sku="ABC-123")
            ])
    """
    return MockSupabaseClient()


@pytest.fixture
def fake_s3() -> FakeS3Client:
    return FakeS3Client()


@pytest.fixture
def storage(fake_s3) -> ObjectStorage:
    return ObjectStorage(fake_s3, "jewelry-images", CDN_BASE_URL)


@pytest.fixture
def product_service(mock_supabase, storage) -> ProductService:
    return ProductService(db=mock_supabase, storage=storage, table="products")


@pytest.fixture
def image_client() -> FakeGenaiClient:
    return FakeGenaiClient()


@pytest.fixture
def text_client() -> FakeGenaiClient:
    return FakeGenaiClient()


@pytest.fixture
def gemini_service(image_client, text_client) -> GeminiService:
    return GeminiService(
        image_client=image_client,
        text_client=text_client,
        image_model="image-model",
        text_model="text-model"
    )


@pytest.fixture
def sample_product_data() -> dict:
    """Product with a meta title, ready for stage images."""
    return ProductFactory.create(
        sku="ABC-123",
        category="Rings",
        meta_title="Custom Gold Ring"
    )


@pytest.fixture
def untitled_product_data() -> dict:
    """Product with no meta title yet."""
    return ProductFactory.create(sku="ABC-123", category="Rings", meta_title=None)


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def test_client(product_service, gemini_service) -> Generator:
    """
    FastAPI test client with services bound to the fakes.

    The lifespan is not run, so no real clients are created.

    Usage:
        def test_endpoint(test_client, mock_supabase):
            mock_supabase.set_table_data("products", [...])
            response = test_client.get("/products")
    """
    from fastapi.testclient import TestClient
    from main import app

    app.dependency_overrides[get_product_service] = lambda: product_service
    app.dependency_overrides[get_gemini_service] = lambda: gemini_service

    yield TestClient(app)

    app.dependency_overrides.clear()
