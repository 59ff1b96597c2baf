"""
Shared test fixtures.
"""

import os
import sys
from pathlib import Path

# Add backend directory to Python path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

# Settings are loaded at import time and require Supabase credentials
os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")

import pytest
from unittest.mock import patch
from datetime import datetime, timezone
from typing import Callable, Generator, Optional
from uuid import uuid4


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ===================
# MOCK SUPABASE CLIENT
# ===================

class MockSupabaseResponse:
    """Mock Supabase query response."""

    def __init__(self, data: list = None, count: int = None):
        self.data = data if data is not None else []
        self.count = count if count is not None else (
            len(self.data) if isinstance(self.data, list) else None
        )


class MockSupabaseQuery:
    """
    Mock Supabase query builder with chainable methods.

    Filters are recorded, not applied: tests configure exactly the rows
    a query should return. Every executed write is logged on the client.
    """

    def __init__(self, client: "MockSupabaseClient", table: str, data: list, count: int = None):
        self._client = client
        self._table = table
        self._data = data
        self._count = count
        self._operation = "select"
        self._payload = None
        self._is_single = False
        self._range: Optional[tuple[int, int]] = None
        self.filters: list[tuple] = []

    @property
    def not_(self):
        self.filters.append(("not",))
        return self

    def select(self, *args, **kwargs):
        return self

    def insert(self, data):
        # Simulate insert - add id and timestamps
        rows = [data] if isinstance(data, dict) else data
        inserted = []
        for item in rows:
            row = dict(item)
            row.setdefault("id", str(uuid4()))
            row.setdefault("created_at", _now_iso())
            inserted.append(row)
        self._operation = "insert"
        self._payload = inserted
        self._data = inserted
        return self

    def update(self, data):
        self._operation = "update"
        self._payload = dict(data)
        self._data = [{**item, **data} for item in self._data] or [dict(data)]
        return self

    def delete(self):
        self._operation = "delete"
        return self

    def eq(self, column, value):
        self.filters.append(("eq", column, value))
        return self

    def neq(self, column, value):
        self.filters.append(("neq", column, value))
        return self

    def is_(self, column, value):
        self.filters.append(("is", column, value))
        return self

    def in_(self, column, values):
        self.filters.append(("in", column, list(values)))
        return self

    def single(self):
        self._is_single = True
        return self

    def order(self, column, **kwargs):
        return self

    def range(self, start, end):
        # Inclusive bounds, like PostgREST
        self._range = (start, end)
        return self

    def limit(self, count):
        return self

    def execute(self) -> MockSupabaseResponse:
        self._client.record(self)

        error = self._client.error_for(self)
        if error is not None:
            raise error

        if self._is_single:
            data = self._data[0] if self._data else None
            return MockSupabaseResponse(data=data, count=1 if data else 0)

        data = self._data
        if self._range is not None and self._operation == "select":
            start, end = self._range
            data = data[start:end + 1]
        return MockSupabaseResponse(
            data=data,
            count=self._count if self._count is not None else len(self._data)
        )


class MockSupabaseTable:
    """Mock Supabase table with configurable responses."""

    def __init__(self, client: "MockSupabaseClient", name: str, data: list = None, count: int = None):
        self._client = client
        self._name = name
        self._data = data or []
        self._count = count

    def _query(self) -> MockSupabaseQuery:
        return MockSupabaseQuery(self._client, self._name, [dict(r) for r in self._data], self._count)

    def select(self, *args, **kwargs):
        return self._query()

    def insert(self, data):
        return self._query().insert(data)

    def update(self, data):
        return self._query().update(data)

    def delete(self):
        return self._query().delete()


class MockSupabaseClient:
    """Mock Supabase client."""

    def __init__(self):
        self._tables = {}
        self._errors: list[tuple] = []
        self.operations: list[dict] = []

    def set_table_data(self, table_name: str, data: list, count: int = None):
        """Configure mock data for a table."""
        self._tables[table_name] = {"data": data, "count": count}

    def set_table_error(
        self,
        table_name: str,
        error: Exception,
        operation: Optional[str] = None,
        when: Optional[Callable[[MockSupabaseQuery], bool]] = None,
    ):
        """Make queries on a table raise (optionally only one operation, or when a predicate holds)."""
        self._errors.append((table_name, operation, when, error))

    def error_for(self, query: MockSupabaseQuery) -> Optional[Exception]:
        for table_name, operation, when, error in self._errors:
            if table_name != query._table:
                continue
            if operation is not None and operation != query._operation:
                continue
            if when is not None and not when(query):
                continue
            return error
        return None

    def record(self, query: MockSupabaseQuery) -> None:
        self.operations.append({
            "table": query._table,
            "operation": query._operation,
            "payload": query._payload,
            "filters": list(query.filters),
            "range": query._range,
        })

    def writes(self, table_name: str, operation: str) -> list[dict]:
        """Executed operations of one kind on one table."""
        return [
            op for op in self.operations
            if op["table"] == table_name and op["operation"] == operation
        ]

    def table(self, name: str) -> MockSupabaseTable:
        """Get mock table."""
        config = self._tables.get(name, {"data": [], "count": None})
        return MockSupabaseTable(self, name, config["data"], config["count"])


# ===================
# FIXTURES
# ===================

_SERVICE_MODULES = (
    "services.product_service",
    "services.upload_history_service",
    "services.import_service",
    "services.project_service",
)


@pytest.fixture
def mock_supabase() -> MockSupabaseClient:
    """
    Create a mock Supabase client.

    Usage:
        def test_something(mock_supabase):
            mock_supabase.set_table_data("products", [
                {"id": "1", "product": "LED Panel", ...}
            ])
    """
    return MockSupabaseClient()


@pytest.fixture
def mock_db(mock_supabase) -> Generator:
    """
    Patch the database client with mock and reset service singletons.

    Usage:
        def test_something(mock_db, mock_supabase):
            mock_supabase.set_table_data("products", [...])
            # Now any code using get_supabase_client() gets the mock
    """
    import services.import_service as import_module
    import services.product_service as product_module
    import services.project_service as project_module
    import services.upload_history_service as history_module

    patches = [patch("config.database.get_supabase_client", return_value=mock_supabase)]
    patches += [
        patch(f"{module}.get_supabase_client", return_value=mock_supabase)
        for module in _SERVICE_MODULES
    ]
    for p in patches:
        p.start()

    singletons = (
        (import_module, "_import_service"),
        (product_module, "_product_service"),
        (project_module, "_project_service"),
        (history_module, "_service"),
    )
    for module, name in singletons:
        setattr(module, name, None)

    yield mock_supabase

    for module, name in singletons:
        setattr(module, name, None)
    for p in patches:
        p.stop()


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def test_client_with_mock_db(mock_db):
    """
    Create FastAPI test client with mocked database.

    Usage:
        def test_endpoint(test_client_with_mock_db, mock_supabase):
            mock_supabase.set_table_data("products", [...])
            response = test_client_with_mock_db.get("/api/projects?user_id=u1")
    """
    from fastapi.testclient import TestClient
    from main import app

    # No `with`: skips lifespan, which would hit the real database
    return TestClient(app)
