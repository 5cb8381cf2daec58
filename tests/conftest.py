"""
Shared test fixtures.
"""

import sys
from pathlib import Path

# Add project root to Python path
project_dir = Path(__file__).parent.parent
sys.path.insert(0, str(project_dir))

import pytest
from unittest.mock import MagicMock, patch
from typing import Generator, Optional

from models.mapping import AttributeMatch, OwnedRecordPair
from models.suggestion_service import SuggestMappingRequest, SuggestMappingResponse
from services.mapping_suggestion_service import CancellationToken, SuggestionContext
from services.progress_service import LogProgressSink
from services.quality_assessment_service import MappingQualityAssessor
from services.suggestion_client_service import SuggestionClient
from tests.factories import AttributeMatchFactory, RecordFactory


# ===================
# MOCK SUPABASE CLIENT
# ===================

class MockSupabaseResponse:
    """Mock Supabase query response."""

    def __init__(self, data: list = None, count: int = None):
        self.data = data or []
        self.count = count if count is not None else len(self.data)


class MockSupabaseQuery:
    """Mock Supabase query builder with chainable methods; eq/is_ filter rows."""

    def __init__(self, data: list = None, count: int = None, calls: list = None):
        self._data = data or []
        self._count = count
        self._negate = False
        self._limit = None
        self.calls = calls if calls is not None else []

    def select(self, *args, **kwargs):
        return self

    def upsert(self, data, **kwargs):
        self.calls.append(("upsert", data, kwargs))
        self._data = [data] if isinstance(data, dict) else data
        return self

    @property
    def not_(self):
        self._negate = True
        return self

    def eq(self, column, value):
        self.calls.append(("eq", column, value))
        self._data = [row for row in self._data if row.get(column) == value]
        return self

    def is_(self, column, value):
        self.calls.append(("is_", column, value, self._negate))
        expected_none = value == "null"
        if self._negate:
            self._data = [row for row in self._data if (row.get(column) is None) != expected_none]
        else:
            self._data = [row for row in self._data if (row.get(column) is None) == expected_none]
        self._negate = False
        return self

    def order(self, column, **kwargs):
        return self

    def limit(self, count):
        self._limit = count
        return self

    def execute(self) -> MockSupabaseResponse:
        data = self._data[:self._limit] if self._limit is not None else self._data
        return MockSupabaseResponse(
            data=data,
            count=self._count if self._count is not None else len(data)
        )


class MockSupabaseTable:
    """Mock Supabase table with configurable rows."""

    def __init__(self, data: list = None, count: int = None, calls: list = None):
        self._data = data or []
        self._count = count
        self.calls = calls if calls is not None else []

    def select(self, *args, **kwargs):
        return MockSupabaseQuery(self._data.copy(), self._count, self.calls)

    def upsert(self, data, **kwargs):
        query = MockSupabaseQuery(self._data.copy(), self._count, self.calls)
        return query.upsert(data, **kwargs)


class MockSupabaseClient:
    """Mock Supabase client."""

    def __init__(self):
        self._tables = {}
        self.calls: dict[str, list] = {}

    def set_table_data(self, table_name: str, data: list, count: int = None):
        """Configure mock rows for a table."""
        self._tables[table_name] = {"data": data, "count": count}

    def table(self, name: str) -> MockSupabaseTable:
        """Get mock table."""
        config = self._tables.get(name, {"data": [], "count": None})
        return MockSupabaseTable(config["data"], config["count"], self.calls.setdefault(name, []))


# ===================
# STUB COLLABORATORS
# ===================

class StubSuggestionClient(SuggestionClient):
    """Deterministic transport that records the requests it receives."""

    def __init__(self, script: Optional[str] = "input", error: Optional[Exception] = None):
        self.script = script
        self.error = error
        self.calls: list[SuggestMappingRequest] = []

    def invoke(self, request: SuggestMappingRequest) -> SuggestMappingResponse:
        self.calls.append(request)
        if self.error is not None:
            raise self.error
        return SuggestMappingResponse(transformation_script=self.script)


# ===================
# FIXTURES
# ===================

@pytest.fixture
def mock_supabase() -> MockSupabaseClient:
    """
    Create a mock Supabase client.

    Usage:
        def test_something(mock_supabase):
            mock_supabase.set_table_data("shadows", [
                {"id": "a-1", "owner_id": "u-1", ...}
            ])
    """
    return MockSupabaseClient()


@pytest.fixture
def mock_db(mock_supabase) -> Generator:
    """
    Patch the database client with mock.

    Any code using get_supabase_client() gets the mock.
    """
    with patch("config.database.get_supabase_client", return_value=mock_supabase):
        with patch("services.record_store_service.get_supabase_client", return_value=mock_supabase):
            with patch("services.progress_service.get_supabase_client", return_value=mock_supabase):
                yield mock_supabase


@pytest.fixture
def stub_client() -> StubSuggestionClient:
    """Suggestion client answering with the sentinel."""
    return StubSuggestionClient()


@pytest.fixture
def progress_sink() -> LogProgressSink:
    return LogProgressSink()


@pytest.fixture
def make_context(stub_client, progress_sink):
    """
    Build a SuggestionContext around stubs.

    Usage:
        ctx = make_context(record_store=store, suggestion_client=client)
    """
    def _make(
        record_store=None,
        suggestion_client=None,
        quality_assessor=None,
        progress_sink_override=None,
        cancellation=None
    ) -> SuggestionContext:
        return SuggestionContext(
            record_store=record_store if record_store is not None else MagicMock(),
            suggestion_client=suggestion_client if suggestion_client is not None else stub_client,
            quality_assessor=quality_assessor or MappingQualityAssessor(),
            progress_sink=progress_sink_override or progress_sink,
            cancellation=cancellation or CancellationToken(),
        )
    return _make


@pytest.fixture
def mail_match() -> AttributeMatch:
    """Account mail → subject emailAddress (string)."""
    return AttributeMatchFactory.create(
        source_name="mail",
        source_path="attributes/ri:mail",
        target_name="emailAddress",
        target_path="emailAddress"
    )


@pytest.fixture
def owned_pairs() -> list[OwnedRecordPair]:
    """Two owned pairs whose mail values equal the subject's emailAddress."""
    return [
        OwnedRecordPair(
            account=RecordFactory.account(attributes={"mail": ["jdoe@example.com"], "uid": ["jdoe"]}),
            owner=RecordFactory.subject(emailAddress="jdoe@example.com", name="JDOE", employeeNumber="1001")
        ),
        OwnedRecordPair(
            account=RecordFactory.account(attributes={"mail": ["asmith@example.com"], "uid": ["asmith"]}),
            owner=RecordFactory.subject(emailAddress="asmith@example.com", name="ASMITH", employeeNumber="1002")
        ),
    ]


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def test_client():
    """
    Create FastAPI test client.

    Usage:
        def test_endpoint(test_client):
            response = test_client.get("/")
            assert response.status_code == 200
    """
    from fastapi.testclient import TestClient
    from main import app

    return TestClient(app)
