"""
Shared test fixtures.

The mock Supabase client keeps rows per table and evaluates the
PostgREST-style builder calls the data provider makes
(eq/in_/gte/lte/order/range, update, insert), so services can be
tested end to end without a database.
"""

import sys
from pathlib import Path

# Add project root to Python path
project_dir = Path(__file__).parent.parent
sys.path.insert(0, str(project_dir))

import pytest
from unittest.mock import patch
from datetime import date
from typing import Any, Generator, Optional


# ===================
# MOCK SUPABASE CLIENT
# ===================

class MockSupabaseResponse:
    """Mock Supabase query response."""

    def __init__(self, data: list = None, count: int = None):
        self.data = data or []
        self.count = count if count is not None else len(self.data)


class MockSupabaseQuery:
    """Mock query builder; filters are applied on execute()."""

    def __init__(self, client: "MockSupabaseClient", table: str):
        self._client = client
        self._table = table
        self._operation = "select"
        self._payload: Any = None
        self._filters: list[tuple[str, str, Any]] = []
        self._orders: list[tuple[str, bool]] = []
        self._range: Optional[tuple[int, int]] = None
        self._limit: Optional[int] = None

    def select(self, *args, **kwargs):
        self._operation = "select"
        return self

    def insert(self, data):
        self._operation = "insert"
        self._payload = data
        return self

    def update(self, data):
        self._operation = "update"
        self._payload = data
        return self

    def eq(self, column, value):
        self._filters.append(("eq", column, value))
        return self

    def in_(self, column, values):
        self._filters.append(("in", column, list(values)))
        return self

    def gte(self, column, value):
        self._filters.append(("gte", column, value))
        return self

    def lte(self, column, value):
        self._filters.append(("lte", column, value))
        return self

    def order(self, column, desc: bool = False, **kwargs):
        self._orders.append((column, desc))
        return self

    def range(self, start, end):
        self._range = (start, end)
        return self

    def limit(self, count):
        self._limit = count
        return self

    def _matches(self, row: dict) -> bool:
        for operator, column, value in self._filters:
            current = row.get(column)
            if operator == "eq" and current != value:
                return False
            if operator == "in" and current not in value:
                return False
            if operator == "gte" and (current is None or str(current) < str(value)):
                return False
            if operator == "lte" and (current is None or str(current)[:len(str(value))] > str(value)):
                return False
        return True

    def execute(self) -> MockSupabaseResponse:
        self._client.calls.append({
            "table": self._table,
            "operation": self._operation,
            "filters": list(self._filters),
            "payload": self._payload,
        })

        error = self._client.error_for(self._table, self._operation)
        if error is not None:
            raise error

        rows = self._client.rows(self._table)

        if self._operation == "insert":
            items = self._payload if isinstance(self._payload, list) else [self._payload]
            inserted = [dict(item) for item in items]
            rows.extend(inserted)
            return MockSupabaseResponse(data=inserted)

        matched = [row for row in rows if self._matches(row)]

        if self._operation == "update":
            for row in matched:
                row.update(self._payload)
            return MockSupabaseResponse(data=[dict(row) for row in matched])

        for column, desc in reversed(self._orders):
            matched.sort(key=lambda r: (r.get(column) is None, r.get(column)), reverse=desc)

        total = len(matched)
        if self._range is not None:
            start, end = self._range
            matched = matched[start:end + 1]
        if self._limit is not None:
            matched = matched[:self._limit]

        return MockSupabaseResponse(data=[dict(row) for row in matched], count=total)


class MockSupabaseClient:
    """Mock Supabase client with per-table rows and injectable failures."""

    def __init__(self):
        self._tables: dict[str, list[dict]] = {}
        self._errors: dict[tuple[str, Optional[str]], Exception] = {}
        self.calls: list[dict] = []

    def set_table_data(self, table_name: str, data: list):
        """Configure rows for a table."""
        self._tables[table_name] = [dict(row) for row in data]

    def set_table_error(self, table_name: str, error: Exception, operation: Optional[str] = None):
        """Make every (or one kind of) request to a table raise."""
        self._errors[(table_name, operation)] = error

    def clear_table_error(self, table_name: str, operation: Optional[str] = None):
        self._errors.pop((table_name, operation), None)

    def error_for(self, table_name: str, operation: str) -> Optional[Exception]:
        return self._errors.get((table_name, operation)) or self._errors.get((table_name, None))

    def rows(self, table_name: str) -> list[dict]:
        return self._tables.setdefault(table_name, [])

    def calls_to(self, table_name: str, operation: Optional[str] = None) -> list[dict]:
        return [
            c for c in self.calls
            if c["table"] == table_name and (operation is None or c["operation"] == operation)
        ]

    def table(self, name: str) -> MockSupabaseQuery:
        return MockSupabaseQuery(self, name)


# ===================
# FIXTURES
# ===================

@pytest.fixture
def mock_supabase() -> MockSupabaseClient:
    """
    Create a mock Supabase client.

    Usage:
        def test_something(mock_supabase):
            mock_supabase.set_table_data("orders_view", [
                {"order_id": 1, "order_name": "1001", ...}
            ])
    """
    return MockSupabaseClient()


@pytest.fixture
def mock_db(mock_supabase) -> Generator:
    """Patch the database client with the mock."""
    with patch("config.database.get_supabase_client", return_value=mock_supabase):
        with patch("services.data_provider.get_supabase_client", return_value=mock_supabase):
            yield mock_supabase


@pytest.fixture
def provider(mock_supabase):
    """Supabase data provider over the mock client."""
    from services.data_provider import SupabaseDataProvider

    return SupabaseDataProvider(client=mock_supabase)


@pytest.fixture
def bus():
    from services.invalidation import InvalidationBus

    return InvalidationBus()


@pytest.fixture
def notifications():
    from services.notification_service import NotificationService

    return NotificationService(max_items=50)


@pytest.fixture
def data_service(provider, bus):
    from services.calendar_data_service import CalendarDataService

    service = CalendarDataService(provider=provider, bus=bus)
    yield service
    service.close()


@pytest.fixture
def move_service(provider, bus, notifications):
    from services.order_move_service import OrderMoveService

    return OrderMoveService(provider=provider, bus=bus, notifications=notifications)


@pytest.fixture
def status_service(provider, bus, notifications):
    from services.order_status_service import OrderStatusService

    return OrderStatusService(provider=provider, bus=bus, notifications=notifications)


@pytest.fixture
def window():
    """Window centred on 12.11.2025: 07.11.2025 .. 22.11.2025."""
    from services.calendar_days import CalendarWindow

    return CalendarWindow(center_date=date(2025, 11, 12), days_back=5, days_forward=10, step_days=7)


@pytest.fixture
def board(data_service, move_service, status_service, notifications, window):
    from services.calendar_board_service import CalendarBoard

    return CalendarBoard(
        data_service=data_service,
        move_service=move_service,
        status_service=status_service,
        notifications=notifications,
        window=window,
        container_width=1200,
    )


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def calendar_singletons(mock_supabase) -> Generator:
    """
    Install service singletons wired to the mock client.

    Yields the data service; every singleton is reset afterwards.
    """
    import services.calendar_data_service as data_module
    import services.data_provider as provider_module
    import services.invalidation as bus_module
    import services.notification_service as notification_module
    import services.order_move_service as move_module
    import services.order_status_service as status_module

    provider_module._data_provider = provider_module.SupabaseDataProvider(client=mock_supabase)
    bus_module._invalidation_bus = bus_module.InvalidationBus()
    notification_module._notification_service = notification_module.NotificationService(max_items=50)
    data_module._calendar_data_service = data_module.CalendarDataService()
    move_module._order_move_service = move_module.OrderMoveService()
    status_module._order_status_service = status_module.OrderStatusService()

    yield data_module._calendar_data_service

    data_module._calendar_data_service.close()
    for module, name in (
        (provider_module, "_data_provider"),
        (bus_module, "_invalidation_bus"),
        (notification_module, "_notification_service"),
        (data_module, "_calendar_data_service"),
        (move_module, "_order_move_service"),
        (status_module, "_order_status_service"),
    ):
        setattr(module, name, None)


@pytest.fixture
def test_client_with_mock_db(mock_db, calendar_singletons):
    """
    FastAPI test client with the calendar services on the mock client.

    Usage:
        def test_endpoint(test_client_with_mock_db, mock_supabase):
            mock_supabase.set_table_data("orders_view", [...])
            response = test_client_with_mock_db.get("/api/calendar/board")
    """
    from fastapi.testclient import TestClient
    from main import app

    with TestClient(app) as client:
        yield client
