"""
API tests for the calendar routes.

Run: pytest tests/unit/test_calendar_routes.py -v
"""

import pytest

from tests.factories import DetailFactory, OrderFactory, seed_calendar


@pytest.fixture
def client(test_client_with_mock_db, mock_supabase):
    seed_calendar(
        mock_supabase,
        [
            OrderFactory.create(order_id=1, order_name="1001", planned_completion_date="2025-11-10"),
            OrderFactory.create(order_id=2, order_name="1002", planned_completion_date="2025-11-10"),
            OrderFactory.create(order_id=3, order_name="1003", planned_completion_date="2025-11-14"),
        ],
        details=[DetailFactory.create(order_id=1, detail_id=1)],
    )
    return test_client_with_mock_db


def column(board: dict, date_key: str) -> dict:
    return next(col for row in board["rows"] for col in row if col["date_key"] == date_key)


class TestBoardEndpoint:
    """Tests for GET /api/calendar/board"""

    def test_board(self, client):
        response = client.get("/api/calendar/board", params={"center": "2025-11-12", "container_width": 1200})

        assert response.status_code == 200
        board = response.json()
        assert board["start_date"] == "2025-11-07"
        assert board["end_date"] == "2025-11-22"
        assert board["layout"] == {"column_width": 252, "columns_per_row": 4}
        assert [c["order"]["order_name"] for c in column(board, "10.11.2025")["cards"]] == ["1001", "1002"]
        assert column(board, "14.11.2025")["total_area_label"] == "1.50 кв.м."

    def test_brief_board(self, client):
        response = client.get(
            "/api/calendar/board",
            params={"center": "2025-11-12", "view_mode": "brief", "card_scale": 0.7},
        )

        board = response.json()
        assert board["zoom_enabled"] is False
        assert board["card_scale"] == 1.0
        assert len(column(board, "10.11.2025")["brief_lines"]) == 2

    def test_board_search(self, client):
        response = client.get("/api/calendar/board", params={"center": "2025-11-12", "search": "1002"})

        cards = column(response.json(), "10.11.2025")["cards"]
        assert [c["order"]["order_id"] for c in cards] == [2]

    def test_board_error_is_retryable(self, client, mock_supabase):
        mock_supabase.set_table_error("order_details", Exception("timeout"))

        response = client.get("/api/calendar/board", params={"center": "2025-11-12"})

        assert response.status_code == 200
        board = response.json()
        assert board["rows"] == []
        assert board["error"]["code"] == "CALENDAR_DATA_UNAVAILABLE"
        assert board["error"]["retryable"] is True

    def test_card_scale_out_of_range(self, client):
        response = client.get("/api/calendar/board", params={"card_scale": 3})

        assert response.status_code == 422


class TestDaysAndLayout:
    def test_days(self, client):
        response = client.get("/api/calendar/days", params={"center": "2025-11-12"})

        data = response.json()
        assert len(data["days"]) == 16
        assert data["date_keys"][0] == "07.11.2025"
        assert data["date_keys"][5] == "12.11.2025"

    def test_layout_desktop(self, client):
        response = client.get("/api/calendar/layout", params={"container_width": 1200, "card_scale": 0.72})

        assert response.json() == {"column_width": 252, "columns_per_row": 5}

    def test_layout_mobile_derived_from_width(self, client):
        response = client.get("/api/calendar/layout", params={"container_width": 375})

        assert response.json()["columns_per_row"] == 2

    def test_statuses(self, client):
        response = client.get("/api/calendar/statuses")

        data = response.json()
        assert [s["name"] for s in data["payment_statuses"]] == ["Не оплачен", "Оплачен"]
        assert len(data["order_statuses"]) == 3


class TestMoveEndpoint:
    """Tests for POST /api/calendar/orders/{id}/move"""

    def test_move(self, client, mock_supabase):
        response = client.post(
            "/api/calendar/orders/1/move",
            json={"source_date": "10.11.2025", "target_date": "12.11.2025"},
        )

        assert response.status_code == 200
        assert response.json()["state"] == "succeeded"
        assert response.json()["planned_completion_date"] == "2025-11-12"
        assert mock_supabase.rows("orders")[0]["planned_completion_date"] == "2025-11-12"

    def test_same_day_move_is_idle(self, client, mock_supabase):
        response = client.post(
            "/api/calendar/orders/1/move",
            json={"source_date": "10.11.2025", "target_date": "10.11.2025"},
        )

        assert response.json()["state"] == "idle"
        assert mock_supabase.calls_to("orders", "update") == []
        assert mock_supabase.calls_to("orders_view") == []

    def test_malformed_key(self, client):
        response = client.post(
            "/api/calendar/orders/1/move",
            json={"source_date": "2025-11-10", "target_date": "12.11.2025"},
        )

        assert response.status_code == 422

    def test_impossible_date(self, client):
        response = client.post(
            "/api/calendar/orders/1/move",
            json={"source_date": "10.11.2025", "target_date": "31.02.2025"},
        )

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "CALENDAR_INVALID_DATE_KEY"

    def test_unknown_order(self, client):
        response = client.post(
            "/api/calendar/orders/999/move",
            json={"source_date": "10.11.2025", "target_date": "12.11.2025"},
        )

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "ORDER_NOT_FOUND"

    def test_backend_failure(self, client, mock_supabase):
        mock_supabase.set_table_error("orders", Exception("denied"), operation="update")

        response = client.post(
            "/api/calendar/orders/1/move",
            json={"source_date": "10.11.2025", "target_date": "12.11.2025"},
        )

        assert response.status_code == 502
        assert response.json()["error"]["code"] == "ORDER_MOVE_FAILED"


class TestStatusEndpoint:
    """Tests for POST /api/calendar/orders/{id}/status"""

    def test_production_status(self, client, mock_supabase):
        response = client.post(
            "/api/calendar/orders/1/status",
            json={"field": "production_status", "status_id": 3, "status_name": "Распилен"},
        )

        assert response.status_code == 200
        assert response.json()["event_recorded"] is True
        assert len(mock_supabase.rows("production_status_events")) == 1

    def test_invalid_field(self, client, mock_supabase):
        response = client.post(
            "/api/calendar/orders/1/status",
            json={"field": "delivery_status", "status_id": 1},
        )

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "INVALID_STATUS_FIELD"
        assert mock_supabase.calls_to("orders_view") == []


class TestAppEndpoints:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_root(self, client):
        response = client.get("/")

        assert "/api/calendar/board" in response.json()["endpoints"].values()
