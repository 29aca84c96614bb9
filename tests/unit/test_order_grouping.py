"""
Unit tests for order grouping and per-day aggregates.

Run: pytest tests/unit/test_order_grouping.py -v
"""

import math
from datetime import date

from models.calendar import CalendarOrder
from services.order_grouping import (
    are_all_orders_issued,
    calculate_stats,
    calculate_total_area,
    filter_orders_by_search,
    group_orders_by_date,
    is_order_issued,
    to_area,
)


def make_order(order_id: int, **fields) -> CalendarOrder:
    fields.setdefault("order_name", str(order_id))
    return CalendarOrder(order_id=order_id, **fields)


class TestToArea:
    """Tests for to_area()"""

    def test_numbers_pass_through(self):
        assert to_area(1.5) == 1.5
        assert to_area(2) == 2.0

    def test_numeric_strings(self):
        assert to_area("2.25") == 2.25
        assert to_area("2,25") == 2.25

    def test_garbage_counts_as_zero(self):
        """Non-numeric, missing and non-finite values are 0."""
        assert to_area(None) == 0.0
        assert to_area("abc") == 0.0
        assert to_area("") == 0.0
        assert to_area(float("nan")) == 0.0
        assert to_area(float("inf")) == 0.0
        assert to_area(True) == 0.0


class TestGroupOrdersByDate:
    """Tests for group_orders_by_date()"""

    def test_groups_by_key(self):
        """Orders on the same day share one DD.MM.YYYY bucket."""
        orders = [
            make_order(1, planned_completion_date=date(2025, 11, 10)),
            make_order(2, planned_completion_date=date(2025, 11, 10)),
            make_order(3, planned_completion_date=date(2025, 11, 11)),
        ]

        grouped = group_orders_by_date(orders)

        assert list(grouped) == ["10.11.2025", "11.11.2025"]
        assert [o.order_id for o in grouped["10.11.2025"]] == [1, 2]

    def test_orders_without_date_are_skipped(self):
        orders = [
            make_order(1, planned_completion_date=None),
            make_order(2, planned_completion_date=date(2025, 11, 10)),
        ]

        grouped = group_orders_by_date(orders)

        assert sum(len(v) for v in grouped.values()) == 1

    def test_timestamp_keeps_calendar_day(self):
        """An ISO timestamp groups under its date part."""
        order = make_order(1, planned_completion_date="2025-11-10T23:30:00+03:00")

        assert list(group_orders_by_date([order])) == ["10.11.2025"]

    def test_each_order_appears_once(self):
        orders = [make_order(i, planned_completion_date=date(2025, 11, 10 + i % 3)) for i in range(9)]

        grouped = group_orders_by_date(orders)

        ids = [o.order_id for group in grouped.values() for o in group]
        assert sorted(ids) == list(range(9))

    def test_empty(self):
        assert group_orders_by_date([]) == {}


class TestDayAggregates:
    """Tests for total area and the all-issued flag."""

    def test_total_area(self):
        """1.5 + 2.0 = 3.5."""
        orders = [make_order(1, total_area=1.5), make_order(2, total_area="2.0")]

        assert calculate_total_area(orders) == 3.5

    def test_total_area_bad_values_count_as_zero(self):
        orders = [make_order(1, total_area="abc"), make_order(2, total_area=None)]

        total = calculate_total_area(orders)

        assert total == 0.0
        assert not math.isnan(total)

    def test_total_area_empty_day(self):
        assert calculate_total_area([]) == 0.0

    def test_issued_check_is_case_insensitive(self):
        assert is_order_issued(make_order(1, order_status_name="Выдан")) is True
        assert is_order_issued(make_order(2, order_status_name="в работе")) is False

    def test_all_issued(self):
        orders = [
            make_order(1, order_status_name="выдан"),
            make_order(2, order_status_name="ВЫДАН"),
        ]

        assert are_all_orders_issued(orders) is True

    def test_all_issued_false_with_one_open_order(self):
        orders = [
            make_order(1, order_status_name="выдан"),
            make_order(2, order_status_name="готов"),
        ]

        assert are_all_orders_issued(orders) is False

    def test_all_issued_false_for_empty_day(self):
        assert are_all_orders_issued([]) is False


class TestFilterOrdersBySearch:
    """Tests for filter_orders_by_search()"""

    def setup_method(self):
        self.orders = [
            make_order(1, order_name="1001", client_name="Иванов"),
            make_order(2, order_name="К-17", client_name="Петров", production_status_search="распилен"),
        ]

    def test_empty_query_keeps_everything(self):
        assert len(filter_orders_by_search(self.orders, "  ")) == 2
        assert len(filter_orders_by_search(self.orders, None)) == 2

    def test_by_number(self):
        assert [o.order_id for o in filter_orders_by_search(self.orders, "1001")] == [1]

    def test_by_client_case_insensitive(self):
        assert [o.order_id for o in filter_orders_by_search(self.orders, "петров")] == [2]

    def test_by_detail_stage_keyword(self):
        assert [o.order_id for o in filter_orders_by_search(self.orders, "распил")] == [2]


class TestCalculateStats:
    def test_stats(self):
        grouped = {
            "10.11.2025": [make_order(1, total_area=2, order_status_name="выдан")],
            "11.11.2025": [make_order(2, total_area=4, order_status_name="в работе")],
        }

        stats = calculate_stats(grouped)

        assert stats.total_orders == 2
        assert stats.total_area == 6.0
        assert stats.average_area_per_day == 3.0
        assert stats.orders_by_status == {"выдан": 1, "в работе": 1}

    def test_stats_over_visible_days(self):
        grouped = {"10.11.2025": [make_order(1, total_area=8)]}

        assert calculate_stats(grouped, days_count=16).average_area_per_day == 0.5
