"""
Grouping of calendar orders by planned completion date.

Also derives per-day aggregates (total area, "all issued") and the
search/statistics helpers used by the board.
"""

import math
from collections import Counter
from typing import Any, Iterable, Optional
import structlog

from config.calendar import ISSUED_STATUS
from models.calendar import CalendarOrder, CalendarStats, OrdersByDate
from services.calendar_days import format_date_key

logger = structlog.get_logger(__name__)


def to_area(value: Any) -> float:
    """
    Coerce an area value to float.

    None, non-numeric strings, NaN and infinities count as 0.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        area = float(str(value).strip().replace(",", "."))
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(area) or math.isinf(area):
        return 0.0
    return area


def group_orders_by_date(orders: Iterable[CalendarOrder]) -> OrdersByDate:
    """
    Group orders by planned completion date.

    Orders without a date are skipped. Insertion order follows the
    input order, which the aggregator sorts by date then id.

    Returns:
        dict of DD.MM.YYYY key → orders
    """
    grouped: OrdersByDate = {}

    for order in orders:
        if not order.planned_completion_date:
            continue

        try:
            key = format_date_key(order.planned_completion_date)
        except (ValueError, TypeError) as e:
            logger.error(
                "group_order_by_date_failed",
                order_id=order.order_id,
                planned_completion_date=str(order.planned_completion_date),
                error=str(e)
            )
            continue

        grouped.setdefault(key, []).append(order)

    return grouped


def calculate_total_area(orders: Iterable[CalendarOrder]) -> float:
    """Sum of order areas in m²; never NaN."""
    return sum((to_area(order.total_area) for order in orders), 0.0)


def is_order_issued(order: CalendarOrder) -> bool:
    status = (order.order_status_name or "").strip().lower()
    return status == ISSUED_STATUS or order.is_issued is True


def are_all_orders_issued(orders: Iterable[CalendarOrder]) -> bool:
    """True only for a non-empty group where every order is issued."""
    orders = list(orders)
    if not orders:
        return False
    return all(is_order_issued(order) for order in orders)


def filter_orders_by_search(
    orders: Iterable[CalendarOrder],
    search_query: Optional[str]
) -> list[CalendarOrder]:
    """
    Keep orders whose number, client, id or production keywords match.
    """
    orders = list(orders)
    if not search_query or not search_query.strip():
        return orders

    query = search_query.strip().lower()

    def matches(order: CalendarOrder) -> bool:
        return (
            query in (order.order_name or "").lower()
            or query in (order.client_name or "").lower()
            or query in str(order.order_id)
            or query in (order.production_status_name or "").lower()
            or query in order.production_status_search
        )

    return [order for order in orders if matches(order)]


def calculate_stats(orders_by_date: OrdersByDate, days_count: Optional[int] = None) -> CalendarStats:
    """
    Board statistics.

    `average_area_per_day` divides by `days_count` when given (the
    visible window), otherwise by the number of non-empty days.
    """
    all_orders = [order for group in orders_by_date.values() for order in group]
    total_area = calculate_total_area(all_orders)

    by_status = Counter(
        (order.order_status_name or "—") for order in all_orders
    )

    divisor = days_count if days_count else len(orders_by_date)
    average = total_area / divisor if divisor else 0.0

    return CalendarStats(
        total_orders=len(all_orders),
        total_area=round(total_area, 2),
        orders_by_status=dict(by_status),
        average_area_per_day=round(average, 2)
    )
