"""
Production calendar schemas.

Denormalized order projections, drag payloads, layout results and the
aggregated window data produced on every refresh.
"""

from pydantic import Field, field_validator
from typing import Any, Optional
from enum import Enum
from datetime import date, datetime

from models.base import BaseSchema, ValueSchema, date_part


class ViewMode(str, Enum):
    """Board rendering density."""
    STANDARD = "standard"
    COMPACT = "compact"
    BRIEF = "brief"


class StatusField(str, Enum):
    """Logical status fields editable from the context menu."""
    ORDER_STATUS = "order_status"
    PAYMENT_STATUS = "payment_status"
    PRODUCTION_STATUS = "production_status"


class MoveState(str, Enum):
    """State of one move attempt."""
    IDLE = "idle"
    PERSISTING = "persisting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


# ===================
# ORDER PROJECTION
# ===================

class DetailSummary(BaseSchema):
    """
    Production detail of an order with names resolved.

    Never carries the raw foreign keys.
    """

    detail_id: int
    order_id: int
    area: Any = None
    milling_type_name: Optional[str] = None
    material_name: Optional[str] = None
    production_status_name: Optional[str] = None


class CalendarOrder(BaseSchema):
    """
    Order as shown on the calendar board.

    Recomputed in full on every refresh; never patched in place.
    """

    order_id: int
    order_name: str = ""
    order_date: Optional[date] = None
    planned_completion_date: Optional[date] = None
    client_name: Optional[str] = None
    parts_count: Optional[int] = None
    total_area: Any = None
    order_status_name: Optional[str] = None
    payment_status_name: Optional[str] = None
    production_status_name: Optional[str] = None
    # Lower-cased distinct detail stage names; keyword surface for search only
    production_status_search: str = ""
    paid_amount: Optional[float] = None
    total_price: Optional[float] = None
    materials: Optional[str] = None
    is_issued: Optional[bool] = None
    is_drawn: Optional[bool] = None

    order_details: list[DetailSummary] = Field(default_factory=list)
    doweling_order_name: Optional[str] = None
    passed_stage_codes: list[str] = Field(default_factory=list)

    @field_validator("order_date", "planned_completion_date", mode="before")
    @classmethod
    def strip_time(cls, v: Any) -> Any:
        return date_part(v)


OrdersByDate = dict[str, list[CalendarOrder]]


class CalendarData(BaseSchema):
    """Result of one aggregator refresh for a date window."""

    start_date: date
    end_date: date
    orders: list[CalendarOrder] = Field(default_factory=list)
    orders_by_date: OrdersByDate = Field(default_factory=dict)
    sequence: int = 0
    loaded_at: datetime
    degraded_sources: list[str] = Field(
        default_factory=list,
        description="Lookups that failed and were left empty"
    )


class CalendarStats(BaseSchema):
    total_orders: int
    total_area: float
    orders_by_status: dict[str, int]
    average_area_per_day: float


# ===================
# INTERACTION VALUES
# ===================

class DragItem(ValueSchema):
    """Payload of one drag gesture. Exists only while dragging."""

    order: CalendarOrder
    source_date: str = Field(..., description="Source date key (DD.MM.YYYY)")


class LayoutCalculation(ValueSchema):
    """Column width (px) and how many day columns fit in one row."""

    column_width: float
    columns_per_row: int


class ContextMenuState(BaseSchema):
    is_open: bool = False
    x: int = 0
    y: int = 0
    order: Optional[CalendarOrder] = None


class StatusItem(BaseSchema):
    id: int
    name: str


class StatusOptions(BaseSchema):
    """Active statuses offered in the context menu."""

    order_statuses: list[StatusItem] = Field(default_factory=list)
    payment_statuses: list[StatusItem] = Field(default_factory=list)
    production_statuses: list[StatusItem] = Field(default_factory=list)
