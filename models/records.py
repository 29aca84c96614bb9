"""
Record schemas for rows read from the backend.

One schema per resource the calendar reads. Rows are validated at the
aggregator boundary so a missing column fails loudly instead of
surfacing later as a blank card.
"""

from pydantic import Field, field_validator
from typing import Any, Optional
from datetime import date, datetime

from models.base import RecordSchema, date_part


# ===================
# ORDERS
# ===================

class OrderViewRecord(RecordSchema):
    """Row of `orders_view` (order header joined with names)."""

    order_id: int
    order_name: str = ""
    order_date: Optional[date] = None
    planned_completion_date: Optional[date] = None
    client_name: Optional[str] = None
    parts_count: Optional[int] = None
    # Raw value; non-numeric garbage is tolerated and counted as zero
    total_area: Any = None
    order_status_name: Optional[str] = None
    payment_status_name: Optional[str] = None
    production_status_name: Optional[str] = None
    paid_amount: Optional[float] = None
    total_price: Optional[float] = None
    materials: Optional[str] = None
    is_issued: Optional[bool] = None
    is_drawn: Optional[bool] = None

    @field_validator("order_date", "planned_completion_date", mode="before")
    @classmethod
    def strip_time(cls, v: Any) -> Any:
        return date_part(v)


class OrderDetailRecord(RecordSchema):
    """Row of `order_details` (one production line of an order)."""

    detail_id: int
    order_id: int
    area: Any = None
    milling_type_id: Optional[int] = None
    material_id: Optional[int] = None
    production_status_id: Optional[int] = None
    delete_flag: bool = False


# ===================
# REFERENCE TABLES
# ===================

class MillingTypeRecord(RecordSchema):
    milling_type_id: int
    milling_type_name: str


class MaterialRecord(RecordSchema):
    material_id: int
    material_name: str


class ProductionStatusRecord(RecordSchema):
    """Row of `production_statuses`; `production_status_code` is the stage code."""

    production_status_id: int
    production_status_name: str
    production_status_code: Optional[str] = None
    sort_order: Optional[int] = None


class OrderStatusRecord(RecordSchema):
    order_status_id: int
    order_status_name: str


class PaymentStatusRecord(RecordSchema):
    payment_status_id: int
    payment_status_name: str


# ===================
# EVENTS AND LINKS
# ===================

class ProductionStatusEventRecord(RecordSchema):
    """Append-only production stage event."""

    event_id: Optional[int] = None
    order_id: Optional[int] = None
    detail_id: Optional[int] = None
    production_status_id: int
    event_at: Optional[datetime] = None
    note: Optional[str] = None
    payload: dict = Field(default_factory=dict)


class DowelingLinkRecord(RecordSchema):
    """Link between a primary order and a doweling (fitting) sub-order."""

    link_id: int
    order_id: int
    doweling_order_id: int


class DowelingOrderRecord(RecordSchema):
    doweling_order_id: int
    doweling_order_name: str
    design_engineer: Optional[str] = None
