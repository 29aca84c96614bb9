"""
Board view and request/response schemas.

The board is rendered as data: rows of day columns holding order cards
(or one-line entries in brief mode) plus the colours and flags a client
needs to draw them.
"""

from pydantic import Field
from typing import Optional
from datetime import date, datetime

from models.base import BaseSchema
from models.calendar import (
    CalendarOrder,
    LayoutCalculation,
    MoveState,
    StatusField,
    ViewMode,
)


# ===================
# NOTIFICATIONS
# ===================

class Notification(BaseSchema):
    """User-facing message (success/error toast)."""

    level: str = Field(..., pattern="^(success|info|warning|error)$")
    message: str
    created_at: datetime


# ===================
# RENDERED BOARD
# ===================

class OrderCardView(BaseSchema):
    """Standard or compact order card."""

    order: CalendarOrder
    source_date: str
    background_color: str
    border_color: str
    order_number_color: str
    milling_display: str = ""
    materials: list[str] = Field(default_factory=list)
    production_stages: list[str] = Field(
        default_factory=list,
        description="Card stage letters matched from the production keywords"
    )
    stage_letters: str = ""
    info_line: str = ""
    is_issued: bool = False
    is_ready_to_issue: bool = False
    is_drawn: bool = False
    is_not_paid: bool = False
    is_dragging: bool = False


class BriefOrderLine(BaseSchema):
    """One `number - area - material - milling` line of the brief view."""

    order_id: int
    text: str


class DayColumnView(BaseSchema):
    day: date
    date_key: str
    day_name: str
    header: str
    is_today: bool
    is_weekend: bool
    total_area: float
    total_area_label: str
    all_issued: bool
    cards: list[OrderCardView] = Field(default_factory=list)
    brief_lines: list[BriefOrderLine] = Field(default_factory=list)


class BoardError(BaseSchema):
    code: str
    message: str
    retryable: bool = True


class BoardView(BaseSchema):
    """Full board snapshot."""

    start_date: date
    end_date: date
    view_mode: ViewMode
    card_scale: float
    zoom_enabled: bool
    container_width: int
    is_mobile: bool
    layout: LayoutCalculation
    rows: list[list[DayColumnView]] = Field(default_factory=list)
    is_loading: bool = False
    error: Optional[BoardError] = None
    moving_order_ids: list[int] = Field(default_factory=list)
    updating_order_ids: list[int] = Field(default_factory=list)
    notifications: list[Notification] = Field(default_factory=list)


# ===================
# REQUESTS / RESULTS
# ===================

class MoveRequest(BaseSchema):
    source_date: str = Field(..., pattern=r"^\d{2}\.\d{2}\.\d{4}$")
    target_date: str = Field(..., pattern=r"^\d{2}\.\d{2}\.\d{4}$")


class MoveResult(BaseSchema):
    order_id: int
    state: MoveState
    planned_completion_date: Optional[date] = None
    message: Optional[str] = None


class StatusUpdateRequest(BaseSchema):
    field: str = Field(..., description="order_status, payment_status or production_status")
    status_id: int
    status_name: str = ""


class StatusUpdateResult(BaseSchema):
    order_id: int
    field: StatusField
    status_id: int
    event_recorded: bool = False
    message: Optional[str] = None


class CalendarDaysResponse(BaseSchema):
    center_date: date
    start_date: date
    end_date: date
    days: list[date]
    date_keys: list[str]
