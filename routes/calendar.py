"""
Production calendar API routes.

The board is stateless per request: window, view mode, zoom and
container width come in as query parameters.
"""

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse
from typing import Optional
from datetime import date
import structlog

from config.calendar import CARD_SCALE_DEFAULT, CARD_SCALE_MAX, CARD_SCALE_MIN, DEFAULT_CONTAINER_WIDTH
from models.calendar import LayoutCalculation, StatusOptions, ViewMode
from models.board import (
    BoardView,
    CalendarDaysResponse,
    MoveRequest,
    MoveResult,
    StatusUpdateRequest,
    StatusUpdateResult,
)
from services.calendar_board_service import CalendarBoard
from services.calendar_data_service import get_calendar_data_service
from services.calendar_days import CalendarWindow, format_date_key, parse_date_key
from services.calendar_layout import calculate_columns_per_row, is_mobile_device
from services.order_move_service import get_order_move_service
from services.order_status_service import get_order_status_service
from exceptions import AppError, ValidationError

logger = structlog.get_logger(__name__)

router = APIRouter(
    prefix="/api/calendar",
    tags=["calendar"]
)


# ===================
# EXCEPTION HANDLER
# ===================

def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    # Unexpected error
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred"
            }
        }
    )


def parse_key_or_fail(key: str, field: str) -> date:
    parsed = parse_date_key(key)
    if parsed is None:
        raise ValidationError(
            message=f"{field} must be DD.MM.YYYY",
            code="CALENDAR_INVALID_DATE_KEY",
            details={field: key}
        )
    return parsed


# ===================
# ROUTES
# ===================

@router.get("/board", response_model=BoardView)
async def get_board(
    center: Optional[date] = Query(None, description="Pivot date (default: today)"),
    view_mode: ViewMode = Query(ViewMode.STANDARD, description="standard, compact or brief"),
    card_scale: float = Query(CARD_SCALE_DEFAULT, ge=CARD_SCALE_MIN, le=CARD_SCALE_MAX),
    container_width: int = Query(DEFAULT_CONTAINER_WIDTH, ge=1, le=10000),
    search: Optional[str] = Query(None, description="Order number, client or stage keyword"),
):
    """
    Render the calendar board for a window of days.

    A failed order/detail fetch is returned inside the board as a
    retryable error, not as an HTTP error.
    """
    try:
        board = CalendarBoard(
            window=CalendarWindow(center_date=center),
            container_width=container_width,
            view_mode=view_mode,
            card_scale=card_scale,
        )
        board.search_query = search
        await board.refresh()
        return board.render()
    except Exception as e:
        return handle_error(e)


@router.get("/days", response_model=CalendarDaysResponse)
async def get_days(
    center: Optional[date] = Query(None, description="Pivot date (default: today)"),
):
    """Days of the window around `center`."""
    window = CalendarWindow(center_date=center)
    days = window.days
    return CalendarDaysResponse(
        center_date=window.center_date,
        start_date=window.start_date,
        end_date=window.end_date,
        days=days,
        date_keys=[format_date_key(d) for d in days],
    )


@router.get("/layout", response_model=LayoutCalculation)
async def get_layout(
    container_width: int = Query(..., ge=1, le=10000),
    card_scale: float = Query(CARD_SCALE_DEFAULT, ge=CARD_SCALE_MIN, le=CARD_SCALE_MAX),
    is_mobile: Optional[bool] = Query(None, description="Default: derived from width"),
):
    """Column width and columns per row for a container width."""
    mobile = is_mobile_device(container_width) if is_mobile is None else is_mobile
    return calculate_columns_per_row(container_width, mobile, card_scale)


@router.get("/statuses", response_model=StatusOptions)
async def get_statuses():
    """Active order, payment and production statuses."""
    try:
        return await get_calendar_data_service().load_status_options()
    except Exception as e:
        return handle_error(e)


@router.post("/orders/{order_id}/move", response_model=MoveResult)
async def move_order(order_id: int, request: MoveRequest):
    """
    Move an order to another day.

    A same-day move returns state `idle` without touching the backend.
    """
    try:
        target = parse_key_or_fail(request.target_date, "target_date")
        parse_key_or_fail(request.source_date, "source_date")

        # Checked here as well so a same-day drop skips the get_order fetch
        if request.source_date == request.target_date:
            return MoveResult(order_id=order_id, state="idle")

        order = await get_calendar_data_service().get_order(order_id)
        state = await get_order_move_service().move_order(
            order, target, request.source_date, request.target_date
        )
        return MoveResult(
            order_id=order_id,
            state=state,
            planned_completion_date=target,
            message=f"Заказ {order.order_name} перемещен на {request.target_date}",
        )
    except Exception as e:
        logger.error("move_order_failed", order_id=order_id, error=str(e))
        return handle_error(e)


@router.post("/orders/{order_id}/status", response_model=StatusUpdateResult)
async def update_order_status(order_id: int, request: StatusUpdateRequest):
    """Change the order, payment or production status of an order."""
    try:
        service = get_order_status_service()
        service.resolve_field(request.field)

        order = await get_calendar_data_service().get_order(order_id)
        return await service.update_status(order, request.field, request.status_id, request.status_name)
    except Exception as e:
        logger.error("update_order_status_failed", order_id=order_id, error=str(e))
        return handle_error(e)
