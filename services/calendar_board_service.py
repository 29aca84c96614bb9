"""
Calendar Board - orchestrates the production calendar.

Holds the transient board state (window, view mode, card scale,
container width, context menu, current drag), routes drops and status
picks to the move/status services and renders the grid as a
`BoardView`.
"""

from datetime import date
from typing import Optional
import structlog

from config.calendar import (
    CARD_SCALE_DEFAULT,
    CARD_SCALE_MAX,
    CARD_SCALE_MIN,
    CARD_SCALE_STEP,
    DEFAULT_CONTAINER_WIDTH,
    DRAWN_STATUS,
    ISSUED_STATUS,
    NOT_PAID_STATUS,
    READY_TO_ISSUE_STATUS,
)
from models.calendar import (
    CalendarData,
    CalendarOrder,
    ContextMenuState,
    DragItem,
    LayoutCalculation,
    MoveState,
    ViewMode,
)
from models.board import (
    BoardError,
    BoardView,
    BriefOrderLine,
    DayColumnView,
    OrderCardView,
    StatusUpdateResult,
)
from services.calendar_data_service import CalendarDataService, get_calendar_data_service
from services.calendar_days import (
    CalendarWindow,
    format_date_header,
    format_date_key,
    get_day_name,
    is_today,
    is_weekend,
)
from services.calendar_layout import (
    calculate_columns_per_row,
    group_days_into_rows,
    is_mobile_device,
)
from services.notification_service import NotificationService, get_notification_service
from services.order_grouping import (
    are_all_orders_issued,
    calculate_total_area,
    filter_orders_by_search,
    to_area,
)
from services.order_move_service import OrderMoveService, get_order_move_service
from services.order_status_service import OrderStatusService, get_order_status_service
from services.status_colors import (
    format_production_stages,
    get_card_border_color,
    get_card_production_stages,
    get_materials_for_card,
    get_milling_display_value,
    get_order_number_color,
    get_status_color,
)
from exceptions import AppError, CalendarDataError, ValidationError

logger = structlog.get_logger(__name__)


# ===================
# CARD RENDERING
# ===================

def format_area(area: float) -> str:
    return f"{area:.2f} кв.м." if area > 0 else "—"


def build_order_card(order: CalendarOrder, source_date: str, is_dragging: bool = False) -> OrderCardView:
    """Card data for the standard and compact views."""
    status = (order.order_status_name or "").lower()
    production = (order.production_status_name or "").lower()
    payment = (order.payment_status_name or "").lower()

    info_parts = [
        format_date_key(order.order_date) if order.order_date else None,
        order.client_name,
    ]

    return OrderCardView(
        order=order,
        source_date=source_date,
        background_color=get_status_color(order.order_status_name),
        border_color=get_card_border_color(order),
        order_number_color=get_order_number_color(order),
        milling_display=get_milling_display_value(order.order_details),
        materials=get_materials_for_card(order.order_details, exclude_default=True),
        production_stages=get_card_production_stages(order),
        stage_letters=format_production_stages(order.passed_stage_codes),
        info_line=" • ".join(part for part in info_parts if part),
        is_issued=status == ISSUED_STATUS,
        is_ready_to_issue=status == READY_TO_ISSUE_STATUS,
        is_drawn=status == DRAWN_STATUS or production == DRAWN_STATUS or bool(order.is_drawn),
        is_not_paid=NOT_PAID_STATUS in payment,
        is_dragging=is_dragging,
    )


def build_brief_line(order: CalendarOrder) -> BriefOrderLine:
    """`number - area - materials - milling` line."""
    if order.materials:
        materials = ", ".join(m.strip() for m in order.materials.split(",") if m.strip())
    else:
        materials = ", ".join(get_materials_for_card(order.order_details))

    text = " - ".join([
        order.order_name,
        format_area(to_area(order.total_area)),
        materials or "—",
        get_milling_display_value(order.order_details) or "—",
    ])
    return BriefOrderLine(order_id=order.order_id, text=text)


class CalendarBoard:
    """
    Controller for one production calendar board.

    Zoom applies to the standard and compact views only; the brief view
    always lays out at scale 1.0.
    """

    def __init__(
        self,
        data_service: Optional[CalendarDataService] = None,
        move_service: Optional[OrderMoveService] = None,
        status_service: Optional[OrderStatusService] = None,
        notifications: Optional[NotificationService] = None,
        window: Optional[CalendarWindow] = None,
        container_width: float = DEFAULT_CONTAINER_WIDTH,
        view_mode: ViewMode = ViewMode.STANDARD,
        card_scale: float = CARD_SCALE_DEFAULT,
    ):
        self.data_service = data_service or get_calendar_data_service()
        self.move_service = move_service or get_order_move_service()
        self.status_service = status_service or get_order_status_service()
        self.notifications = notifications or get_notification_service()
        self.window = window or CalendarWindow()

        self.container_width = container_width
        self.view_mode = ViewMode(view_mode)
        self.card_scale = self._clamp_scale(card_scale)

        self.context_menu = ContextMenuState()
        self.drag_item: Optional[DragItem] = None
        self.drag_over_date: Optional[str] = None
        self.search_query: Optional[str] = None

        self.data: Optional[CalendarData] = None
        self.is_loading = False
        self.error: Optional[AppError] = None

        self._layout = self._compute_layout()

    # ===================
    # VIEW MODE / ZOOM
    # ===================

    @staticmethod
    def _clamp_scale(scale: float) -> float:
        return round(min(CARD_SCALE_MAX, max(CARD_SCALE_MIN, scale)), 2)

    @property
    def zoom_enabled(self) -> bool:
        return self.view_mode != ViewMode.BRIEF

    @property
    def effective_card_scale(self) -> float:
        return self.card_scale if self.zoom_enabled else 1.0

    def set_view_mode(self, mode: ViewMode) -> None:
        self.view_mode = ViewMode(mode)
        self._recompute_layout()

    def set_card_scale(self, scale: float) -> float:
        if not self.zoom_enabled:
            return self.card_scale
        self.card_scale = self._clamp_scale(scale)
        self._recompute_layout()
        return self.card_scale

    def zoom_in(self) -> float:
        return self.set_card_scale(self.card_scale + CARD_SCALE_STEP)

    def zoom_out(self) -> float:
        return self.set_card_scale(self.card_scale - CARD_SCALE_STEP)

    def reset_zoom(self) -> float:
        return self.set_card_scale(CARD_SCALE_DEFAULT)

    # ===================
    # LAYOUT
    # ===================

    @property
    def is_mobile(self) -> bool:
        return is_mobile_device(self.container_width)

    @property
    def layout(self) -> LayoutCalculation:
        return self._layout

    def _compute_layout(self) -> LayoutCalculation:
        return calculate_columns_per_row(
            self.container_width,
            self.is_mobile,
            self.effective_card_scale
        )

    def _recompute_layout(self) -> None:
        layout = self._compute_layout()
        if layout != self._layout:
            logger.debug(
                "calendar_layout_changed",
                column_width=layout.column_width,
                columns_per_row=layout.columns_per_row
            )
        self._layout = layout

    def resize(self, container_width: float) -> LayoutCalculation:
        """Container resized; a zero width keeps the previous one."""
        if container_width <= 0:
            return self._layout
        self.container_width = container_width
        self._recompute_layout()
        return self._layout

    # ===================
    # NAVIGATION
    # ===================

    def go_forward(self) -> None:
        self.window.go_forward()

    def go_backward(self) -> None:
        self.window.go_backward()

    def go_to_today(self) -> None:
        self.window.go_to_today()

    def set_center_date(self, value: date) -> None:
        self.window.set_center_date(value)

    # ===================
    # DATA
    # ===================

    @property
    def needs_refresh(self) -> bool:
        if self.data is None or self.data_service.is_stale:
            return True
        return (self.data.start_date, self.data.end_date) != (self.window.start_date, self.window.end_date)

    async def refresh(self) -> Optional[CalendarData]:
        """
        Reload the current window.

        A failed load is kept in `error` (shown with a retry action)
        rather than raised.
        """
        self.is_loading = True
        try:
            data = await self.data_service.refresh(self.window.start_date, self.window.end_date)
        except CalendarDataError as e:
            logger.error("calendar_refresh_failed", error=e.message, source=e.source)
            self.error = e
            return None
        finally:
            self.is_loading = False

        self.error = None
        self.data = data
        return data

    async def ensure_fresh(self) -> Optional[CalendarData]:
        if self.needs_refresh:
            return await self.refresh()
        return self.data

    def orders_for(self, date_key: str) -> list[CalendarOrder]:
        if self.data is None:
            return []
        orders = self.data.orders_by_date.get(date_key, [])
        return filter_orders_by_search(orders, self.search_query)

    def find_order(self, order_id: int) -> Optional[CalendarOrder]:
        if self.data is None:
            return None
        return next((o for o in self.data.orders if o.order_id == order_id), None)

    # ===================
    # CONTEXT MENU
    # ===================

    def open_context_menu(self, order: CalendarOrder, x: int, y: int) -> ContextMenuState:
        self.context_menu = ContextMenuState(is_open=True, x=x, y=y, order=order)
        return self.context_menu

    def close_context_menu(self) -> None:
        self.context_menu = ContextMenuState()

    async def pick_status(self, field: str, status_id: int, status_name: str) -> StatusUpdateResult:
        """
        Apply a status chosen in the open context menu.

        Raises:
            ValidationError: If no context menu is open
            InvalidStatusFieldError / StatusUpdateError: From the status service
        """
        order = self.context_menu.order
        if not self.context_menu.is_open or order is None:
            raise ValidationError(message="No order selected", code="CONTEXT_MENU_CLOSED")

        self.close_context_menu()
        result = await self.status_service.update_status(order, field, status_id, status_name)
        await self.ensure_fresh()
        return result

    # ===================
    # DRAG AND DROP
    # ===================

    def start_drag(self, order: CalendarOrder, source_date: str) -> DragItem:
        self.drag_item = DragItem(order=order, source_date=source_date)
        return self.drag_item

    def drag_over(self, date_key: Optional[str]) -> None:
        self.drag_over_date = date_key

    def end_drag(self) -> None:
        self.drag_item = None
        self.drag_over_date = None

    def can_drop(self, item: DragItem) -> bool:
        return not self.move_service.is_moving(item.order.order_id)

    async def drop(self, item: DragItem, target_date: date) -> MoveState:
        """
        Drop a card on a day column.

        Raises:
            OrderMoveInProgressError / OrderMoveError: The card must snap back
        """
        target_key = format_date_key(target_date)
        try:
            state = await self.move_service.move_order(item.order, target_date, item.source_date, target_key)
        finally:
            self.end_drag()

        if state == MoveState.SUCCEEDED:
            await self.ensure_fresh()
        return state

    # ===================
    # RENDER
    # ===================

    def _render_column(self, day: date) -> DayColumnView:
        date_key = format_date_key(day)
        orders = self.orders_for(date_key)
        total_area = calculate_total_area(orders)
        dragged_id = self.drag_item.order.order_id if self.drag_item else None

        column = DayColumnView(
            day=day,
            date_key=date_key,
            day_name=get_day_name(day),
            header=format_date_header(day),
            is_today=is_today(day),
            is_weekend=is_weekend(day),
            total_area=round(total_area, 2),
            total_area_label=format_area(total_area),
            all_issued=are_all_orders_issued(orders),
        )

        if self.view_mode == ViewMode.BRIEF:
            column.brief_lines = [build_brief_line(order) for order in orders]
        else:
            column.cards = [
                build_order_card(order, date_key, is_dragging=order.order_id == dragged_id)
                for order in orders
            ]
        return column

    def render(self) -> BoardView:
        layout = self._layout
        rows = group_days_into_rows(self.window.days, layout.columns_per_row)

        error = None
        if self.error is not None:
            error = BoardError(
                code=self.error.code,
                message=self.error.message,
                retryable=isinstance(self.error, CalendarDataError),
            )

        return BoardView(
            start_date=self.window.start_date,
            end_date=self.window.end_date,
            view_mode=self.view_mode,
            card_scale=self.effective_card_scale,
            zoom_enabled=self.zoom_enabled,
            container_width=int(self.container_width),
            is_mobile=self.is_mobile,
            layout=layout,
            rows=[] if error else [[self._render_column(day) for day in row] for row in rows],
            is_loading=self.is_loading,
            error=error,
            moving_order_ids=self.move_service.moving_order_ids,
            updating_order_ids=self.status_service.updating_order_ids,
            notifications=self.notifications.recent(10),
        )
