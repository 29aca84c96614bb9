"""
Pydantic models for validation and serialization.
"""

from models.base import (
    BaseSchema,
    RecordSchema,
    ValueSchema,
)
from models.query import (
    FilterOperator,
    SortOrder,
    CrudFilter,
    CrudSort,
    Pagination,
    FetchResult,
)
from models.records import (
    OrderViewRecord,
    OrderDetailRecord,
    MillingTypeRecord,
    MaterialRecord,
    ProductionStatusRecord,
    OrderStatusRecord,
    PaymentStatusRecord,
    ProductionStatusEventRecord,
    DowelingLinkRecord,
    DowelingOrderRecord,
)
from models.calendar import (
    ViewMode,
    StatusField,
    MoveState,
    DetailSummary,
    CalendarOrder,
    OrdersByDate,
    CalendarData,
    CalendarStats,
    DragItem,
    LayoutCalculation,
    ContextMenuState,
    StatusItem,
    StatusOptions,
)
from models.board import (
    Notification,
    OrderCardView,
    BriefOrderLine,
    DayColumnView,
    BoardError,
    BoardView,
    MoveRequest,
    MoveResult,
    StatusUpdateRequest,
    StatusUpdateResult,
    CalendarDaysResponse,
)

__all__ = [
    # Base
    "BaseSchema",
    "RecordSchema",
    "ValueSchema",

    # Query
    "FilterOperator",
    "SortOrder",
    "CrudFilter",
    "CrudSort",
    "Pagination",
    "FetchResult",

    # Records
    "OrderViewRecord",
    "OrderDetailRecord",
    "MillingTypeRecord",
    "MaterialRecord",
    "ProductionStatusRecord",
    "OrderStatusRecord",
    "PaymentStatusRecord",
    "ProductionStatusEventRecord",
    "DowelingLinkRecord",
    "DowelingOrderRecord",

    # Calendar
    "ViewMode",
    "StatusField",
    "MoveState",
    "DetailSummary",
    "CalendarOrder",
    "OrdersByDate",
    "CalendarData",
    "CalendarStats",
    "DragItem",
    "LayoutCalculation",
    "ContextMenuState",
    "StatusItem",
    "StatusOptions",

    # Board
    "Notification",
    "OrderCardView",
    "BriefOrderLine",
    "DayColumnView",
    "BoardError",
    "BoardView",
    "MoveRequest",
    "MoveResult",
    "StatusUpdateRequest",
    "StatusUpdateResult",
    "CalendarDaysResponse",
]
