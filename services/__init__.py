"""
Business logic services.

Each service handles one part of the production calendar.
"""

from services.data_provider import DataProvider, SupabaseDataProvider, get_data_provider
from services.invalidation import InvalidationBus, get_invalidation_bus
from services.notification_service import NotificationService, get_notification_service
from services.calendar_data_service import CalendarDataService, get_calendar_data_service
from services.order_move_service import OrderMoveService, get_order_move_service
from services.order_status_service import OrderStatusService, get_order_status_service
from services.calendar_board_service import CalendarBoard

__all__ = [
    "DataProvider",
    "SupabaseDataProvider",
    "get_data_provider",
    "InvalidationBus",
    "get_invalidation_bus",
    "NotificationService",
    "get_notification_service",
    "CalendarDataService",
    "get_calendar_data_service",
    "OrderMoveService",
    "get_order_move_service",
    "OrderStatusService",
    "get_order_status_service",
    "CalendarBoard",
]
