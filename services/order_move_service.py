"""
Order Move Service - reschedule an order to another day.

State per attempt: idle → persisting → succeeded | failed.
"""

import asyncio
from datetime import date
from typing import Optional
import structlog

from config.calendar import ORDERS_RESOURCE, ORDERS_VIEW_RESOURCE, SCHEDULE_FIELD
from models.calendar import CalendarOrder, MoveState
from services.calendar_days import format_date_for_api, to_date
from services.data_provider import DataProvider, error_message, get_data_provider
from services.invalidation import InvalidationBus, get_invalidation_bus
from services.notification_service import NotificationService, get_notification_service
from exceptions import OrderMoveError, OrderMoveInProgressError

logger = structlog.get_logger(__name__)


class OrderMoveService:
    """
    Persists drag-and-drop moves.

    Moves of different orders run independently; a second move of the
    same order is refused while the first one is persisting.
    """

    def __init__(
        self,
        provider: Optional[DataProvider] = None,
        bus: Optional[InvalidationBus] = None,
        notifications: Optional[NotificationService] = None,
    ):
        self.provider = provider or get_data_provider()
        self.bus = bus or get_invalidation_bus()
        self.notifications = notifications or get_notification_service()
        self._in_flight: set[int] = set()

    def is_moving(self, order_id: int) -> bool:
        return order_id in self._in_flight

    @property
    def is_moving_any(self) -> bool:
        return bool(self._in_flight)

    @property
    def moving_order_ids(self) -> list[int]:
        return sorted(self._in_flight)

    async def move_order(
        self,
        order: CalendarOrder,
        new_date: date,
        source_date: str,
        target_date: str
    ) -> MoveState:
        """
        Move an order to a new planned completion date.

        Args:
            order: Order being dragged
            new_date: New completion date
            source_date: Source column key (DD.MM.YYYY)
            target_date: Target column key (DD.MM.YYYY)

        Returns:
            MoveState.IDLE for a same-day drop, MoveState.SUCCEEDED otherwise

        Raises:
            OrderMoveInProgressError: If this order is already being moved
            OrderMoveError: If the backend rejects the update
        """
        if source_date == target_date:
            logger.debug("order_move_skipped", order_id=order.order_id, date=target_date)
            return MoveState.IDLE

        if self.is_moving(order.order_id):
            raise OrderMoveInProgressError(order.order_id)

        new_date_str = format_date_for_api(to_date(new_date))

        logger.info(
            "moving_order",
            order_id=order.order_id,
            source_date=source_date,
            target_date=target_date,
            state=MoveState.PERSISTING.value
        )

        self._in_flight.add(order.order_id)
        try:
            await asyncio.to_thread(
                self.provider.update,
                ORDERS_RESOURCE,
                order.order_id,
                {SCHEDULE_FIELD: new_date_str},
            )
        except Exception as e:
            message = error_message(e) or "Неизвестная ошибка"
            logger.error(
                "order_move_failed",
                order_id=order.order_id,
                target_date=target_date,
                state=MoveState.FAILED.value,
                error=message
            )
            self.notifications.error(f"Ошибка перемещения заказа: {message}")
            raise OrderMoveError(order.order_id, message) from e
        finally:
            self._in_flight.discard(order.order_id)

        self.notifications.success(f"Заказ {order.order_name} перемещен на {target_date}")
        self.bus.invalidate(ORDERS_VIEW_RESOURCE)

        logger.info(
            "order_moved",
            order_id=order.order_id,
            planned_completion_date=new_date_str,
            state=MoveState.SUCCEEDED.value
        )
        return MoveState.SUCCEEDED


# Singleton instance
_order_move_service: Optional[OrderMoveService] = None


def get_order_move_service() -> OrderMoveService:
    """Get the singleton order move service instance."""
    global _order_move_service
    if _order_move_service is None:
        _order_move_service = OrderMoveService()
    return _order_move_service
