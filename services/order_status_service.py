"""
Order Status Service - order, payment and production status changes.

A manual production status also disables the status derived from
details and appends a production event. The event write is
best-effort: a duplicate means the stage is already recorded, and any
other failure is only logged because the visible change already
succeeded.
"""

import asyncio
from typing import Optional
import structlog

from config.calendar import (
    ORDERS_RESOURCE,
    ORDERS_VIEW_RESOURCE,
    PRODUCTION_STATUS_AUTO_FIELD,
    PRODUCTION_STATUS_EVENTS_RESOURCE,
    STATUS_FIELD_LABELS,
    STATUS_FIELD_MAPPING,
)
from models.calendar import CalendarOrder, StatusField
from models.board import StatusUpdateResult
from services.data_provider import DataProvider, error_message, get_data_provider
from services.invalidation import InvalidationBus, get_invalidation_bus
from services.notification_service import NotificationService, get_notification_service
from exceptions import (
    DatabaseError,
    InvalidStatusFieldError,
    StatusUpdateError,
    StatusUpdateInProgressError,
)

logger = structlog.get_logger(__name__)


def is_duplicate_error(e: Exception) -> bool:
    """Backend refused the insert because the row already exists."""
    if isinstance(e, DatabaseError):
        return e.is_duplicate
    message = error_message(e).lower()
    return "unique" in message or "duplicate" in message


class OrderStatusService:
    """Status changes triggered from the board's context menu."""

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

    def is_updating(self, order_id: int) -> bool:
        return order_id in self._in_flight

    @property
    def updating_order_ids(self) -> list[int]:
        return sorted(self._in_flight)

    def resolve_field(self, field: str) -> StatusField:
        """
        Map a logical field name to its enum.

        Raises:
            InvalidStatusFieldError: For unknown fields (no backend call is made)
        """
        try:
            return StatusField(field)
        except ValueError:
            message = f"Неизвестное поле: {field}"
            self.notifications.error(message)
            logger.warning("invalid_status_field", field=field)
            raise InvalidStatusFieldError(field, list(STATUS_FIELD_MAPPING)) from None

    async def update_status(
        self,
        order: CalendarOrder,
        field: str,
        status_id: int,
        status_name: str
    ) -> StatusUpdateResult:
        """
        Set one status of an order.

        Args:
            order: Target order
            field: order_status, payment_status or production_status
            status_id: New status id
            status_name: New status name (for the user message)

        Raises:
            InvalidStatusFieldError: Unknown field
            StatusUpdateInProgressError: Order already being updated
            StatusUpdateError: Backend rejected the update
        """
        status_field = self.resolve_field(field)

        if self.is_updating(order.order_id):
            raise StatusUpdateInProgressError(order.order_id)

        values = {STATUS_FIELD_MAPPING[status_field.value]: status_id}
        if status_field == StatusField.PRODUCTION_STATUS:
            values[PRODUCTION_STATUS_AUTO_FIELD] = False

        logger.info(
            "updating_order_status",
            order_id=order.order_id,
            field=status_field.value,
            status_id=status_id
        )

        self._in_flight.add(order.order_id)
        try:
            try:
                await asyncio.to_thread(self.provider.update, ORDERS_RESOURCE, order.order_id, values)
            except Exception as e:
                message = error_message(e) or "Неизвестная ошибка"
                logger.error(
                    "order_status_update_failed",
                    order_id=order.order_id,
                    field=status_field.value,
                    error=message
                )
                self.notifications.error(f"Ошибка обновления статуса: {message}")
                raise StatusUpdateError(order.order_id, status_field.value, message) from e

            label = STATUS_FIELD_LABELS[status_field.value]
            success_message = f'{label} изменен на "{status_name}" для заказа {order.order_name}'
            self.notifications.success(success_message)

            event_recorded = False
            if status_field == StatusField.PRODUCTION_STATUS:
                event_recorded = await self.record_production_event(order.order_id, status_id)
        finally:
            self._in_flight.discard(order.order_id)

        self.bus.invalidate(ORDERS_VIEW_RESOURCE)

        return StatusUpdateResult(
            order_id=order.order_id,
            field=status_field,
            status_id=status_id,
            event_recorded=event_recorded,
            message=success_message,
        )

    async def record_production_event(
        self,
        order_id: int,
        status_id: int,
        detail_id: Optional[int] = None,
        note: Optional[str] = None
    ) -> bool:
        """
        Append a production status event. Never raises.

        Returns:
            True if the event is stored (newly or already present)
        """
        event = {
            "order_id": order_id,
            "detail_id": detail_id,
            "production_status_id": status_id,
            "note": note,
            "payload": {},
        }

        try:
            await asyncio.to_thread(self.provider.create, PRODUCTION_STATUS_EVENTS_RESOURCE, event)
        except Exception as e:
            if is_duplicate_error(e):
                logger.info(
                    "production_event_already_recorded",
                    order_id=order_id,
                    status_id=status_id
                )
                return True
            logger.warning(
                "production_event_record_failed",
                order_id=order_id,
                status_id=status_id,
                error=error_message(e)
            )
            return False

        logger.info("production_event_recorded", order_id=order_id, status_id=status_id)
        return True


# Singleton instance
_order_status_service: Optional[OrderStatusService] = None


def get_order_status_service() -> OrderStatusService:
    """Get the singleton order status service instance."""
    global _order_status_service
    if _order_status_service is None:
        _order_status_service = OrderStatusService()
    return _order_status_service
