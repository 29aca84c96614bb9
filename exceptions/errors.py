"""
Custom exception classes for the application.

Base classes map onto HTTP status codes; calendar errors follow the
board's error taxonomy (fatal refresh, bad input, failed mutation).
"""

from typing import Optional, Any
from datetime import datetime, timezone


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "ORDER_NOT_FOUND")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class NotFoundError(AppError):
    """Resource not found (404)."""

    def __init__(
        self,
        resource: str,
        identifier: str,
        code: Optional[str] = None
    ):
        super().__init__(
            code=code or f"{resource.upper()}_NOT_FOUND",
            message=f"{resource} not found",
            status_code=404,
            details={"id": identifier}
        )


class ValidationError(AppError):
    """Validation failed (422)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details
        )


class ConflictError(AppError):
    """Conflict with existing resource (409)."""

    def __init__(
        self,
        message: str,
        code: str = "CONFLICT",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=409,
            details=details
        )


class ExternalServiceError(AppError):
    """External service failure (503)."""

    def __init__(
        self,
        service: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code=f"{service.upper()}_ERROR",
            message=message,
            status_code=503,
            details={"service": service, **(details or {})}
        )


class DatabaseError(AppError):
    """
    Database operation failed (500).

    Keeps the raw backend message in `backend_message` so callers can
    show it to the user or inspect it (e.g. unique constraint conflicts).
    """

    def __init__(
        self,
        operation: str,
        message: str,
        details: Optional[dict] = None
    ):
        self.operation = operation
        self.backend_message = message
        super().__init__(
            code="DATABASE_ERROR",
            message=f"Database {operation} failed: {message}",
            status_code=500,
            details={"operation": operation, **(details or {})}
        )

    @property
    def is_duplicate(self) -> bool:
        """True when the backend rejected the write as a uniqueness conflict."""
        text = (self.backend_message or "").lower()
        return "unique" in text or "duplicate" in text


# ===================
# ORDER ERRORS
# ===================

class OrderNotFoundError(NotFoundError):
    """Order not found."""

    def __init__(self, order_id: int):
        super().__init__(
            resource="Order",
            identifier=str(order_id),
            code="ORDER_NOT_FOUND"
        )


# ===================
# CALENDAR ERRORS
# ===================

class CalendarDataError(AppError):
    """
    Calendar refresh failed (503).

    Raised when the primary order fetch or the detail fetch fails.
    The board shows it with a retry action.
    """

    def __init__(self, source: str, message: str):
        super().__init__(
            code="CALENDAR_DATA_UNAVAILABLE",
            message=f"Не удалось загрузить заказы: {message}",
            status_code=503,
            details={"source": source, "retryable": True}
        )
        self.source = source

    @property
    def retryable(self) -> bool:
        return True


class InvalidStatusFieldError(ValidationError):
    """Unknown status field kind requested from the context menu."""

    def __init__(self, field: str, valid: list[str]):
        super().__init__(
            code="INVALID_STATUS_FIELD",
            message=f"Неизвестное поле: {field}",
            details={"provided": field, "valid": valid}
        )


class OrderMoveInProgressError(ConflictError):
    """A move for this order is still being persisted."""

    def __init__(self, order_id: int):
        super().__init__(
            code="ORDER_MOVE_IN_PROGRESS",
            message="Order is already being moved",
            details={"order_id": order_id}
        )


class StatusUpdateInProgressError(ConflictError):
    """A status update for this order is still being persisted."""

    def __init__(self, order_id: int):
        super().__init__(
            code="STATUS_UPDATE_IN_PROGRESS",
            message="Order status is already being updated",
            details={"order_id": order_id}
        )


class OrderMoveError(AppError):
    """Persisting a new completion date failed (502)."""

    def __init__(self, order_id: int, message: str):
        super().__init__(
            code="ORDER_MOVE_FAILED",
            message=f"Ошибка перемещения заказа: {message}",
            status_code=502,
            details={"order_id": order_id}
        )


class StatusUpdateError(AppError):
    """Persisting a status change failed (502)."""

    def __init__(self, order_id: int, field: str, message: str):
        super().__init__(
            code="STATUS_UPDATE_FAILED",
            message=f"Ошибка обновления статуса: {message}",
            status_code=502,
            details={"order_id": order_id, "field": field}
        )
