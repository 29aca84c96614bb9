"""
Custom exceptions module.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    NotFoundError,
    ValidationError,
    ConflictError,
    ExternalServiceError,
    DatabaseError,

    # Orders
    OrderNotFoundError,

    # Calendar
    CalendarDataError,
    InvalidStatusFieldError,
    OrderMoveInProgressError,
    StatusUpdateInProgressError,
    OrderMoveError,
    StatusUpdateError,
)

__all__ = [
    # Base
    "AppError",
    "NotFoundError",
    "ValidationError",
    "ConflictError",
    "ExternalServiceError",
    "DatabaseError",

    # Orders
    "OrderNotFoundError",

    # Calendar
    "CalendarDataError",
    "InvalidStatusFieldError",
    "OrderMoveInProgressError",
    "StatusUpdateInProgressError",
    "OrderMoveError",
    "StatusUpdateError",
]
