"""
Notification Service - user-facing success/error messages.

Keeps a bounded history the board returns to the client, and logs
every message.
"""

from collections import deque
from datetime import datetime, timezone
from typing import Optional
import structlog

from config import settings
from models.board import Notification

logger = structlog.get_logger(__name__)


class NotificationService:
    """Collects toast-style messages for display."""

    def __init__(self, max_items: Optional[int] = None):
        self._items: deque[Notification] = deque(
            maxlen=max_items or settings.notification_history_size
        )

    def _push(self, level: str, message: str) -> Notification:
        notification = Notification(
            level=level,
            message=message,
            created_at=datetime.now(timezone.utc)
        )
        self._items.append(notification)
        logger.info("user_notification", level=level, message=message)
        return notification

    def success(self, message: str) -> Notification:
        return self._push("success", message)

    def info(self, message: str) -> Notification:
        return self._push("info", message)

    def warning(self, message: str) -> Notification:
        return self._push("warning", message)

    def error(self, message: str) -> Notification:
        return self._push("error", message)

    def recent(self, limit: Optional[int] = None) -> list[Notification]:
        """Most recent messages, oldest first."""
        items = list(self._items)
        if limit is not None:
            items = items[-limit:] if limit > 0 else []
        return items

    def clear(self) -> None:
        self._items.clear()


# Singleton instance
_notification_service: Optional[NotificationService] = None


def get_notification_service() -> NotificationService:
    """Get the singleton notification service."""
    global _notification_service
    if _notification_service is None:
        _notification_service = NotificationService()
    return _notification_service
