"""
Invalidation bus - "discard cached lists for resource X and refetch".

Readers subscribe per resource; mutating services call `invalidate()`
after a successful write.
"""

from collections import defaultdict
from typing import Callable, Optional
import structlog

logger = structlog.get_logger(__name__)

Listener = Callable[[str], None]


class InvalidationBus:
    """Explicit, injectable replacement for a framework-wide query cache."""

    def __init__(self):
        self._listeners: dict[str, list[Listener]] = defaultdict(list)

    def subscribe(self, resource: str, listener: Listener) -> None:
        if listener not in self._listeners[resource]:
            self._listeners[resource].append(listener)

    def unsubscribe(self, resource: str, listener: Listener) -> None:
        if listener in self._listeners.get(resource, []):
            self._listeners[resource].remove(listener)

    def listeners(self, resource: str) -> list[Listener]:
        return list(self._listeners.get(resource, []))

    def invalidate(self, resource: str) -> int:
        """
        Notify every listener of `resource`.

        A failing listener is logged and skipped so one broken reader
        cannot stop the others from refetching.

        Returns:
            Number of listeners notified successfully
        """
        notified = 0
        for listener in self.listeners(resource):
            try:
                listener(resource)
                notified += 1
            except Exception as e:
                logger.error(
                    "invalidation_listener_failed",
                    resource=resource,
                    error=str(e),
                    error_type=type(e).__name__
                )

        logger.debug("resource_invalidated", resource=resource, listeners=notified)
        return notified


# Singleton instance
_invalidation_bus: Optional[InvalidationBus] = None


def get_invalidation_bus() -> InvalidationBus:
    """Get the singleton invalidation bus."""
    global _invalidation_bus
    if _invalidation_bus is None:
        _invalidation_bus = InvalidationBus()
    return _invalidation_bus
