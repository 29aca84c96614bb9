"""
API route modules.
"""

from routes.calendar import router as calendar_router

__all__ = [
    "calendar_router",
]
