"""
Supabase client for the calendar.

One cached client per process; `check_connection` counts rows in the
tables the board cannot render without.
"""

from functools import lru_cache

import structlog
from supabase import Client, create_client

from config.settings import settings
from exceptions import ExternalServiceError

logger = structlog.get_logger(__name__)

# (table, id column) pairs probed by the health check
HEALTH_TABLES = (
    ("orders", "order_id"),
    ("order_statuses", "order_status_id"),
)


@lru_cache()
def get_supabase_client() -> Client:
    """
    Create the Supabase client on first use.

    Call get_supabase_client.cache_clear() to reconnect.

    Raises:
        ExternalServiceError: If the client cannot be created or the
            first lookup fails
    """
    logger.info("connecting_to_supabase", url=settings.supabase_url[:30] + "...")

    try:
        client = create_client(settings.supabase_url, settings.supabase_key)
        client.table("order_statuses").select("order_status_id").limit(1).execute()
    except Exception as e:
        logger.error(
            "supabase_connection_failed",
            error=str(e),
            error_type=type(e).__name__
        )
        raise ExternalServiceError(
            "supabase",
            f"Failed to connect to Supabase: {e}",
            details={"url": settings.supabase_url}
        ) from e

    logger.info("supabase_connected")
    return client


def check_connection() -> dict:
    """
    Report whether the calendar tables are reachable.

    Returns:
        dict: `status` plus `<table>_count` for each probed table, or
            `error` when any probe fails
    """
    try:
        client = get_supabase_client()
        counts = {
            f"{table}_count": client.table(table).select(id_column, count="exact").limit(1).execute().count
            for table, id_column in HEALTH_TABLES
        }
    except Exception as e:
        logger.warning("health_check_failed", error=str(e))
        return {"status": "unhealthy", "error": str(e)}

    return {"status": "healthy", **counts}
