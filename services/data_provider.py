"""
Record data provider - fetch/update/create against the hosted backend.

The calendar services only talk to the backend through the
`DataProvider` protocol, so they can be tested without a live database.
`SupabaseDataProvider` is the production implementation (PostgREST).
"""

from typing import Any, Iterable, Optional, Protocol
import structlog

from config import get_supabase_client
from config.calendar import ID_COLUMNS
from models.query import (
    CrudFilter,
    CrudSort,
    FetchResult,
    FilterOperator,
    Pagination,
    SortOrder,
)
from exceptions import DatabaseError

logger = structlog.get_logger(__name__)


class DataProvider(Protocol):
    """Narrow record interface consumed by the calendar core."""

    def fetch(
        self,
        resource: str,
        filters: Iterable[CrudFilter] = (),
        sorters: Iterable[CrudSort] = (),
        pagination: Optional[Pagination] = None,
    ) -> FetchResult:
        ...

    def update(self, resource: str, id: Any, values: dict[str, Any]) -> dict[str, Any]:
        ...

    def create(self, resource: str, values: dict[str, Any]) -> dict[str, Any]:
        ...


def error_message(e: Exception) -> str:
    """Backend-provided message of an exception, falling back to str(e)."""
    if isinstance(e, DatabaseError):
        return e.backend_message
    message = getattr(e, "message", None)
    if isinstance(message, str) and message:
        return message
    return str(e) or type(e).__name__


class SupabaseDataProvider:
    """
    DataProvider backed by the Supabase client.

    Filters map to PostgREST operators (eq, in, gte, lte); pagination
    maps to a `range()` with an exact count.
    """

    def __init__(self, client=None):
        self.db = client if client is not None else get_supabase_client()

    @staticmethod
    def id_column(resource: str) -> str:
        return ID_COLUMNS.get(resource, "id")

    def fetch(
        self,
        resource: str,
        filters: Iterable[CrudFilter] = (),
        sorters: Iterable[CrudSort] = (),
        pagination: Optional[Pagination] = None,
    ) -> FetchResult:
        """
        Fetch one page of records.

        Raises:
            DatabaseError: If the query fails
        """
        filters = list(filters)
        sorters = list(sorters)
        pagination = pagination or Pagination()

        logger.debug(
            "fetching_records",
            resource=resource,
            filters=len(filters),
            page=pagination.current,
            page_size=pagination.page_size
        )

        try:
            query = self.db.table(resource).select("*", count="exact")

            for f in filters:
                if f.operator == FilterOperator.EQ:
                    query = query.eq(f.field, f.value)
                elif f.operator == FilterOperator.IN:
                    query = query.in_(f.field, list(f.value))
                elif f.operator == FilterOperator.GTE:
                    query = query.gte(f.field, f.value)
                elif f.operator == FilterOperator.LTE:
                    query = query.lte(f.field, f.value)

            for s in sorters:
                query = query.order(s.field, desc=s.order == SortOrder.DESC)

            start = pagination.offset
            query = query.range(start, start + pagination.limit - 1)

            result = query.execute()

        except Exception as e:
            logger.error(
                "fetch_records_failed",
                resource=resource,
                error=error_message(e)
            )
            raise DatabaseError("fetch", error_message(e), {"resource": resource}) from e

        records = result.data or []
        return FetchResult(records=records, total=getattr(result, "count", None))

    def update(self, resource: str, id: Any, values: dict[str, Any]) -> dict[str, Any]:
        """
        Partially update one record; only the given fields change.

        Raises:
            DatabaseError: If the update fails or matches no row
        """
        id_column = self.id_column(resource)
        logger.info(
            "updating_record",
            resource=resource,
            id=id,
            fields=sorted(values.keys())
        )

        try:
            result = (
                self.db.table(resource)
                .update(values)
                .eq(id_column, id)
                .execute()
            )
        except Exception as e:
            logger.error(
                "update_record_failed",
                resource=resource,
                id=id,
                error=error_message(e)
            )
            raise DatabaseError("update", error_message(e), {"resource": resource, "id": id}) from e

        if not result.data:
            raise DatabaseError(
                "update",
                f"{resource} {id} not found",
                {"resource": resource, "id": id}
            )

        return result.data[0]

    def create(self, resource: str, values: dict[str, Any]) -> dict[str, Any]:
        """
        Insert one record.

        Raises:
            DatabaseError: If the insert fails (message kept for conflict checks)
        """
        logger.info("creating_record", resource=resource)

        try:
            result = self.db.table(resource).insert(values).execute()
        except Exception as e:
            logger.warning(
                "create_record_failed",
                resource=resource,
                error=error_message(e)
            )
            raise DatabaseError("create", error_message(e), {"resource": resource}) from e

        return result.data[0] if result.data else dict(values)


# Singleton instance
_data_provider: Optional[SupabaseDataProvider] = None


def get_data_provider() -> SupabaseDataProvider:
    """Get the singleton Supabase data provider."""
    global _data_provider
    if _data_provider is None:
        _data_provider = SupabaseDataProvider()
    return _data_provider
