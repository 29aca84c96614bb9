"""
Calendar Data Service - aggregates the records behind the board.

One refresh fetches the orders of a date window, then fans out to the
detail, reference, event and link tables filtered to those orders,
and folds everything into denormalized `CalendarOrder` values grouped
by day.

Failure policy:
    - orders / order_details fetch fails → CalendarDataError (retryable)
    - any lookup fails → warning logged, field left empty, refresh goes on
"""

import asyncio
from collections import defaultdict
from datetime import date, datetime, timezone
from typing import Any, Iterable, Optional, Type, TypeVar
import structlog
from pydantic import BaseModel, ValidationError as PydanticValidationError

from config import settings
from config.calendar import (
    DOWELING_LINKS_RESOURCE,
    DOWELING_ORDERS_RESOURCE,
    MATERIALS_RESOURCE,
    MILLING_TYPES_RESOURCE,
    ORDER_DETAILS_RESOURCE,
    ORDER_STATUSES_RESOURCE,
    ORDERS_VIEW_RESOURCE,
    PAYMENT_STATUSES_RESOURCE,
    PRODUCTION_STATUS_EVENTS_RESOURCE,
    PRODUCTION_STATUSES_RESOURCE,
    SCHEDULE_FIELD,
)
from models.query import CrudFilter, CrudSort, FilterOperator, Pagination, SortOrder
from models.records import (
    DowelingLinkRecord,
    DowelingOrderRecord,
    MaterialRecord,
    MillingTypeRecord,
    OrderDetailRecord,
    OrderStatusRecord,
    OrderViewRecord,
    PaymentStatusRecord,
    ProductionStatusEventRecord,
    ProductionStatusRecord,
)
from models.calendar import (
    CalendarData,
    CalendarOrder,
    DetailSummary,
    StatusItem,
    StatusOptions,
)
from services.calendar_days import format_date_for_api
from services.data_provider import DataProvider, error_message, get_data_provider
from services.invalidation import InvalidationBus, get_invalidation_bus
from services.order_grouping import group_orders_by_date
from exceptions import CalendarDataError, OrderNotFoundError

logger = structlog.get_logger(__name__)

R = TypeVar("R", bound=BaseModel)

# Windows whose last applied refresh is remembered for stale checks
APPLIED_WINDOWS_KEPT = 32


# ===================
# RECORD PARSING
# ===================

def parse_records(
    rows: Iterable[dict],
    schema: Type[R],
    resource: str,
    strict: bool = False
) -> list[R]:
    """
    Validate raw rows against a record schema.

    Lookup tables (`strict=False`) skip malformed rows with a warning;
    primary sources (`strict=True`) fail the refresh.
    """
    parsed: list[R] = []
    for row in rows:
        try:
            parsed.append(schema.model_validate(row))
        except PydanticValidationError as e:
            if strict:
                logger.error(
                    "calendar_record_invalid",
                    resource=resource,
                    error=str(e)
                )
                raise CalendarDataError(resource, f"invalid {resource} record") from e
            logger.warning(
                "calendar_record_skipped",
                resource=resource,
                errors=e.error_count()
            )
    return parsed


# ===================
# AGGREGATION (pure)
# ===================

def build_name_map(records: Iterable[Any], id_field: str, name_field: str) -> dict[int, str]:
    """id → name map; rows without a name are left out."""
    result: dict[int, str] = {}
    for record in records:
        name = getattr(record, name_field, None)
        if name:
            result[getattr(record, id_field)] = name
    return result


def collect_passed_stage_codes(
    events: Iterable[ProductionStatusEventRecord],
    status_codes: dict[int, str]
) -> dict[int, list[str]]:
    """
    Distinct stage codes per order, in first-occurrence order.

    Events without an order or with an unknown status are ignored.
    """
    codes_by_order: dict[int, list[str]] = defaultdict(list)
    for event in events:
        if event.order_id is None:
            continue
        code = status_codes.get(event.production_status_id)
        if not code:
            continue
        codes = codes_by_order[event.order_id]
        if code not in codes:
            codes.append(code)
    return dict(codes_by_order)


def latest_doweling_links(links: Iterable[DowelingLinkRecord]) -> dict[int, DowelingLinkRecord]:
    """
    One link per order: the largest `link_id` wins.

    Link ids are autoincrement, so the largest id is taken as the most
    recently created link. There is no timestamp to compare.
    """
    latest: dict[int, DowelingLinkRecord] = {}
    for link in links:
        current = latest.get(link.order_id)
        if current is None or link.link_id > current.link_id:
            latest[link.order_id] = link
    return latest


def summarize_details(
    details: Iterable[OrderDetailRecord],
    milling_names: dict[int, str],
    material_names: dict[int, str],
    status_names: dict[int, str]
) -> dict[int, list[DetailSummary]]:
    """Details per order with foreign keys replaced by names."""
    by_order: dict[int, list[DetailSummary]] = defaultdict(list)
    for detail in details:
        if detail.delete_flag:
            continue
        by_order[detail.order_id].append(
            DetailSummary(
                detail_id=detail.detail_id,
                order_id=detail.order_id,
                area=detail.area,
                milling_type_name=milling_names.get(detail.milling_type_id),
                material_name=material_names.get(detail.material_id),
                production_status_name=status_names.get(detail.production_status_id),
            )
        )
    return dict(by_order)


def detail_status_keywords(details: Iterable[DetailSummary]) -> str:
    """Space-joined, lower-cased distinct detail stage names."""
    names: list[str] = []
    for detail in details:
        name = (detail.production_status_name or "").strip().lower()
        if name and name not in names:
            names.append(name)
    return " ".join(names)


def aggregate_orders(
    orders: Iterable[OrderViewRecord],
    details: Iterable[OrderDetailRecord],
    milling_types: Iterable[MillingTypeRecord] = (),
    materials: Iterable[MaterialRecord] = (),
    production_statuses: Iterable[ProductionStatusRecord] = (),
    events: Iterable[ProductionStatusEventRecord] = (),
    links: Iterable[DowelingLinkRecord] = (),
    doweling_orders: Iterable[DowelingOrderRecord] = (),
) -> list[CalendarOrder]:
    """
    Fold fetched records into calendar orders.

    Every map is built once per call. Any input may be empty; the
    affected fields are then simply left blank.
    """
    production_statuses = list(production_statuses)

    milling_names = build_name_map(milling_types, "milling_type_id", "milling_type_name")
    material_names = build_name_map(materials, "material_id", "material_name")
    status_names = build_name_map(production_statuses, "production_status_id", "production_status_name")
    status_codes = build_name_map(production_statuses, "production_status_id", "production_status_code")
    doweling_names = build_name_map(doweling_orders, "doweling_order_id", "doweling_order_name")

    details_by_order = summarize_details(details, milling_names, material_names, status_names)
    codes_by_order = collect_passed_stage_codes(events, status_codes)
    links_by_order = latest_doweling_links(links)

    result: list[CalendarOrder] = []
    for order in orders:
        order_details = details_by_order.get(order.order_id, [])
        link = links_by_order.get(order.order_id)

        if order.production_status_name:
            search = order.production_status_name.lower()
        else:
            search = detail_status_keywords(order_details)

        result.append(
            CalendarOrder(
                **order.model_dump(),
                production_status_search=search,
                order_details=order_details,
                doweling_order_name=doweling_names.get(link.doweling_order_id) if link else None,
                passed_stage_codes=codes_by_order.get(order.order_id, []),
            )
        )
    return result


# ===================
# SERVICE
# ===================

class CalendarDataService:
    """
    Record aggregator for the production calendar.

    Subscribes to `orders_view` invalidations; refreshes are tagged with
    a sequence number and a result older than the last one applied for
    the same window is dropped.
    """

    def __init__(
        self,
        provider: Optional[DataProvider] = None,
        bus: Optional[InvalidationBus] = None,
    ):
        self.provider = provider or get_data_provider()
        self.bus = bus or get_invalidation_bus()
        self.page_size = settings.calendar_page_size

        self.latest: Optional[CalendarData] = None
        self.is_stale = True
        self._sequence = 0
        self._applied: dict[tuple[date, date], CalendarData] = {}

        self.bus.subscribe(ORDERS_VIEW_RESOURCE, self._on_invalidate)

    def close(self) -> None:
        self.bus.unsubscribe(ORDERS_VIEW_RESOURCE, self._on_invalidate)

    def _on_invalidate(self, resource: str) -> None:
        self.is_stale = True
        logger.debug("calendar_data_invalidated", resource=resource)

    # ===================
    # FETCH HELPERS
    # ===================

    async def _fetch(
        self,
        resource: str,
        filters: list[CrudFilter] = (),
        sorters: list[CrudSort] = (),
        page_size: Optional[int] = None,
    ) -> list[dict]:
        pagination = Pagination(current=1, page_size=page_size or self.page_size)
        result = await asyncio.to_thread(
            self.provider.fetch, resource, list(filters), list(sorters), pagination
        )
        return result.records

    async def _fetch_required(
        self,
        resource: str,
        schema: Type[R],
        filters: list[CrudFilter] = (),
        sorters: list[CrudSort] = (),
    ) -> list[R]:
        """Fetch a source the board cannot render without."""
        try:
            rows = await self._fetch(resource, filters, sorters)
        except Exception as e:
            logger.error(
                "calendar_fetch_failed",
                resource=resource,
                error=error_message(e)
            )
            raise CalendarDataError(resource, error_message(e)) from e
        return parse_records(rows, schema, resource, strict=True)

    async def _fetch_lookup(
        self,
        resource: str,
        schema: Type[R],
        filters: list[CrudFilter] = (),
        sorters: list[CrudSort] = (),
        page_size: Optional[int] = None,
    ) -> tuple[list[R], bool]:
        """
        Fetch a lookup; failures degrade to an empty list.

        Returns:
            Tuple of (records, ok)
        """
        try:
            rows = await self._fetch(resource, filters, sorters, page_size)
        except Exception as e:
            logger.warning(
                "calendar_lookup_failed",
                resource=resource,
                error=error_message(e)
            )
            return [], False
        return parse_records(rows, schema, resource), True

    # ===================
    # LOAD
    # ===================

    async def fetch_orders(self, start_date: date, end_date: date) -> list[OrderViewRecord]:
        """Orders of the window sorted by completion date, then id."""
        return await self._fetch_required(
            ORDERS_VIEW_RESOURCE,
            OrderViewRecord,
            filters=[
                CrudFilter(field=SCHEDULE_FIELD, operator=FilterOperator.GTE, value=format_date_for_api(start_date)),
                CrudFilter(field=SCHEDULE_FIELD, operator=FilterOperator.LTE, value=format_date_for_api(end_date)),
            ],
            sorters=[
                CrudSort(field=SCHEDULE_FIELD, order=SortOrder.ASC),
                CrudSort(field="order_id", order=SortOrder.ASC),
            ],
        )

    async def load(self, start_date: date, end_date: date, sequence: int = 0) -> CalendarData:
        """
        Aggregate one window. Does not touch `latest`.

        Raises:
            CalendarDataError: If the order or detail fetch fails
        """
        logger.info(
            "loading_calendar_data",
            start_date=str(start_date),
            end_date=str(end_date),
            sequence=sequence
        )

        orders = await self.fetch_orders(start_date, end_date)
        order_ids = [order.order_id for order in orders]

        if not order_ids:
            logger.info("calendar_window_empty", start_date=str(start_date), end_date=str(end_date))
            return CalendarData(
                start_date=start_date,
                end_date=end_date,
                sequence=sequence,
                loaded_at=datetime.now(timezone.utc),
            )

        by_orders = CrudFilter(field="order_id", operator=FilterOperator.IN, value=order_ids)

        (
            details,
            (milling_types, milling_ok),
            (materials, materials_ok),
            (statuses, statuses_ok),
            (events, events_ok),
            (links, links_ok),
        ) = await asyncio.gather(
            self._fetch_required(
                ORDER_DETAILS_RESOURCE,
                OrderDetailRecord,
                filters=[
                    by_orders,
                    CrudFilter(field="delete_flag", operator=FilterOperator.EQ, value=False),
                ],
                sorters=[CrudSort(field="detail_id")],
            ),
            self._fetch_lookup(MILLING_TYPES_RESOURCE, MillingTypeRecord),
            self._fetch_lookup(MATERIALS_RESOURCE, MaterialRecord),
            self._fetch_lookup(PRODUCTION_STATUSES_RESOURCE, ProductionStatusRecord),
            self._fetch_lookup(
                PRODUCTION_STATUS_EVENTS_RESOURCE,
                ProductionStatusEventRecord,
                filters=[by_orders],
                sorters=[CrudSort(field="event_at")],
            ),
            self._fetch_lookup(
                DOWELING_LINKS_RESOURCE,
                DowelingLinkRecord,
                filters=[by_orders],
                sorters=[CrudSort(field="link_id")],
            ),
        )

        doweling_orders: list[DowelingOrderRecord] = []
        doweling_ok = True
        doweling_ids = sorted({link.doweling_order_id for link in links})
        if doweling_ids:
            doweling_orders, doweling_ok = await self._fetch_lookup(
                DOWELING_ORDERS_RESOURCE,
                DowelingOrderRecord,
                filters=[CrudFilter(field="doweling_order_id", operator=FilterOperator.IN, value=doweling_ids)],
            )

        degraded = [
            resource for resource, ok in (
                (MILLING_TYPES_RESOURCE, milling_ok),
                (MATERIALS_RESOURCE, materials_ok),
                (PRODUCTION_STATUSES_RESOURCE, statuses_ok),
                (PRODUCTION_STATUS_EVENTS_RESOURCE, events_ok),
                (DOWELING_LINKS_RESOURCE, links_ok),
                (DOWELING_ORDERS_RESOURCE, doweling_ok),
            ) if not ok
        ]

        calendar_orders = aggregate_orders(
            orders,
            details,
            milling_types=milling_types,
            materials=materials,
            production_statuses=statuses,
            events=events,
            links=links,
            doweling_orders=doweling_orders,
        )

        logger.info(
            "calendar_data_loaded",
            orders=len(calendar_orders),
            details=len(details),
            events=len(events),
            links=len(links),
            degraded=degraded,
            sequence=sequence
        )

        return CalendarData(
            start_date=start_date,
            end_date=end_date,
            orders=calendar_orders,
            orders_by_date=group_orders_by_date(calendar_orders),
            sequence=sequence,
            loaded_at=datetime.now(timezone.utc),
            degraded_sources=degraded,
        )

    async def refresh(self, start_date: date, end_date: date) -> Optional[CalendarData]:
        """
        Load a window and apply it unless a newer refresh of the same
        window already landed.

        Refreshes of different windows never supersede each other.

        Returns:
            The applied data (or the newer data for the same window when
            this one was stale)

        Raises:
            CalendarDataError: If this refresh is current and failed
        """
        self._sequence += 1
        sequence = self._sequence
        window = (start_date, end_date)

        try:
            data = await self.load(start_date, end_date, sequence=sequence)
        except CalendarDataError:
            newer = self._superseding(window, sequence)
            if newer is not None:
                logger.info("stale_refresh_error_ignored", sequence=sequence, applied=newer.sequence)
                return newer
            raise

        newer = self._superseding(window, sequence)
        if newer is not None:
            logger.info(
                "stale_refresh_dropped",
                sequence=sequence,
                applied=newer.sequence,
                start_date=str(start_date)
            )
            return newer

        self._applied[window] = data
        if len(self._applied) > APPLIED_WINDOWS_KEPT:
            oldest = min(self._applied, key=lambda w: self._applied[w].sequence)
            del self._applied[oldest]
        if self.latest is None or sequence > self.latest.sequence:
            self.latest = data
            self.is_stale = False
        return data

    def _superseding(self, window: tuple[date, date], sequence: int) -> Optional[CalendarData]:
        applied = self._applied.get(window)
        if applied is not None and applied.sequence > sequence:
            return applied
        return None

    # ===================
    # SINGLE ORDER / STATUS LOOKUPS
    # ===================

    async def get_order(self, order_id: int) -> CalendarOrder:
        """
        Load one order for a mutation request.

        Raises:
            OrderNotFoundError: If the order does not exist
            CalendarDataError: If the fetch fails
        """
        records = await self._fetch_required(
            ORDERS_VIEW_RESOURCE,
            OrderViewRecord,
            filters=[CrudFilter(field="order_id", operator=FilterOperator.EQ, value=order_id)],
        )
        if not records:
            raise OrderNotFoundError(order_id)
        return CalendarOrder(**records[0].model_dump())

    async def load_status_options(self) -> StatusOptions:
        """Active order, payment and production statuses for the context menu."""
        active = [CrudFilter(field="is_active", operator=FilterOperator.EQ, value=True)]
        page_size = settings.status_page_size

        (order_rows, _), (payment_rows, _), (production_rows, _) = await asyncio.gather(
            self._fetch_lookup(ORDER_STATUSES_RESOURCE, OrderStatusRecord, active, page_size=page_size),
            self._fetch_lookup(PAYMENT_STATUSES_RESOURCE, PaymentStatusRecord, active, page_size=page_size),
            self._fetch_lookup(PRODUCTION_STATUSES_RESOURCE, ProductionStatusRecord, active, page_size=page_size),
        )

        return StatusOptions(
            order_statuses=[StatusItem(id=r.order_status_id, name=r.order_status_name) for r in order_rows],
            payment_statuses=[StatusItem(id=r.payment_status_id, name=r.payment_status_name) for r in payment_rows],
            production_statuses=[
                StatusItem(id=r.production_status_id, name=r.production_status_name) for r in production_rows
            ],
        )


# Singleton instance
_calendar_data_service: Optional[CalendarDataService] = None


def get_calendar_data_service() -> CalendarDataService:
    """Get the singleton calendar data service instance."""
    global _calendar_data_service
    if _calendar_data_service is None:
        _calendar_data_service = CalendarDataService()
    return _calendar_data_service
