"""
Query schemas for the record-fetch/update interface.

Filters are ANDed; sorters apply in list order.
"""

from pydantic import Field, field_validator
from typing import Any, Optional
from enum import Enum

from models.base import ValueSchema

MAX_PAGE_SIZE = 10000


class FilterOperator(str, Enum):
    """Supported filter operators."""
    EQ = "eq"
    IN = "in"
    GTE = "gte"
    LTE = "lte"


class SortOrder(str, Enum):
    """Sort direction."""
    ASC = "asc"
    DESC = "desc"


class CrudFilter(ValueSchema):
    """Single `(field, operator, value)` predicate."""

    field: str = Field(..., min_length=1)
    operator: FilterOperator
    value: Any

    @field_validator("value")
    @classmethod
    def validate_in_value(cls, v: Any, info) -> Any:
        """`in` filters need a concrete list of values."""
        if info.data.get("operator") == FilterOperator.IN:
            if not isinstance(v, (list, tuple, set, frozenset)):
                raise ValueError("'in' filter value must be a collection")
            return tuple(v)
        return v


class CrudSort(ValueSchema):
    """Single `(field, direction)` sort key."""

    field: str = Field(..., min_length=1)
    order: SortOrder = SortOrder.ASC


class Pagination(ValueSchema):
    """1-based page index with page size up to 10 000 rows."""

    current: int = Field(default=1, ge=1)
    page_size: int = Field(default=10, ge=1, le=MAX_PAGE_SIZE)

    @property
    def offset(self) -> int:
        return (self.current - 1) * self.page_size

    @property
    def limit(self) -> int:
        return self.page_size


class FetchResult(ValueSchema):
    """One page of records plus the total row count."""

    records: list[dict[str, Any]] = Field(default_factory=list)
    total: Optional[int] = None

    @property
    def count(self) -> int:
        return self.total if self.total is not None else len(self.records)
