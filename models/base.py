"""
Base schemas and helpers for all models.
"""

from pydantic import BaseModel, ConfigDict
from datetime import date, datetime
from typing import Any


class BaseSchema(BaseModel):
    """
    Base for all schemas.

    Features:
        - Auto-trim whitespace from strings
        - Validate on attribute assignment
        - Allow ORM objects (from_attributes)
    """
    model_config = ConfigDict(
        from_attributes=True,
        str_strip_whitespace=True,
        validate_assignment=True
    )


class RecordSchema(BaseModel):
    """
    Base for rows coming back from the record-fetch interface.

    Unknown columns are ignored so view changes on the backend never
    break parsing; missing required columns still fail validation.
    """
    model_config = ConfigDict(
        extra="ignore",
        str_strip_whitespace=True,
    )


class ValueSchema(BaseModel):
    """Immutable value object (no identity, compared by fields)."""
    model_config = ConfigDict(frozen=True)


def date_part(value: Any) -> Any:
    """
    Reduce a date-like value to its calendar date.

    ISO strings keep only the leading YYYY-MM-DD so a timezone suffix
    can never shift the day. Used as a `mode="before"` validator.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return value.strip()[:10]
    return value
