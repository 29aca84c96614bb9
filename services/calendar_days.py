"""
Calendar day generation and date-key helpers.

The `DD.MM.YYYY` key produced here is the only key used to match
orders to day columns, so grouping and rendering always align.
"""

from datetime import date, datetime, timedelta
from typing import Optional, Union
import structlog

from config import settings
from exceptions import ValidationError

logger = structlog.get_logger(__name__)

DATE_KEY_FORMAT = "%d.%m.%Y"
API_DATE_FORMAT = "%Y-%m-%d"

DAY_NAMES = ["Пн", "Вт", "Ср", "Чт", "Пт", "Сб", "Вс"]

WEEKDAY_NAMES = [
    "понедельник", "вторник", "среда", "четверг",
    "пятница", "суббота", "воскресенье",
]

MONTH_NAMES_GENITIVE = [
    "января", "февраля", "марта", "апреля", "мая", "июня",
    "июля", "августа", "сентября", "октября", "ноября", "декабря",
]

DateLike = Union[date, datetime, str]


def to_date(value: DateLike) -> date:
    """
    Reduce a date-like value to a calendar date.

    Strings are read by their leading YYYY-MM-DD only; the time and any
    timezone suffix are ignored.

    Raises:
        ValueError: If the string is not an ISO date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value).strip()[:10])


def generate_calendar_days(
    center_date: DateLike,
    days_back: int,
    days_forward: int
) -> list[date]:
    """
    Generate consecutive days around a pivot date.

    Weekends are included. The pivot's time of day is dropped.

    Args:
        center_date: Pivot date (usually today)
        days_back: Days before the pivot
        days_forward: Days after the pivot

    Returns:
        `days_back + days_forward + 1` ascending dates; index `days_back`
        is the pivot
    """
    if days_back < 0 or days_forward < 0:
        raise ValidationError(
            message="days_back and days_forward must be non-negative",
            code="CALENDAR_INVALID_RANGE",
            details={"days_back": days_back, "days_forward": days_forward}
        )

    pivot = to_date(center_date)
    return [pivot + timedelta(days=offset) for offset in range(-days_back, days_forward + 1)]


def format_date_key(value: DateLike) -> str:
    """Format a date as the `DD.MM.YYYY` column key."""
    return to_date(value).strftime(DATE_KEY_FORMAT)


def parse_date_key(key: str) -> Optional[date]:
    """
    Parse a `DD.MM.YYYY` key back into a date.

    Returns None (and logs) on malformed input.
    """
    try:
        return datetime.strptime(key.strip(), DATE_KEY_FORMAT).date()
    except (ValueError, AttributeError) as e:
        logger.warning("date_key_parse_failed", key=key, error=str(e))
        return None


def format_date_for_api(value: DateLike) -> str:
    """Format a date for backend filters (YYYY-MM-DD)."""
    return to_date(value).strftime(API_DATE_FORMAT)


def format_date_header(value: DateLike) -> str:
    """Column header, e.g. "12 ноября, среда"."""
    d = to_date(value)
    return f"{d.day} {MONTH_NAMES_GENITIVE[d.month - 1]}, {WEEKDAY_NAMES[d.weekday()]}"


def get_day_name(value: DateLike) -> str:
    """Short weekday name (Пн..Вс)."""
    return DAY_NAMES[to_date(value).weekday()]


def is_today(value: DateLike, today: Optional[date] = None) -> bool:
    return to_date(value) == (today or date.today())


def is_weekend(value: DateLike) -> bool:
    return to_date(value).weekday() >= 5


class CalendarWindow:
    """
    Navigable window of days around a pivot date.

    Default: 5 days back + pivot + 10 days forward; navigation moves the
    pivot by a week.
    """

    def __init__(
        self,
        center_date: Optional[DateLike] = None,
        days_back: Optional[int] = None,
        days_forward: Optional[int] = None,
        step_days: Optional[int] = None,
    ):
        self.days_back = settings.calendar_days_back if days_back is None else days_back
        self.days_forward = settings.calendar_days_forward if days_forward is None else days_forward
        self.step_days = step_days or settings.calendar_navigation_step_days
        self.center_date = to_date(center_date) if center_date is not None else date.today()
        self._days = self._generate()

    def _generate(self) -> list[date]:
        return generate_calendar_days(self.center_date, self.days_back, self.days_forward)

    @property
    def days(self) -> list[date]:
        return list(self._days)

    @property
    def start_date(self) -> date:
        return self._days[0]

    @property
    def end_date(self) -> date:
        return self._days[-1]

    def set_center_date(self, value: DateLike) -> None:
        self.center_date = to_date(value)
        self._days = self._generate()

    def go_to_today(self) -> None:
        self.set_center_date(date.today())

    def go_forward(self) -> None:
        self.set_center_date(self.center_date + timedelta(days=self.step_days))

    def go_backward(self) -> None:
        self.set_center_date(self.center_date - timedelta(days=self.step_days))

    def contains(self, value: DateLike) -> bool:
        return self.start_date <= to_date(value) <= self.end_date
