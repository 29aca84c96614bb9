"""
Unit tests for calendar day generation and date keys.

Run: pytest tests/unit/test_calendar_days.py -v
"""

import pytest
from datetime import date, datetime, timezone

from services.calendar_days import (
    CalendarWindow,
    format_date_for_api,
    format_date_header,
    format_date_key,
    generate_calendar_days,
    get_day_name,
    is_today,
    is_weekend,
    parse_date_key,
    to_date,
)
from exceptions import ValidationError


class TestGenerateCalendarDays:
    """Tests for generate_calendar_days()"""

    def test_default_window_has_sixteen_days(self):
        """5 back + pivot + 10 forward."""
        days = generate_calendar_days(date(2025, 11, 12), 5, 10)

        assert len(days) == 16
        assert days[0] == date(2025, 11, 7)
        assert days[5] == date(2025, 11, 12)
        assert days[-1] == date(2025, 11, 22)

    def test_days_are_consecutive(self):
        """Every day is one after the previous, weekends included."""
        days = generate_calendar_days(date(2025, 11, 12), 5, 10)

        assert all((b - a).days == 1 for a, b in zip(days, days[1:]))
        assert date(2025, 11, 15) in days
        assert date(2025, 11, 16) in days

    def test_zero_zero_is_only_the_pivot(self):
        """Should return just the pivot."""
        assert generate_calendar_days(date(2025, 11, 12), 0, 0) == [date(2025, 11, 12)]

    def test_pivot_time_is_dropped(self):
        """A datetime pivot late in the day gives the same days."""
        days = generate_calendar_days(datetime(2025, 11, 12, 23, 59), 1, 1)

        assert days == [date(2025, 11, 11), date(2025, 11, 12), date(2025, 11, 13)]

    def test_month_boundary(self):
        """Should cross into the next month."""
        days = generate_calendar_days(date(2025, 11, 29), 0, 3)

        assert days[-1] == date(2025, 12, 2)

    def test_negative_count_raises(self):
        """Negative counts are rejected."""
        with pytest.raises(ValidationError) as exc_info:
            generate_calendar_days(date(2025, 11, 12), -1, 10)

        assert exc_info.value.code == "CALENDAR_INVALID_RANGE"


class TestDateKeys:
    """Tests for format_date_key() / parse_date_key()"""

    def test_format_key(self):
        assert format_date_key(date(2025, 11, 10)) == "10.11.2025"

    def test_format_key_from_iso_string_ignores_time(self):
        """Timestamp strings keep their calendar day."""
        assert format_date_key("2025-11-10T23:30:00+03:00") == "10.11.2025"
        assert format_date_key("2025-11-10T00:30:00Z") == "10.11.2025"

    def test_format_key_from_aware_datetime(self):
        """Should use the datetime's own date."""
        value = datetime(2025, 11, 10, 22, 0, tzinfo=timezone.utc)

        assert format_date_key(value) == "10.11.2025"

    def test_parse_key(self):
        assert parse_date_key("10.11.2025") == date(2025, 11, 10)

    def test_parse_key_malformed_returns_none(self):
        """Should return None for malformed keys."""
        assert parse_date_key("2025-11-10") is None
        assert parse_date_key("32.01.2025") is None
        assert parse_date_key(None) is None

    def test_format_for_api(self):
        assert format_date_for_api(date(2025, 1, 5)) == "2025-01-05"

    def test_to_date_rejects_garbage(self):
        with pytest.raises(ValueError):
            to_date("not a date")


class TestDayLabels:
    """Tests for headers, day names and flags."""

    def test_header(self):
        assert format_date_header(date(2025, 11, 12)) == "12 ноября, среда"

    def test_day_name(self):
        assert get_day_name(date(2025, 11, 10)) == "Пн"
        assert get_day_name(date(2025, 11, 16)) == "Вс"

    def test_is_weekend(self):
        assert is_weekend(date(2025, 11, 15)) is True
        assert is_weekend(date(2025, 11, 16)) is True
        assert is_weekend(date(2025, 11, 17)) is False

    def test_is_today_with_explicit_today(self):
        assert is_today(date(2025, 11, 12), today=date(2025, 11, 12)) is True
        assert is_today(date(2025, 11, 13), today=date(2025, 11, 12)) is False


class TestCalendarWindow:
    """Tests for CalendarWindow navigation."""

    def test_bounds(self, window):
        assert window.start_date == date(2025, 11, 7)
        assert window.end_date == date(2025, 11, 22)
        assert len(window.days) == 16

    def test_go_forward_moves_a_week(self, window):
        window.go_forward()

        assert window.center_date == date(2025, 11, 19)
        assert window.start_date == date(2025, 11, 14)

    def test_go_backward_moves_a_week(self, window):
        window.go_backward()

        assert window.center_date == date(2025, 11, 5)

    def test_go_to_today(self, window):
        window.go_to_today()

        assert window.center_date == date.today()

    def test_contains(self, window):
        assert window.contains(date(2025, 11, 7)) is True
        assert window.contains("2025-11-22T18:00:00") is True
        assert window.contains(date(2025, 11, 23)) is False

    def test_days_returns_copy(self, window):
        """Mutating the returned list does not change the window."""
        days = window.days
        days.clear()

        assert len(window.days) == 16
