"""
Unit tests for business-hours evaluation.
"""

from datetime import datetime

from app.utils.business_hours import (
    BusinessHoursStatus,
    evaluate_business_hours,
    parse_time_of_day,
)

# 2024-01-01 was a Monday
MONDAY = datetime(2024, 1, 1)
TUESDAY = datetime(2024, 1, 2)

WEEKDAY_HOURS = [{"day": "monday", "open": "09:00", "close": "17:00"}]


def test_open_within_range():
    """Test that a schedule is open between its open and close times."""
    status = evaluate_business_hours(WEEKDAY_HOURS, MONDAY.replace(hour=10))

    assert status == BusinessHoursStatus(is_open=True, hours="09:00 - 17:00")


def test_closed_after_range():
    """Test that a schedule is closed after its close time."""
    status = evaluate_business_hours(WEEKDAY_HOURS, MONDAY.replace(hour=18))

    assert status.is_open is False
    assert status.hours is None


def test_range_bounds_are_inclusive():
    """Test the exact open and close minutes count as open."""
    assert evaluate_business_hours(WEEKDAY_HOURS, MONDAY.replace(hour=9)).is_open is True
    assert evaluate_business_hours(WEEKDAY_HOURS, MONDAY.replace(hour=17)).is_open is True
    assert (
        evaluate_business_hours(WEEKDAY_HOURS, MONDAY.replace(hour=17, minute=1)).is_open
        is False
    )


def test_closed_flag_wins_over_times():
    """Test that an entry marked closed is closed regardless of its times."""
    entries = [{"day": "monday", "open": "00:00", "close": "23:59", "closed": True}]

    assert evaluate_business_hours(entries, MONDAY.replace(hour=12)).is_open is False


def test_missing_day_is_closed():
    """Test that a day without an entry is closed."""
    assert evaluate_business_hours(WEEKDAY_HOURS, TUESDAY.replace(hour=10)).is_open is False


def test_empty_schedule_is_closed():
    """Test that missing or empty schedules are closed."""
    assert evaluate_business_hours(None, MONDAY).is_open is False
    assert evaluate_business_hours([], MONDAY).is_open is False


def test_day_match_is_case_insensitive():
    """Test that day names match regardless of case."""
    entries = [{"day": "Monday", "open": "09:00", "close": "17:00"}]

    assert evaluate_business_hours(entries, MONDAY.replace(hour=12)).is_open is True


def test_first_entry_for_a_day_wins():
    """Test that only the first entry for a day is used."""
    entries = [
        {"day": "monday", "closed": True},
        {"day": "monday", "open": "09:00", "close": "17:00"},
    ]

    assert evaluate_business_hours(entries, MONDAY.replace(hour=12)).is_open is False


def test_malformed_times_are_closed():
    """Test that entries with unparseable times are treated as closed."""
    entries = [{"day": "monday", "open": "9am", "close": "5pm"}]

    assert evaluate_business_hours(entries, MONDAY.replace(hour=12)).is_open is False


def test_overnight_range_before_midnight():
    """Test an overnight range in the evening of its own day."""
    entries = [{"day": "monday", "open": "22:00", "close": "02:00"}]

    status = evaluate_business_hours(entries, MONDAY.replace(hour=23))

    assert status == BusinessHoursStatus(is_open=True, hours="22:00 - 02:00")


def test_overnight_range_after_midnight():
    """Test that yesterday's overnight range covers the early hours."""
    entries = [{"day": "monday", "open": "22:00", "close": "02:00"}]

    assert evaluate_business_hours(entries, TUESDAY.replace(hour=1)).is_open is True
    assert evaluate_business_hours(entries, TUESDAY.replace(hour=3)).is_open is False


def test_overnight_range_does_not_cover_own_morning():
    """Test that an overnight range does not open the early hours of its own day."""
    entries = [{"day": "monday", "open": "22:00", "close": "02:00"}]

    assert evaluate_business_hours(entries, MONDAY.replace(hour=1)).is_open is False


def test_parse_time_of_day():
    """Test HH:MM parsing and rejection of malformed values."""
    assert parse_time_of_day("09:30") == (9, 30)
    assert parse_time_of_day(" 23:59 ") == (23, 59)
    assert parse_time_of_day("24:00") is None
    assert parse_time_of_day("12:60") is None
    assert parse_time_of_day("noon") is None
    assert parse_time_of_day(None) is None
