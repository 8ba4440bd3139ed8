"""
Business-hours evaluation.

A schedule is a list of ``{"day", "open", "close", "closed"}`` entries with
24-hour ``HH:MM`` times. Only the first entry for a given day is used.
A range whose close time is earlier than its open time wraps past midnight
and is finished by the following day's early hours.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, Optional, Tuple

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


@dataclass(frozen=True)
class BusinessHoursStatus:
    is_open: bool
    hours: Optional[str] = None


CLOSED = BusinessHoursStatus(is_open=False)


def parse_time_of_day(value: Any) -> Optional[Tuple[int, int]]:
    """Parse ``HH:MM`` into ``(hour, minute)``; ``None`` when malformed."""
    if not isinstance(value, str):
        return None
    parts = value.strip().split(":")
    if len(parts) != 2 or not all(p.isdigit() for p in parts):
        return None
    hour, minute = int(parts[0]), int(parts[1])
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        return None
    return hour, minute


def _find_entry(entries: Iterable[Dict[str, Any]], day: str) -> Optional[Dict[str, Any]]:
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        entry_day = entry.get("day")
        if isinstance(entry_day, str) and entry_day.strip().lower() == day:
            return entry
    return None


def _entry_range(
    entry: Optional[Dict[str, Any]],
) -> Optional[Tuple[Tuple[int, int], Tuple[int, int]]]:
    if entry is None or entry.get("closed"):
        return None
    opens = parse_time_of_day(entry.get("open"))
    closes = parse_time_of_day(entry.get("close"))
    if opens is None or closes is None:
        return None
    return opens, closes


def _format_range(opens: Tuple[int, int], closes: Tuple[int, int]) -> str:
    return f"{opens[0]:02d}:{opens[1]:02d} - {closes[0]:02d}:{closes[1]:02d}"


def evaluate_business_hours(
    entries: Optional[Iterable[Dict[str, Any]]], now: Optional[datetime] = None
) -> BusinessHoursStatus:
    """
    Determine whether a schedule is open at a given moment.

    Args:
        entries: Weekly schedule entries; ``None`` or empty means closed
        now: Moment to evaluate, defaults to the server's local wall clock

    Returns:
        BusinessHoursStatus with ``hours`` set to the matching range when open
    """
    if not entries:
        return CLOSED
    entries = list(entries)
    now = now or datetime.now()
    current = (now.hour, now.minute)

    today = _entry_range(_find_entry(entries, WEEKDAYS[now.weekday()]))
    if today is not None:
        opens, closes = today
        if opens <= closes:
            if opens <= current <= closes:
                return BusinessHoursStatus(is_open=True, hours=_format_range(opens, closes))
        elif current >= opens:
            return BusinessHoursStatus(is_open=True, hours=_format_range(opens, closes))

    # Tail of an overnight range started yesterday
    yesterday_name = WEEKDAYS[(now - timedelta(days=1)).weekday()]
    yesterday = _entry_range(_find_entry(entries, yesterday_name))
    if yesterday is not None:
        opens, closes = yesterday
        if closes < opens and current <= closes:
            return BusinessHoursStatus(is_open=True, hours=_format_range(opens, closes))

    return CLOSED
