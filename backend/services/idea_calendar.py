"""
Calendar helpers for the Daily Bad Idea.

Normalizes request dates to a UTC calendar-date key and derives the
per-date generation seed and holiday theme. All functions are pure.
"""

from datetime import date, datetime, timezone
from typing import Callable, Dict, Optional, Union

from dateutil.easter import easter
from dateutil.parser import isoparse
from dateutil.relativedelta import MO, TH, relativedelta

DateInput = Union[str, date, datetime, None]

_FIXED_HOLIDAYS: Dict[tuple, str] = {
    (1, 1): "New Year's Day",
    (2, 14): "Valentine's Day",
    (3, 17): "St. Patrick's Day",
    (4, 1): "April Fools' Day",
    (7, 4): "Independence Day",
    (10, 31): "Halloween",
    (11, 11): "Veterans Day",
    (12, 24): "Christmas Eve",
    (12, 25): "Christmas Day",
    (12, 31): "New Year's Eve",
}


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_date_key(value: DateInput = None, now: Optional[Callable[[], datetime]] = None) -> date:
    """Normalize a date-ish value to a UTC calendar date.

    Accepts None (today in UTC), a date, a datetime (naive values are taken
    as UTC) or an ISO-8601 string, either ``YYYY-MM-DD`` or a full timestamp.

    Raises:
        ValueError: If the string cannot be parsed or the UTC date is out of range.
    """
    if value is None:
        return (now or utc_now)().astimezone(timezone.utc).date()

    if isinstance(value, str):
        raw = value.strip()
        if not raw:
            raise ValueError("Empty date")
        # A bare calendar date is already a key; no timezone shift.
        if len(raw) == 10:
            return date.fromisoformat(raw)
        try:
            value = isoparse(raw)
        except OverflowError as e:
            raise ValueError(f"Date out of range: {raw}") from e

    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        try:
            return value.astimezone(timezone.utc).date()
        except OverflowError as e:
            raise ValueError(f"Date out of range: {value.isoformat()}") from e

    return value


def date_key_str(target_date: date) -> str:
    """Canonical ``YYYY-MM-DD`` key."""
    return target_date.isoformat()


def seed_for_date(target_date: date) -> int:
    """Deterministic per-date seed, e.g. 2025-10-19 -> 20251019."""
    return target_date.year * 10000 + target_date.month * 100 + target_date.day


def nth_weekday(year: int, month: int, weekday, n: int) -> date:
    """Date of the nth given weekday (dateutil MO/TU/...) in a month."""
    return date(year, month, 1) + relativedelta(weekday=weekday(n))


def last_weekday(year: int, month: int, weekday) -> date:
    """Date of the last given weekday in a month."""
    return date(year, month, 1) + relativedelta(day=31, weekday=weekday(-1))


def _floating_holidays(year: int) -> Dict[date, str]:
    return {
        nth_weekday(year, 1, MO, 3): "Martin Luther King Jr. Day",
        nth_weekday(year, 2, MO, 3): "Presidents' Day",
        easter(year): "Easter Sunday",
        last_weekday(year, 5, MO): "Memorial Day",
        nth_weekday(year, 9, MO, 1): "Labor Day",
        nth_weekday(year, 10, MO, 2): "Columbus Day",
        nth_weekday(year, 11, TH, 4): "Thanksgiving",
    }


def holiday_for_date(target_date: date) -> Optional[str]:
    """Name of the US holiday on this date, or None.

    Fixed-date holidays are checked before floating ones.
    """
    fixed = _FIXED_HOLIDAYS.get((target_date.month, target_date.day))
    if fixed:
        return fixed
    return _floating_holidays(target_date.year).get(target_date)
