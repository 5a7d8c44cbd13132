"""Instants and the local calendar.

An instant is an ``int`` count of milliseconds since the Unix epoch. All
calendar questions (year, month, day, weekday, midnight) are answered in the
single zone ``config.LOCAL_TZ``.
"""

from __future__ import annotations

import calendar
from datetime import date, datetime, time, timedelta
from typing import NamedTuple

from dateutil import tz
from dateutil.relativedelta import relativedelta

from budgetcycle import config


# Largest signed 64-bit millisecond value, later than any real instant
NEVER = 2 ** 63 - 1

ONE_DAY_MS = 24 * 60 * 60 * 1000

EPOCH = datetime(1970, 1, 1, tzinfo=tz.UTC)
_ONE_MS = timedelta(milliseconds=1)

# Latest instant the engine computes from; one period later still fits in datetime
LAST_INSTANT = (datetime(9999, 11, 30, tzinfo=tz.UTC) - EPOCH) // _ONE_MS


class CalendarFields(NamedTuple):
    year: int
    month: int
    day: int
    weekday: int  # Monday == 0


def to_datetime(instant: int) -> datetime:
    return (EPOCH + timedelta(milliseconds=instant)).astimezone(config.LOCAL_TZ)


def from_datetime(moment: datetime) -> int:
    """Naive datetimes are read as local wall-clock time."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=config.LOCAL_TZ)
    return (moment - EPOCH) // _ONE_MS


def to_date(instant: int) -> date:
    return to_datetime(instant).date()


def from_date(day: date, at: time = time()) -> int:
    return from_datetime(datetime.combine(day, at, tzinfo=config.LOCAL_TZ))


def make_instant(year: int, month: int, day: int, at: time = time()) -> int:
    """Build an instant from calendar fields.

    Raises ValueError when ``day`` does not exist in the month; callers that
    want clamping check ``days_in_month`` first.
    """
    return from_date(date(year, month, day), at)


def calendar_fields(instant: int) -> CalendarFields:
    d = to_date(instant)
    return CalendarFields(d.year, d.month, d.day, d.weekday())


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def at_midnight(instant: int) -> int:
    return from_date(to_date(instant))


def next_day(instant: int) -> int:
    """Midnight of the calendar day after ``instant``'s day."""
    return from_date(to_date(instant) + timedelta(days=1))


def is_same_day(first: int, second: int) -> bool:
    return to_date(first) == to_date(second)


def is_in_month(instant: int, month_instant: int) -> bool:
    a, b = to_date(instant), to_date(month_instant)
    return (a.year, a.month) == (b.year, b.month)


def first_day_of_month(instant: int) -> int:
    return from_date(to_date(instant).replace(day=1))


def last_day_of_month(instant: int) -> int:
    d = to_date(instant)
    last = d.replace(day=days_in_month(d.year, d.month))
    return from_date(last, time(23, 59, 59, 999000))


def previous_month(instant: int) -> int:
    return from_datetime(to_datetime(instant) - relativedelta(months=1))


def next_month(instant: int) -> int:
    return from_datetime(to_datetime(instant) + relativedelta(months=1))


def month_view_dates(instant: int) -> list[int]:
    """42 midnights (six weeks) covering the month, starting on a Sunday."""
    first = to_date(instant).replace(day=1)
    # weekday() is Monday-based; the grid starts on Sunday
    start = first - timedelta(days=(first.weekday() + 1) % 7)
    return [from_date(start + timedelta(days=i)) for i in range(42)]


def format_date(instant: int) -> str:
    return to_datetime(instant).strftime("%b %d, %Y")


def format_month_year(instant: int) -> str:
    return to_datetime(instant).strftime("%B %Y")


def format_day_of_month(instant: int) -> str:
    return str(to_date(instant).day)


def format_day_of_week(instant: int) -> str:
    return to_datetime(instant).strftime("%a")
