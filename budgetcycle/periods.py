"""Period policy: where the next calendar-aligned reset falls."""

from __future__ import annotations

from datetime import date
from enum import Enum
from typing import NamedTuple

from dateutil.relativedelta import relativedelta, MO, TU, WE, TH, FR, SA, SU


WEEKDAYS = (MO, TU, WE, TH, FR, SA, SU)


class Candidate(NamedTuple):
    day: date
    first: bool  # first occurrence after the anchor; informational, for logging


class Period(Enum):
    WEEKLY = "weekly"
    MONTHLY = "monthly"

    @classmethod
    def parse(cls, text: str) -> Period:
        try:
            return cls(text.strip().lower())
        except ValueError:
            raise ValueError(f"Unknown period {text!r}, use: weekly/monthly") from None

    @property
    def step(self) -> relativedelta:
        if self is Period.WEEKLY:
            return relativedelta(weeks=1)
        return relativedelta(months=1)

    @property
    def min_days(self) -> int:
        return 7 if self is Period.WEEKLY else 28

    def candidate(self, anchor: date, since: date, first_period: bool) -> Candidate:
        """Next reset day aligned with ``anchor``'s phase.

        ``first_period`` is set by the caller when the reference instant is
        at or before the anchor; the result is then exactly one period after
        the anchor. Otherwise it is the first aligned day strictly after
        ``since``: a day equal to ``since`` counts as already passed.
        """
        if first_period:
            # relativedelta clamps Jan 31 + 1 month to the end of February
            return Candidate(anchor + self.step, True)
        if self is Period.WEEKLY:
            return Candidate(self._next_weekday(anchor, since), False)
        return Candidate(self._next_month_day(anchor, since), False)

    @staticmethod
    def _next_weekday(anchor: date, since: date) -> date:
        return since + relativedelta(days=1, weekday=WEEKDAYS[anchor.weekday()])

    @staticmethod
    def _next_month_day(anchor: date, since: date) -> date:
        # day= is absolute and clamped to the month's length, recomputed
        # for every month
        this_month = since + relativedelta(day=anchor.day)
        if since >= this_month:
            return since + relativedelta(months=1, day=anchor.day)
        return this_month
