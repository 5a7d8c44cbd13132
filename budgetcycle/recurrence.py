"""Recurrence engine for weekly and monthly budgets.

Every function here is a pure function of a budget's ``period``,
``start_date``, ``end_date`` and ``repeating`` fields plus reference
instants. Returned occurrences are local-midnight instants; ``NEVER`` means
the recurrence has ended.

Preconditions (checked when a budget is created, not here): instants are
non-negative and ``end_date`` is not before ``start_date``. Instants after
``LAST_INSTANT`` are past the end of the calendar: nothing recurs there.
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol

from budgetcycle.instants import LAST_INSTANT, NEVER, at_midnight, from_date, next_day, to_date
from budgetcycle.periods import Period


logger = logging.getLogger(__name__)


class Recurring(Protocol):
    period: Period
    start_date: int
    end_date: Optional[int]
    repeating: bool


def _final_instant(budget: Recurring) -> Optional[int]:
    # end dates are day-granular
    if budget.end_date is None or budget.end_date > LAST_INSTANT:
        return None
    return at_midnight(budget.end_date)


def next_reset(budget: Recurring, since: int) -> int:
    """Next reset strictly after the start of ``since``'s day, or NEVER."""
    if not budget.repeating:
        return NEVER
    if since > LAST_INSTANT or budget.start_date > LAST_INSTANT:
        return NEVER

    final = _final_instant(budget)
    if final is not None and since >= final:
        return NEVER

    first_period = since <= budget.start_date
    candidate = budget.period.candidate(to_date(budget.start_date), to_date(since), first_period)
    reset = from_date(candidate.day)
    if candidate.first:
        logger.debug("First %s reset after the anchor", budget.period.value)

    if final is not None and reset > final:
        return final
    return reset


def has_reset(budget: Recurring, now: int, since: Optional[int] = None) -> bool:
    """True when a reset falls between ``since`` (default: ``now``) and ``now``.

    Non-repeating budgets never reset: their single occurrence is not a reset.
    """
    if not budget.repeating:
        return False
    return now >= next_reset(budget, now if since is None else since)


def occurrences_in_range(budget: Recurring, lo: int, hi: int) -> list[int]:
    """All occurrences within ``[lo, hi]``, ascending, the anchor included."""
    if budget.start_date > LAST_INSTANT:
        return []
    hi = min(hi, LAST_INSTANT)
    anchor = at_midnight(budget.start_date)
    if not budget.repeating:
        return [anchor] if lo <= anchor <= hi else []

    found = []
    cursor = anchor
    iterations = 0
    while cursor <= hi:
        iterations += 1
        if cursor >= lo:
            found.append(cursor)
        # from the next day, so the cursor itself is never re-derived
        following = next_reset(budget, next_day(cursor))
        if following == NEVER:
            break
        cursor = following

    logger.debug("Enumerated %d occurrences in %d steps (%s)", len(found), iterations, budget.period.value)
    return found


def resets_in_range(budget: Recurring, lo: int, hi: int) -> list[int]:
    """Like occurrences_in_range, without the anchor of a repeating budget."""
    found = occurrences_in_range(budget, lo, hi)
    if budget.repeating and found and found[0] == at_midnight(budget.start_date):
        return found[1:]
    return found


def current_period(budget: Recurring, now: int) -> tuple[Optional[int], int]:
    """(start of the period containing ``now``, next reset after ``now``).

    The start is None when ``now`` precedes the first occurrence.
    """
    if budget.start_date > LAST_INSTANT:
        return None, NEVER
    started = occurrences_in_range(budget, at_midnight(budget.start_date), now)
    return (started[-1] if started else None), next_reset(budget, now)
