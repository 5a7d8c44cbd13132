from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional
from uuid import uuid4

from budgetcycle import recurrence
from budgetcycle.instants import LAST_INSTANT
from budgetcycle.periods import Period


def _new_id() -> str:
    return uuid4().hex


@dataclass(frozen=True)
class BudgetCategory:
    name: str
    amount: float
    color: int = 0
    id: str = field(default_factory=_new_id)


@dataclass(frozen=True)
class Budget:
    user_id: str
    amount: float
    period: Period
    start_date: int
    end_date: Optional[int] = None
    repeating: bool = True
    name: str = "My Budget"
    categories: tuple[BudgetCategory, ...] = ()
    id: str = field(default_factory=_new_id)

    def next_reset(self, since: int) -> int:
        return recurrence.next_reset(self, since)

    def has_reset(self, now: int, since: Optional[int] = None) -> bool:
        return recurrence.has_reset(self, now, since)

    def occurrences_in_range(self, lo: int, hi: int) -> list[int]:
        return recurrence.occurrences_in_range(self, lo, hi)

    def resets_in_range(self, lo: int, hi: int) -> list[int]:
        return recurrence.resets_in_range(self, lo, hi)

    def current_period(self, now: int) -> tuple[Optional[int], int]:
        return recurrence.current_period(self, now)


@dataclass(frozen=True)
class Expense:
    budget_id: str
    amount: float
    date: int
    description: str = ""
    id: str = field(default_factory=_new_id)


def validate_budget(budget: Budget) -> None:
    """Raise ValueError for budgets the recurrence engine cannot take."""
    if budget.amount <= 0:
        raise ValueError("Budget amount must be positive")
    if budget.start_date < 0:
        raise ValueError("Start date must not be before the epoch")
    if budget.start_date > LAST_INSTANT:
        raise ValueError("Start date is past the end of the calendar")
    if budget.end_date is not None and budget.end_date < budget.start_date:
        raise ValueError("End date must not be before the start date")


budgets: list[Budget] = []
expenses: list[Expense] = []
