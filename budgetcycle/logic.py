import logging
from dataclasses import replace
from typing import Any, Callable, Optional

from budgetcycle.instants import NEVER, at_midnight, first_day_of_month, last_day_of_month
from budgetcycle.models import Budget, BudgetCategory, Expense, budgets, expenses, validate_budget
from budgetcycle.periods import Period


logger = logging.getLogger(__name__)

Listener = Callable[[str, Any], None]

_listeners: list[Listener] = []


class BudgetNotFoundError(LookupError):
    pass


class ExpenseNotFoundError(LookupError):
    pass


def subscribe(listener: Listener) -> Callable[[], None]:
    """Call ``listener(event, payload)`` after every store change."""
    _listeners.append(listener)

    def unsubscribe():
        if listener in _listeners:
            _listeners.remove(listener)

    return unsubscribe


def _notify(event: str, payload: Any) -> None:
    for listener in list(_listeners):
        listener(event, payload)


def create_budget(
        user_id: str,
        name: str,
        amount: float,
        period: Period,
        start_date: int,
        end_date: Optional[int] = None,
        repeating: bool = True,
        categories: tuple[BudgetCategory, ...] = (),
) -> Budget:
    budget = Budget(
        user_id=user_id,
        name=name,
        amount=amount,
        period=period,
        start_date=start_date,
        end_date=end_date,
        repeating=repeating,
        categories=tuple(categories),
    )
    validate_budget(budget)
    budgets.append(budget)
    logger.info("Created %s budget %s for user %s", period.value, budget.id, user_id)
    _notify("budget_created", budget)
    return budget


def get_budgets_for_user(user_id: str) -> list[Budget]:
    return [b for b in budgets if b.user_id == user_id]


def get_budget(budget_id: str) -> Optional[Budget]:
    for b in budgets:
        if b.id == budget_id:
            return b
    return None


def _budget_index(budget_id: str) -> int:
    for i, b in enumerate(budgets):
        if b.id == budget_id:
            return i
    raise BudgetNotFoundError(f"Budget not found: {budget_id}")


def update_budget(budget_id: str, **changes) -> Budget:
    """Replace a budget with a copy carrying ``changes``."""
    index = _budget_index(budget_id)
    updated = replace(budgets[index], **changes)
    validate_budget(updated)
    budgets[index] = updated
    logger.info("Updated budget %s", budget_id)
    _notify("budget_updated", updated)
    return updated


def delete_budget(budget_id: str) -> Budget:
    index = _budget_index(budget_id)
    removed = budgets.pop(index)
    expenses[:] = [e for e in expenses if e.budget_id != budget_id]
    logger.info("Deleted budget %s and its expenses", budget_id)
    _notify("budget_deleted", removed)
    return removed


def add_expense(budget_id: str, amount: float, date: int, description: str = "") -> Expense:
    _budget_index(budget_id)
    expense = Expense(budget_id=budget_id, amount=amount, date=date, description=description)
    expenses.append(expense)
    _notify("expense_added", expense)
    return expense


def get_expenses_for_budget(budget_id: str) -> list[Expense]:
    return sorted((e for e in expenses if e.budget_id == budget_id), key=lambda e: e.date, reverse=True)


def _expense_index(expense_id: str) -> int:
    for i, e in enumerate(expenses):
        if e.id == expense_id:
            return i
    raise ExpenseNotFoundError(f"Expense not found: {expense_id}")


def update_expense(expense_id: str, amount: float, description: str) -> Expense:
    index = _expense_index(expense_id)
    updated = replace(expenses[index], amount=amount, description=description)
    expenses[index] = updated
    _notify("expense_updated", updated)
    return updated


def delete_expense(expense_id: str) -> Expense:
    removed = expenses.pop(_expense_index(expense_id))
    _notify("expense_deleted", removed)
    return removed


def get_total_expense(budget_id: str, lo: Optional[int] = None, hi: Optional[int] = None) -> float:
    return round(sum(
        e.amount for e in expenses
        if e.budget_id == budget_id
        and (lo is None or e.date >= lo)
        and (hi is None or e.date < hi)
    ), 2)


def budget_summary(budget_id: str, now: Optional[int] = None) -> dict:
    """Spending against a budget.

    With ``now`` the totals only cover the period containing ``now``;
    without it every expense of the budget counts.
    """
    budget = get_budget(budget_id)
    if budget is None:
        raise BudgetNotFoundError(f"Budget not found: {budget_id}")

    period_start = next_reset = None
    if now is not None:
        period_start, next_reset = budget.current_period(now)
        spent = get_total_expense(
            budget_id,
            lo=at_midnight(budget.start_date) if period_start is None else period_start,
            hi=None if next_reset == NEVER else next_reset,
        )
    else:
        spent = get_total_expense(budget_id)

    return {
        "budget": budget,
        "total_spent": spent,
        "remaining": round(budget.amount - spent, 2),
        "percent_used": (spent / budget.amount) * 100 if budget.amount > 0 else 0.0,
        "is_over_budget": spent > budget.amount,
        "period_start": period_start,
        "next_reset": next_reset,
    }


def reset_markers(user_id: str, month_instant: int) -> list[tuple[Budget, int]]:
    """(budget, reset) pairs for every reset shown in a month's calendar."""
    lo, hi = first_day_of_month(month_instant), last_day_of_month(month_instant)
    markers = [
        (budget, reset)
        for budget in get_budgets_for_user(user_id)
        for reset in budget.occurrences_in_range(lo, hi)
    ]
    markers.sort(key=lambda pair: pair[1])
    return markers
