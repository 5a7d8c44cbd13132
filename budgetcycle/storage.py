import json
import logging
from datetime import date
from pathlib import Path
from typing import Optional

from budgetcycle import config
from budgetcycle.models import Budget, BudgetCategory, Expense, budgets, expenses, validate_budget
from budgetcycle.periods import Period


logger = logging.getLogger(__name__)

FORMAT_VERSION = "1.0"


def _saves_dir(saves_dir: Optional[Path]) -> Path:
    return Path(saves_dir) if saves_dir is not None else config.SAVES_DIR


def list_save_files(saves_dir: Optional[Path] = None):
    return sorted(f.stem for f in _saves_dir(saves_dir).glob("*.json"))


def _budget_to_dict(b: Budget) -> dict:
    return {
        "id": b.id,
        "user_id": b.user_id,
        "name": b.name,
        "amount": b.amount,
        "period": b.period.value,
        "start_date": b.start_date,
        "end_date": b.end_date,
        "repeating": b.repeating,
        "categories": [
            {"id": c.id, "name": c.name, "amount": c.amount, "color": c.color}
            for c in b.categories
        ],
    }


def _budget_from_dict(data: dict) -> Budget:
    return Budget(
        id=data["id"],
        user_id=data["user_id"],
        name=data.get("name", "My Budget"),
        amount=float(data["amount"]),
        period=Period.parse(data["period"]),
        start_date=int(data["start_date"]),
        end_date=int(data["end_date"]) if data.get("end_date") is not None else None,
        repeating=bool(data.get("repeating", True)),
        categories=tuple(
            BudgetCategory(id=c["id"], name=c["name"], amount=float(c["amount"]), color=int(c.get("color", 0)))
            for c in data.get("categories", [])
        ),
    )


def _records(data: dict, key: str) -> list:
    """The dict records stored under ``key``; anything else is skipped."""
    records = data.get(key) or []
    if not isinstance(records, list):
        logger.warning("Ignoring %r: expected a list", key)
        return []
    kept = [r for r in records if isinstance(r, dict)]
    if len(kept) != len(records):
        logger.warning("Skipping %d malformed %s records", len(records) - len(kept), key)
    return kept


def save_data(save_name="default", saves_dir: Optional[Path] = None):
    data = {
        "metadata": {
            "version": FORMAT_VERSION,
            "created": date.today().isoformat(),
            "budget_count": len(budgets),
            "expense_count": len(expenses),
        },
        "budgets": [_budget_to_dict(b) for b in budgets],
        "expenses": [
            {
                "id": e.id,
                "budget_id": e.budget_id,
                "amount": e.amount,
                "date": e.date,
                "description": e.description,
            } for e in expenses
        ],
    }

    try:
        target_dir = _saves_dir(saves_dir)
        target_dir.mkdir(parents=True, exist_ok=True)
        save_path = target_dir / f"{save_name}.json"
        save_path.write_text(json.dumps(data, indent=2))
    except OSError as e:
        logger.error("Error saving data to %r: %s", save_name, e)
        return False
    logger.info("Saved %d budgets and %d expenses to %r", len(budgets), len(expenses), save_name)
    return True


def load_data(save_name="default", saves_dir: Optional[Path] = None):
    filepath = _saves_dir(saves_dir) / f"{save_name}.json"
    if not filepath.exists():
        logger.warning("Save file %r not found", save_name)
        return False

    try:
        data = json.loads(filepath.read_text())
    except (OSError, json.JSONDecodeError) as e:
        logger.error("Error loading data from %r: %s", save_name, e)
        return False

    if not isinstance(data, dict):
        logger.error("Error loading data from %r: expected an object, got %s", save_name, type(data).__name__)
        return False

    budgets.clear()
    expenses.clear()

    for b_data in _records(data, "budgets"):
        try:
            budget = _budget_from_dict(b_data)
            validate_budget(budget)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Skipping invalid budget %s: %s", b_data.get("id"), e)
            continue
        budgets.append(budget)

    known = {b.id for b in budgets}
    for e_data in _records(data, "expenses"):
        try:
            expense = Expense(
                id=e_data["id"],
                budget_id=e_data["budget_id"],
                amount=float(e_data["amount"]),
                date=int(e_data["date"]),
                description=e_data.get("description", ""),
            )
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Skipping invalid expense %s: %s", e_data.get("id"), e)
            continue
        if expense.budget_id not in known:
            logger.warning("Skipping expense %s of unknown budget %s", expense.id, expense.budget_id)
            continue
        expenses.append(expense)

    logger.info("Loaded %d budgets and %d expenses from %r", len(budgets), len(expenses), save_name)
    return True
