import cmd
from datetime import date
from typing import Optional

from budgetcycle.instants import (
    NEVER, format_date, format_day_of_month, format_month_year, from_date, month_view_dates, is_in_month,
)
from budgetcycle.logic import (
    create_budget,
    delete_budget,
    get_budget,
    get_budgets_for_user,
    add_expense,
    get_expenses_for_budget,
    budget_summary,
    reset_markers,
)
from budgetcycle.periods import Period
from budgetcycle.storage import save_data, load_data, list_save_files


def _parse_day(text: str) -> int:
    try:
        return from_date(date.fromisoformat(text))
    except ValueError:
        raise ValueError("Date must be in YYYY-MM-DD format") from None


def _today() -> int:
    return from_date(date.today())


def _describe_reset(instant: int) -> str:
    return "never" if instant == NEVER else format_date(instant)


class BudgetCLI(cmd.Cmd):
    prompt = "(budgets) "

    def __init__(self, user_id: str = "local"):
        super().__init__()
        self.intro = "Welcome to Budget Cycle. Type 'help' for commands."
        self.user_id = user_id

    # ===== BUDGETS =====
    def do_budget(self, arg):
        """Manage budgets: budget <add|list|delete> ...
        budget add <amount> <weekly|monthly> [YYYY-MM-DD] [--until YYYY-MM-DD] [--once] [--name NAME]
        budget list
        budget delete <ID>
        """
        args = arg.split()
        if not args:
            print(self.do_budget.__doc__)
            return

        try:
            if args[0] == "add":
                opts = self._parse_budget_args(args[1:])
                budget = create_budget(user_id=self.user_id, **opts)
                confirmation = f"✓ Added {budget.period.value} budget {budget.id[:8]} of ${budget.amount:.2f}"
                if not budget.repeating:
                    confirmation += " (one-off)"
                print(confirmation)
            elif args[0] == "list":
                mine = get_budgets_for_user(self.user_id)
                if not mine:
                    print("No budgets defined")
                    return
                print("\nBudgets:")
                for b in mine:
                    print(f"  {b.id[:8]} {b.name}: ${b.amount:.2f} {b.period.value} "
                          f"from {format_date(b.start_date)}"
                          f"{' until ' + format_date(b.end_date) if b.end_date is not None else ''}")
            elif args[0] == "delete":
                budget = self._lookup(args[1])
                delete_budget(budget.id)
                print(f"✓ Deleted budget: {budget.name}")
            else:
                print(self.do_budget.__doc__)
        except (ValueError, LookupError, IndexError) as e:
            print(f"Error: {e}")

    def do_spend(self, arg):
        """Record an expense: spend <budget ID> <amount> [YYYY-MM-DD] [--desc "description"]"""
        args = arg.split()
        try:
            if len(args) < 2:
                raise ValueError("Missing required arguments (budget and amount)")
            budget = self._lookup(args[0])
            amount = float(args[1])
            when = _today()
            desc = ""
            rest = args[2:]
            if rest and not rest[0].startswith("--"):
                when = _parse_day(rest.pop(0))
            if rest and rest[0] == "--desc":
                desc = " ".join(rest[1:])
            add_expense(budget.id, amount, when, desc)
            print(f"✓ Spent ${amount:.2f} from {budget.name} on {format_date(when)}")
        except (ValueError, LookupError) as e:
            print(f"Invalid input: {e}")

    def do_expenses(self, arg):
        """List a budget's expenses, newest first: expenses <budget ID>"""
        try:
            budget = self._lookup(arg.strip())
        except LookupError as e:
            print(f"Error: {e}")
            return
        items = get_expenses_for_budget(budget.id)
        if not items:
            print("No expenses recorded")
        for e in items:
            print(f"  {format_date(e.date)}  ${e.amount:.2f}  {e.description}")

    # ===== RECURRENCE =====
    def do_next(self, arg):
        """Show the next reset: next <budget ID> [YYYY-MM-DD]"""
        args = arg.split()
        try:
            budget = self._lookup(args[0])
            since = _parse_day(args[1]) if len(args) > 1 else _today()
            print(f"Next reset: {_describe_reset(budget.next_reset(since))}")
        except (ValueError, LookupError, IndexError) as e:
            print(f"Error: {e}")

    def do_resets(self, arg):
        """List occurrences in a range: resets <budget ID> <from YYYY-MM-DD> <to YYYY-MM-DD>"""
        args = arg.split()
        try:
            if len(args) < 3:
                raise ValueError("Usage: resets <budget ID> <from> <to>")
            budget = self._lookup(args[0])
            occurrences = budget.occurrences_in_range(_parse_day(args[1]), _parse_day(args[2]))
            if not occurrences:
                print("No occurrences in range")
            for o in occurrences:
                print(f"  {format_date(o)}")
        except (ValueError, LookupError) as e:
            print(f"Error: {e}")

    def do_summary(self, arg):
        """Spending against a budget: summary <budget ID> [--all]"""
        args = arg.split()
        try:
            budget = self._lookup(args[0])
            now = None if "--all" in args else _today()
            result = budget_summary(budget.id, now)
        except (ValueError, LookupError, IndexError) as e:
            print(f"Error: {e}")
            return

        print(f"\n{' ' + budget.name + ' ':-^50}")
        if result["period_start"] is not None:
            print(f"Period: {format_date(result['period_start'])} to {_describe_reset(result['next_reset'])}")
        print(f"  Budget:    ${budget.amount:.2f}")
        print(f"  Spent:     ${result['total_spent']:.2f} ({result['percent_used']:.0f}%)")
        print(f"  Remaining: ${result['remaining']:.2f}")
        if result["is_over_budget"]:
            print("\nWarning: over budget")

    def do_calendar(self, arg):
        """Show a month with its reset days: calendar [YYYY-MM-DD]"""
        try:
            month = _parse_day(arg.strip()) if arg.strip() else _today()
        except ValueError as e:
            print(f"Error: {e}")
            return

        markers = reset_markers(self.user_id, month)
        marked = {reset for _, reset in markers}
        print(f"\n{format_month_year(month):^28}")
        print(" Su  Mo  Tu  We  Th  Fr  Sa")
        cells = []
        for day in month_view_dates(month):
            if not is_in_month(day, month):
                cells.append("    ")
                continue
            cells.append(f"{format_day_of_month(day):>3}{'*' if day in marked else ' '}")
        for week in range(0, len(cells), 7):
            print("".join(cells[week:week + 7]).rstrip())
        for budget, reset in markers:
            print(f"  * {format_date(reset)}: {budget.name} resets")

    # ===== SESSION =====
    def do_user(self, arg):
        """Switch the active user: user <name>"""
        if arg.strip():
            self.user_id = arg.strip()
        print(f"Active user: {self.user_id}")

    def do_save(self, arg):
        """Save current data: save [name=default]"""
        name = arg.strip() or "default"
        if save_data(name):
            print(f"✓ Saved as '{name}'")
        else:
            print("Error saving data")

    def do_load(self, arg):
        """Load saved data: load [name]"""
        saves = list_save_files()
        if not saves:
            print("No save files available")
            return

        if not arg:
            print("Available saves:")
            for i, name in enumerate(saves, 1):
                print(f"{i}. {name}")
            try:
                choice = int(input("Select save: ")) - 1
                name = saves[choice]
            except (ValueError, IndexError):
                print("Invalid selection")
                return
        else:
            name = arg.strip()

        if load_data(name):
            print(f"✓ Loaded '{name}'")
        else:
            print(f"Could not load '{name}'")

    def do_exit(self, arg):
        """Exit the program"""
        print("Goodbye!")
        return True

    # ===== HELPERS =====
    def _lookup(self, prefix: str):
        """Find one of the user's budgets by id or id prefix"""
        exact = get_budget(prefix)
        if exact is not None:
            return exact
        matches = [b for b in get_budgets_for_user(self.user_id) if b.id.startswith(prefix)] if prefix else []
        if len(matches) != 1:
            raise LookupError(f"No unique budget matches '{prefix}'")
        return matches[0]

    @staticmethod
    def _parse_budget_args(args) -> dict:
        """Parse budget add arguments"""
        if len(args) < 2:
            raise ValueError("Missing required arguments (amount and period)")

        result = {
            'amount': float(args[0]),
            'period': Period.parse(args[1]),
            'start_date': _today(),
            'end_date': None,
            'repeating': True,
            'name': "My Budget",
        }

        i = 2
        while i < len(args):
            if args[i] == '--until':
                if i + 1 >= len(args):
                    raise ValueError("Missing date after --until")
                result['end_date'] = _parse_day(args[i + 1])
                i += 2
            elif args[i] == '--once':
                result['repeating'] = False
                i += 1
            elif args[i] == '--name':
                result['name'] = ' '.join(args[i + 1:]) or "My Budget"
                break
            elif args[i].startswith('--'):
                raise ValueError(f"Unknown flag: {args[i]}")
            else:
                result['start_date'] = _parse_day(args[i])
                i += 1

        return result


def run(user_id: Optional[str] = None):
    BudgetCLI(user_id or "local").cmdloop()


if __name__ == "__main__":
    run()
