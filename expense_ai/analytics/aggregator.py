"""
Expense Aggregation

Pure functions that derive statistics from a sequence of expenses.
Nothing here keeps state between calls; the orchestrator re-runs them
after every mutation.

Days are compared by LOCAL calendar date: two expenses two hours apart
across midnight fall on different days.
"""

from collections import defaultdict
from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional, Sequence, Union

from expense_ai.models.expense import (
    BudgetConfig,
    CategoryBudgetStatus,
    Expense,
    ExpenseCategory,
    TrendPoint,
)


ZERO = Decimal("0")
HUNDRED = Decimal("100")


def local_date(moment: datetime) -> date:
    """Calendar date of a timestamp in the local timezone."""
    if moment.tzinfo is None:
        return moment.date()
    return moment.astimezone().date()


def round_half_up(value: Union[Decimal, float, int], places: int) -> Decimal:
    """Round to `places` decimals with ties away from zero, as shown to users."""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


def _as_local(moment: datetime) -> datetime:
    # Naive datetimes are treated as local so they compare with aware ones
    if moment.tzinfo is None:
        return moment.astimezone()
    return moment


def trend_label(day: date) -> str:
    """Short month/day label, e.g. 'Oct 19'."""
    return f"{day:%b} {day.day}"


def total_spent(expenses: Iterable[Expense]) -> Decimal:
    return sum((e.amount for e in expenses), ZERO)


def category_totals(expenses: Iterable[Expense]) -> dict[ExpenseCategory, Decimal]:
    """
    Sum amounts per category.

    Categories without expenses are absent from the result. Keys appear
    in order of first occurrence in `expenses`.
    """
    totals: dict[ExpenseCategory, Decimal] = {}
    for expense in expenses:
        totals[expense.category] = totals.get(expense.category, ZERO) + expense.amount
    return totals


def trend_series(
    expenses: Iterable[Expense],
    days: int,
    reference_date: Optional[Union[date, datetime]] = None,
) -> list[TrendPoint]:
    """
    Daily totals for the `days` calendar days ending at `reference_date`.

    Always returns exactly `days` points, oldest first, including days
    with no spending.

    Raises:
        ValueError: If days < 1
    """
    if days < 1:
        raise ValueError(f"days must be at least 1, got {days}")

    if reference_date is None:
        end_day = date.today()
    elif isinstance(reference_date, datetime):
        end_day = local_date(reference_date)
    else:
        end_day = reference_date

    start_day = end_day - timedelta(days=days - 1)

    by_day: dict[date, Decimal] = defaultdict(lambda: ZERO)
    for expense in expenses:
        day = local_date(expense.date)
        if start_day <= day <= end_day:
            by_day[day] += expense.amount

    points = []
    for offset in range(days):
        day = start_day + timedelta(days=offset)
        points.append(TrendPoint(day=day, label=trend_label(day), total=by_day.get(day, ZERO)))
    return points


def trend_chart_data(points: Sequence[TrendPoint]) -> dict[date, float]:
    """Trend totals keyed by calendar day, so a chart axis shows real dates."""
    return {point.day: float(point.total) for point in points}


def days_with_expenses(expenses: Iterable[Expense]) -> int:
    """Number of distinct calendar dates with at least one expense."""
    return len({local_date(e.date) for e in expenses})


def top_category(totals: dict[ExpenseCategory, Decimal]) -> Optional[ExpenseCategory]:
    """
    Category with the highest total.

    Ties go to the category that comes first in `totals`; a later
    category only wins with a strictly greater total. Returns None for
    an empty mapping.
    """
    best: Optional[ExpenseCategory] = None
    best_total = ZERO
    for category, amount in totals.items():
        if best is None or amount > best_total:
            best, best_total = category, amount
    return best


def category_share(
    totals: dict[ExpenseCategory, Decimal],
    category: ExpenseCategory,
) -> Optional[Decimal]:
    """Percentage of total spend in `category`; None when nothing was spent."""
    overall = sum(totals.values(), ZERO)
    if overall <= 0:
        return None
    return totals.get(category, ZERO) / overall * HUNDRED


def budget_used_pct(total: Decimal, budget: BudgetConfig) -> Decimal:
    """Share of the monthly budget spent, 0 when no monthly budget is set."""
    if not budget.has_monthly_budget:
        return ZERO
    return total / budget.monthly * HUNDRED


def expenses_since(expenses: Iterable[Expense], since: datetime) -> list[Expense]:
    """Expenses dated at or after `since` (inclusive)."""
    boundary = _as_local(since)
    return [e for e in expenses if e.date >= boundary]


def category_budget_status(
    totals: dict[ExpenseCategory, Decimal],
    budget: BudgetConfig,
) -> list[CategoryBudgetStatus]:
    """
    Spend against per-category thresholds.

    One entry per category that has a threshold or any spending, in
    category declaration order.
    """
    statuses = []
    for category in ExpenseCategory:
        spent = totals.get(category, ZERO)
        limit = budget.limit_for(category)
        if spent <= 0 and limit <= 0:
            continue
        statuses.append(CategoryBudgetStatus(
            category=category,
            spent=spent,
            limit=limit,
            used_pct=spent / limit * HUNDRED if limit > 0 else None,
        ))
    return statuses


def filter_by_category(
    expenses: Sequence[Expense],
    category: Union[ExpenseCategory, str, None],
) -> list[Expense]:
    """Expenses of one category; 'all' or None returns everything."""
    if category is None or category == "all":
        return list(expenses)
    wanted = ExpenseCategory(category)
    return [e for e in expenses if e.category == wanted]
