"""
Insight Engine

Turns the expense list and budget into an ordered list of advisory
messages. Rules are evaluated in a fixed order and each one appends
independently:

1. Budget usage      - exactly one of reducing / monitor / great job
2. Top category      - share of total spend
3. Frequency         - more than 10 expenses in the trailing 7 days
4. Receipt accuracy  - mean confidence of scanned receipts
5. Projection        - projected monthly spend over budget

An empty expense list yields no insights at all, whatever the budget.
"""

from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional, Sequence

from expense_ai.analytics.aggregator import (
    budget_used_pct,
    category_share,
    category_totals,
    days_with_expenses,
    expenses_since,
    round_half_up,
    top_category,
    total_spent,
)
from expense_ai.models.expense import (
    BudgetConfig,
    Expense,
    ExpenseSource,
    Insight,
    InsightKind,
)


# Budget usage thresholds (percent, strict >)
BUDGET_CRITICAL_PCT = Decimal("90")
BUDGET_WARNING_PCT = Decimal("75")

# Frequency rule
FREQUENCY_WINDOW = timedelta(days=7)
FREQUENCY_MAX_EXPENSES = 10

# Projection rule
PROJECTION_MIN_EXPENSES = 5
PROJECTION_DAYS_PER_MONTH = 30


def _budget_insight(pct: Decimal) -> Insight:
    if pct > BUDGET_CRITICAL_PCT:
        return Insight(
            kind=InsightKind.WARNING,
            rule="budget_usage",
            message=f"You've used {round_half_up(pct, 1)}% of your monthly budget. Consider reducing spending.",
        )
    if pct > BUDGET_WARNING_PCT:
        return Insight(
            kind=InsightKind.WARNING,
            rule="budget_usage",
            message=f"You're at {round_half_up(pct, 1)}% of your monthly budget. Monitor your spending closely.",
        )
    return Insight(
        kind=InsightKind.SUCCESS,
        rule="budget_usage",
        message=f"Great job! You're at {round_half_up(pct, 1)}% of your monthly budget.",
    )


def generate_insights(
    expenses: Sequence[Expense],
    budget: BudgetConfig,
    now: Optional[datetime] = None,
    currency_symbol: str = "$",
) -> list[Insight]:
    """
    Generate insights from scratch for the given expenses and budget.

    Args:
        expenses: All expenses, any order
        budget: Current budget configuration
        now: Reference time for the trailing-week rule (defaults to now)
        currency_symbol: Prefix for currency amounts in messages

    Returns:
        Insights in rule order
    """
    if not expenses:
        return []

    now = now or datetime.now().astimezone()
    insights: list[Insight] = []

    totals = category_totals(expenses)
    spent = total_spent(expenses)

    if budget.has_monthly_budget:
        insights.append(_budget_insight(budget_used_pct(spent, budget)))

    top = top_category(totals)
    share = category_share(totals, top) if top is not None else None
    if top is not None and share is not None:
        insights.append(Insight(
            kind=InsightKind.INFO,
            rule="top_category",
            message=f"{top.display_name} accounts for {round_half_up(share, 1)}% of your spending.",
        ))

    recent = expenses_since(expenses, now - FREQUENCY_WINDOW)
    if len(recent) > FREQUENCY_MAX_EXPENSES:
        insights.append(Insight(
            kind=InsightKind.WARNING,
            rule="frequency",
            message=(
                f"You've made {len(recent)} transactions this week. "
                "Consider consolidating purchases."
            ),
        ))

    scanned = [e for e in expenses if e.source == ExpenseSource.OCR]
    if scanned:
        # Scans without a recorded confidence count as 0
        mean_confidence = sum(e.confidence or 0.0 for e in scanned) / len(scanned)
        insights.append(Insight(
            kind=InsightKind.INFO,
            rule="receipt_accuracy",
            message=(
                f"AI processed {len(scanned)} receipts with "
                f"{round_half_up(mean_confidence * 100, 1)}% accuracy."
            ),
        ))

    if len(expenses) >= PROJECTION_MIN_EXPENSES:
        avg_daily = spent / max(1, days_with_expenses(expenses))
        projected = avg_daily * PROJECTION_DAYS_PER_MONTH
        if budget.has_monthly_budget and projected > budget.monthly:
            overage = projected - budget.monthly
            insights.append(Insight(
                kind=InsightKind.WARNING,
                rule="projection",
                message=(
                    "Based on current spending, you may exceed your budget by "
                    f"{currency_symbol}{round_half_up(overage, 2)} this month."
                ),
            ))

    return insights
