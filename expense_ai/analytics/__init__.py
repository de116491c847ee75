"""Spending aggregation and insight generation."""

from expense_ai.analytics.aggregator import (
    budget_used_pct,
    category_budget_status,
    category_share,
    category_totals,
    days_with_expenses,
    expenses_since,
    filter_by_category,
    local_date,
    round_half_up,
    top_category,
    total_spent,
    trend_chart_data,
    trend_label,
    trend_series,
)
from expense_ai.analytics.insights import generate_insights

__all__ = [
    "budget_used_pct",
    "category_budget_status",
    "category_share",
    "category_totals",
    "days_with_expenses",
    "expenses_since",
    "filter_by_category",
    "generate_insights",
    "local_date",
    "round_half_up",
    "top_category",
    "total_spent",
    "trend_chart_data",
    "trend_label",
    "trend_series",
]
