"""
Streamlit Frontend for ExpenseAI

Presentation layer only: every number and message shown here comes
from ExpenseTracker.snapshot(), recomputed after each action.

Layout:
1. Stat tiles (total spent, budget used, insight count)
2. Add expense form and receipt upload
3. Spending by category and daily trend charts
4. Insights
5. Expense list with category filter
6. Budget settings in the sidebar
"""

import asyncio

import streamlit as st

from expense_ai.analytics import round_half_up, trend_chart_data
from expense_ai.config import get_settings
from expense_ai.models.expense import ExpenseCategory, InsightKind
from expense_ai.orchestrator import (
    ExpenseTracker,
    IngestionInProgressError,
    create_tracker,
)
from expense_ai.services.storage import StorageError
from expense_ai.validation import BudgetValidationError, ExpenseValidationError, InputValidator


st.set_page_config(
    page_title="ExpenseAI",
    page_icon="💸",
    layout="wide",
)

TREND_PERIODS = {"7 days": 7, "30 days": 30, "90 days": 90}


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_tracker() -> ExpenseTracker:
    """Get or create the tracker (cached for the server process)."""
    return create_tracker()


def show_validation_error(error: Exception, validator: InputValidator) -> None:
    st.error(validator.get_user_friendly_summary(error.result))


def render_budget_sidebar(tracker: ExpenseTracker, validator: InputValidator) -> None:
    st.sidebar.title("💸 ExpenseAI")
    st.sidebar.markdown("---")
    st.sidebar.subheader("🎯 Budget")

    budget = tracker.budget
    with st.sidebar.form("budget_form"):
        monthly = st.text_input(
            "Monthly budget",
            value=str(budget.monthly) if budget.has_monthly_budget else "",
        )
        category_inputs = {}
        for category in (ExpenseCategory.FOOD, ExpenseCategory.TRANSPORT, ExpenseCategory.ENTERTAINMENT):
            limit = budget.limit_for(category)
            category_inputs[category] = st.text_input(
                f"{category.display_name} budget",
                value=str(limit) if limit > 0 else "",
            )
        submitted = st.form_submit_button("Save budget")

    if submitted:
        try:
            outcome = tracker.save_budget(monthly, category_inputs)
        except BudgetValidationError as e:
            show_validation_error(e, validator)
        else:
            if outcome.persisted:
                st.sidebar.success(outcome.message)
            else:
                st.sidebar.warning(outcome.message)


def render_stat_tiles(tracker: ExpenseTracker, snapshot) -> None:
    col1, col2, col3 = st.columns(3)
    col1.metric("Total spent", tracker.format_amount(snapshot.total_spent))
    col2.metric("Budget used", f"{round_half_up(snapshot.budget_used_pct, 1)}%")
    col3.metric("AI insights", snapshot.insight_count)


def render_add_expense(tracker: ExpenseTracker, validator: InputValidator) -> None:
    st.subheader("➕ Add expense")
    with st.form("expense_form", clear_on_submit=True):
        amount = st.text_input("Amount")
        category = st.selectbox(
            "Category",
            options=list(ExpenseCategory),
            format_func=lambda c: c.display_name,
        )
        description = st.text_input("Description")
        submitted = st.form_submit_button("Add expense", type="primary")

    if submitted:
        try:
            outcome = tracker.add_expense(amount, category, description)
        except ExpenseValidationError as e:
            show_validation_error(e, validator)
        else:
            if outcome.persisted:
                st.success(outcome.message)
            else:
                st.warning(outcome.message)


def render_receipt_upload(tracker: ExpenseTracker) -> None:
    st.subheader("🧾 Scan receipt")
    receipt_formats = get_settings().receipts.supported_formats_list
    uploaded_file = st.file_uploader(
        "Drop a receipt photo or PDF",
        type=receipt_formats,
        disabled=tracker.ingestion_in_progress,
    )

    if uploaded_file and st.button("🔍 Process receipt", disabled=tracker.ingestion_in_progress):
        with st.spinner("AI is reading your receipt..."):
            try:
                outcome = run_async(
                    tracker.process_receipt(uploaded_file.name, uploaded_file.getvalue())
                )
            except IngestionInProgressError as e:
                st.info(str(e))
                return

        if not outcome.success:
            st.error(outcome.message)
        elif outcome.persisted:
            st.success(outcome.message)
        else:
            st.warning(outcome.message)


def render_charts(snapshot) -> None:
    col1, col2 = st.columns(2)

    with col1:
        st.subheader("📊 Spending by category")
        if snapshot.category_totals:
            st.bar_chart({
                category.display_name: float(amount)
                for category, amount in snapshot.category_totals.items()
            })
        else:
            st.caption("No expenses yet.")

        for status in snapshot.category_budgets:
            if status.used_pct is None:
                continue
            label = f"{status.category.display_name}: {round_half_up(status.used_pct, 1)}% of budget"
            st.progress(min(float(status.used_pct) / 100, 1.0), text=label)

    with col2:
        st.subheader("📈 Daily spending")
        st.line_chart(
            {"Daily spending": trend_chart_data(snapshot.trend)},
        )
        if snapshot.trend:
            st.caption(f"{snapshot.trend[0].label} to {snapshot.trend[-1].label}")


def render_insights(snapshot) -> None:
    st.subheader("🤖 AI insights")
    if not snapshot.insights:
        st.info("Add some expenses to get AI-powered insights!")
        return

    for insight in snapshot.insights:
        if insight.kind == InsightKind.WARNING:
            st.warning(insight.message)
        elif insight.kind == InsightKind.SUCCESS:
            st.success(insight.message)
        else:
            st.info(insight.message)


def render_expense_list(tracker: ExpenseTracker) -> None:
    st.subheader("📋 Recent expenses")
    choice = st.selectbox(
        "Filter",
        options=["all"] + [c.value for c in ExpenseCategory],
        format_func=lambda v: "All categories" if v == "all" else ExpenseCategory(v).display_name,
    )
    expenses = tracker.filter_expenses(choice)

    if not expenses:
        if choice == "all":
            st.caption("No expenses yet. Add your first expense above!")
        else:
            st.caption("No expenses found for this category.")
        return

    for expense in expenses:
        left, right = st.columns([4, 1])
        source = " • AI Processed" if expense.is_scanned else ""
        left.markdown(
            f"**{expense.description or expense.category_name}**  \n"
            f"{expense.merchant or expense.category_name}{source}"
        )
        right.markdown(
            f"**{tracker.format_amount(expense.amount)}**  \n"
            f"{expense.date.astimezone():%x}"
        )


def main():
    """Main application entry point."""
    try:
        tracker = get_tracker()
    except StorageError as e:
        st.error(f"Could not load your saved expenses: {e}")
        st.stop()

    validator = InputValidator()
    render_budget_sidebar(tracker, validator)

    st.title("💸 ExpenseAI")

    top_left, top_right = st.columns(2)
    with top_left:
        render_add_expense(tracker, validator)
    with top_right:
        render_receipt_upload(tracker)

    period = st.radio("Trend period", list(TREND_PERIODS), horizontal=True)
    snapshot = tracker.snapshot(days=TREND_PERIODS[period])

    st.markdown("---")
    render_stat_tiles(tracker, snapshot)
    render_charts(snapshot)
    render_insights(snapshot)
    st.markdown("---")
    render_expense_list(tracker)


if __name__ == "__main__":
    main()
