"""
Main Orchestrator for ExpenseAI

Ties the components together and defines the user-facing flows:
1. Add expense    (form text -> validate -> store -> persist)
2. Scan receipt   (file -> ingest -> store -> persist)
3. Save budget    (form text -> validate -> replace -> persist)
4. Dashboard      (store + budget -> totals, trend, insights)

The orchestrator enforces the boundaries:
- Invalid input never reaches the store
- A failed receipt scan leaves the store untouched
- Storage failures are reported; the in-memory change still applies
- Every mutation is audited
- Derived views are recomputed from scratch on request
"""

from datetime import datetime, timedelta
from decimal import Decimal
from pathlib import Path
from typing import Any, Mapping, Optional, Union
from uuid import UUID

from expense_ai.analytics import (
    budget_used_pct,
    category_budget_status,
    category_totals,
    filter_by_category,
    generate_insights,
    round_half_up,
    total_spent,
    trend_series,
)
from expense_ai.audit import AuditLogger, create_correlation_id
from expense_ai.config import get_settings
from expense_ai.ledger import AppState, StateLoadReport
from expense_ai.models.expense import (
    ActionOutcome,
    BudgetConfig,
    DashboardSnapshot,
    Expense,
    ExpenseCategory,
    ExpenseSource,
    Insight,
    ReceiptUpload,
)
from expense_ai.services.ocr import (
    ReceiptIngestionError,
    ReceiptScannerInterface,
    SimulatedReceiptScanner,
)
from expense_ai.services.storage import JsonFileStorage, StorageError
from expense_ai.validation import (
    BudgetValidationError,
    ExpenseValidationError,
    InputValidator,
)


class IngestionInProgressError(Exception):
    """A receipt is already being processed for this upload slot."""
    pass


class ExpenseTracker:
    """
    Application façade used by the presentation layer.

    Single writer: all mutations go through this object, one at a time.
    Only one receipt scan may be in flight; a second call while one is
    running raises IngestionInProgressError.
    """

    def __init__(
        self,
        state: AppState,
        scanner: Optional[ReceiptScannerInterface] = None,
        audit_logger: Optional[AuditLogger] = None,
        validator: Optional[InputValidator] = None,
        currency_symbol: Optional[str] = None,
        trend_days: Optional[int] = None,
    ):
        app_settings = get_settings().app
        self._state = state
        self._scanner = scanner or SimulatedReceiptScanner()
        self._audit_logger = audit_logger or AuditLogger()
        self._validator = validator or InputValidator()
        self._currency_symbol = currency_symbol if currency_symbol is not None else app_settings.currency_symbol
        self._trend_days = trend_days or app_settings.trend_days
        self._ingesting = False

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    @property
    def state(self) -> AppState:
        return self._state

    @property
    def audit_logger(self) -> AuditLogger:
        return self._audit_logger

    @property
    def expenses(self) -> list[Expense]:
        return self._state.expenses.all()

    @property
    def budget(self) -> BudgetConfig:
        return self._state.budget

    @property
    def ingestion_in_progress(self) -> bool:
        return self._ingesting

    def format_amount(self, amount: Decimal) -> str:
        return f"{self._currency_symbol}{round_half_up(amount, 2):,}"

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def startup(
        self,
        seed_sample_data: Optional[bool] = None,
        now: Optional[datetime] = None,
    ) -> StateLoadReport:
        """
        Load persisted state and optionally seed sample data.

        Raises:
            StorageReadError: If stored data exists but cannot be read
        """
        try:
            report = self._state.load()
        except StorageError as e:
            self._audit_logger.log_error(
                error_type="storage_read_failed",
                error_message=str(e),
                details={"key": e.key},
            )
            raise

        self._audit_logger.log_expenses_loaded(report.expenses_loaded, report.expenses_skipped)
        if report.expenses_skipped:
            self._audit_logger.log_records_skipped(
                self._state.expenses.key,
                report.expenses_skipped,
                report.errors,
            )

        if seed_sample_data is None:
            seed_sample_data = get_settings().app.load_sample_data
        if seed_sample_data:
            self.load_sample_data(now=now)

        return report

    def load_sample_data(self, now: Optional[datetime] = None) -> bool:
        """
        Seed three sample expenses (1, 2 and 3 days ago) into an empty store.

        Returns:
            True if the store was seeded
        """
        if not self._state.expenses.is_empty:
            return False

        now = now or datetime.now().astimezone()

        def days_ago(n: int) -> datetime:
            return now - timedelta(days=n)

        def id_for(moment: datetime) -> int:
            return int(moment.timestamp() * 1000)

        samples = [
            Expense(
                id=id_for(days_ago(1)),
                amount=Decimal("45.67"),
                category=ExpenseCategory.FOOD,
                description="Lunch at downtown cafe",
                date=days_ago(1),
            ),
            Expense(
                id=id_for(days_ago(2)),
                amount=Decimal("89.99"),
                category=ExpenseCategory.SHOPPING,
                description="Weekly groceries",
                date=days_ago(2),
                source=ExpenseSource.OCR,
                confidence=0.97,
                merchant="Whole Foods",
            ),
            Expense(
                id=id_for(days_ago(3)),
                amount=Decimal("25.00"),
                category=ExpenseCategory.TRANSPORT,
                description="Gas station fill-up",
                date=days_ago(3),
            ),
        ]

        try:
            self._state.expenses.replace_all(samples)
        except StorageError as e:
            self._audit_logger.log_storage_write_failed(key=e.key, error_message=str(e))
        self._audit_logger.log_expenses_replaced(len(samples))
        return True

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def _store_expense(
        self,
        expense: Expense,
        success_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> ActionOutcome:
        persisted = True
        message = success_message
        try:
            self._state.expenses.add(expense)
        except StorageError as e:
            persisted = False
            message = (
                f"{success_message} It could not be saved to storage and "
                f"will be lost when the app closes ({e})."
            )
            self._audit_logger.log_storage_write_failed(
                key=e.key,
                error_message=str(e),
                correlation_id=correlation_id,
            )

        self._audit_logger.log_expense_added(
            expense_id=expense.id,
            amount=str(expense.amount),
            category=expense.category.value,
            source=expense.source.value,
            correlation_id=correlation_id,
        )
        return ActionOutcome(
            success=True,
            message=message,
            expense=expense,
            persisted=persisted,
            correlation_id=correlation_id,
        )

    def add_expense(
        self,
        amount: Any,
        category: Union[ExpenseCategory, str, None],
        description: Optional[str],
        when: Optional[datetime] = None,
    ) -> ActionOutcome:
        """
        Add a manual expense from raw form values.

        Raises:
            ExpenseValidationError: If the input is invalid (nothing is stored)
        """
        try:
            expense = self._validator.build_expense(amount, category, description, when=when)
        except ExpenseValidationError as e:
            self._audit_logger.log_validation_failed(
                "expense",
                [i.model_dump() for i in e.result.issues],
            )
            raise

        return self._store_expense(expense, "Expense added successfully!")

    async def process_receipt(self, filename: str, content: bytes) -> ActionOutcome:
        """
        Scan a receipt and add the resulting expense.

        Either exactly one expense is added, or (on a failed scan) none
        and the outcome carries the error message.

        Raises:
            IngestionInProgressError: If another scan is still running
        """
        if self._ingesting:
            raise IngestionInProgressError(
                "A receipt is already being processed. Please wait for it to finish."
            )

        self._ingesting = True
        correlation_id = create_correlation_id()
        try:
            upload = ReceiptUpload(
                filename=filename or "unnamed",
                size_bytes=len(content) if content is not None else 0,
            )
            self._audit_logger.log_receipt_uploaded(
                upload_id=upload.upload_id,
                filename=upload.filename,
                size_bytes=upload.size_bytes,
                correlation_id=correlation_id,
            )

            try:
                expense = await self._scanner.ingest(filename, content)
            except ReceiptIngestionError as e:
                self._audit_logger.log_receipt_failed(
                    filename=upload.filename,
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
                return ActionOutcome(
                    success=False,
                    message=f"Receipt could not be processed: {e}",
                    correlation_id=correlation_id,
                )
            except Exception as e:
                self._audit_logger.log_error(
                    error_type="receipt_scanner_error",
                    error_message=str(e),
                    details={"filename": upload.filename},
                    correlation_id=correlation_id,
                )
                raise
        finally:
            self._ingesting = False

        outcome = self._store_expense(
            expense,
            "Receipt processed successfully!",
            correlation_id=correlation_id,
        )
        self._audit_logger.log_receipt_processed(
            upload_id=upload.upload_id,
            expense_id=expense.id,
            confidence=expense.confidence or 0.0,
            correlation_id=correlation_id,
        )
        return outcome

    def save_budget(
        self,
        monthly: Any,
        categories: Optional[Mapping[Union[ExpenseCategory, str], Any]] = None,
    ) -> ActionOutcome:
        """
        Replace the budget from raw form values.

        Raises:
            BudgetValidationError: If the input is invalid (budget unchanged)
        """
        try:
            budget = self._validator.build_budget(monthly, categories)
        except BudgetValidationError as e:
            self._audit_logger.log_validation_failed(
                "budget",
                [i.model_dump() for i in e.result.issues],
            )
            raise

        persisted = True
        message = "Budget updated successfully!"
        try:
            self._state.save_budget(budget)
        except StorageError as e:
            persisted = False
            message = (
                "Budget updated for this session, but it could not be saved "
                f"to storage ({e})."
            )
            self._audit_logger.log_storage_write_failed(key=e.key, error_message=str(e))

        self._audit_logger.log_budget_saved(
            monthly=str(budget.monthly),
            categories={c.value: str(v) for c, v in budget.categories.items()},
        )
        return ActionOutcome(success=True, message=message, persisted=persisted)

    # -------------------------------------------------------------------------
    # Derived views
    # -------------------------------------------------------------------------

    def filter_expenses(self, category: Union[ExpenseCategory, str, None] = "all") -> list[Expense]:
        """Expenses of one category, or all of them for 'all'."""
        return filter_by_category(self._state.expenses.all(), category)

    def insights(self, now: Optional[datetime] = None) -> list[Insight]:
        return generate_insights(
            self._state.expenses.all(),
            self._state.budget,
            now=now,
            currency_symbol=self._currency_symbol,
        )

    def snapshot(
        self,
        days: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> DashboardSnapshot:
        """Recompute every derived view for the presentation layer."""
        now = now or datetime.now().astimezone()
        expenses = self._state.expenses.all()
        budget = self._state.budget
        totals = category_totals(expenses)
        spent = total_spent(expenses)

        return DashboardSnapshot(
            generated_at=now,
            total_spent=spent,
            budget_used_pct=budget_used_pct(spent, budget),
            expense_count=len(expenses),
            category_totals=totals,
            trend=trend_series(expenses, days or self._trend_days, now),
            category_budgets=category_budget_status(totals, budget),
            insights=generate_insights(
                expenses,
                budget,
                now=now,
                currency_symbol=self._currency_symbol,
            ),
        )


def create_tracker(
    data_dir: Optional[Path] = None,
    scanner: Optional[ReceiptScannerInterface] = None,
    load: bool = True,
) -> ExpenseTracker:
    """
    Factory function to create a tracker backed by JSON files.

    Args:
        data_dir: Directory for the storage files (defaults to settings)
        scanner: Receipt scanner (defaults to the simulated scanner)
        load: Whether to load persisted state (and seed sample data)

    Returns:
        A ready-to-use ExpenseTracker
    """
    storage = JsonFileStorage(data_dir)
    tracker = ExpenseTracker(
        state=AppState(storage),
        scanner=scanner,
        audit_logger=AuditLogger(),
    )
    if load:
        tracker.startup()
    return tracker
