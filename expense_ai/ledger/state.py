"""
Application State

The only persisted state in the system: the expense store and the
budget configuration. AppState owns both and has an explicit
load / save lifecycle; nothing else reads or writes these keys.
"""

from typing import NamedTuple, Optional

import structlog
from pydantic import ValidationError

from expense_ai.config import get_settings
from expense_ai.ledger.store import ExpenseStore
from expense_ai.models.expense import BudgetConfig
from expense_ai.services.storage import KeyValueStorageInterface


logger = structlog.get_logger(__name__)


class StateLoadReport(NamedTuple):
    expenses_loaded: int
    expenses_skipped: int
    errors: list[str]
    budget_reset: bool


class AppState:
    """Owns the expense store and the budget for one session."""

    def __init__(
        self,
        storage: KeyValueStorageInterface,
        expenses_key: Optional[str] = None,
        budget_key: Optional[str] = None,
    ):
        storage_settings = get_settings().storage
        self._storage = storage
        self._budget_key = budget_key or storage_settings.budget_key
        self.expenses = ExpenseStore(storage, expenses_key or storage_settings.expenses_key)
        self._budget = BudgetConfig()

    @property
    def budget(self) -> BudgetConfig:
        return self._budget

    @property
    def budget_key(self) -> str:
        return self._budget_key

    def load(self) -> StateLoadReport:
        """
        Load expenses and budget from storage.

        Absent keys load as an empty store and the default budget. A
        stored budget that no longer validates is replaced by the
        default and reported.

        Raises:
            StorageReadError: If a stored blob cannot be read at all
        """
        report = self.expenses.load()

        budget_reset = False
        raw_budget = self._storage.read(self._budget_key)
        if raw_budget is None:
            self._budget = BudgetConfig()
        else:
            try:
                self._budget = BudgetConfig.model_validate(raw_budget)
            except ValidationError as e:
                logger.warning("budget_reset_to_default", key=self._budget_key, errors=e.error_count())
                self._budget = BudgetConfig()
                budget_reset = True

        return StateLoadReport(
            expenses_loaded=report.loaded,
            expenses_skipped=report.skipped,
            errors=report.errors,
            budget_reset=budget_reset,
        )

    def save_budget(self, budget: BudgetConfig) -> None:
        """
        Replace the budget and persist it.

        Raises:
            StorageWriteError: If the write fails (the new budget still applies)
        """
        self._budget = budget
        self._storage.write(self._budget_key, budget.model_dump(mode="json"))

    def save(self) -> None:
        """Write both keys."""
        self.expenses.save()
        self._storage.write(self._budget_key, self._budget.model_dump(mode="json"))
