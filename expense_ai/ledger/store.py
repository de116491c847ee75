"""
Expense Store

Ordered, in-memory collection of expenses, newest first, persisted
through a KeyValueStorageInterface after every mutation.

The store does not recompute totals or insights itself; whoever mutates
it (the orchestrator) is responsible for refreshing derived views.

If a storage write fails, the in-memory change is kept (it stays
authoritative for the session) and the StorageError is raised to the
caller.
"""

from typing import Iterable, Iterator, NamedTuple, Optional, Union

import structlog
from pydantic import ValidationError

from expense_ai.config import get_settings
from expense_ai.models.expense import Expense, ExpenseCategory, expense_id_clock
from expense_ai.services.storage import KeyValueStorageInterface, StorageReadError


logger = structlog.get_logger(__name__)


class LoadReport(NamedTuple):
    loaded: int
    skipped: int
    errors: list[str]


class ExpenseStore:
    """Newest-first expense sequence backed by one storage key."""

    def __init__(
        self,
        storage: KeyValueStorageInterface,
        key: Optional[str] = None,
    ):
        self._storage = storage
        self._key = key or get_settings().storage.expenses_key
        self._expenses: list[Expense] = []

    @property
    def key(self) -> str:
        return self._key

    def __len__(self) -> int:
        return len(self._expenses)

    def __iter__(self) -> Iterator[Expense]:
        return iter(list(self._expenses))

    @property
    def is_empty(self) -> bool:
        return not self._expenses

    def load(self) -> LoadReport:
        """
        Replace in-memory contents with what storage holds.

        Records that no longer validate are skipped and counted; an
        absent key loads as an empty store.

        Raises:
            StorageReadError: If the stored blob cannot be read or is not a list
        """
        raw = self._storage.read(self._key)
        if raw is None:
            self._expenses = []
            return LoadReport(loaded=0, skipped=0, errors=[])

        if not isinstance(raw, list):
            raise StorageReadError(
                self._key,
                f"Expected a list under '{self._key}', found {type(raw).__name__}",
            )

        expenses: list[Expense] = []
        errors: list[str] = []
        for index, item in enumerate(raw):
            try:
                expenses.append(Expense.model_validate(item))
            except ValidationError as e:
                errors.append(f"record {index}: {e.error_count()} validation errors")

        for expense in expenses:
            expense_id_clock.observe(expense.id)

        self._expenses = expenses
        if errors:
            logger.warning("expense_records_skipped", key=self._key, skipped=len(errors))
        return LoadReport(loaded=len(expenses), skipped=len(errors), errors=errors)

    def save(self) -> None:
        """
        Write the full sequence to storage.

        Raises:
            StorageWriteError: If the write fails
        """
        self._storage.write(
            self._key,
            [expense.model_dump(mode="json") for expense in self._expenses],
        )

    def add(self, expense: Expense) -> Expense:
        """Insert at the front and persist."""
        self._expenses.insert(0, expense)
        self.save()
        return expense

    def all(self) -> list[Expense]:
        """The full sequence, newest first (a copy)."""
        return list(self._expenses)

    def by_category(self, category: Union[ExpenseCategory, str]) -> Iterator[Expense]:
        """Lazily yield expenses of one category without touching the store."""
        wanted = ExpenseCategory(category)
        return (e for e in self._expenses if e.category == wanted)

    def replace_all(self, expenses: Iterable[Expense]) -> None:
        """Bulk seed/import; the given order is kept as-is and persisted."""
        self._expenses = list(expenses)
        for expense in self._expenses:
            expense_id_clock.observe(expense.id)
        self.save()
