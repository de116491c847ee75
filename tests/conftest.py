"""Shared fixtures: in-memory storage, a fixed clock and expense factories."""

import random
from datetime import datetime
from decimal import Decimal
from io import BytesIO

import pytest
from PIL import Image

from expense_ai.audit import AuditLogger
from expense_ai.ledger import AppState
from expense_ai.models.expense import Expense, ExpenseCategory, ExpenseSource
from expense_ai.orchestrator import ExpenseTracker
from expense_ai.services.ocr import SimulatedReceiptScanner
from expense_ai.services.storage import InMemoryStorage, StorageWriteError


class FailingStorage(InMemoryStorage):
    """In-memory storage whose writes fail while `fail_writes` is set."""

    def __init__(self, initial=None):
        self.fail_writes = False
        super().__init__(initial)
        self.fail_writes = True

    def write(self, key, value):
        if self.fail_writes:
            raise StorageWriteError(key, "disk full")
        super().write(key, value)


@pytest.fixture
def now() -> datetime:
    """Noon local time, far from midnight."""
    return datetime(2024, 6, 15, 12, 0).astimezone()


@pytest.fixture
def make_expense(now):
    def factory(
        amount="10.00",
        category=ExpenseCategory.FOOD,
        description="Test expense",
        when=None,
        source=ExpenseSource.MANUAL,
        confidence=None,
        merchant=None,
    ) -> Expense:
        return Expense(
            amount=Decimal(amount),
            category=category,
            description=description,
            date=when or now,
            source=source,
            confidence=confidence,
            merchant=merchant,
        )
    return factory


@pytest.fixture
def receipt_png() -> bytes:
    """A small but valid PNG image."""
    buffer = BytesIO()
    Image.new("RGB", (40, 60), "white").save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def failing_storage() -> FailingStorage:
    return FailingStorage()


@pytest.fixture
def state(storage) -> AppState:
    return AppState(storage, expenses_key="expenses", budget_key="budget")


@pytest.fixture
def instant_scanner() -> SimulatedReceiptScanner:
    return SimulatedReceiptScanner(
        rng=random.Random(42),
        min_delay_seconds=0,
        max_delay_seconds=0,
    )


@pytest.fixture
def tracker(state, instant_scanner) -> ExpenseTracker:
    return ExpenseTracker(
        state=state,
        scanner=instant_scanner,
        audit_logger=AuditLogger(),
        currency_symbol="$",
        trend_days=7,
    )
