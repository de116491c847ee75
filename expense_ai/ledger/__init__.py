"""Persisted application state: expense store and budget."""

from expense_ai.ledger.state import AppState, StateLoadReport
from expense_ai.ledger.store import ExpenseStore, LoadReport

__all__ = ["AppState", "ExpenseStore", "LoadReport", "StateLoadReport"]
