"""
Data Models Package

This package contains all Pydantic models used in ExpenseAI.
All data flowing through the system must conform to these schemas.
"""

from expense_ai.models.expense import (
    ActionOutcome,
    BudgetConfig,
    CategoryBudgetStatus,
    DashboardSnapshot,
    Expense,
    ExpenseCategory,
    ExpenseIdClock,
    ExpenseSource,
    Insight,
    InsightKind,
    ReceiptUpload,
    TrendPoint,
    ValidationIssue,
    ValidationResult,
    expense_id_clock,
)
from expense_ai.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Expense models
    "ActionOutcome",
    "BudgetConfig",
    "CategoryBudgetStatus",
    "DashboardSnapshot",
    "Expense",
    "ExpenseCategory",
    "ExpenseIdClock",
    "ExpenseSource",
    "Insight",
    "InsightKind",
    "ReceiptUpload",
    "TrendPoint",
    "ValidationIssue",
    "ValidationResult",
    "expense_id_clock",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
