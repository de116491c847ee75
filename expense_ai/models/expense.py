"""
Core Data Models for ExpenseAI

These models define the strict schemas for all data flowing through the system.
They are designed to:
1. Enforce type safety at runtime
2. Provide clear validation error messages
3. Be serializable for storage and logging
4. Support the audit trail

Amounts are Decimal throughout. Percentages and currency values are
formatted at presentation time and never stored rounded.
"""

import time
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Optional
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class ExpenseCategory(str, Enum):
    """
    Supported expense categories.

    Category keys are never free text; anything outside this set is
    rejected at the input boundary.
    """
    FOOD = "food"
    TRANSPORT = "transport"
    UTILITIES = "utilities"
    ENTERTAINMENT = "entertainment"
    HEALTHCARE = "healthcare"
    SHOPPING = "shopping"
    OTHER = "other"

    @property
    def display_name(self) -> str:
        return _CATEGORY_DISPLAY_NAMES[self]

    @classmethod
    def display_name_for(cls, value: str) -> str:
        """Display name for a raw category key; unknown keys read as 'Other'."""
        try:
            return cls(value).display_name
        except ValueError:
            return cls.OTHER.display_name


_CATEGORY_DISPLAY_NAMES = {
    ExpenseCategory.FOOD: "Food & Dining",
    ExpenseCategory.TRANSPORT: "Transportation",
    ExpenseCategory.UTILITIES: "Utilities",
    ExpenseCategory.ENTERTAINMENT: "Entertainment",
    ExpenseCategory.HEALTHCARE: "Healthcare",
    ExpenseCategory.SHOPPING: "Shopping",
    ExpenseCategory.OTHER: "Other",
}


class ExpenseSource(str, Enum):
    """How an expense entered the system."""
    MANUAL = "manual"  # Typed in by the user
    OCR = "ocr"        # Produced by the receipt scanner


class InsightKind(str, Enum):
    """Presentation tone of an insight."""
    WARNING = "warning"
    SUCCESS = "success"
    INFO = "info"


# =============================================================================
# IDENTIFIERS
# =============================================================================

class ExpenseIdClock:
    """
    Issues expense ids derived from the creation time in milliseconds.

    Ids are strictly increasing within a process: two expenses created in
    the same millisecond still get distinct ids.
    """

    def __init__(self):
        self._last_issued = 0

    def next_id(self) -> int:
        candidate = time.time_ns() // 1_000_000
        self._last_issued = max(candidate, self._last_issued + 1)
        return self._last_issued

    def observe(self, expense_id: int) -> None:
        """Make sure future ids sort after an id loaded from storage."""
        if expense_id > self._last_issued:
            self._last_issued = expense_id


expense_id_clock = ExpenseIdClock()


def _now_local() -> datetime:
    return datetime.now().astimezone()


# =============================================================================
# CORE EXPENSE MODEL
# =============================================================================

class Expense(BaseModel):
    """
    A single dated, categorized monetary outflow.

    Expenses are immutable once created. They are inserted at the head
    of the store (newest first) and only ever leave it through a bulk
    replace.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: int = Field(
        default_factory=expense_id_clock.next_id,
        ge=0,
        description="Unique monotonic identifier (creation time in ms)"
    )
    amount: Annotated[
        Decimal,
        Field(gt=0, decimal_places=2, description="Expense amount (required, positive)")
    ]
    category: ExpenseCategory = Field(
        ...,
        description="Expense category (required)"
    )
    description: str = Field(
        default="",
        max_length=500,
        description="Free-text description"
    )
    date: datetime = Field(
        default_factory=_now_local,
        description="When the expense happened"
    )
    source: ExpenseSource = Field(
        default=ExpenseSource.MANUAL,
        description="Manual entry or receipt scan"
    )
    merchant: Optional[str] = Field(
        default=None,
        max_length=200,
        description="Merchant name, usually only known for scanned receipts"
    )
    confidence: Optional[float] = Field(
        default=None,
        ge=0.0,
        le=1.0,
        description="Extraction confidence (0-1), receipt scans only"
    )

    @field_validator('date')
    @classmethod
    def assume_local_time(cls, v: datetime) -> datetime:
        """Naive timestamps are taken to be in local time."""
        if v.tzinfo is None:
            return v.astimezone()
        return v

    @model_validator(mode='after')
    def validate_confidence_source(self) -> 'Expense':
        if self.confidence is not None and self.source != ExpenseSource.OCR:
            raise ValueError("Confidence is only valid for receipt-scanned expenses")
        return self

    @property
    def category_name(self) -> str:
        return self.category.display_name

    @property
    def is_scanned(self) -> bool:
        return self.source == ExpenseSource.OCR


class BudgetConfig(BaseModel):
    """
    Monthly ceiling plus optional per-category ceilings.

    Replaced wholesale on save. A monthly value of 0 means
    "no budget configured".
    """
    model_config = ConfigDict(frozen=True)

    monthly: Annotated[
        Decimal,
        Field(ge=0, description="Monthly budget (0 = not set)")
    ] = Decimal("0")
    categories: dict[ExpenseCategory, Annotated[Decimal, Field(ge=0)]] = Field(
        default_factory=dict,
        description="Per-category monthly thresholds"
    )

    def limit_for(self, category: ExpenseCategory) -> Decimal:
        """Threshold for a category, 0 when none is configured."""
        return self.categories.get(category, Decimal("0"))

    @property
    def has_monthly_budget(self) -> bool:
        return self.monthly > 0


# =============================================================================
# DERIVED VIEWS - never persisted
# =============================================================================

class Insight(BaseModel):
    """A derived advisory message generated from aggregate spending rules."""
    model_config = ConfigDict(frozen=True)

    kind: InsightKind
    message: str
    rule: str = Field(
        ...,
        description="Name of the rule that produced this insight"
    )


class TrendPoint(BaseModel):
    """Total spend for one calendar day of the trend chart."""
    model_config = ConfigDict(frozen=True)

    day: date
    label: str = Field(
        ...,
        description="Short month/day label, e.g. 'Oct 19'"
    )
    total: Decimal = Decimal("0")


class CategoryBudgetStatus(BaseModel):
    """Spend against the configured threshold for one category."""
    model_config = ConfigDict(frozen=True)

    category: ExpenseCategory
    spent: Decimal
    limit: Decimal
    used_pct: Optional[Decimal] = Field(
        default=None,
        description="spent / limit * 100, None when no limit is configured"
    )

    @property
    def over_budget(self) -> bool:
        return self.limit > 0 and self.spent > self.limit


class DashboardSnapshot(BaseModel):
    """Everything the presentation layer renders after a mutation."""

    generated_at: datetime = Field(default_factory=_now_local)
    total_spent: Decimal
    budget_used_pct: Decimal
    expense_count: int = Field(ge=0)
    category_totals: dict[ExpenseCategory, Decimal] = Field(default_factory=dict)
    trend: list[TrendPoint] = Field(default_factory=list)
    category_budgets: list[CategoryBudgetStatus] = Field(default_factory=list)
    insights: list[Insight] = Field(default_factory=list)

    @property
    def insight_count(self) -> int:
        return len(self.insights)


# =============================================================================
# RECEIPT UPLOAD MODELS
# =============================================================================

class ReceiptUpload(BaseModel):
    """Represents an uploaded receipt file before scanning."""

    upload_id: UUID = Field(
        default_factory=uuid4,
        description="Unique upload identifier"
    )
    uploaded_at: datetime = Field(default_factory=_now_local)
    filename: str = Field(..., min_length=1)
    size_bytes: int = Field(ge=0)

    @property
    def extension(self) -> str:
        """Lower-case file extension without the dot ('' when absent)."""
        name = self.filename.rsplit("/", 1)[-1]
        if "." not in name:
            return ""
        return name.rsplit(".", 1)[-1].lower()


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found in user input."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'not_a_number', 'out_of_range')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        default="error",
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


class ValidationResult(BaseModel):
    """Outcome of validating one form submission."""

    validated_at: datetime = Field(default_factory=_now_local)
    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    def errors_for(self, field: str) -> list[ValidationIssue]:
        return [i for i in self.issues if i.field == field and i.severity == "error"]


# =============================================================================
# ORCHESTRATOR RESULTS
# =============================================================================

class ActionOutcome(BaseModel):
    """
    Result of a user action (add expense, scan receipt, save budget).

    `persisted` is False when the in-memory change succeeded but the
    storage write did not; the change still holds for the session.
    """

    success: bool
    message: str
    expense: Optional[Expense] = None
    persisted: bool = True
    correlation_id: Optional[UUID] = None
