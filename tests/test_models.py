"""
Tests for ExpenseAI models

Test strategy:
1. Unit tests for individual components (models, validators, analytics)
2. Flow tests for the orchestrator with in-memory storage
3. No real delays or randomness in tests (injected sleep and seeded RNG)
"""

import pytest
from datetime import datetime
from decimal import Decimal

from pydantic import ValidationError

from expense_ai.models.expense import (
    BudgetConfig,
    CategoryBudgetStatus,
    Expense,
    ExpenseCategory,
    ExpenseIdClock,
    ExpenseSource,
    ReceiptUpload,
    ValidationIssue,
    ValidationResult,
)
from expense_ai.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)


class TestExpenseModel:
    """Tests for the Expense model."""

    def test_expense_creation(self):
        """Test Expense model creation with defaults."""
        expense = Expense(
            amount=Decimal("12.50"),
            category=ExpenseCategory.FOOD,
            description="Lunch",
        )
        assert expense.amount == Decimal("12.50")
        assert expense.source == ExpenseSource.MANUAL
        assert expense.confidence is None
        assert expense.merchant is None
        assert expense.date.tzinfo is not None

    def test_expense_strips_whitespace(self):
        """Test that whitespace is stripped from text fields."""
        expense = Expense(
            amount=Decimal("1.00"),
            category=ExpenseCategory.OTHER,
            description="  Coffee  ",
        )
        assert expense.description == "Coffee"

    def test_expense_rejects_non_positive_amount(self):
        """Test that zero and negative amounts are rejected."""
        for amount in ("0", "-5.00"):
            with pytest.raises(ValidationError):
                Expense(amount=Decimal(amount), category=ExpenseCategory.FOOD)

    def test_expense_rejects_nan_amount(self):
        """Test that a NaN amount never makes it into a record."""
        with pytest.raises(ValidationError):
            Expense(amount=Decimal("NaN"), category=ExpenseCategory.FOOD)

    def test_expense_rejects_unknown_category(self):
        """Test that categories outside the enum are rejected."""
        with pytest.raises(ValidationError):
            Expense(amount=Decimal("1.00"), category="groceries")

    def test_expense_is_immutable(self):
        """Test that expenses cannot be mutated after creation."""
        expense = Expense(amount=Decimal("1.00"), category=ExpenseCategory.FOOD)
        with pytest.raises(ValidationError):
            expense.amount = Decimal("2.00")

    def test_confidence_only_for_scanned_expenses(self):
        """Test that a manual expense cannot carry a confidence."""
        with pytest.raises(ValueError, match="Confidence is only valid"):
            Expense(
                amount=Decimal("1.00"),
                category=ExpenseCategory.FOOD,
                confidence=0.9,
            )

    def test_confidence_bounds(self):
        """Test confidence must be between 0 and 1."""
        with pytest.raises(ValidationError):
            Expense(
                amount=Decimal("1.00"),
                category=ExpenseCategory.FOOD,
                source=ExpenseSource.OCR,
                confidence=1.5,
            )

    def test_naive_date_is_taken_as_local(self):
        """Test that naive timestamps become timezone-aware local times."""
        naive = datetime(2024, 6, 15, 9, 30)
        expense = Expense(amount=Decimal("1.00"), category=ExpenseCategory.FOOD, date=naive)
        assert expense.date.tzinfo is not None
        assert expense.date.astimezone().replace(tzinfo=None) == naive

    def test_json_dump_loads_back(self):
        """Test that the storage representation validates back to an equal record."""
        expense = Expense(
            amount=Decimal("89.45"),
            category=ExpenseCategory.SHOPPING,
            description="Grocery shopping",
            source=ExpenseSource.OCR,
            confidence=0.97,
            merchant="Whole Foods",
        )
        assert Expense.model_validate(expense.model_dump(mode="json")) == expense

    def test_loads_record_written_by_the_web_widget(self):
        """Test that records with float amounts and UTC ISO dates load."""
        expense = Expense.model_validate({
            "id": 1718000000000,
            "amount": 45.67,
            "category": "food",
            "description": "Lunch at downtown cafe",
            "date": "2024-06-14T10:00:00.000Z",
            "source": "manual",
        })
        assert expense.amount == Decimal("45.67")
        assert expense.id == 1718000000000


class TestExpenseIdClock:
    """Tests for monotonic id issuance."""

    def test_ids_strictly_increase(self):
        """Test that ids issued back to back are distinct and increasing."""
        clock = ExpenseIdClock()
        ids = [clock.next_id() for _ in range(100)]
        assert ids == sorted(set(ids))

    def test_observe_moves_clock_forward(self):
        """Test that a loaded id far in the future is never reissued."""
        clock = ExpenseIdClock()
        future = clock.next_id() + 10_000_000
        clock.observe(future)
        assert clock.next_id() == future + 1

    def test_default_ids_are_unique(self):
        """Test that expenses created together get different ids."""
        first = Expense(amount=Decimal("1.00"), category=ExpenseCategory.FOOD)
        second = Expense(amount=Decimal("1.00"), category=ExpenseCategory.FOOD)
        assert second.id > first.id


class TestExpenseCategories:
    """Tests for the category enum."""

    def test_all_categories_exist(self):
        """Test that expected categories exist."""
        expected = [
            "food", "transport", "utilities", "entertainment",
            "healthcare", "shopping", "other",
        ]
        assert [c.value for c in ExpenseCategory] == expected

    def test_display_names(self):
        """Test category display names."""
        assert ExpenseCategory.FOOD.display_name == "Food & Dining"
        assert ExpenseCategory.TRANSPORT.display_name == "Transportation"
        assert ExpenseCategory.HEALTHCARE.display_name == "Healthcare"

    def test_unknown_key_displays_as_other(self):
        """Test display fallback for unknown keys."""
        assert ExpenseCategory.display_name_for("crypto") == "Other"
        assert ExpenseCategory.display_name_for("shopping") == "Shopping"


class TestBudgetConfig:
    """Tests for BudgetConfig."""

    def test_defaults(self):
        """Test the default budget has no limits."""
        budget = BudgetConfig()
        assert budget.monthly == Decimal("0")
        assert budget.categories == {}
        assert budget.has_monthly_budget is False

    def test_limit_for_defaults_to_zero(self):
        """Test that unset category thresholds read as zero."""
        budget = BudgetConfig(monthly=Decimal("500"), categories={ExpenseCategory.FOOD: Decimal("200")})
        assert budget.limit_for(ExpenseCategory.FOOD) == Decimal("200")
        assert budget.limit_for(ExpenseCategory.SHOPPING) == Decimal("0")

    def test_rejects_negative_values(self):
        """Test that negative thresholds are rejected."""
        with pytest.raises(ValidationError):
            BudgetConfig(monthly=Decimal("-1"))
        with pytest.raises(ValidationError):
            BudgetConfig(categories={ExpenseCategory.FOOD: Decimal("-1")})

    def test_category_keys_serialize_as_strings(self):
        """Test that the stored form uses plain category keys."""
        budget = BudgetConfig(monthly=Decimal("500"), categories={ExpenseCategory.FOOD: Decimal("200")})
        dumped = budget.model_dump(mode="json")
        assert set(dumped["categories"]) == {"food"}
        assert BudgetConfig.model_validate(dumped) == budget


class TestDerivedModels:
    """Tests for derived view models."""

    def test_category_budget_status_over_budget(self):
        """Test over_budget only applies with a configured limit."""
        over = CategoryBudgetStatus(
            category=ExpenseCategory.FOOD,
            spent=Decimal("150"),
            limit=Decimal("100"),
            used_pct=Decimal("150"),
        )
        unlimited = CategoryBudgetStatus(
            category=ExpenseCategory.FOOD,
            spent=Decimal("150"),
            limit=Decimal("0"),
        )
        assert over.over_budget is True
        assert unlimited.over_budget is False

    def test_receipt_upload_extension(self):
        """Test extension parsing on receipt uploads."""
        assert ReceiptUpload(filename="Scan.JPG", size_bytes=1).extension == "jpg"
        assert ReceiptUpload(filename="archive.tar.pdf", size_bytes=1).extension == "pdf"
        assert ReceiptUpload(filename="README", size_bytes=1).extension == ""


class TestValidationResult:
    """Tests for ValidationResult model."""

    def test_validation_result_has_errors(self):
        """Test has_errors property."""
        result = ValidationResult(issues=[
            ValidationIssue(
                field="amount",
                issue_type="missing",
                message="Amount is required",
                severity="error",
            ),
        ])
        assert result.has_errors is True
        assert result.is_valid is False
        assert result.error_count == 1
        assert len(result.errors_for("amount")) == 1

    def test_validation_result_warnings_only(self):
        """Test that warnings don't count as errors."""
        result = ValidationResult(issues=[
            ValidationIssue(
                field="description",
                issue_type="long",
                message="Long description",
                severity="warning",
            ),
        ])
        assert result.has_errors is False
        assert result.is_valid is True
        assert result.error_count == 0


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.BUDGET_SAVED,
            description="Budget saved",
        )
        assert event.severity == AuditSeverity.INFO
        assert event.is_user_action is False

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEventBuilder.expense_added(
            expense_id=123,
            amount="12.50",
            category="food",
        )
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "expense_added"
        assert log_dict["entity_id"] == "123"
        assert log_dict["details"]["amount"] == "12.50"
        assert log_dict["is_user_action"] is True

    def test_storage_failure_is_an_error(self):
        """Test AuditEventBuilder.storage_write_failed severity."""
        event = AuditEventBuilder.storage_write_failed(key="expenses", error_message="disk full")
        assert event.event_type == AuditEventType.STORAGE_WRITE_FAILED
        assert event.severity == AuditSeverity.ERROR
        assert event.error_message == "disk full"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
