"""
Form Input Validation

Raw form values (amount as text, category key, description, budget
fields) are turned into validated Decimals and enums here, or rejected
with a list of ValidationIssues.

IMPORTANT: Validation NEVER silently fixes input. A non-numeric or
non-finite amount is rejected, not coerced to 0 or stored as NaN.
The only normalizations are whitespace trimming and dropping a leading
currency symbol / thousands separators.
"""

from decimal import Decimal, InvalidOperation
from datetime import datetime
from typing import Any, Mapping, Optional, Union

from expense_ai.models.expense import (
    BudgetConfig,
    Expense,
    ExpenseCategory,
    ExpenseSource,
    ValidationIssue,
    ValidationResult,
)


CENT = Decimal("0.01")
MAX_AMOUNT = Decimal("1000000000000")
CURRENCY_SYMBOLS = "$€£¥₹"
MAX_DESCRIPTION_LENGTH = 500


class InputValidationError(Exception):
    """Base exception for rejected form input."""

    def __init__(self, result: ValidationResult):
        self.result = result
        messages = "; ".join(i.message for i in result.issues if i.severity == "error")
        super().__init__(messages or "Invalid input")


class ExpenseValidationError(InputValidationError):
    """Expense form was rejected."""
    pass


class BudgetValidationError(InputValidationError):
    """Budget form was rejected."""
    pass


def parse_decimal(value: Any) -> tuple[Optional[Decimal], Optional[str]]:
    """
    Parse a numeric form value.

    Returns:
        (value, None) on success, (None, issue_type) on failure, where
        issue_type is 'missing', 'not_a_number' or 'not_finite'.
    """
    if value is None:
        return None, "missing"

    if isinstance(value, bool):
        return None, "not_a_number"

    if isinstance(value, (int, float, Decimal)):
        text = str(value)
    else:
        text = str(value).strip().lstrip(CURRENCY_SYMBOLS).strip().replace(",", "")

    if not text:
        return None, "missing"

    try:
        number = Decimal(text)
    except InvalidOperation:
        return None, "not_a_number"

    if not number.is_finite():
        return None, "not_finite"

    return number, None


class InputValidator:
    """
    Validates expense and budget form submissions.

    `validate_*` methods return a ValidationResult; `build_*` methods
    return the model or raise the matching InputValidationError.
    """

    def _amount_issues(
        self,
        field: str,
        value: Any,
        allow_blank: bool,
        allow_zero: bool,
    ) -> tuple[Optional[Decimal], list[ValidationIssue]]:
        label = field.replace("_", " ")
        number, problem = parse_decimal(value)

        if problem == "missing":
            if allow_blank:
                return None, []
            return None, [ValidationIssue(
                field=field,
                issue_type="missing",
                message=f"{label.capitalize()} is required",
                suggested_fix="Enter an amount such as 12.50",
            )]

        if problem is not None:
            return None, [ValidationIssue(
                field=field,
                issue_type=problem,
                message=f"{label.capitalize()} must be a number, got {value!r}",
                suggested_fix="Use digits and an optional decimal point, e.g. 12.50",
            )]

        if number < 0 or (number == 0 and not allow_zero):
            bound = "zero or more" if allow_zero else "greater than zero"
            return None, [ValidationIssue(
                field=field,
                issue_type="out_of_range",
                message=f"{label.capitalize()} must be {bound}",
            )]

        if number >= MAX_AMOUNT:
            return None, [ValidationIssue(
                field=field,
                issue_type="out_of_range",
                message=f"{label.capitalize()} must be less than {MAX_AMOUNT:,}",
            )]

        if number != number.quantize(CENT):
            return None, [ValidationIssue(
                field=field,
                issue_type="too_precise",
                message=f"{label.capitalize()} cannot have more than two decimal places",
                suggested_fix=f"Did you mean {number.quantize(CENT)}?",
            )]

        return number.quantize(CENT), []

    def _category_issues(
        self,
        value: Union[ExpenseCategory, str, None],
    ) -> tuple[Optional[ExpenseCategory], list[ValidationIssue]]:
        if isinstance(value, ExpenseCategory):
            return value, []

        key = str(value if value is not None else "").strip().lower()
        if not key:
            return None, [ValidationIssue(
                field="category",
                issue_type="missing",
                message="Category is required",
            )]

        try:
            return ExpenseCategory(key), []
        except ValueError:
            allowed = ", ".join(c.value for c in ExpenseCategory)
            return None, [ValidationIssue(
                field="category",
                issue_type="invalid_choice",
                message=f"Unknown category {value!r}",
                suggested_fix=f"Choose one of: {allowed}",
            )]

    def _description_issues(self, value: Optional[str]) -> tuple[str, list[ValidationIssue]]:
        text = (value or "").strip()
        if not text:
            return text, [ValidationIssue(
                field="description",
                issue_type="missing",
                message="Description is required",
            )]
        if len(text) > MAX_DESCRIPTION_LENGTH:
            return text, [ValidationIssue(
                field="description",
                issue_type="too_long",
                message=f"Description cannot exceed {MAX_DESCRIPTION_LENGTH} characters",
            )]
        return text, []

    def validate_expense(
        self,
        amount: Any,
        category: Union[ExpenseCategory, str, None],
        description: Optional[str],
    ) -> ValidationResult:
        _, amount_issues = self._amount_issues("amount", amount, allow_blank=False, allow_zero=False)
        _, category_issues = self._category_issues(category)
        _, description_issues = self._description_issues(description)
        return ValidationResult(issues=amount_issues + category_issues + description_issues)

    def build_expense(
        self,
        amount: Any,
        category: Union[ExpenseCategory, str, None],
        description: Optional[str],
        when: Optional[datetime] = None,
    ) -> Expense:
        """
        Build a manual expense from raw form values.

        Raises:
            ExpenseValidationError: If any field is invalid
        """
        parsed_amount, amount_issues = self._amount_issues("amount", amount, allow_blank=False, allow_zero=False)
        parsed_category, category_issues = self._category_issues(category)
        text, description_issues = self._description_issues(description)

        result = ValidationResult(issues=amount_issues + category_issues + description_issues)
        if result.has_errors:
            raise ExpenseValidationError(result)

        fields = {
            "amount": parsed_amount,
            "category": parsed_category,
            "description": text,
            "source": ExpenseSource.MANUAL,
        }
        if when is not None:
            fields["date"] = when
        return Expense(**fields)

    def build_budget(
        self,
        monthly: Any,
        categories: Optional[Mapping[Union[ExpenseCategory, str], Any]] = None,
    ) -> BudgetConfig:
        """
        Build a budget from raw form values.

        A blank monthly field means 0 (no budget). Blank or zero category
        fields are left out of the mapping.

        Raises:
            BudgetValidationError: If any field is invalid
        """
        issues: list[ValidationIssue] = []

        parsed_monthly, monthly_issues = self._amount_issues(
            "monthly_budget", monthly, allow_blank=True, allow_zero=True,
        )
        issues.extend(monthly_issues)

        limits: dict[ExpenseCategory, Decimal] = {}
        for raw_category, raw_limit in (categories or {}).items():
            category, category_issues = self._category_issues(raw_category)
            if category_issues:
                issues.extend(category_issues)
                continue
            limit, limit_issues = self._amount_issues(
                f"{category.value}_budget", raw_limit, allow_blank=True, allow_zero=True,
            )
            issues.extend(limit_issues)
            if limit is not None and limit > 0:
                limits[category] = limit

        result = ValidationResult(issues=issues)
        if result.has_errors:
            raise BudgetValidationError(result)

        return BudgetConfig(
            monthly=parsed_monthly if parsed_monthly is not None else Decimal("0"),
            categories=limits,
        )

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """Summary of validation issues suitable for showing to the user."""
        if not result.issues:
            return "✅ All fields look good."

        lines = ["❌ Please fix the following:"]
        for issue in result.issues:
            lines.append(f"   • {issue.message}")
            if issue.suggested_fix:
                lines.append(f"     💡 {issue.suggested_fix}")
        return "\n".join(lines)
