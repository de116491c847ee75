"""Form input validation package."""

from expense_ai.validation.validator import (
    BudgetValidationError,
    ExpenseValidationError,
    InputValidationError,
    InputValidator,
    parse_decimal,
)

__all__ = [
    "BudgetValidationError",
    "ExpenseValidationError",
    "InputValidationError",
    "InputValidator",
    "parse_decimal",
]
