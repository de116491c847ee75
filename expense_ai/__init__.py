"""
ExpenseAI - Source Package

A personal expense tracker: manual and receipt-scanned expenses,
category budgets, spending statistics and rule-based insights.

DESIGN PRINCIPLES:
1. Derived views (totals, trends, insights) are pure functions of stored data
2. Fail early, fail visibly
3. No silent corrections of user input
4. Every mutation is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "ExpenseAI Team"
