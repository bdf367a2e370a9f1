"""Domain models and types for spendeasy.

This package contains the functional core:
- Pure functions with no side effects
- No I/O operations
- Easy to test
- Analytics, chart geometry and reminder decisions separated from infrastructure
"""

from spendeasy.domain.models import Category, CategoryTotal, Expense, Money, Month

__all__ = ["Category", "CategoryTotal", "Expense", "Money", "Month"]
