"""
Linkage component - order/expense joins and id lookups.
"""

from ._impl import (
    archived_order_ids,
    cost_by_order,
    expenses_for,
    find_expense,
    find_order,
    is_visible,
    total_cost_for,
    visible_expenses,
)

__all__ = [
    "archived_order_ids",
    "cost_by_order",
    "expenses_for",
    "find_expense",
    "find_order",
    "is_visible",
    "total_cost_for",
    "visible_expenses",
]
