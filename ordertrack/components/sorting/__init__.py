"""
Sorting component - stable sort with direction toggling.
"""

from ._impl import EXPENSE_KEYS, ORDER_KEYS, apply_sort, sort_keys_for
from .models import SortContext, SortDirection, SortSpec, toggle_sort

__all__ = [
    "EXPENSE_KEYS",
    "ORDER_KEYS",
    "SortContext",
    "SortDirection",
    "SortSpec",
    "apply_sort",
    "sort_keys_for",
    "toggle_sort",
]
