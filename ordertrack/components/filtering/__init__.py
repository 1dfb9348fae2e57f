"""
Filtering component - year/month/unit/type/owner/search/archived filters.
"""

from ._impl import (
    EXPENSE_SEARCH_FIELDS,
    ORDER_SEARCH_FIELDS,
    apply_expense_filter,
    apply_filter,
    matches_search,
    order_matches,
)
from .models import ReportFilter

__all__ = [
    "EXPENSE_SEARCH_FIELDS",
    "ORDER_SEARCH_FIELDS",
    "ReportFilter",
    "apply_expense_filter",
    "apply_filter",
    "matches_search",
    "order_matches",
]
