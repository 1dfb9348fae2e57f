"""
Filter engine - composable predicates over orders and expenses.

Functional Core - pure, non-mutating, input order preserved.

Invariants:
- Predicates are AND-combined; search is OR across its fields
- Empty set predicates match everything
- apply_filter(apply_filter(x, f), f) == apply_filter(x, f)
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime, tzinfo

from ordertrack.components.linkage import archived_order_ids
from ordertrack.domain.entities import Expense, ServiceOrder, enum_value

from .models import ReportFilter

ORDER_SEARCH_FIELDS: tuple[str, ...] = ("id", "title", "unit")
EXPENSE_SEARCH_FIELDS: tuple[str, ...] = ("id", "item", "supplier", "unit")


def _calendar(moment: datetime, tz: tzinfo | None) -> tuple[int, int]:
    """(year, zero-based month) in the reporting timezone."""
    local = moment.astimezone(tz) if tz else moment
    return local.year, local.month - 1


def _matches_period(moment: datetime, f: ReportFilter, tz: tzinfo | None) -> bool:
    if f.year is None and not f.months:
        return True
    year, month = _calendar(moment, tz)
    if f.year is not None and year != f.year:
        return False
    return not f.months or month in f.months


def _matches_set(value: object, allowed: frozenset[object]) -> bool:
    return not allowed or enum_value(value) in allowed


def matches_search(item: object, needle: str | None, fields: Sequence[str]) -> bool:
    """Case-insensitive substring match against any of the named fields."""
    if not needle or not needle.strip():
        return True
    lowered = needle.strip().lower()
    for name in fields:
        value = enum_value(getattr(item, name, None))
        if value is not None and lowered in str(value).lower():
            return True
    return False


def order_matches(
    order: ServiceOrder,
    f: ReportFilter,
    *,
    tz: tzinfo | None = None,
    search_fields: Sequence[str] = ORDER_SEARCH_FIELDS,
) -> bool:
    return (
        _matches_period(order.date_opened, f, tz)
        and _matches_set(order.unit, f.units)
        and _matches_set(order.type, f.types)
        and _matches_set(order.owner_id, f.owners)
        and (f.archived is None or order.archived == f.archived)
        and matches_search(order, f.search_text, search_fields)
    )


def apply_filter(
    orders: Iterable[ServiceOrder],
    f: ReportFilter,
    *,
    tz: tzinfo | None = None,
    search_fields: Sequence[str] = ORDER_SEARCH_FIELDS,
) -> list[ServiceOrder]:
    return [o for o in orders if order_matches(o, f, tz=tz, search_fields=search_fields)]


def apply_expense_filter(
    expenses: Iterable[Expense],
    f: ReportFilter,
    *,
    orders: Iterable[ServiceOrder] = (),
    tz: tzinfo | None = None,
    search_fields: Sequence[str] = EXPENSE_SEARCH_FIELDS,
) -> list[Expense]:
    """
    Filter expenses. types/owners do not apply to expenses.

    An expense counts as archived when its linked order (looked up in
    `orders`) is archived; unlinked or unknown links count as not archived.
    """
    archived_ids = archived_order_ids(orders) if f.archived is not None else frozenset()

    def keep(expense: Expense) -> bool:
        if not _matches_period(expense.date, f, tz):
            return False
        if not _matches_set(expense.unit, f.units):
            return False
        if f.archived is not None:
            linked_archived = expense.linked_os_id in archived_ids
            if linked_archived != f.archived:
                return False
        return matches_search(expense, f.search_text, search_fields)

    return [e for e in expenses if keep(e)]
