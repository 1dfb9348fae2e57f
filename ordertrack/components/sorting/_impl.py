"""
Sort engine - stable single-key sorting with synthetic join keys.

Invariants:
- Stable: equal keys keep their input order in both directions
- Strings compare case-insensitively
- Missing optional values sort as the lowest value
- Unknown keys leave the input order untouched
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import datetime
from typing import Any, TypeVar

from ordertrack.domain.entities import Expense, ServiceOrder, enum_value

from .models import SortContext, SortSpec

T = TypeVar("T", ServiceOrder, Expense)

Extractor = Callable[[Any, SortContext], Any]


def _attr(name: str) -> Extractor:
    return lambda item, _ctx: getattr(item, name)


ORDER_KEYS: dict[str, Extractor] = {
    "id": _attr("id"),
    "title": _attr("title"),
    "unit": _attr("unit"),
    "type": _attr("type"),
    "status": _attr("status"),
    "priority": lambda o, ctx: ctx.priority_weights.get(enum_value(o.priority), 0),
    "owner_name": lambda o, ctx: ctx.owner_names.get(o.owner_id),
    "date_opened": _attr("date_opened"),
    "date_forecast": _attr("date_forecast"),
    "date_closed": _attr("date_closed"),
    "total_cost": lambda o, ctx: ctx.order_costs.get(o.id, 0.0),
}

EXPENSE_KEYS: dict[str, Extractor] = {
    "id": _attr("id"),
    "item": _attr("item"),
    "value": _attr("value"),
    "date": _attr("date"),
    "unit": _attr("unit"),
    "supplier": _attr("supplier"),
    "category": _attr("category"),
    "payment_method": _attr("payment_method"),
    "linked_os_id": _attr("linked_os_id"),
}


def sort_keys_for(item: object) -> dict[str, Extractor]:
    if isinstance(item, ServiceOrder):
        return ORDER_KEYS
    if isinstance(item, Expense):
        return EXPENSE_KEYS
    return {}


def _normalize(value: Any) -> tuple[int, Any]:
    """Rank missing values below everything else, fold strings."""
    value = enum_value(value)
    if value is None or value == "":
        return (0, 0)
    if isinstance(value, str):
        return (1, value.casefold())
    if isinstance(value, datetime):
        return (1, value.timestamp())
    return (1, value)


def apply_sort(
    items: Iterable[T],
    spec: SortSpec | None,
    context: SortContext | None = None,
) -> list[T]:
    """Return a new sorted list; the input is never mutated."""
    result = list(items)
    if spec is None or not result:
        return result

    extractor = sort_keys_for(result[0]).get(spec.key)
    if extractor is None:
        return result

    ctx = context or SortContext()
    # sorted() stays stable with reverse=True
    return sorted(
        result,
        key=lambda item: _normalize(extractor(item, ctx)),
        reverse=spec.descending,
    )
