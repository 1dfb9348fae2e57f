"""
Linkage resolver - joins between orders and expenses.

Functional Core - pure lookups over caller-supplied collections.
"""

from __future__ import annotations

from collections.abc import Iterable

from ordertrack.domain.entities import Expense, ServiceOrder
from ordertrack.domain.errors import NotFoundError


def expenses_for(order_id: str, expenses: Iterable[Expense]) -> list[Expense]:
    return [e for e in expenses if e.linked_os_id == order_id]


def total_cost_for(order_id: str, expenses: Iterable[Expense]) -> float:
    return sum((e.value for e in expenses_for(order_id, expenses)), 0.0)


def cost_by_order(expenses: Iterable[Expense]) -> dict[str, float]:
    """Reverse mapping: linked order id -> summed expense value."""
    costs: dict[str, float] = {}
    for expense in expenses:
        if expense.linked_os_id is None:
            continue
        costs[expense.linked_os_id] = costs.get(expense.linked_os_id, 0.0) + expense.value
    return costs


def is_visible(expense: Expense, visible_order_ids: Iterable[str]) -> bool:
    """An expense is visible iff it is linked to an order the caller can see."""
    if expense.linked_os_id is None:
        return False
    ids = visible_order_ids if isinstance(visible_order_ids, (set, frozenset)) else set(visible_order_ids)
    return expense.linked_os_id in ids


def visible_expenses(
    visible_orders: Iterable[ServiceOrder],
    expenses: Iterable[Expense],
) -> list[Expense]:
    ids = frozenset(o.id for o in visible_orders)
    return [e for e in expenses if is_visible(e, ids)]


def archived_order_ids(orders: Iterable[ServiceOrder]) -> frozenset[str]:
    return frozenset(o.id for o in orders if o.archived)


def find_order(order_id: str, orders: Iterable[ServiceOrder]) -> ServiceOrder:
    """Raises NotFoundError when the id is absent."""
    found = next((o for o in orders if o.id == order_id), None)
    if found is None:
        raise NotFoundError("ServiceOrder", order_id)
    return found


def find_expense(expense_id: str, expenses: Iterable[Expense]) -> Expense:
    found = next((e for e in expenses if e.id == expense_id), None)
    if found is None:
        raise NotFoundError("Expense", expense_id)
    return found
