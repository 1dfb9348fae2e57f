from collections.abc import Iterable

from ordertrack.components.linkage import visible_expenses
from ordertrack.domain.entities import Expense, ServiceOrder, UserRef


def visible_orders(user: UserRef, orders: Iterable[ServiceOrder]) -> list[ServiceOrder]:
    """Admins see every order; everyone else only the orders they own."""
    if user.is_admin:
        return list(orders)
    return [o for o in orders if o.owner_id == user.id]


def scope_for_user(
    user: UserRef,
    orders: Iterable[ServiceOrder],
    expenses: Iterable[Expense],
) -> tuple[list[ServiceOrder], list[Expense]]:
    """
    Narrow a snapshot to what `user` may see before filtering.

    Non-admins see expenses only when linked to one of their orders;
    unlinked expenses are admin-only.
    """
    scoped = visible_orders(user, orders)
    if user.is_admin:
        return scoped, list(expenses)
    return scoped, visible_expenses(scoped, expenses)
