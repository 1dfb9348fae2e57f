"""
In-memory order, expense and user sources for testing/dev.

They implement the source ports with the same semantics a remote backend
would: ids are generated on create, partial updates are re-validated, and
unknown ids raise NotFoundError.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from typing import Any

from ordertrack.domain.entities import (
    Expense,
    HistoryLog,
    OrderStatus,
    ServiceOrder,
    UserRef,
)
from ordertrack.domain.errors import NotFoundError
from ordertrack.ports.clock import ClockPort

logger = logging.getLogger(__name__)

_ORDER_ID = re.compile(r"^OS-(\d{2})(\d{3,})$")
_EXPENSE_ID = re.compile(r"^FIN-(\d+)$")

# Fields a caller may not set on create; the source owns them
_ORDER_CREATE_RESERVED = frozenset({"id", "status", "date_closed", "archived"})


class InMemoryOrderSource:
    """In-memory service order source."""

    def __init__(
        self,
        clock: ClockPort,
        orders: Iterable[ServiceOrder] = (),
    ) -> None:
        self._clock = clock
        self._orders: dict[str, ServiceOrder] = {o.id: o for o in orders}

    def _next_id(self) -> str:
        """OS-<yy><seq3>, sequence continuing from the highest id of the year."""
        yy = self._clock.now_utc().year % 100
        highest = 0
        for order_id in self._orders:
            match = _ORDER_ID.match(order_id)
            if match and int(match.group(1)) == yy:
                highest = max(highest, int(match.group(2)))
        return f"OS-{yy:02d}{highest + 1:03d}"

    def _get(self, order_id: str) -> ServiceOrder:
        order = self._orders.get(order_id)
        if order is None:
            raise NotFoundError("ServiceOrder", order_id)
        return order

    def list(self, archived: bool | None = None) -> list[ServiceOrder]:
        orders = list(self._orders.values())
        if archived is None:
            return orders
        return [o for o in orders if o.archived == archived]

    def get(self, order_id: str) -> ServiceOrder:
        return self._get(order_id)

    def create(self, fields: dict[str, Any]) -> ServiceOrder:
        reserved = _ORDER_CREATE_RESERVED & set(fields)
        if reserved:
            raise ValueError(f"Fields set by the source: {', '.join(sorted(reserved))}")

        now = self._clock.now_utc()
        data = {"date_opened": now, **fields}
        data.update(id=self._next_id(), status=OrderStatus.OPEN, archived=False)
        history = list(data.get("history") or [])
        history.append(HistoryLog(date=now, message="Order created", user_id=data.get("owner_id")))
        data["history"] = history

        order = ServiceOrder.model_validate(data)
        self._orders[order.id] = order
        logger.debug("Created order %s", order.id)
        return order

    def update(self, order_id: str, fields: dict[str, Any]) -> ServiceOrder:
        existing = self._get(order_id)
        if "id" in fields and fields["id"] != order_id:
            raise ValueError("Order id cannot change")
        updated = ServiceOrder.model_validate({**existing.model_dump(), **fields})
        self._orders[order_id] = updated
        return updated

    def archive(self, order_id: str, history: list[HistoryLog] | None = None) -> None:
        fields: dict[str, Any] = {"archived": True}
        if history is not None:
            fields["history"] = history
        self.update(order_id, fields)

    def save(self, order: ServiceOrder) -> ServiceOrder:
        """Replace a whole snapshot (seeding and tests)."""
        self._orders[order.id] = order
        return order


class InMemoryExpenseSource:
    """In-memory expense source."""

    def __init__(self, expenses: Iterable[Expense] = ()) -> None:
        self._expenses: dict[str, Expense] = {e.id: e for e in expenses}

    def _next_id(self) -> str:
        highest = 0
        for expense_id in self._expenses:
            match = _EXPENSE_ID.match(expense_id)
            if match:
                highest = max(highest, int(match.group(1)))
        return f"FIN-{highest + 1:03d}"

    def _get(self, expense_id: str) -> Expense:
        expense = self._expenses.get(expense_id)
        if expense is None:
            raise NotFoundError("Expense", expense_id)
        return expense

    def list(self) -> list[Expense]:
        return list(self._expenses.values())

    def get(self, expense_id: str) -> Expense:
        return self._get(expense_id)

    def create(self, fields: dict[str, Any]) -> Expense:
        expense = Expense.model_validate({**fields, "id": self._next_id()})
        self._expenses[expense.id] = expense
        logger.debug("Created expense %s", expense.id)
        return expense

    def update(self, expense_id: str, fields: dict[str, Any]) -> Expense:
        existing = self._get(expense_id)
        if "id" in fields and fields["id"] != expense_id:
            raise ValueError("Expense id cannot change")
        updated = Expense.model_validate({**existing.model_dump(), **fields})
        self._expenses[expense_id] = updated
        return updated

    def delete(self, expense_id: str) -> None:
        self._get(expense_id)
        del self._expenses[expense_id]


class InMemoryUserDirectory:
    def __init__(self, users: Iterable[UserRef] = ()) -> None:
        self._users = list(users)

    def list(self) -> list[UserRef]:
        return list(self._users)
