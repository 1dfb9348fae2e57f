from __future__ import annotations

from typing import Any, Protocol

from ordertrack.domain.entities import Expense, HistoryLog, ServiceOrder, UserRef


class OrderSourcePort(Protocol):
    def list(self, archived: bool | None = None) -> list[ServiceOrder]:
        ...

    def create(self, fields: dict[str, Any]) -> ServiceOrder:
        ...

    def update(self, order_id: str, fields: dict[str, Any]) -> ServiceOrder:
        """Apply a partial update. Raises NotFoundError for unknown ids."""
        ...

    def archive(self, order_id: str, history: list[HistoryLog] | None = None) -> None:
        """Set the archived flag, and the final history when given, in one write."""
        ...


class ExpenseSourcePort(Protocol):
    def list(self) -> list[Expense]:
        ...

    def create(self, fields: dict[str, Any]) -> Expense:
        ...

    def update(self, expense_id: str, fields: dict[str, Any]) -> Expense:
        ...

    def delete(self, expense_id: str) -> None:
        """Delete an expense. Linked orders are unaffected."""
        ...


class UserDirectoryPort(Protocol):
    """Read-only view of users: owner names and admin flags."""

    def list(self) -> list[UserRef]:
        ...
