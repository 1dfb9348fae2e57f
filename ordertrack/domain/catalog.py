"""
Enumeration catalog handed to the filter, sort, aggregate and report layers.

The catalog fixes bucket order and display labels. It is built from the
rules file in production; tests can pass synthetic catalogs.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from ordertrack.domain.entities import (
    ExpenseCategory,
    OrderStatus,
    OrderType,
    Unit,
    enum_value,
)


@dataclass(frozen=True)
class Catalog:
    """Ordered enumeration values plus display labels."""

    units: tuple[str, ...]
    statuses: tuple[str, ...]
    order_types: tuple[str, ...]
    expense_categories: tuple[str, ...]
    labels: Mapping[str, str] = field(default_factory=dict)

    def label(self, value: Any) -> str:
        raw = enum_value(value)
        return self.labels.get(raw, str(raw))


DEFAULT_LABELS: dict[str, str] = {
    OrderStatus.OPEN.value: "Open",
    OrderStatus.WAITING.value: "Waiting",
    OrderStatus.IN_PROGRESS.value: "In Progress",
    OrderStatus.DONE.value: "Done",
    OrderStatus.CANCELLED.value: "Cancelled",
    OrderType.PREVENTIVE.value: "Preventive",
    OrderType.CORRECTIVE.value: "Corrective",
    OrderType.INSTALLATION.value: "Installation",
    ExpenseCategory.PARTS.value: "Parts",
    ExpenseCategory.LABOR.value: "Labor",
}


def default_catalog() -> Catalog:
    return Catalog(
        units=tuple(u.value for u in Unit),
        statuses=(
            OrderStatus.DONE.value,
            OrderStatus.IN_PROGRESS.value,
            OrderStatus.OPEN.value,
            OrderStatus.WAITING.value,
            OrderStatus.CANCELLED.value,
        ),
        order_types=(
            OrderType.PREVENTIVE.value,
            OrderType.CORRECTIVE.value,
            OrderType.INSTALLATION.value,
            OrderType.OTHER.value,
        ),
        expense_categories=tuple(c.value for c in ExpenseCategory),
        labels=dict(DEFAULT_LABELS),
    )
