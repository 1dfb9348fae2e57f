"""
Reports component input/output models.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from ordertrack.components.aggregation import Bucket, Kpis, StatusSummary
from ordertrack.components.filtering import ReportFilter
from ordertrack.components.sorting import SortSpec
from ordertrack.domain.entities import Expense, ServiceOrder, UserRef

MONTH_LABELS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


# --- Validation Error ---


@dataclass(frozen=True)
class ReportsValidationError:
    """Reports validation error."""

    code: str
    message: str
    field_name: str | None = None


# --- Query declarations ---


@dataclass(frozen=True)
class ReportQuery:
    """
    Declarative description of a named report.

    filter_fields: ambient filter fields the query honours; others are reset.
    forced: filter values applied unconditionally over the ambient filter.
    rows: which collection feeds the table rows ("orders", "expenses" or None).
    search: rules.search attribute holding the query's search fields.
    """

    name: str
    collections: tuple[str, ...]
    filter_fields: tuple[str, ...]
    groupings: tuple[str, ...] = ()
    forced: Mapping[str, Any] = field(default_factory=dict)
    rows: str | None = None
    search: str | None = None


# --- Input ---


@dataclass(frozen=True)
class ReportInput:
    """Snapshot handed to a report query. Visibility is already applied."""

    orders: Sequence[ServiceOrder] = ()
    expenses: Sequence[Expense] = ()
    filter: ReportFilter = field(default_factory=ReportFilter)
    sort: SortSpec | None = None
    users: Sequence[UserRef] = ()


# --- Rows ---


@dataclass(frozen=True)
class OrderRow:
    order: ServiceOrder
    owner_name: str | None
    total_cost: float
    duration_days: int


@dataclass(frozen=True)
class ExpenseRow:
    expense: Expense
    linked_order_title: str | None = None
    parts_warranty_until: datetime | None = None
    service_warranty_until: datetime | None = None
    under_warranty: bool = False


# --- Output ---


@dataclass(frozen=True)
class ReportView:
    """Result of a report query. Recomputed on every filter/sort change."""

    name: str
    filtered_orders: tuple[ServiceOrder, ...] = ()
    filtered_expenses: tuple[Expense, ...] = ()
    groupings: Mapping[str, tuple[Bucket, ...]] = field(default_factory=dict)
    kpis: Kpis = field(default_factory=Kpis)
    order_rows: tuple[OrderRow, ...] = ()
    expense_rows: tuple[ExpenseRow, ...] = ()
    sort: SortSpec | None = None
    summary: StatusSummary | None = None
    errors: list[ReportsValidationError] = field(default_factory=list)
    success: bool = True
