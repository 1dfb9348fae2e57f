"""
Report view builder - composes filter, sort and aggregation into named views.

Stateless: every call recomputes from the snapshot it is given.

Invariants:
- closed_orders/financial_records only ever see archived data, whatever
  the ambient filter says
- board only ever sees active (non-archived) orders
- Filter fields a query does not declare are ignored
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, tzinfo
from zoneinfo import ZoneInfo

from ordertrack.components.aggregation import (
    Bucket,
    Kpis,
    compute_kpis,
    count_by_status,
    count_by_type,
    count_by_unit,
    status_summary,
    sum_by_category,
    sum_by_month,
    sum_by_unit,
    to_buckets,
    total_spend,
)
from ordertrack.components.filtering import (
    ReportFilter,
    apply_expense_filter,
    apply_filter,
)
from ordertrack.components.linkage import visible_expenses
from ordertrack.components.sorting import (
    EXPENSE_KEYS,
    ORDER_KEYS,
    SortContext,
    SortSpec,
    apply_sort,
)
from ordertrack.domain.catalog import Catalog
from ordertrack.domain.entities import (
    Expense,
    OrderStatus,
    ServiceOrder,
)
from ordertrack.domain.state import compute_duration_days
from ordertrack.domain.warranty import under_warranty, warranty_expiry
from ordertrack.rules.models import Rules

from .models import (
    MONTH_LABELS,
    ExpenseRow,
    OrderRow,
    ReportInput,
    ReportQuery,
    ReportsValidationError,
    ReportView,
)

QUERIES: dict[str, ReportQuery] = {
    q.name: q
    for q in (
        ReportQuery(
            name="managerial",
            collections=("orders", "expenses"),
            filter_fields=("year", "months", "units"),
            groupings=("by_status", "by_type", "by_unit"),
        ),
        ReportQuery(
            name="financial",
            collections=("orders", "expenses"),
            filter_fields=("year", "months", "units"),
            groupings=("by_category", "by_unit", "by_month"),
        ),
        ReportQuery(
            name="closed_orders",
            collections=("orders", "expenses"),
            filter_fields=("year", "units", "search_text"),
            forced={"archived": True},
            rows="orders",
            search="closed_orders",
        ),
        ReportQuery(
            name="financial_records",
            collections=("expenses",),
            filter_fields=("year", "units", "search_text"),
            forced={"archived": True},
            rows="expenses",
            search="financial_records",
        ),
        ReportQuery(
            name="dashboard",
            collections=("orders", "expenses"),
            filter_fields=("units",),
            groupings=("spend_by_unit", "open_by_unit", "done_by_unit"),
            rows="orders",
        ),
        ReportQuery(
            name="board",
            collections=("orders", "expenses"),
            filter_fields=("units", "types", "owners", "search_text"),
            groupings=("columns",),
            forced={"archived": False},
            rows="orders",
            search="orders",
        ),
    )
}

# Kanban columns: label key -> statuses shown in the column
BOARD_COLUMNS: tuple[tuple[str, tuple[OrderStatus, ...]], ...] = (
    ("open", (OrderStatus.OPEN,)),
    ("waiting", (OrderStatus.WAITING,)),
    ("in_progress", (OrderStatus.IN_PROGRESS,)),
    ("closed", (OrderStatus.DONE, OrderStatus.CANCELLED)),
)


@dataclass(frozen=True)
class BuildContext:
    rules: Rules
    catalog: Catalog
    tz: tzinfo
    now: datetime


def make_context(rules: Rules, now: datetime) -> BuildContext:
    return BuildContext(
        rules=rules,
        catalog=rules.build_catalog(),
        tz=ZoneInfo(rules.reporting.timezone),
        now=now,
    )


def narrow_filter(query: ReportQuery, f: ReportFilter) -> ReportFilter:
    """Keep the query's declared fields, then apply its forced values."""
    narrowed = f.only(query.filter_fields)
    if query.forced:
        narrowed = narrowed.replace(**query.forced)
    return narrowed


def resolve_sort(
    query: ReportQuery,
    requested: SortSpec | None,
    rules: Rules,
) -> tuple[SortSpec | None, list[ReportsValidationError]]:
    """Requested sort if valid for the row type, else the query default."""
    keys = ORDER_KEYS if query.rows == "orders" else EXPENSE_KEYS
    errors: list[ReportsValidationError] = []
    if requested is not None:
        if query.rows is not None and requested.key in keys:
            return requested, errors
        errors.append(
            ReportsValidationError(
                code="unknown_sort_key",
                message=f"Report {query.name} cannot sort by {requested.key}",
                field_name="sort",
            )
        )
    default = rules.default_sorts.get(query.name)
    if default is None or default.key not in keys:
        return None, errors
    return SortSpec(default.key, default.direction), errors


def _search_fields(query: ReportQuery, rules: Rules, fallback: str) -> tuple[str, ...]:
    return tuple(getattr(rules.search, query.search or fallback))


def _scope_orders(query: ReportQuery, inp: ReportInput, f: ReportFilter, ctx: BuildContext) -> list[ServiceOrder]:
    if "orders" not in query.collections:
        return []
    return apply_filter(
        inp.orders, f, tz=ctx.tz, search_fields=_search_fields(query, ctx.rules, "orders")
    )


def _scope_expenses(
    query: ReportQuery, inp: ReportInput, f: ReportFilter, ctx: BuildContext
) -> list[Expense]:
    if "expenses" not in query.collections:
        return []
    return apply_expense_filter(
        inp.expenses,
        f,
        orders=inp.orders,
        tz=ctx.tz,
        search_fields=_search_fields(query, ctx.rules, "expenses"),
    )


def _order_rows(
    orders: Sequence[ServiceOrder],
    sort_ctx: SortContext,
    now: datetime,
) -> tuple[OrderRow, ...]:
    return tuple(
        OrderRow(
            order=o,
            owner_name=sort_ctx.owner_names.get(o.owner_id),
            total_cost=sort_ctx.order_costs.get(o.id, 0.0),
            duration_days=compute_duration_days(o, now),
        )
        for o in orders
    )


def _expense_row(expense: Expense, titles: dict[str, str], now: datetime) -> ExpenseRow:
    parts, service = warranty_expiry(expense)
    return ExpenseRow(
        expense=expense,
        linked_order_title=titles.get(expense.linked_os_id or ""),
        parts_warranty_until=parts,
        service_warranty_until=service,
        under_warranty=under_warranty(expense, now),
    )


def _month_buckets(sums: dict[int, float]) -> tuple[Bucket, ...]:
    return tuple(Bucket(label=MONTH_LABELS[m], sum=v, key=str(m)) for m, v in sums.items())


# --- Query builders ---


def build_managerial(query: ReportQuery, inp: ReportInput, ctx: BuildContext) -> ReportView:
    f = narrow_filter(query, inp.filter)
    orders = _scope_orders(query, inp, f, ctx)
    expenses = _scope_expenses(query, inp, f, ctx)
    reporting = ctx.rules.reporting
    groupings = {
        "by_status": tuple(to_buckets(count_by_status(orders, ctx.catalog), ctx.catalog, drop_zero=True)),
        "by_type": tuple(to_buckets(count_by_type(orders, ctx.catalog), ctx.catalog, drop_zero=True)),
        "by_unit": tuple(count_by_unit(orders, reporting.top_units, reporting.other_label)),
    }
    return ReportView(
        name=query.name,
        filtered_orders=tuple(orders),
        filtered_expenses=tuple(expenses),
        groupings=groupings,
        kpis=compute_kpis(orders, expenses, reporting.median_decimals),
    )


def build_financial(query: ReportQuery, inp: ReportInput, ctx: BuildContext) -> ReportView:
    f = narrow_filter(query, inp.filter)
    orders = _scope_orders(query, inp, f, ctx)
    expenses = _scope_expenses(query, inp, f, ctx)
    groupings = {
        "by_category": tuple(to_buckets(sum_by_category(expenses), ctx.catalog, as_sum=True)),
        "by_unit": tuple(to_buckets(sum_by_unit(expenses), ctx.catalog, as_sum=True)),
        "by_month": _month_buckets(sum_by_month(expenses, f.months, ctx.tz)),
    }
    return ReportView(
        name=query.name,
        filtered_orders=tuple(orders),
        filtered_expenses=tuple(expenses),
        groupings=groupings,
        kpis=compute_kpis(orders, expenses, ctx.rules.reporting.median_decimals),
    )


def build_closed_orders(query: ReportQuery, inp: ReportInput, ctx: BuildContext) -> ReportView:
    f = narrow_filter(query, inp.filter)
    orders = _scope_orders(query, inp, f, ctx)
    sort, errors = resolve_sort(query, inp.sort, ctx.rules)
    sort_ctx = SortContext.from_sources(inp.users, inp.expenses, ctx.rules.priority_weights)
    ordered = apply_sort(orders, sort, sort_ctx)
    linked = visible_expenses(ordered, inp.expenses)
    return ReportView(
        name=query.name,
        filtered_orders=tuple(ordered),
        filtered_expenses=tuple(linked),
        kpis=compute_kpis(ordered, linked, ctx.rules.reporting.median_decimals),
        order_rows=_order_rows(ordered, sort_ctx, ctx.now),
        sort=sort,
        errors=errors,
        success=not errors,
    )


def build_financial_records(query: ReportQuery, inp: ReportInput, ctx: BuildContext) -> ReportView:
    f = narrow_filter(query, inp.filter)
    expenses = _scope_expenses(query, inp, f, ctx)
    sort, errors = resolve_sort(query, inp.sort, ctx.rules)
    ordered = apply_sort(expenses, sort)
    titles = {o.id: o.title for o in inp.orders}
    rows = tuple(_expense_row(e, titles, ctx.now) for e in ordered)
    spend = total_spend(ordered)
    return ReportView(
        name=query.name,
        filtered_expenses=tuple(ordered),
        kpis=Kpis(total_spend=spend),
        expense_rows=rows,
        sort=sort,
        errors=errors,
        success=not errors,
    )


def build_dashboard(query: ReportQuery, inp: ReportInput, ctx: BuildContext) -> ReportView:
    """
    Landing overview: status summary, current-month spend per unit,
    open/done volume per unit and the latest non-done orders as alerts.
    """
    f = narrow_filter(query, inp.filter)
    orders = _scope_orders(query, inp, f, ctx)
    local_now = ctx.now.astimezone(ctx.tz)
    month_filter = f.replace(year=local_now.year, months=frozenset({local_now.month - 1}))
    month_expenses = _scope_expenses(query, inp, month_filter, ctx)

    units = [u for u in ctx.catalog.units if not f.units or u in f.units]
    open_by_unit = {u: 0 for u in units}
    done_by_unit = {u: 0 for u in units}
    for order in orders:
        if order.status == OrderStatus.DONE:
            done_by_unit[order.unit] = done_by_unit.get(order.unit, 0) + 1
        elif not order.is_terminal:
            open_by_unit[order.unit] = open_by_unit.get(order.unit, 0) + 1

    spend_by_unit = {u: 0.0 for u in units}
    for unit, amount in sum_by_unit(month_expenses).items():
        spend_by_unit[unit] = spend_by_unit.get(unit, 0.0) + amount

    alerts = apply_sort(
        [o for o in orders if o.status != OrderStatus.DONE and not o.archived],
        SortSpec("date_opened", "desc"),
    )[: ctx.rules.reporting.alerts_limit]
    sort_ctx = SortContext.from_sources(inp.users, inp.expenses, ctx.rules.priority_weights)

    spend = total_spend(month_expenses)
    return ReportView(
        name=query.name,
        filtered_orders=tuple(orders),
        filtered_expenses=tuple(month_expenses),
        groupings={
            "spend_by_unit": tuple(to_buckets(spend_by_unit, ctx.catalog, as_sum=True)),
            "open_by_unit": tuple(to_buckets(open_by_unit, ctx.catalog)),
            "done_by_unit": tuple(to_buckets(done_by_unit, ctx.catalog)),
        },
        kpis=Kpis(total_count=len(orders), total_spend=spend),
        order_rows=_order_rows(alerts, sort_ctx, ctx.now),
        summary=status_summary(orders),
    )


def build_board(query: ReportQuery, inp: ReportInput, ctx: BuildContext) -> ReportView:
    f = narrow_filter(query, inp.filter)
    orders = _scope_orders(query, inp, f, ctx)
    sort, errors = resolve_sort(query, inp.sort, ctx.rules)
    sort_ctx = SortContext.from_sources(inp.users, inp.expenses, ctx.rules.priority_weights)
    ordered = apply_sort(orders, sort, sort_ctx)

    columns = []
    for key, statuses in BOARD_COLUMNS:
        members = [o for o in ordered if o.status in statuses]
        columns.append(
            Bucket(
                label=ctx.catalog.label(key),
                count=len(members),
                sum=sum((sort_ctx.order_costs.get(o.id, 0.0) for o in members), 0.0),
                key=key,
            )
        )

    return ReportView(
        name=query.name,
        filtered_orders=tuple(ordered),
        groupings={"columns": tuple(columns)},
        kpis=Kpis(
            total_count=len(ordered),
            total_spend=sum((sort_ctx.order_costs.get(o.id, 0.0) for o in ordered), 0.0),
        ),
        order_rows=_order_rows(ordered, sort_ctx, ctx.now),
        sort=sort,
        errors=errors,
        success=not errors,
    )


BUILDERS = {
    "managerial": build_managerial,
    "financial": build_financial,
    "closed_orders": build_closed_orders,
    "financial_records": build_financial_records,
    "dashboard": build_dashboard,
    "board": build_board,
}
