"""
Reports component - named report queries over order/expense snapshots.

Composes filtering, sorting and aggregation into the views the
presentation layer renders: managerial and financial charts, the
closed-orders and financial-records tables, the dashboard and the
kanban board.

Invariants:
- Queries own no state; callers re-run them on every filter/sort change
- Visibility scoping is applied by the caller before the query runs
- Empty snapshots produce empty/zero views, never errors
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from ordertrack.domain.errors import NotFoundError
from ordertrack.rules.models import Rules, default_rules

from ._builder import BUILDERS, QUERIES, make_context
from .models import ReportInput, ReportView
from .ports import TimePort

logger = logging.getLogger(__name__)


def _now(time_port: TimePort | None) -> datetime:
    return time_port.now_utc() if time_port else datetime.now(UTC)


def _run_named(
    name: str,
    inp: ReportInput,
    rules: Rules | None,
    time_port: TimePort | None,
) -> ReportView:
    query = QUERIES[name]
    ctx = make_context(rules or default_rules(), _now(time_port))
    view = BUILDERS[name](query, inp, ctx)
    if view.errors:
        logger.warning(
            "Report %s built with errors: %s",
            name,
            ", ".join(e.code for e in view.errors),
        )
    return view


# --- Component Entry Points ---


def run_managerial(
    inp: ReportInput,
    *,
    rules: Rules | None = None,
    time_port: TimePort | None = None,
) -> ReportView:
    """
    Orders and expenses under year/months/units.

    Groupings: by_status, by_type (zero buckets dropped) and by_unit
    (top units plus "Other"). KPIs: count, spend, average ticket, PMA,
    completion rate, active units.
    """
    return _run_named("managerial", inp, rules, time_port)


def run_financial(
    inp: ReportInput,
    *,
    rules: Rules | None = None,
    time_port: TimePort | None = None,
) -> ReportView:
    """Expense groupings by category, unit and month."""
    return _run_named("financial", inp, rules, time_port)


def run_closed_orders(
    inp: ReportInput,
    *,
    rules: Rules | None = None,
    time_port: TimePort | None = None,
) -> ReportView:
    """
    Archived orders table.

    Restricted to archived orders regardless of the ambient filter. Rows
    carry linked cost, owner name and duration.
    """
    return _run_named("closed_orders", inp, rules, time_port)


def run_financial_records(
    inp: ReportInput,
    *,
    rules: Rules | None = None,
    time_port: TimePort | None = None,
) -> ReportView:
    """Expenses whose linked order is archived."""
    return _run_named("financial_records", inp, rules, time_port)


def run_dashboard(
    inp: ReportInput,
    *,
    rules: Rules | None = None,
    time_port: TimePort | None = None,
) -> ReportView:
    return _run_named("dashboard", inp, rules, time_port)


def run_board(
    inp: ReportInput,
    *,
    rules: Rules | None = None,
    time_port: TimePort | None = None,
) -> ReportView:
    return _run_named("board", inp, rules, time_port)


def report_names() -> list[str]:
    return list(QUERIES)


def run(
    name: str,
    inp: ReportInput,
    *,
    rules: Rules | None = None,
    time_port: TimePort | None = None,
) -> ReportView:
    """
    Main entry point for the reports component.

    Dispatches on the report name. Raises NotFoundError for unknown names.
    """
    if name not in QUERIES:
        raise NotFoundError("Report", name)
    return _run_named(name, inp, rules, time_port)
