"""
Reports component - named report views.
"""

from ._builder import BOARD_COLUMNS, QUERIES, narrow_filter
from .component import (
    report_names,
    run,
    run_board,
    run_closed_orders,
    run_dashboard,
    run_financial,
    run_financial_records,
    run_managerial,
)
from .models import (
    ExpenseRow,
    OrderRow,
    ReportInput,
    ReportQuery,
    ReportsValidationError,
    ReportView,
)
from .ports import TimePort

__all__ = [
    "BOARD_COLUMNS",
    "QUERIES",
    "ExpenseRow",
    "OrderRow",
    "ReportInput",
    "ReportQuery",
    "ReportView",
    "ReportsValidationError",
    "TimePort",
    "narrow_filter",
    "report_names",
    "run",
    "run_board",
    "run_closed_orders",
    "run_dashboard",
    "run_financial",
    "run_financial_records",
    "run_managerial",
]
