"""
Reports component unit tests.

Named queries over a small fixed snapshot with a frozen clock.
"""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from ordertrack.components.filtering import ReportFilter
from ordertrack.components.reports import (
    QUERIES,
    ReportInput,
    narrow_filter,
    report_names,
    run,
    run_board,
    run_closed_orders,
    run_dashboard,
    run_financial,
    run_financial_records,
    run_managerial,
)
from ordertrack.components.sorting import SortSpec
from ordertrack.domain.entities import (
    Expense,
    ExpenseCategory,
    OrderPriority,
    OrderStatus,
    OrderType,
    ServiceOrder,
    UserRef,
)
from ordertrack.domain.errors import NotFoundError
from ordertrack.rules.models import Rules, default_rules

# --- Mock Implementations ---


class MockTimePort:
    def __init__(self, fixed: datetime) -> None:
        self._now = fixed

    def now_utc(self) -> datetime:
        return self._now


def _d(month: int, day: int, year: int = 2026) -> datetime:
    return datetime(year, month, day, 12, tzinfo=UTC)


# --- Fixtures ---


@pytest.fixture
def rules() -> Rules:
    return default_rules()


@pytest.fixture
def time_port() -> MockTimePort:
    return MockTimePort(_d(3, 15))


@pytest.fixture
def orders() -> list[ServiceOrder]:
    return [
        ServiceOrder(
            id="OS-26001",
            title="Air conditioner",
            unit="Aldeota",
            owner_id="u1",
            priority=OrderPriority.LOW,
            date_opened=_d(3, 2),
        ),
        ServiceOrder(
            id="OS-26002",
            title="Freezer repair",
            unit="Cambeba",
            owner_id="u2",
            status=OrderStatus.DONE,
            date_opened=_d(1, 5),
            date_closed=_d(1, 7),
            archived=True,
        ),
        ServiceOrder(
            id="OS-26003",
            title="Door",
            unit="Aldeota",
            owner_id="u1",
            status=OrderStatus.CANCELLED,
            date_opened=_d(2, 10),
            date_closed=_d(2, 11),
            archived=True,
        ),
        ServiceOrder(
            id="OS-26004",
            title="Filter swap",
            unit="Eusébio",
            owner_id="u2",
            type=OrderType.PREVENTIVE,
            priority=OrderPriority.HIGH,
            status=OrderStatus.IN_PROGRESS,
            date_opened=_d(3, 10),
        ),
        ServiceOrder(
            id="OS-25005",
            title="Lighting",
            unit="Aldeota",
            owner_id="u1",
            status=OrderStatus.DONE,
            date_opened=_d(12, 1, 2025),
            date_closed=_d(12, 3, 2025),
        ),
    ]


@pytest.fixture
def expenses() -> list[Expense]:
    return [
        Expense(
            id="FIN-001",
            item="Compressor",
            value=450,
            date=_d(1, 6),
            supplier="Frio Norte",
            unit="Cambeba",
            category=ExpenseCategory.PARTS,
            linked_os_id="OS-26002",
        ),
        Expense(
            id="FIN-002",
            item="Technician visit",
            value=100,
            date=_d(3, 5),
            unit="Aldeota",
            category=ExpenseCategory.LABOR,
            linked_os_id="OS-26001",
        ),
        Expense(
            id="FIN-003",
            item="Hinge",
            value=30,
            date=_d(2, 11),
            unit="Aldeota",
            category=ExpenseCategory.PARTS,
            linked_os_id="OS-26003",
        ),
        Expense(
            id="FIN-004",
            item="Cleaning supplies",
            value=20,
            date=_d(3, 12),
            unit="Eusébio",
            category=ExpenseCategory.OTHER,
        ),
    ]


@pytest.fixture
def users() -> list[UserRef]:
    return [UserRef(id="u1", name="Marta"), UserRef(id="u2", name="Bruno", is_admin=True)]


@pytest.fixture
def make_input(orders, expenses, users):
    def _make(f: ReportFilter | None = None, sort: SortSpec | None = None) -> ReportInput:
        return ReportInput(
            orders=orders,
            expenses=expenses,
            filter=f or ReportFilter(),
            sort=sort,
            users=users,
        )

    return _make


def _keys(view, grouping: str) -> list[str | None]:
    return [b.key for b in view.groupings[grouping]]


# --- Tests ---


class TestRegistry:
    def test_names(self) -> None:
        assert set(report_names()) == {
            "managerial",
            "financial",
            "closed_orders",
            "financial_records",
            "dashboard",
            "board",
        }

    def test_unknown_report(self, make_input) -> None:
        with pytest.raises(NotFoundError):
            run("nope", make_input())

    def test_narrow_filter_forces_archived(self) -> None:
        f = ReportFilter(year=2026, owners={"u1"}, archived=False)
        narrowed = narrow_filter(QUERIES["closed_orders"], f)
        assert narrowed == ReportFilter(year=2026, archived=True)


class TestManagerial:
    def test_groupings_and_kpis(self, make_input, rules, time_port) -> None:
        view = run_managerial(make_input(ReportFilter(year=2026)), rules=rules, time_port=time_port)

        assert [o.id for o in view.filtered_orders] == [
            "OS-26001",
            "OS-26002",
            "OS-26003",
            "OS-26004",
        ]
        assert _keys(view, "by_status") == ["done", "in_progress", "open", "cancelled"]
        assert _keys(view, "by_type") == ["preventive", "corrective"]
        assert [(b.key, b.count) for b in view.groupings["by_unit"]] == [
            ("Aldeota", 2),
            ("Cambeba", 1),
            ("Eusébio", 1),
        ]
        assert view.kpis.total_count == 4
        assert view.kpis.total_spend == 600
        assert view.kpis.avg_ticket == 150
        assert view.kpis.median_resolution_days == 1.5
        assert view.kpis.completion_rate == 25
        assert view.kpis.active_units == 3
        assert view.success

    def test_ignores_search_and_archived(self, make_input, rules) -> None:
        f = ReportFilter(year=2026, search_text="zzz", archived=True, owners={"nobody"})
        assert len(run_managerial(make_input(f), rules=rules).filtered_orders) == 4

    def test_month_filter(self, make_input, rules) -> None:
        view = run_managerial(make_input(ReportFilter(year=2026, months={2})), rules=rules)
        assert [o.id for o in view.filtered_orders] == ["OS-26001", "OS-26004"]
        assert view.kpis.total_spend == 120

    def test_empty_snapshot(self, rules) -> None:
        view = run_managerial(ReportInput(), rules=rules)
        assert view.kpis.total_count == 0
        assert view.kpis.avg_ticket == 0
        assert view.kpis.median_resolution_days == 0
        assert view.groupings["by_status"] == ()


class TestFinancial:
    def test_groupings(self, make_input, rules) -> None:
        view = run_financial(make_input(ReportFilter(year=2026)), rules=rules)
        assert [(b.key, b.sum) for b in view.groupings["by_category"]] == [
            ("parts", 480),
            ("labor", 100),
            ("other", 20),
        ]
        assert [(b.key, b.sum) for b in view.groupings["by_unit"]] == [
            ("Cambeba", 450),
            ("Aldeota", 130),
            ("Eusébio", 20),
        ]
        months = view.groupings["by_month"]
        assert len(months) == 12
        assert [b.sum for b in months[:3]] == [450, 30, 120]
        assert months[0].label == "Jan"

    def test_month_selection(self, make_input, rules) -> None:
        view = run_financial(make_input(ReportFilter(year=2026, months={2, 0})), rules=rules)
        assert _keys(view, "by_month") == ["0", "2"]
        assert view.kpis.total_spend == 570


class TestClosedOrders:
    def test_only_archived_default_sort(self, make_input, rules, time_port) -> None:
        view = run_closed_orders(make_input(), rules=rules, time_port=time_port)
        assert [r.order.id for r in view.order_rows] == ["OS-26003", "OS-26002"]
        assert view.sort == SortSpec("date_closed", "desc")
        first, second = view.order_rows
        assert (first.total_cost, first.duration_days) == (30, 1)
        assert (second.total_cost, second.duration_days, second.owner_name) == (450, 2, "Bruno")

    def test_ambient_archived_flag_ignored(self, make_input, rules) -> None:
        view = run_closed_orders(make_input(ReportFilter(archived=False)), rules=rules)
        assert len(view.order_rows) == 2

    def test_search_title_and_id_only(self, make_input, rules) -> None:
        found = run_closed_orders(make_input(ReportFilter(search_text="freezer")), rules=rules)
        assert [o.id for o in found.filtered_orders] == ["OS-26002"]
        by_unit = run_closed_orders(make_input(ReportFilter(search_text="cambeba")), rules=rules)
        assert by_unit.filtered_orders == ()

    def test_sort_by_cost(self, make_input, rules) -> None:
        view = run_closed_orders(make_input(sort=SortSpec("total_cost", "desc")), rules=rules)
        assert [o.id for o in view.filtered_orders] == ["OS-26002", "OS-26003"]

    def test_unknown_sort_key_reports_error(self, make_input, rules) -> None:
        view = run_closed_orders(make_input(sort=SortSpec("bogus")), rules=rules)
        assert not view.success
        assert view.errors[0].code == "unknown_sort_key"
        assert view.sort == SortSpec("date_closed", "desc")
        assert len(view.order_rows) == 2


class TestFinancialRecords:
    def test_expenses_of_archived_orders(self, make_input, rules) -> None:
        view = run_financial_records(make_input(), rules=rules)
        assert [r.expense.id for r in view.expense_rows] == ["FIN-003", "FIN-001"]
        assert view.expense_rows[1].linked_order_title == "Freezer repair"
        assert view.kpis.total_spend == 480

    def test_search_by_linked_order(self, make_input, rules) -> None:
        view = run_financial_records(make_input(ReportFilter(search_text="os-26002")), rules=rules)
        assert [e.id for e in view.filtered_expenses] == ["FIN-001"]

    def test_units(self, make_input, rules) -> None:
        view = run_financial_records(make_input(ReportFilter(units={"Aldeota"})), rules=rules)
        assert [e.id for e in view.filtered_expenses] == ["FIN-003"]

    def test_warranty_columns(self, orders, expenses, rules, time_port) -> None:
        expenses[0] = expenses[0].model_copy(update={"warranty_parts_months": 3})
        view = run_financial_records(
            ReportInput(orders=orders, expenses=expenses), rules=rules, time_port=time_port
        )
        rows = {r.expense.id: r for r in view.expense_rows}
        assert rows["FIN-001"].parts_warranty_until == _d(4, 6)
        assert rows["FIN-001"].service_warranty_until is None
        assert rows["FIN-001"].under_warranty
        assert not rows["FIN-003"].under_warranty


class TestDashboard:
    def test_summary_spend_and_alerts(self, make_input, rules, time_port) -> None:
        view = run_dashboard(make_input(), rules=rules, time_port=time_port)

        assert view.summary is not None
        assert (view.summary.open, view.summary.in_progress, view.summary.done) == (1, 1, 2)
        assert view.kpis.total_spend == 120
        spend = {b.key: b.sum for b in view.groupings["spend_by_unit"]}
        assert spend["Aldeota"] == 100
        assert spend["Eusébio"] == 20
        assert spend["Cambeba"] == 0
        assert [r.order.id for r in view.order_rows] == ["OS-26004", "OS-26001"]

    def test_open_and_done_volume(self, make_input, rules, time_port) -> None:
        view = run_dashboard(make_input(), rules=rules, time_port=time_port)
        opened = {b.key: b.count for b in view.groupings["open_by_unit"]}
        done = {b.key: b.count for b in view.groupings["done_by_unit"]}
        assert opened["Aldeota"] == 1
        assert opened["Eusébio"] == 1
        assert done["Aldeota"] == 1
        assert done["Cambeba"] == 1

    def test_unit_scope(self, make_input, rules, time_port) -> None:
        view = run_dashboard(make_input(ReportFilter(units={"Aldeota"})), rules=rules, time_port=time_port)
        assert _keys(view, "spend_by_unit") == ["Aldeota"]
        assert [r.order.id for r in view.order_rows] == ["OS-26001"]

    def test_alert_limit(self, make_input, rules, time_port) -> None:
        limited = rules.model_copy(
            update={"reporting": rules.reporting.model_copy(update={"alerts_limit": 1})}
        )
        view = run_dashboard(make_input(), rules=limited, time_port=time_port)
        assert len(view.order_rows) == 1


class TestBoard:
    def test_active_orders_in_columns(self, make_input, rules, time_port) -> None:
        view = run_board(make_input(), rules=rules, time_port=time_port)
        assert {o.id for o in view.filtered_orders} == {"OS-26001", "OS-26004", "OS-25005"}
        columns = {b.key: (b.count, b.sum) for b in view.groupings["columns"]}
        assert columns == {
            "open": (1, 100),
            "waiting": (0, 0),
            "in_progress": (1, 0),
            "closed": (1, 0),
        }

    def test_archived_flag_forced(self, make_input, rules) -> None:
        view = run_board(make_input(ReportFilter(archived=True)), rules=rules)
        assert all(not o.archived for o in view.filtered_orders)

    def test_owner_and_type_filters(self, make_input, rules) -> None:
        view = run_board(make_input(ReportFilter(owners={"u2"})), rules=rules)
        assert [o.id for o in view.filtered_orders] == ["OS-26004"]
        view = run_board(make_input(ReportFilter(types={"corrective"})), rules=rules)
        assert [o.id for o in view.filtered_orders] == ["OS-26001", "OS-25005"]

    def test_priority_sort_and_duration(self, make_input, rules, time_port) -> None:
        view = run_board(make_input(sort=SortSpec("priority", "desc")), rules=rules, time_port=time_port)
        assert [r.order.id for r in view.order_rows] == ["OS-26004", "OS-25005", "OS-26001"]
        durations = {r.order.id: r.duration_days for r in view.order_rows}
        assert durations["OS-26001"] == 13
        assert durations["OS-25005"] == 2
