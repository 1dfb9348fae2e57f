"""
Aggregator - grouped counts/sums and scalar KPIs over filtered views.

Functional Core - no I/O, no caching, never raises on empty input.

Key behaviors:
- Status/type counts are zero-filled in catalog order
- Unit counts collapse everything past the top N into one keyless "Other" bucket
- Monthly sums use 12 zero-filled buckets, narrowed to selected months
- Median resolution uses the same day rounding as order cards
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime, tzinfo

from ordertrack.domain.catalog import Catalog, default_catalog
from ordertrack.domain.entities import (
    Expense,
    OrderStatus,
    ServiceOrder,
    enum_value,
)
from ordertrack.domain.state import compute_duration_days

from .models import Bucket, Kpis, StatusSummary

# --- Counts ---


def _count_in_order(values: Iterable[str], order: Sequence[str]) -> dict[str, int]:
    counts: dict[str, int] = {key: 0 for key in order}
    for value in values:
        counts[value] = counts.get(value, 0) + 1
    return counts


def count_by_status(
    orders: Iterable[ServiceOrder],
    catalog: Catalog | None = None,
) -> dict[str, int]:
    cat = catalog or default_catalog()
    return _count_in_order((enum_value(o.status) for o in orders), cat.statuses)


def count_by_type(
    orders: Iterable[ServiceOrder],
    catalog: Catalog | None = None,
) -> dict[str, int]:
    cat = catalog or default_catalog()
    return _count_in_order((enum_value(o.type) for o in orders), cat.order_types)


def count_by_unit(
    orders: Iterable[ServiceOrder],
    top_n: int = 5,
    other_label: str = "Other",
) -> list[Bucket]:
    """
    Units with at least one order, descending by count.

    Each unit bucket is keyed by its unit name. When more than top_n + 1
    units are present the tail is summed into one `other_label` bucket with
    no key, so a real unit sharing that label stays a separate entry. A
    single leftover unit keeps its own name.
    """
    counts: dict[str, int] = {}
    for order in orders:
        counts[order.unit] = counts.get(order.unit, 0) + 1

    ranked = sorted(counts.items(), key=lambda kv: kv[1], reverse=True)
    if len(ranked) <= top_n + 1:
        return [Bucket(label=unit, count=c, key=unit) for unit, c in ranked]

    buckets = [Bucket(label=unit, count=c, key=unit) for unit, c in ranked[:top_n]]
    buckets.append(Bucket(label=other_label, count=sum(c for _, c in ranked[top_n:])))
    return buckets


def status_summary(orders: Iterable[ServiceOrder]) -> StatusSummary:
    opened = in_progress = done = 0
    for order in orders:
        if order.status == OrderStatus.OPEN:
            opened += 1
        elif order.status in (OrderStatus.IN_PROGRESS, OrderStatus.WAITING):
            in_progress += 1
        elif order.status == OrderStatus.DONE:
            done += 1
    return StatusSummary(open=opened, in_progress=in_progress, done=done)


# --- Sums ---


def total_spend(expenses: Iterable[Expense]) -> float:
    return sum((e.value for e in expenses), 0.0)


def sum_by_category(expenses: Iterable[Expense]) -> dict[str, float]:
    """Category totals, descending by amount (ties keep first-seen order)."""
    sums: dict[str, float] = {}
    for expense in expenses:
        key = enum_value(expense.category)
        sums[key] = sums.get(key, 0.0) + expense.value
    return dict(sorted(sums.items(), key=lambda kv: kv[1], reverse=True))


def sum_by_unit(
    expenses: Iterable[Expense],
    catalog: Catalog | None = None,
) -> dict[str, float]:
    """
    Unit totals. With a catalog every known unit is present (zero-filled,
    catalog order) and unknown units are appended; without one only the
    units seen appear, in first-seen order.
    """
    sums: dict[str, float] = {u: 0.0 for u in catalog.units} if catalog else {}
    for expense in expenses:
        sums[expense.unit] = sums.get(expense.unit, 0.0) + expense.value
    return sums


def _local_month(moment: datetime, tz: tzinfo | None) -> int:
    return (moment.astimezone(tz) if tz else moment).month - 1


def sum_by_month(
    expenses: Iterable[Expense],
    months: Iterable[int] | None = None,
    tz: tzinfo | None = None,
) -> dict[int, float]:
    """
    Zero-based month index -> total, always chronological.

    All 12 months unless `months` narrows the selection.
    """
    buckets = [0.0] * 12
    for expense in expenses:
        buckets[_local_month(expense.date, tz)] += expense.value

    selected = sorted(set(months)) if months else range(12)
    return {m: buckets[m] for m in selected if 0 <= m <= 11}


# --- KPIs ---


def median_resolution_days(orders: Iterable[ServiceOrder], decimals: int = 1) -> float:
    """
    PMA: median of closed-order durations in days.

    Odd counts return the middle duration, even counts the mean of the
    two middle ones rounded to `decimals`. No closed orders gives 0.
    """
    durations = sorted(
        compute_duration_days(o) for o in orders if o.date_closed is not None
    )
    if not durations:
        return 0
    mid = len(durations) // 2
    if len(durations) % 2:
        return durations[mid]
    return round((durations[mid - 1] + durations[mid]) / 2, decimals)


def average_ticket(total: float, order_count: int) -> float:
    if order_count == 0:
        return 0
    return total / order_count


def completion_rate(orders: Sequence[ServiceOrder]) -> int:
    """Share of done orders as a whole percentage."""
    if not orders:
        return 0
    done = sum(1 for o in orders if o.status == OrderStatus.DONE)
    return round(done / len(orders) * 100)


def compute_kpis(
    orders: Sequence[ServiceOrder],
    expenses: Iterable[Expense],
    decimals: int = 1,
) -> Kpis:
    spend = total_spend(expenses)
    return Kpis(
        total_count=len(orders),
        total_spend=spend,
        avg_ticket=average_ticket(spend, len(orders)),
        median_resolution_days=median_resolution_days(orders, decimals),
        completion_rate=completion_rate(orders),
        active_units=len({o.unit for o in orders}),
    )


# --- Presentation helpers ---


def to_buckets(
    values: Mapping[str, int] | Mapping[str, float],
    catalog: Catalog | None = None,
    *,
    as_sum: bool = False,
    drop_zero: bool = False,
) -> list[Bucket]:
    """Turn a grouping map into labelled buckets, keeping map order."""
    cat = catalog or default_catalog()
    buckets = []
    for key, amount in values.items():
        if drop_zero and not amount:
            continue
        if as_sum:
            buckets.append(Bucket(label=cat.label(key), sum=float(amount), key=key))
        else:
            buckets.append(Bucket(label=cat.label(key), count=int(amount), key=key))
    return buckets
