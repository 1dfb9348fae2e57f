import math
from collections.abc import Iterable
from datetime import UTC, date, datetime, timedelta, tzinfo
from typing import Any

from ordertrack.domain.entities import (
    TERMINAL_STATUSES,
    HistoryLog,
    OrderStatus,
    ServiceOrder,
)
from ordertrack.domain.errors import InvalidTransitionError, NotArchivableError

DAY = timedelta(days=1)

# Fields a form edit may change. Status, closing date, archival and history
# only move through the functions below.
EDITABLE_FIELDS = frozenset(
    {
        "title",
        "description",
        "unit",
        "type",
        "priority",
        "owner_id",
        "date_opened",
        "date_forecast",
    }
)


def is_terminal(status: OrderStatus | str) -> bool:
    return OrderStatus(status) in TERMINAL_STATUSES


def can_transition(order: ServiceOrder, new_status: OrderStatus | str) -> bool:
    """
    Any status may follow any other; only archival freezes an order.
    """
    OrderStatus(new_status)
    return not order.archived


def _ensure_mutable(order: ServiceOrder, action: str) -> None:
    if order.archived:
        raise InvalidTransitionError(f"Order {order.id} is archived; cannot {action}")


def transition(
    order: ServiceOrder,
    new_status: OrderStatus | str,
    now: datetime,
    actor_id: str | None = None,
) -> ServiceOrder:
    """
    Return a NEW ServiceOrder with the updated status and closing date.
    Raises InvalidTransitionError if the order is archived.
    """
    target = OrderStatus(new_status)
    if not can_transition(order, target):
        raise InvalidTransitionError(
            f"Order {order.id} is archived; status cannot change to {target.value}"
        )

    if order.status == target:
        return order.model_copy()

    updates: dict[str, Any] = {"status": target}
    if target in TERMINAL_STATUSES:
        if order.date_closed is None:
            updates["date_closed"] = now
    else:
        updates["date_closed"] = None

    log = HistoryLog(
        date=now,
        message=f"Status changed from {order.status.value} to {target.value}",
        user_id=actor_id,
    )
    updates["history"] = [*order.history, log]

    return order.model_copy(update=updates)


def archive(order: ServiceOrder, now: datetime, actor_id: str | None = None) -> ServiceOrder:
    """
    Document a closed order. One-way: there is no unarchive.
    """
    _ensure_mutable(order, "archive again")
    if order.status not in TERMINAL_STATUSES:
        raise NotArchivableError(
            f"Order {order.id} is {order.status.value}; only done or cancelled orders can be archived"
        )

    log = HistoryLog(date=now, message="Order documented and archived", user_id=actor_id)
    return order.model_copy(update={"archived": True, "history": [*order.history, log]})


def append_log(
    order: ServiceOrder,
    message: str,
    now: datetime,
    user_id: str | None = None,
) -> ServiceOrder:
    _ensure_mutable(order, "add history")
    if not message or not message.strip():
        raise ValueError("History message is required")
    log = HistoryLog(date=now, message=message.strip(), user_id=user_id)
    return order.model_copy(update={"history": [*order.history, log]})


def delegate(
    order: ServiceOrder,
    new_owner_id: str,
    now: datetime,
    actor_id: str | None = None,
    owner_name: str | None = None,
) -> ServiceOrder:
    """Transfer responsibility, recording the handover in the history."""
    _ensure_mutable(order, "delegate")
    if new_owner_id == order.owner_id:
        return order.model_copy()
    log = HistoryLog(
        date=now,
        message=f"Responsibility transferred to {owner_name or new_owner_id}",
        user_id=actor_id,
    )
    return order.model_copy(
        update={"owner_id": new_owner_id, "history": [*order.history, log]}
    )


def edit(order: ServiceOrder, **fields: Any) -> ServiceOrder:
    """Apply a form edit. Archived orders are read-only."""
    _ensure_mutable(order, "edit")
    unknown = set(fields) - EDITABLE_FIELDS
    if unknown:
        raise ValueError(f"Fields not editable: {', '.join(sorted(unknown))}")
    # Round-trip through validation so unit/date normalization applies
    return ServiceOrder.model_validate({**order.model_dump(), **fields})


def compute_duration_days(order: ServiceOrder, as_of: datetime | None = None) -> int:
    """
    Whole days between opening and closing, rounded up.

    Open orders are measured against as_of (default: current UTC time).
    Shared by card display and the median resolution KPI.
    """
    end = order.date_closed or as_of or datetime.now(UTC)
    if end.tzinfo is None:
        end = end.replace(tzinfo=UTC)
    elapsed = abs((end - order.date_opened).total_seconds())
    return math.ceil(elapsed / DAY.total_seconds())


def group_logs_by_day(
    logs: Iterable[HistoryLog],
    tz: tzinfo | None = None,
) -> list[tuple[date, list[HistoryLog]]]:
    """Group logs by calendar day, ascending, keeping input order for equal dates."""
    ordered = sorted(logs, key=lambda log: log.date)
    groups: list[tuple[date, list[HistoryLog]]] = []
    for log in ordered:
        day = (log.date.astimezone(tz) if tz else log.date).date()
        if groups and groups[-1][0] == day:
            groups[-1][1].append(log)
        else:
            groups.append((day, [log]))
    return groups
