import calendar
from datetime import datetime

from ordertrack.domain.entities import Expense


def add_months(start: datetime, months: int) -> datetime:
    """Calendar month arithmetic, clamping to the last day of short months."""
    index = start.month - 1 + months
    year = start.year + index // 12
    month = index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return start.replace(year=year, month=month, day=day)


def warranty_expiry(expense: Expense) -> tuple[datetime | None, datetime | None]:
    """Return (parts, service) warranty expiry dates; None where no warranty applies."""
    parts = (
        add_months(expense.date, expense.warranty_parts_months)
        if expense.warranty_parts_months
        else None
    )
    service = (
        add_months(expense.date, expense.warranty_service_months)
        if expense.warranty_service_months
        else None
    )
    return parts, service


def under_warranty(expense: Expense, as_of: datetime) -> bool:
    parts, service = warranty_expiry(expense)
    return any(end is not None and as_of <= end for end in (parts, service))
