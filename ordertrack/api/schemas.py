import re
from dataclasses import asdict
from datetime import date, datetime
from typing import Annotated, Any, Literal

from pydantic import BaseModel, BeforeValidator, Field

from ordertrack.components.reports import ReportView
from ordertrack.domain.entities import (
    Expense,
    OrderPriority,
    OrderStatus,
    OrderType,
    ServiceOrder,
)

# --- Requests ---

_FORM_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def _form_date(value: Any) -> Any:
    """Bare YYYY-MM-DD strings are calendar days, not UTC midnights."""
    if isinstance(value, str) and _FORM_DATE.match(value):
        return date.fromisoformat(value)
    return value


FormDate = Annotated[datetime | date, BeforeValidator(_form_date)]


class CreateOrderRequest(BaseModel):
    title: str = Field(min_length=1)
    description: str = ""
    unit: str
    type: OrderType = OrderType.CORRECTIVE
    priority: OrderPriority = OrderPriority.MEDIUM
    owner_id: str | None = None
    date_opened: FormDate | None = None
    date_forecast: FormDate | None = None


class EditOrderRequest(BaseModel):
    title: str | None = None
    description: str | None = None
    unit: str | None = None
    type: OrderType | None = None
    priority: OrderPriority | None = None
    date_opened: FormDate | None = None
    date_forecast: FormDate | None = None


class TransitionRequest(BaseModel):
    status: OrderStatus


class LogRequest(BaseModel):
    message: str = Field(min_length=1)


class DelegateRequest(BaseModel):
    owner_id: str


# --- Responses ---


class BucketResponse(BaseModel):
    label: str
    key: str | None = None
    count: int
    sum: float


class KpisResponse(BaseModel):
    total_count: int
    total_spend: float
    avg_ticket: float
    median_resolution_days: float
    completion_rate: int
    active_units: int


class StatusSummaryResponse(BaseModel):
    open: int
    in_progress: int
    done: int


class OrderRowResponse(BaseModel):
    order: ServiceOrder
    owner_name: str | None
    total_cost: float
    duration_days: int


class ExpenseRowResponse(BaseModel):
    expense: Expense
    linked_order_title: str | None
    parts_warranty_until: datetime | None = None
    service_warranty_until: datetime | None = None
    under_warranty: bool = False


class SortResponse(BaseModel):
    key: str
    direction: Literal["asc", "desc"]


class ErrorItem(BaseModel):
    code: str
    message: str
    field_name: str | None = None


class ReportResponse(BaseModel):
    name: str
    order_count: int
    expense_count: int
    groupings: dict[str, list[BucketResponse]]
    kpis: KpisResponse
    order_rows: list[OrderRowResponse]
    expense_rows: list[ExpenseRowResponse]
    sort: SortResponse | None
    summary: StatusSummaryResponse | None
    errors: list[ErrorItem]

    @classmethod
    def from_view(cls, view: ReportView) -> "ReportResponse":
        return cls(
            name=view.name,
            order_count=len(view.filtered_orders),
            expense_count=len(view.filtered_expenses),
            groupings={
                name: [
                    BucketResponse(label=b.label, key=b.key, count=b.count, sum=b.sum)
                    for b in buckets
                ]
                for name, buckets in view.groupings.items()
            },
            kpis=KpisResponse(**asdict(view.kpis)),
            order_rows=[
                OrderRowResponse(
                    order=r.order,
                    owner_name=r.owner_name,
                    total_cost=r.total_cost,
                    duration_days=r.duration_days,
                )
                for r in view.order_rows
            ],
            expense_rows=[ExpenseRowResponse(**asdict(r)) for r in view.expense_rows],
            sort=SortResponse(key=view.sort.key, direction=view.sort.direction) if view.sort else None,
            summary=StatusSummaryResponse(**asdict(view.summary)) if view.summary else None,
            errors=[
                ErrorItem(code=e.code, message=e.message, field_name=e.field_name)
                for e in view.errors
            ],
        )
