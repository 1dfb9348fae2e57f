from datetime import UTC, datetime
from enum import Enum
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator, model_validator

# --- Enums ---


class OrderStatus(str, Enum):
    OPEN = "open"
    WAITING = "waiting"
    IN_PROGRESS = "in_progress"
    DONE = "done"
    CANCELLED = "cancelled"


class OrderType(str, Enum):
    PREVENTIVE = "preventive"
    CORRECTIVE = "corrective"
    INSTALLATION = "installation"
    OTHER = "other"


class OrderPriority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ExpenseCategory(str, Enum):
    PARTS = "parts"
    LABOR = "labor"
    OTHER = "other"


class PaymentMethod(str, Enum):
    CASH = "cash"
    BOLETO = "boleto"
    PIX = "pix"
    CREDIT_CARD = "credit_card"
    OTHER = "other"


class Unit(str, Enum):
    """Facility locations shipped with the default catalog."""

    ALDEOTA = "Aldeota"
    PARQUELANDIA = "Parquelândia"
    CAMBEBA = "Cambeba"
    EUSEBIO = "Eusébio"
    POKE = "Poke (Santos Dumont)"
    ESTOQUE = "Estoque"
    FABRICA = "Fábrica"
    ADMINISTRATIVO = "Administrativo"


TERMINAL_STATUSES = frozenset({OrderStatus.DONE, OrderStatus.CANCELLED})


def as_utc(value: datetime) -> datetime:
    """Naive datetimes are treated as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def enum_value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


# --- Users ---


class UserRef(BaseModel):
    id: str
    name: str
    is_admin: bool = False


# --- Service Orders ---


class HistoryLog(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid4()))
    date: datetime
    message: str
    user_id: str | None = None

    @field_validator("date")
    @classmethod
    def _utc_date(cls, v: datetime) -> datetime:
        return as_utc(v)


class ServiceOrder(BaseModel):
    """
    A maintenance request against a facility unit.

    Invariants:
    - date_closed is set if and only if status is done or cancelled
    - archived implies a terminal status
    """

    id: str
    title: str
    description: str = ""
    unit: str
    type: OrderType = OrderType.CORRECTIVE
    priority: OrderPriority = OrderPriority.MEDIUM
    status: OrderStatus = OrderStatus.OPEN
    owner_id: str
    date_opened: datetime
    date_forecast: datetime | None = None
    date_closed: datetime | None = None
    archived: bool = False
    history: list[HistoryLog] = Field(default_factory=list)

    @field_validator("unit", mode="before")
    @classmethod
    def _unit_value(cls, v: Any) -> Any:
        return enum_value(v)

    @field_validator("date_opened", "date_forecast", "date_closed")
    @classmethod
    def _utc_dates(cls, v: datetime | None) -> datetime | None:
        return as_utc(v) if v is not None else None

    @model_validator(mode="after")
    def _check_lifecycle(self) -> "ServiceOrder":
        terminal = self.status in TERMINAL_STATUSES
        if terminal and self.date_closed is None:
            raise ValueError(f"{self.id}: status {self.status.value} requires date_closed")
        if not terminal and self.date_closed is not None:
            raise ValueError(f"{self.id}: date_closed set on non-terminal status {self.status.value}")
        if self.archived and not terminal:
            raise ValueError(f"{self.id}: archived orders must be done or cancelled")
        return self

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES


# --- Expenses ---


class Expense(BaseModel):
    id: str
    item: str
    value: float = Field(ge=0)
    date: datetime
    supplier: str = ""
    category: ExpenseCategory = ExpenseCategory.OTHER
    payment_method: PaymentMethod = PaymentMethod.PIX
    unit: str
    warranty_parts_months: int = Field(default=0, ge=0)
    warranty_service_months: int = Field(default=0, ge=0)
    # Weak reference: no ownership, no cascade
    linked_os_id: str | None = None

    @field_validator("unit", mode="before")
    @classmethod
    def _unit_value(cls, v: Any) -> Any:
        return enum_value(v)

    @field_validator("date")
    @classmethod
    def _utc_date(cls, v: datetime) -> datetime:
        return as_utc(v)
