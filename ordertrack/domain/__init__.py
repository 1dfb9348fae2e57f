from ordertrack.domain.catalog import Catalog, default_catalog
from ordertrack.domain.entities import (
    TERMINAL_STATUSES,
    Expense,
    ExpenseCategory,
    HistoryLog,
    OrderPriority,
    OrderStatus,
    OrderType,
    PaymentMethod,
    ServiceOrder,
    Unit,
    UserRef,
)
from ordertrack.domain.errors import (
    InvalidTransitionError,
    NotArchivableError,
    NotFoundError,
    OrderTrackError,
)

__all__ = [
    "Catalog",
    "default_catalog",
    "TERMINAL_STATUSES",
    "Expense",
    "ExpenseCategory",
    "HistoryLog",
    "OrderPriority",
    "OrderStatus",
    "OrderType",
    "PaymentMethod",
    "ServiceOrder",
    "Unit",
    "UserRef",
    "InvalidTransitionError",
    "NotArchivableError",
    "NotFoundError",
    "OrderTrackError",
]
