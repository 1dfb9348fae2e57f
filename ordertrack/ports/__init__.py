from ordertrack.ports.clock import ClockPort
from ordertrack.ports.sources import ExpenseSourcePort, OrderSourcePort, UserDirectoryPort

__all__ = ["ClockPort", "ExpenseSourcePort", "OrderSourcePort", "UserDirectoryPort"]
