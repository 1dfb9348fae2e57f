from ordertrack.adapters.clock import FrozenClock, SystemClock
from ordertrack.adapters.memory import (
    InMemoryExpenseSource,
    InMemoryOrderSource,
    InMemoryUserDirectory,
)
from ordertrack.adapters.time_local import LocalTimeAdapter

__all__ = [
    "FrozenClock",
    "SystemClock",
    "InMemoryExpenseSource",
    "InMemoryOrderSource",
    "InMemoryUserDirectory",
    "LocalTimeAdapter",
]
