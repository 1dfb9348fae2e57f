from datetime import UTC, datetime
from pathlib import Path

import pytest

from ordertrack.adapters.clock import FrozenClock
from ordertrack.adapters.memory import (
    InMemoryExpenseSource,
    InMemoryOrderSource,
    InMemoryUserDirectory,
)
from ordertrack.domain.entities import ServiceOrder, UserRef
from ordertrack.rules.loader import load_rules
from ordertrack.rules.models import Rules
from ordertrack.services.orders import OrderService

NOW = datetime(2026, 3, 15, 12, 0, tzinfo=UTC)


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(NOW)


@pytest.fixture
def rules() -> Rules:
    """Load the real rules from the project root (tests run from there)."""
    rules_path = Path(__file__).resolve().parent.parent / "rules.yaml"
    return load_rules(rules_path)


@pytest.fixture
def users() -> list[UserRef]:
    return [
        UserRef(id="admin", name="Admin", is_admin=True),
        UserRef(id="u1", name="Marta"),
        UserRef(id="u2", name="Bruno"),
    ]


@pytest.fixture
def user_directory(users: list[UserRef]) -> InMemoryUserDirectory:
    return InMemoryUserDirectory(users)


@pytest.fixture
def order_source(clock: FrozenClock) -> InMemoryOrderSource:
    return InMemoryOrderSource(clock)


@pytest.fixture
def expense_source() -> InMemoryExpenseSource:
    return InMemoryExpenseSource()


@pytest.fixture
def service(
    order_source: InMemoryOrderSource,
    clock: FrozenClock,
    user_directory: InMemoryUserDirectory,
) -> OrderService:
    return OrderService(orders=order_source, clock=clock, users=user_directory)


@pytest.fixture
def open_order() -> ServiceOrder:
    return ServiceOrder(
        id="OS-26001",
        title="Leaking pipe",
        unit="Aldeota",
        owner_id="u1",
        date_opened=datetime(2026, 1, 5, 12, tzinfo=UTC),
    )
