import logging
import os
from collections.abc import Iterable
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from fastapi import Depends, Header, HTTPException, status

from ordertrack.adapters.clock import SystemClock
from ordertrack.adapters.memory import (
    InMemoryExpenseSource,
    InMemoryOrderSource,
    InMemoryUserDirectory,
)
from ordertrack.adapters.time_local import LocalTimeAdapter
from ordertrack.domain.entities import UserRef
from ordertrack.ports.clock import ClockPort
from ordertrack.ports.sources import (
    ExpenseSourcePort,
    OrderSourcePort,
    UserDirectoryPort,
)
from ordertrack.rules.loader import load_rules
from ordertrack.rules.models import Rules
from ordertrack.services.orders import OrderService

logger = logging.getLogger(__name__)


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        self.rules_path = Path(os.environ.get("ORDERTRACK_RULES", self.base_dir / "rules.yaml"))


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Application context ---
@dataclass
class AppContext:
    """Sources, clock and rules shared by every request."""

    rules: Rules
    clock: ClockPort
    orders: OrderSourcePort
    expenses: ExpenseSourcePort
    users: UserDirectoryPort

    @classmethod
    def in_memory(
        cls,
        rules: Rules,
        clock: ClockPort | None = None,
        users: Iterable[UserRef] = (),
    ) -> "AppContext":
        clock = clock or SystemClock()
        return cls(
            rules=rules,
            clock=clock,
            orders=InMemoryOrderSource(clock),
            expenses=InMemoryExpenseSource(),
            users=InMemoryUserDirectory(users),
        )


_context_instance: AppContext | None = None


def get_context() -> AppContext:
    """Process-wide context. Tests replace it via dependency_overrides."""
    global _context_instance
    if _context_instance is None:
        settings = get_settings()
        _context_instance = AppContext.in_memory(load_rules(settings.rules_path))
        logger.info("Application context initialised with in-memory sources")
    return _context_instance


def get_order_service(ctx: AppContext = Depends(get_context)) -> OrderService:
    return OrderService(orders=ctx.orders, clock=ctx.clock, users=ctx.users)


def get_local_time(ctx: AppContext = Depends(get_context)) -> LocalTimeAdapter:
    return LocalTimeAdapter(ctx.rules.reporting.timezone)


# --- Current user ---
def get_current_user(
    x_user_id: str | None = Header(default=None),
    ctx: AppContext = Depends(get_context),
) -> UserRef:
    """
    Resolve the caller from the X-User-Id header.

    Authentication happens upstream; this only maps the id to a directory
    entry so visibility can be scoped.
    """
    if not x_user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-User-Id header",
        )
    user = next((u for u in ctx.users.list() if u.id == x_user_id), None)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unknown user",
        )
    return user
