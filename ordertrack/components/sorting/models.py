"""
Sorting component - Data models.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Literal

from ordertrack.components.linkage import cost_by_order
from ordertrack.domain.entities import Expense, UserRef

SortDirection = Literal["asc", "desc"]

DEFAULT_PRIORITY_WEIGHTS: dict[str, int] = {"high": 3, "medium": 2, "low": 1}


@dataclass(frozen=True)
class SortSpec:
    """Single active sort. Selecting the active key again flips direction."""

    key: str
    direction: SortDirection = "asc"

    def __post_init__(self) -> None:
        if self.direction not in ("asc", "desc"):
            raise ValueError(f"Invalid sort direction: {self.direction}")

    @property
    def descending(self) -> bool:
        return self.direction == "desc"

    def toggled(self, key: str) -> SortSpec:
        if key == self.key:
            return SortSpec(key, "desc" if self.direction == "asc" else "asc")
        return SortSpec(key, "asc")


def toggle_sort(current: SortSpec | None, key: str) -> SortSpec:
    if current is None:
        return SortSpec(key, "asc")
    return current.toggled(key)


@dataclass(frozen=True)
class SortContext:
    """Lookups for synthetic sort keys (owner name, linked cost, priority)."""

    owner_names: Mapping[str, str] = field(default_factory=dict)
    order_costs: Mapping[str, float] = field(default_factory=dict)
    priority_weights: Mapping[str, int] = field(
        default_factory=lambda: dict(DEFAULT_PRIORITY_WEIGHTS)
    )

    @classmethod
    def from_sources(
        cls,
        users: Iterable[UserRef] = (),
        expenses: Iterable[Expense] = (),
        priority_weights: Mapping[str, int] | None = None,
    ) -> SortContext:
        return cls(
            owner_names={u.id: u.name for u in users},
            order_costs=cost_by_order(expenses),
            priority_weights=dict(priority_weights or DEFAULT_PRIORITY_WEIGHTS),
        )
