"""
Filtering component - Data models.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from ordertrack.domain.entities import enum_value

SET_FIELDS = ("months", "units", "types", "owners")


def _as_set(values: Iterable[Any] | None) -> frozenset[Any]:
    if values is None:
        return frozenset()
    if isinstance(values, (str, bytes)):
        values = (values,)
    return frozenset(enum_value(v) for v in values)


@dataclass(frozen=True)
class ReportFilter:
    """
    Immutable filter over orders or expenses.

    Empty sets mean "no restriction". archived=None leaves the archived
    flag unconstrained; each caller decides its own default.
    """

    year: int | None = None
    months: frozenset[int] = field(default_factory=frozenset)
    units: frozenset[str] = field(default_factory=frozenset)
    types: frozenset[str] = field(default_factory=frozenset)
    owners: frozenset[str] = field(default_factory=frozenset)
    search_text: str | None = None
    archived: bool | None = None

    def __post_init__(self) -> None:
        for name in SET_FIELDS:
            object.__setattr__(self, name, _as_set(getattr(self, name)))
        bad = [m for m in self.months if not isinstance(m, int) or not 0 <= m <= 11]
        if bad:
            raise ValueError(f"Months must be 0-11, got {sorted(bad, key=str)}")

    def replace(self, **changes: Any) -> ReportFilter:
        return dataclasses.replace(self, **changes)

    def toggle(self, field_name: str, value: Any) -> ReportFilter:
        """Add value to a set field, or remove it if already selected."""
        if field_name not in SET_FIELDS:
            raise ValueError(f"Not a multi-select field: {field_name}")
        current: frozenset[Any] = getattr(self, field_name)
        raw = enum_value(value)
        updated = current - {raw} if raw in current else current | {raw}
        return self.replace(**{field_name: updated})

    def cleared(self, field_name: str) -> ReportFilter:
        """Reset a field to its unrestricted value."""
        if field_name in SET_FIELDS:
            return self.replace(**{field_name: frozenset()})
        if field_name in ("year", "search_text", "archived"):
            return self.replace(**{field_name: None})
        raise ValueError(f"Unknown filter field: {field_name}")

    def only(self, fields: Iterable[str]) -> ReportFilter:
        """Keep the named fields, reset the rest to unrestricted."""
        keep = set(fields)
        narrowed = self
        for f in dataclasses.fields(self):
            if f.name not in keep:
                narrowed = narrowed.cleared(f.name)
        return narrowed
