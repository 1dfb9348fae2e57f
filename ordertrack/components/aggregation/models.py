"""
Aggregation component - Data models.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Bucket:
    """One chart/grouping entry."""

    label: str
    count: int = 0
    sum: float = 0.0
    key: str | None = None


@dataclass(frozen=True)
class Kpis:
    """Scalar indicators over a filtered period."""

    total_count: int = 0
    total_spend: float = 0.0
    avg_ticket: float = 0.0
    median_resolution_days: float = 0.0
    completion_rate: int = 0
    active_units: int = 0


@dataclass(frozen=True)
class StatusSummary:
    """Dashboard counters; waiting counts as in progress."""

    open: int = 0
    in_progress: int = 0
    done: int = 0
