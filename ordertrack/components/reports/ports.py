"""
Reports component port definitions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol


class TimePort(Protocol):
    """Current time for month-relative queries (dashboard)."""

    def now_utc(self) -> datetime:
        ...
