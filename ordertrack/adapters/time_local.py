"""
Reporting timezone adapter.

Timestamps are stored in UTC. Calendar grouping for reports (year, month,
day of a history entry) happens in the facility's local timezone.
"""

from __future__ import annotations

from datetime import UTC, date, datetime
from zoneinfo import ZoneInfo

DEFAULT_TIMEZONE = "America/Fortaleza"


class LocalTimeAdapter:
    """Converts between UTC and the configured reporting timezone."""

    def __init__(self, tz_name: str = DEFAULT_TIMEZONE) -> None:
        self._tz_name = tz_name
        self._tz = ZoneInfo(tz_name)

    @property
    def tz(self) -> ZoneInfo:
        return self._tz

    @property
    def timezone_name(self) -> str:
        return self._tz_name

    def now_utc(self) -> datetime:
        return datetime.now(UTC)

    def now_local(self) -> datetime:
        return datetime.now(self._tz)

    def to_local(self, utc_dt: datetime) -> datetime:
        """
        Convert UTC to local time.
        If utc_dt is naive, it's assumed to be UTC.
        """
        if utc_dt.tzinfo is None:
            utc_dt = utc_dt.replace(tzinfo=UTC)
        return utc_dt.astimezone(self._tz)

    def to_utc(self, local_dt: datetime) -> datetime:
        """
        Convert local time to UTC.
        If local_dt is naive, it's assumed to be in the reporting timezone.
        """
        if local_dt.tzinfo is None:
            local_dt = local_dt.replace(tzinfo=self._tz)
        return local_dt.astimezone(UTC)

    def parse_form_date(self, value: str | date) -> datetime:
        """
        Parse a YYYY-MM-DD form value (or a date) as local noon, returned in UTC.

        Noon keeps the calendar day stable across timezone conversion and
        makes same-day open/close pairs measure zero days.
        """
        day = value if isinstance(value, date) else datetime.strptime(value, "%Y-%m-%d").date()
        naive = datetime(day.year, day.month, day.day, 12)
        return self.to_utc(naive)
