from datetime import UTC, datetime, timedelta


class SystemClock:
    def now_utc(self) -> datetime:
        return datetime.now(UTC)


class FrozenClock:
    """
    Clock that returns a fixed time.
    Useful for deterministic testing.
    """

    def __init__(self, frozen_utc: datetime) -> None:
        self.set_now(frozen_utc)

    def now_utc(self) -> datetime:
        return self._now

    def set_now(self, now: datetime) -> None:
        """Naive values are taken as UTC; aware values are converted."""
        if now.tzinfo is None:
            now = now.replace(tzinfo=UTC)
        self._now = now.astimezone(UTC)

    def advance(self, **delta: float) -> None:
        self._now += timedelta(**delta)
