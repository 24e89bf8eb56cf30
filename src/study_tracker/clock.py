"""Time providers used by the engine."""
from datetime import datetime, timedelta


class SystemClock:
    def now(self) -> datetime:
        return datetime.now()


class FixedClock:
    """Clock frozen at a given instant; tests move it forward explicitly."""

    def __init__(self, current: datetime):
        self.current = current

    def now(self) -> datetime:
        return self.current

    def set(self, current: datetime) -> None:
        self.current = current

    def advance(self, **kwargs) -> datetime:
        """Move the clock forward by a timedelta built from kwargs (days=1, hours=2...)."""
        self.current = self.current + timedelta(**kwargs)
        return self.current
