from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Optional, Protocol
from zoneinfo import ZoneInfo


class Clock(Protocol):
    """Current instant in the employer's timezone, as naive wall time."""

    def now(self) -> datetime:
        raise NotImplementedError

    def today(self) -> date:
        raise NotImplementedError


class SystemClock:
    def __init__(self, timezone: Optional[str] = None):
        self._tz = ZoneInfo(timezone) if timezone else None

    def now(self) -> datetime:
        if self._tz is None:
            return datetime.now()
        return datetime.now(self._tz).replace(tzinfo=None)

    def today(self) -> date:
        return self.now().date()


@dataclass
class FixedClock:
    """Clock pinned to a given instant. Used by tests and scripts."""

    current: datetime = field(default_factory=lambda: datetime(2026, 1, 5, 9, 0))

    def now(self) -> datetime:
        return self.current

    def today(self) -> date:
        return self.current.date()

    def set(self, value: datetime) -> None:
        self.current = value

    def advance(self, **kwargs) -> None:
        self.current = self.current + timedelta(**kwargs)
