from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time, timedelta
from decimal import Decimal

from ..common.datetime_utils import elapsed_hours, is_late
from ..core.constants import DEFAULT_HALF_DAY_HOURS, DEFAULT_LATE_THRESHOLD
from .strategies.base import AttendanceStrategy
from .strategies.half_day_strategy import HalfDayStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.on_time_strategy import OnTimeStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules."""

    late_threshold: time = DEFAULT_LATE_THRESHOLD
    half_day_hours: Decimal = Decimal(DEFAULT_HALF_DAY_HOURS)

    def for_checkin(self, *, now: datetime) -> AttendanceStrategy:
        if is_late(now, self.late_threshold):
            return LateStrategy(self.late_threshold.strftime("%H:%M"))
        return OnTimeStrategy()

    def for_checkout(self, *, worked: timedelta) -> AttendanceStrategy:
        # unrounded: 3h59m59s is still a half day
        if elapsed_hours(worked) < self.half_day_hours:
            return HalfDayStrategy()
        return OnTimeStrategy()
