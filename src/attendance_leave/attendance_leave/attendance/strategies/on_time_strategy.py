from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class OnTimeStrategy(AttendanceStrategy):
    """Check-in before the late threshold; checkout keeps the current status."""

    def decide_checkin(self, *, now: datetime) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.PRESENT)

    def decide_checkout(self, *, total_hours: Decimal, current: AttendanceStatus) -> StatusDecision:
        return StatusDecision(status=current)
