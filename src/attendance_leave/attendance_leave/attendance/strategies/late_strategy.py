from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class LateStrategy(AttendanceStrategy):
    """Late check-in."""

    def __init__(self, threshold_label: str = ""):
        self._label = threshold_label

    def decide_checkin(self, *, now: datetime) -> StatusDecision:
        note = f"checked in after {self._label}" if self._label else None
        return StatusDecision(status=AttendanceStatus.LATE, note=note)

    def decide_checkout(self, *, total_hours: Decimal, current: AttendanceStatus) -> StatusDecision:
        return StatusDecision(status=current)
