from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one record per (employee, calendar day)."""

    attendance_id: int
    user_id: int
    work_date: date
    check_in_time: Optional[datetime]
    check_out_time: Optional[datetime]
    status: AttendanceStatus
    leave_type: Optional[str] = None
    total_hours: Decimal = Decimal("0.00")

    @property
    def is_leave(self) -> bool:
        return self.status == AttendanceStatus.LEAVE


@dataclass(frozen=True)
class TodayStatus:
    """Read-model for "where am I today" (no side effects)."""

    user_id: int
    work_date: date
    status: AttendanceStatus
    has_record: bool
    check_in_time: Optional[datetime] = None
    check_out_time: Optional[datetime] = None
    total_hours: Decimal = Decimal("0.00")
    leave_type: Optional[str] = None

    @property
    def checked_in(self) -> bool:
        return self.check_in_time is not None

    @property
    def checked_out(self) -> bool:
        return self.check_out_time is not None
