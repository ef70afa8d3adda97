from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..attendance.model import AttendanceRecord
from ..common.datetime_utils import round_half_up
from ..core.enums import DayStatus
from ..leaves.model import LeaveRequest

_WORKED = (DayStatus.PRESENT, DayStatus.LATE, DayStatus.HALF_DAY)


@dataclass(frozen=True)
class LatenessInfo:
    is_late: bool = False
    minutes_late: int = 0
    check_in_time: Optional[datetime] = None
    expected_time: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "is_late": self.is_late,
            "minutes_late": self.minutes_late,
            "check_in_time": self.check_in_time.strftime("%H:%M:%S") if self.check_in_time else None,
            "expected_time": self.expected_time.strftime("%H:%M") if self.expected_time else None,
        }


@dataclass(frozen=True)
class ResolvedDay:
    """Everything the read paths know about one (employee, day)."""

    user_id: int
    day: date
    status: DayStatus
    record: Optional[AttendanceRecord] = None
    leave: Optional[LeaveRequest] = None
    total_hours: Decimal = Decimal("0.00")
    lateness: LatenessInfo = field(default_factory=LatenessInfo)

    @property
    def worked(self) -> bool:
        return self.status in _WORKED

    def to_dict(self) -> dict:
        rec = self.record
        return {
            "user_id": self.user_id,
            "date": self.day.isoformat(),
            "status": self.status.value,
            "check_in_time": rec.check_in_time.strftime("%H:%M:%S") if rec and rec.check_in_time else None,
            "check_out_time": rec.check_out_time.strftime("%H:%M:%S") if rec and rec.check_out_time else None,
            "total_hours": str(self.total_hours),
            "leave_type": (rec.leave_type if rec and rec.leave_type else None)
            or (self.leave.leave_type.value if self.leave else None),
            "leave": self.leave.to_dict() if self.leave else None,
            "lateness": self.lateness.to_dict(),
        }


@dataclass
class DayCounts:
    """Reducer over resolved days."""

    present: int = 0
    late: int = 0
    half_day: int = 0
    absent: int = 0
    leave_approved: int = 0
    leave_pending: int = 0
    no_record: int = 0
    total_hours: Decimal = Decimal("0.00")

    def add(self, day: ResolvedDay) -> "DayCounts":
        attr = day.status.value.replace("-", "_")
        setattr(self, attr, getattr(self, attr) + 1)
        self.total_hours += day.total_hours
        return self

    def merge(self, other: "DayCounts") -> "DayCounts":
        for name in ("present", "late", "half_day", "absent", "leave_approved", "leave_pending", "no_record"):
            setattr(self, name, getattr(self, name) + getattr(other, name))
        self.total_hours += other.total_hours
        return self

    @property
    def worked_days(self) -> int:
        return self.present + self.late + self.half_day

    @property
    def on_time_percentage(self) -> int:
        denominator = self.present + self.late
        if denominator == 0:
            return 0
        return round_half_up(Decimal(self.present) * 100 / Decimal(denominator))

    def to_dict(self) -> dict:
        return {
            "present": self.present,
            "late": self.late,
            "half_day": self.half_day,
            "absent": self.absent,
            "leave_approved": self.leave_approved,
            "leave_pending": self.leave_pending,
            "no_record": self.no_record,
            "worked_days": self.worked_days,
            "total_hours": str(self.total_hours.quantize(Decimal("0.01"))),
            "on_time_percentage": self.on_time_percentage,
        }
