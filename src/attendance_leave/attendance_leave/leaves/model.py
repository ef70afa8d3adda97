from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import DayLike, days_in_range
from ..core.enums import LeaveStatus, LeaveType


@dataclass(frozen=True)
class LeaveRequest:
    """Time-off request over an inclusive day range."""

    request_id: int
    user_id: int
    leave_type: LeaveType
    reason: str
    start_date: date
    end_date: date
    status: LeaveStatus
    created_at: datetime
    decided_by: Optional[int] = None
    decided_at: Optional[datetime] = None
    decision_comment: Optional[str] = None

    @property
    def is_pending(self) -> bool:
        return self.status == LeaveStatus.PENDING

    @property
    def total_days(self) -> int:
        return len(days_in_range(self.start_date, self.end_date))

    def overlaps(self, day: DayLike) -> bool:
        return day in days_in_range(self.start_date, self.end_date)

    def to_dict(self) -> dict:
        return {
            "request_id": self.request_id,
            "user_id": self.user_id,
            "leave_type": self.leave_type.value,
            "reason": self.reason,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "total_days": self.total_days,
            "status": self.status.value,
            "created_at": self.created_at.strftime("%Y-%m-%d %H:%M"),
            "decided_by": self.decided_by,
            "decided_at": self.decided_at.strftime("%Y-%m-%d %H:%M") if self.decided_at else None,
            "decision_comment": self.decision_comment or "",
        }
