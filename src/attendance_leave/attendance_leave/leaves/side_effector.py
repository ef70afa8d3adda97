from __future__ import annotations

import logging
from typing import Any

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import days_in_range
from ..core.enums import LeaveStatus
from ..core.exceptions import ValidationError
from .model import LeaveRequest

logger = logging.getLogger(__name__)


class LeaveAttendanceWriter:
    """Writes an approved leave into the attendance store.

    Every day of the range becomes a ``leave`` record (created or
    overwritten, times cleared, zero hours). Running it twice for the same
    leave yields the same records.
    """

    def __init__(self, attendance: AttendanceRepository):
        self._attendance = attendance

    def apply(self, leave: LeaveRequest, *, tx: Any = None) -> int:
        if leave.status != LeaveStatus.APPROVED:
            raise ValidationError("Only approved leave can be written to attendance")

        written = self._attendance.upsert_leave_days(
            user_id=leave.user_id,
            days=days_in_range(leave.start_date, leave.end_date),
            leave_type=leave.leave_type.value,
            tx=tx,
        )
        logger.info("Leave %s wrote %s attendance day(s) for user %s", leave.request_id, written, leave.user_id)
        return written
