from __future__ import annotations

import logging
from datetime import timedelta
from typing import Optional

from ..common.clock import Clock, SystemClock
from ..common.datetime_utils import round_hours
from ..core.enums import AttendanceStatus, LeaveCheckinPolicy, Role
from ..core.exceptions import (
    AlreadyCheckedIn,
    AlreadyCheckedOut,
    NotCheckedIn,
    OnApprovedLeave,
    StorageConflictError,
    TransientStorageError,
    ValidationError,
)
from ..users.model import User
from ..users.repository import UserRepository
from .factory import AttendanceStrategyFactory
from .model import AttendanceRecord, TodayStatus
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

# first try + one re-read after a lost race
_ATTEMPTS = 2


class AttendanceService:
    """Check-in / check-out lifecycle of one (employee, day) record."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        users: UserRepository,
        *,
        clock: Optional[Clock] = None,
        strategy_factory: Optional[AttendanceStrategyFactory] = None,
        leave_checkin_policy: LeaveCheckinPolicy = LeaveCheckinPolicy.REJECT,
    ):
        self._attendance = attendance
        self._users = users
        self._clock = clock or SystemClock()
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._leave_policy = LeaveCheckinPolicy(leave_checkin_policy)

    def _require_employee(self, user_id: int) -> User:
        user = self._users.get_by_id(user_id)
        if not user or not user.is_active:
            raise ValidationError("Employee does not exist")
        if user.role != Role.EMPLOYEE:
            raise ValidationError("Only employees record attendance")
        return user

    def _reload(self, user_id: int, record_day) -> Optional[AttendanceRecord]:
        return self._attendance.get_for_user_and_date(user_id, record_day)

    def check_in(self, user_id: int) -> AttendanceRecord:
        self._require_employee(user_id)

        for attempt in range(_ATTEMPTS):
            now = self._clock.now()
            today = now.date()
            record = self._attendance.get_for_user_and_date(user_id, today)

            if record and record.check_in_time is not None:
                raise AlreadyCheckedIn("You have already checked in today")
            if record and record.is_leave and self._leave_policy == LeaveCheckinPolicy.REJECT:
                raise OnApprovedLeave("Today is approved leave, check-in is not allowed")

            decision = self._factory.for_checkin(now=now).decide_checkin(now=now)

            try:
                if record is None:
                    self._attendance.create_checkin(
                        user_id=user_id,
                        work_date=today,
                        check_in_time=now,
                        status=decision.status,
                    )
                    applied = True
                else:
                    applied = self._attendance.update_checkin(
                        attendance_id=record.attendance_id,
                        check_in_time=now,
                        status=decision.status,
                        expected_status=record.status,
                    )
            except StorageConflictError:
                applied = False

            if applied:
                logger.info(
                    "User %s checked in on %s as %s%s",
                    user_id,
                    today,
                    decision.status.value,
                    f" ({decision.note})" if decision.note else "",
                )
                return self._reload(user_id, today)

            logger.warning("Check-in conflict for user %s on %s (attempt %s)", user_id, today, attempt + 1)

        raise TransientStorageError("Attendance is being updated concurrently, try again")

    def check_out(self, user_id: int) -> AttendanceRecord:
        self._require_employee(user_id)

        for attempt in range(_ATTEMPTS):
            now = self._clock.now()
            today = now.date()
            record = self._attendance.get_for_user_and_date(user_id, today)

            if not record or record.check_in_time is None:
                raise NotCheckedIn("You have not checked in today")
            if record.check_out_time is not None:
                raise AlreadyCheckedOut("You have already checked out today")

            worked = max(now - record.check_in_time, timedelta(0))
            total_hours = round_hours(worked)
            decision = self._factory.for_checkout(worked=worked).decide_checkout(
                total_hours=total_hours, current=record.status
            )

            try:
                applied = self._attendance.update_checkout(
                    attendance_id=record.attendance_id,
                    check_out_time=now,
                    status=decision.status,
                    total_hours=total_hours,
                )
            except StorageConflictError:
                applied = False

            if applied:
                logger.info(
                    "User %s checked out on %s after %sh as %s", user_id, today, total_hours, decision.status.value
                )
                return self._reload(user_id, today)

            logger.warning("Check-out conflict for user %s on %s (attempt %s)", user_id, today, attempt + 1)

        raise TransientStorageError("Attendance is being updated concurrently, try again")

    def today_status(self, user_id: int) -> TodayStatus:
        today = self._clock.today()
        record = self._attendance.get_for_user_and_date(user_id, today)
        if not record:
            return TodayStatus(user_id=user_id, work_date=today, status=AttendanceStatus.ABSENT, has_record=False)

        return TodayStatus(
            user_id=user_id,
            work_date=today,
            status=record.status,
            has_record=True,
            check_in_time=record.check_in_time,
            check_out_time=record.check_out_time,
            total_hours=record.total_hours,
            leave_type=record.leave_type,
        )
