from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import pytest

from src.attendance_leave.attendance_leave.attendance.memory_attendance_repository import InMemoryAttendanceRepository
from src.attendance_leave.attendance_leave.attendance.service import AttendanceService
from src.attendance_leave.attendance_leave.common.clock import FixedClock
from src.attendance_leave.attendance_leave.core.enums import AttendanceStatus, LeaveCheckinPolicy, Role
from src.attendance_leave.attendance_leave.core.exceptions import (
    AlreadyCheckedIn,
    AlreadyCheckedOut,
    NotCheckedIn,
    OnApprovedLeave,
    StorageConflictError,
    TransientStorageError,
    ValidationError,
)
from src.attendance_leave.attendance_leave.database.memory import InMemoryDatabase
from src.attendance_leave.attendance_leave.users.memory_user_repository import InMemoryUserRepository

DAY = date(2026, 1, 5)


def build(attendance_cls=InMemoryAttendanceRepository, *, policy=LeaveCheckinPolicy.REJECT):
    db = InMemoryDatabase()
    users = InMemoryUserRepository(db)
    user_id = users.create_user(
        full_name="A", username="a", password_hash="x", role=Role.EMPLOYEE, department="IT", employee_code="E1"
    )
    attendance = attendance_cls(db)
    clock = FixedClock(datetime(2026, 1, 5, 9, 0))
    svc = AttendanceService(attendance, users, clock=clock, leave_checkin_policy=policy)
    return svc, attendance, clock, user_id


def test_checkin_one_second_before_threshold_is_present():
    svc, _, clock, uid = build()
    clock.set(datetime(2026, 1, 5, 9, 29, 59))

    rec = svc.check_in(uid)

    assert rec.status == AttendanceStatus.PRESENT
    assert rec.total_hours == Decimal("0.00")


def test_checkin_at_threshold_is_late():
    svc, _, clock, uid = build()
    clock.set(datetime(2026, 1, 5, 9, 30, 0))

    assert svc.check_in(uid).status == AttendanceStatus.LATE


def test_short_day_becomes_half_day():
    svc, _, clock, uid = build()
    svc.check_in(uid)
    clock.set(datetime(2026, 1, 5, 11, 30))

    rec = svc.check_out(uid)

    assert rec.total_hours == Decimal("2.50")
    assert rec.status == AttendanceStatus.HALF_DAY
    assert rec.check_out_time == datetime(2026, 1, 5, 11, 30)


def test_checkout_just_under_four_hours_is_half_day():
    svc, _, clock, uid = build()
    svc.check_in(uid)
    clock.set(datetime(2026, 1, 5, 12, 59, 50))

    rec = svc.check_out(uid)

    # stored hours round up to 4.00, the decision uses the real 3h59m50s
    assert rec.total_hours == Decimal("4.00")
    assert rec.status == AttendanceStatus.HALF_DAY


def test_checkout_at_exactly_four_hours_keeps_status():
    svc, _, clock, uid = build()
    svc.check_in(uid)
    clock.set(datetime(2026, 1, 5, 13, 0, 0))

    rec = svc.check_out(uid)

    assert rec.total_hours == Decimal("4.00")
    assert rec.status == AttendanceStatus.PRESENT


def test_full_day_keeps_late_status():
    svc, _, clock, uid = build()
    clock.set(datetime(2026, 1, 5, 10, 0))
    svc.check_in(uid)
    clock.set(datetime(2026, 1, 5, 18, 20))

    rec = svc.check_out(uid)

    assert rec.total_hours == Decimal("8.33")
    assert rec.status == AttendanceStatus.LATE


def test_double_checkin_fails_and_keeps_first_state():
    svc, attendance, clock, uid = build()
    first = svc.check_in(uid)
    clock.set(datetime(2026, 1, 5, 10, 0))

    with pytest.raises(AlreadyCheckedIn):
        svc.check_in(uid)

    assert attendance.get_for_user_and_date(uid, DAY) == first


def test_checkout_requires_checkin_and_runs_once():
    svc, _, clock, uid = build()

    with pytest.raises(NotCheckedIn):
        svc.check_out(uid)

    svc.check_in(uid)
    clock.set(datetime(2026, 1, 5, 17, 0))
    svc.check_out(uid)

    with pytest.raises(AlreadyCheckedOut):
        svc.check_out(uid)


def test_unknown_employee_is_rejected_before_any_write():
    svc, attendance, _, _ = build()

    with pytest.raises(ValidationError):
        svc.check_in(999)

    assert attendance.list_for_range(start_date=DAY, end_date=DAY) == []


def test_checkin_on_leave_day_is_rejected_by_default():
    svc, attendance, _, uid = build()
    attendance.upsert_leave_days(user_id=uid, days=[DAY], leave_type="sick leave")

    with pytest.raises(OnApprovedLeave):
        svc.check_in(uid)

    assert attendance.get_for_user_and_date(uid, DAY).status == AttendanceStatus.LEAVE


def test_checkin_on_leave_day_with_override_policy():
    svc, attendance, _, uid = build(policy=LeaveCheckinPolicy.OVERRIDE)
    attendance.upsert_leave_days(user_id=uid, days=[DAY], leave_type="sick leave")

    rec = svc.check_in(uid)

    assert rec.status == AttendanceStatus.PRESENT
    assert rec.leave_type is None
    assert rec.check_in_time == datetime(2026, 1, 5, 9, 0)


def test_today_status_without_record():
    svc, _, _, uid = build()

    status = svc.today_status(uid)

    assert status.status == AttendanceStatus.ABSENT
    assert status.has_record is False
    assert not status.checked_in


def test_today_status_after_checkin():
    svc, _, _, uid = build()
    svc.check_in(uid)

    status = svc.today_status(uid)

    assert status.has_record
    assert status.checked_in and not status.checked_out


class RacingAttendance(InMemoryAttendanceRepository):
    """Another request inserts the same (user, day) just before us."""

    def create_checkin(self, *, user_id, work_date, check_in_time, status):
        super().create_checkin(
            user_id=user_id, work_date=work_date, check_in_time=datetime(2026, 1, 5, 8, 59), status=status
        )
        raise StorageConflictError("duplicate")


class AlwaysConflictingCheckout(InMemoryAttendanceRepository):
    calls = 0

    def update_checkout(self, **kwargs):
        type(self).calls += 1
        return False


def test_lost_checkin_race_surfaces_as_already_checked_in():
    svc, attendance, _, uid = build(RacingAttendance)

    with pytest.raises(AlreadyCheckedIn):
        svc.check_in(uid)

    assert attendance.get_for_user_and_date(uid, DAY).check_in_time == datetime(2026, 1, 5, 8, 59)


def test_second_conflict_raises_transient_error():
    AlwaysConflictingCheckout.calls = 0
    svc, _, clock, uid = build(AlwaysConflictingCheckout)
    svc.check_in(uid)
    clock.set(datetime(2026, 1, 5, 17, 0))

    with pytest.raises(TransientStorageError):
        svc.check_out(uid)

    assert AlwaysConflictingCheckout.calls == 2
