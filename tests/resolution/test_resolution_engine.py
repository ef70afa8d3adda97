from __future__ import annotations

from datetime import date, datetime, time
from decimal import Decimal

import pytest

from src.attendance_leave.attendance_leave.attendance.model import AttendanceRecord
from src.attendance_leave.attendance_leave.core.enums import AttendanceStatus, DayStatus, LeaveStatus, LeaveType
from src.attendance_leave.attendance_leave.leaves.model import LeaveRequest
from src.attendance_leave.attendance_leave.resolution.engine import (
    count_days,
    lateness,
    resolve,
    resolve_day,
    resolve_range,
)
from src.attendance_leave.attendance_leave.resolution.model import DayCounts

DAY = date(2026, 1, 7)


def record(status: AttendanceStatus, *, day: date = DAY, user_id: int = 1, check_in=None, hours="0.00", leave_type=None):
    return AttendanceRecord(
        attendance_id=1,
        user_id=user_id,
        work_date=day,
        check_in_time=check_in,
        check_out_time=None,
        status=status,
        leave_type=leave_type,
        total_hours=Decimal(hours),
    )


def leave(status: LeaveStatus, start: date, end: date, *, user_id: int = 1, request_id: int = 1):
    return LeaveRequest(
        request_id=request_id,
        user_id=user_id,
        leave_type=LeaveType.CASUAL,
        reason="r",
        start_date=start,
        end_date=end,
        status=status,
        created_at=datetime(2026, 1, 1, 8, 0),
    )


def test_leave_record_resolves_to_leave_approved():
    rec = record(AttendanceStatus.LEAVE, leave_type="sick leave")
    assert resolve_day(1, DAY, rec, []) == DayStatus.LEAVE_APPROVED


@pytest.mark.parametrize(
    "status, expected",
    [
        (AttendanceStatus.PRESENT, DayStatus.PRESENT),
        (AttendanceStatus.LATE, DayStatus.LATE),
        (AttendanceStatus.HALF_DAY, DayStatus.HALF_DAY),
        (AttendanceStatus.ABSENT, DayStatus.ABSENT),
    ],
)
def test_record_status_wins_over_any_leave(status, expected):
    leaves = [leave(LeaveStatus.APPROVED, DAY, DAY), leave(LeaveStatus.PENDING, DAY, DAY, request_id=2)]
    assert resolve_day(1, DAY, record(status), leaves) == expected


def test_no_record_with_approved_leave():
    assert resolve_day(1, DAY, None, [leave(LeaveStatus.APPROVED, date(2026, 1, 6), DAY)]) == DayStatus.LEAVE_APPROVED


def test_approved_beats_pending_when_both_overlap():
    leaves = [leave(LeaveStatus.PENDING, DAY, DAY), leave(LeaveStatus.APPROVED, DAY, DAY, request_id=2)]
    assert resolve_day(1, DAY, None, leaves) == DayStatus.LEAVE_APPROVED


def test_no_record_with_pending_leave():
    assert resolve_day(1, DAY, None, [leave(LeaveStatus.PENDING, DAY, date(2026, 1, 9))]) == DayStatus.LEAVE_PENDING


def test_rejected_leave_never_changes_resolution():
    rejected = [leave(LeaveStatus.REJECTED, DAY, DAY)]

    assert resolve_day(1, DAY, None, rejected) == DayStatus.NO_RECORD
    assert resolve_day(1, DAY, record(AttendanceStatus.LATE), rejected) == DayStatus.LATE


def test_overlap_bounds_are_inclusive_and_normalized():
    lv = leave(LeaveStatus.PENDING, date(2026, 1, 6), date(2026, 1, 8))

    assert resolve_day(1, datetime(2026, 1, 6, 0, 0), None, [lv]) == DayStatus.LEAVE_PENDING
    assert resolve_day(1, datetime(2026, 1, 8, 23, 59, 59), None, [lv]) == DayStatus.LEAVE_PENDING
    assert resolve_day(1, date(2026, 1, 9), None, [lv]) == DayStatus.NO_RECORD


def test_other_employees_leaves_are_ignored():
    assert resolve_day(1, DAY, None, [leave(LeaveStatus.APPROVED, DAY, DAY, user_id=2)]) == DayStatus.NO_RECORD


def test_resolve_day_is_pure():
    rec = record(AttendanceStatus.PRESENT)
    leaves = [leave(LeaveStatus.APPROVED, DAY, DAY)]
    snapshot = list(leaves)

    results = {resolve_day(1, DAY, rec, leaves) for _ in range(3)}

    assert results == {DayStatus.PRESENT}
    assert leaves == snapshot


def test_every_outcome_is_one_of_seven_values():
    cases = [
        (record(AttendanceStatus.LEAVE), []),
        (record(AttendanceStatus.PRESENT), []),
        (record(AttendanceStatus.LATE), []),
        (record(AttendanceStatus.HALF_DAY), []),
        (record(AttendanceStatus.ABSENT), []),
        (None, [leave(LeaveStatus.APPROVED, DAY, DAY)]),
        (None, [leave(LeaveStatus.PENDING, DAY, DAY)]),
        (None, []),
    ]
    outcomes = {resolve_day(1, DAY, rec, leaves) for rec, leaves in cases}

    assert outcomes == set(DayStatus)


def test_lateness_floors_minutes():
    rec = record(AttendanceStatus.LATE, check_in=datetime(2026, 1, 7, 9, 45, 59))

    info = lateness(rec, time(9, 30))

    assert info.is_late
    assert info.minutes_late == 15
    assert info.expected_time == datetime(2026, 1, 7, 9, 30)


def test_lateness_for_on_time_and_missing_check_in():
    on_time = lateness(record(AttendanceStatus.PRESENT, check_in=datetime(2026, 1, 7, 9, 0)), time(9, 30))
    leave_day = lateness(record(AttendanceStatus.LEAVE), time(9, 30))

    assert not on_time.is_late and on_time.minutes_late == 0
    assert not leave_day.is_late and leave_day.check_in_time is None


def test_resolve_carries_governing_leave_and_hours():
    lv = leave(LeaveStatus.PENDING, DAY, DAY)

    resolved = resolve(1, DAY, None, [lv])

    assert resolved.status == DayStatus.LEAVE_PENDING
    assert resolved.leave == lv
    assert resolved.total_hours == Decimal("0.00")


def test_resolve_range_yields_one_entry_per_day():
    records = [
        record(AttendanceStatus.PRESENT, day=date(2026, 1, 5), hours="8.00"),
        record(AttendanceStatus.LATE, day=date(2026, 1, 6), hours="7.50"),
        record(AttendanceStatus.PRESENT, day=date(2026, 1, 6), user_id=2),
    ]
    leaves = [leave(LeaveStatus.APPROVED, date(2026, 1, 8), date(2026, 1, 9))]

    days = resolve_range(1, date(2026, 1, 5), date(2026, 1, 11), records, leaves)

    assert [d.day for d in days] == [date(2026, 1, d) for d in range(5, 12)]
    assert [d.status for d in days] == [
        DayStatus.PRESENT,
        DayStatus.LATE,
        DayStatus.NO_RECORD,
        DayStatus.LEAVE_APPROVED,
        DayStatus.LEAVE_APPROVED,
        DayStatus.NO_RECORD,
        DayStatus.NO_RECORD,
    ]

    counts = count_days(days)
    assert counts.present == 1
    assert counts.late == 1
    assert counts.leave_approved == 2
    assert counts.no_record == 3
    assert counts.total_hours == Decimal("15.50")


@pytest.mark.parametrize(
    "present, late, expected",
    [(3, 1, 75), (2, 1, 67), (1, 1, 50), (1, 2, 33), (0, 0, 0), (0, 4, 0), (5, 0, 100)],
)
def test_on_time_percentage(present, late, expected):
    assert DayCounts(present=present, late=late).on_time_percentage == expected
