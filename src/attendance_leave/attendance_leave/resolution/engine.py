"""Status resolution engine.

Merges one attendance record and the leave requests of an employee into a
single ``DayStatus``. Every read path goes through here; nothing else
derives a day's status.

Precedence:

1. record with status ``leave``      -> leave-approved
2. any other record                  -> its own status
3. overlapping approved leave        -> leave-approved
4. overlapping pending leave         -> leave-pending
5. nothing                           -> no-record

Rejected leaves never participate. All functions are pure.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ..attendance.model import AttendanceRecord
from ..common.datetime_utils import DayLike, days_in_range, is_late, normalize_day
from ..core.constants import DEFAULT_LATE_THRESHOLD
from ..core.enums import AttendanceStatus, DayStatus, LeaveStatus
from ..leaves.model import LeaveRequest
from .model import DayCounts, LatenessInfo, ResolvedDay

_RECORD_STATUS = {
    AttendanceStatus.PRESENT: DayStatus.PRESENT,
    AttendanceStatus.LATE: DayStatus.LATE,
    AttendanceStatus.HALF_DAY: DayStatus.HALF_DAY,
    AttendanceStatus.ABSENT: DayStatus.ABSENT,
    AttendanceStatus.LEAVE: DayStatus.LEAVE_APPROVED,
}


def overlapping_leaves(user_id: int, day: DayLike, leaves: Iterable[LeaveRequest]) -> List[LeaveRequest]:
    """Non-rejected leaves of ``user_id`` whose range contains ``day``."""
    d = normalize_day(day)
    return [
        lv
        for lv in leaves
        if lv.user_id == int(user_id) and lv.status != LeaveStatus.REJECTED and lv.overlaps(d)
    ]


def _first_with_status(leaves: Sequence[LeaveRequest], status: LeaveStatus) -> Optional[LeaveRequest]:
    return next((lv for lv in leaves if lv.status == status), None)


def resolve_day(
    user_id: int,
    day: DayLike,
    record: Optional[AttendanceRecord],
    overlapping: Iterable[LeaveRequest],
) -> DayStatus:
    if record is not None:
        return _RECORD_STATUS[record.status]

    candidates = overlapping_leaves(user_id, day, overlapping)
    if _first_with_status(candidates, LeaveStatus.APPROVED):
        return DayStatus.LEAVE_APPROVED
    if _first_with_status(candidates, LeaveStatus.PENDING):
        return DayStatus.LEAVE_PENDING
    return DayStatus.NO_RECORD


def governing_leave(user_id: int, day: DayLike, leaves: Iterable[LeaveRequest]) -> Optional[LeaveRequest]:
    """The leave a reader should see for the day: approved first, then pending."""
    candidates = overlapping_leaves(user_id, day, leaves)
    return _first_with_status(candidates, LeaveStatus.APPROVED) or _first_with_status(
        candidates, LeaveStatus.PENDING
    )


def lateness(record: Optional[AttendanceRecord], threshold: time = DEFAULT_LATE_THRESHOLD) -> LatenessInfo:
    if record is None or record.check_in_time is None:
        return LatenessInfo()

    expected = datetime.combine(record.work_date, threshold)
    late = is_late(record.check_in_time, threshold)
    minutes = (record.check_in_time - expected) // timedelta(minutes=1) if late else 0
    return LatenessInfo(
        is_late=late,
        minutes_late=int(minutes),
        check_in_time=record.check_in_time,
        expected_time=expected,
    )


def resolve(
    user_id: int,
    day: DayLike,
    record: Optional[AttendanceRecord],
    leaves: Iterable[LeaveRequest],
    *,
    threshold: time = DEFAULT_LATE_THRESHOLD,
) -> ResolvedDay:
    """Full read model for one day."""
    d = normalize_day(day)
    leaves = list(leaves)
    return ResolvedDay(
        user_id=int(user_id),
        day=d,
        status=resolve_day(user_id, d, record, leaves),
        record=record,
        leave=governing_leave(user_id, d, leaves),
        total_hours=record.total_hours if record else Decimal("0.00"),
        lateness=lateness(record, threshold),
    )


def index_records(records: Iterable[AttendanceRecord]) -> Dict[Tuple[int, date], AttendanceRecord]:
    return {(r.user_id, r.work_date): r for r in records}


def resolve_range(
    user_id: int,
    start: DayLike,
    end: DayLike,
    records: Iterable[AttendanceRecord],
    leaves: Iterable[LeaveRequest],
    *,
    threshold: time = DEFAULT_LATE_THRESHOLD,
) -> List[ResolvedDay]:
    """One ResolvedDay per calendar day in ``[start, end]``, ascending."""
    by_key = index_records(r for r in records if r.user_id == int(user_id))
    own_leaves = [lv for lv in leaves if lv.user_id == int(user_id)]
    return [
        resolve(user_id, d, by_key.get((int(user_id), d)), own_leaves, threshold=threshold)
        for d in days_in_range(start, end)
    ]


def count_days(days: Iterable[ResolvedDay]) -> DayCounts:
    counts = DayCounts()
    for d in days:
        counts.add(d)
    return counts
