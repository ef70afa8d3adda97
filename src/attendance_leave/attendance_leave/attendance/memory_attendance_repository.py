from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Iterable, Optional, Sequence

from ..core.enums import AttendanceStatus
from ..core.exceptions import StorageConflictError
from ..database.memory import InMemoryDatabase
from .model import AttendanceRecord
from .repository import AttendanceRepository


class InMemoryAttendanceRepository(AttendanceRepository):
    """Rows keyed by (user_id, work_date), the natural key."""

    def __init__(self, db: InMemoryDatabase):
        self._db = db

    @property
    def _rows(self) -> dict:
        return self._db.tables["attendance_records"]

    def _by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        for rec in self._rows.values():
            if rec.attendance_id == int(attendance_id):
                return rec
        return None

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with self._db.lock:
            return self._rows.get((int(user_id), work_date))

    def list_for_range(
        self,
        *,
        start_date: date,
        end_date: date,
        user_ids: Optional[Sequence[int]] = None,
    ) -> Sequence[AttendanceRecord]:
        wanted = None if user_ids is None else {int(u) for u in user_ids}
        with self._db.lock:
            items = [
                r
                for r in self._rows.values()
                if start_date <= r.work_date <= end_date and (wanted is None or r.user_id in wanted)
            ]
        items.sort(key=lambda r: (r.work_date, r.user_id))
        return items

    def total_hours_for_user(self, user_id: int) -> Decimal:
        with self._db.lock:
            return sum((r.total_hours for r in self._rows.values() if r.user_id == int(user_id)), Decimal("0.00"))

    def create_checkin(
        self,
        *,
        user_id: int,
        work_date: date,
        check_in_time: datetime,
        status: AttendanceStatus,
    ) -> int:
        key = (int(user_id), work_date)
        with self._db.lock:
            if key in self._rows:
                raise StorageConflictError(f"Duplicate attendance for user {user_id} on {work_date}")
            attendance_id = self._db.next_id("attendance_records")
            self._rows[key] = AttendanceRecord(
                attendance_id=attendance_id,
                user_id=int(user_id),
                work_date=work_date,
                check_in_time=check_in_time,
                check_out_time=None,
                status=status,
            )
            return attendance_id

    def update_checkin(
        self,
        *,
        attendance_id: int,
        check_in_time: datetime,
        status: AttendanceStatus,
        expected_status: AttendanceStatus,
    ) -> bool:
        with self._db.lock:
            rec = self._by_id(attendance_id)
            if not rec or rec.check_in_time is not None or rec.status != expected_status:
                return False
            self._rows[(rec.user_id, rec.work_date)] = replace(
                rec,
                check_in_time=check_in_time,
                check_out_time=None,
                status=status,
                leave_type=None,
                total_hours=Decimal("0.00"),
            )
            return True

    def update_checkout(
        self,
        *,
        attendance_id: int,
        check_out_time: datetime,
        status: AttendanceStatus,
        total_hours: Decimal,
    ) -> bool:
        with self._db.lock:
            rec = self._by_id(attendance_id)
            if not rec or rec.check_in_time is None or rec.check_out_time is not None:
                return False
            self._rows[(rec.user_id, rec.work_date)] = replace(
                rec,
                check_out_time=check_out_time,
                status=status,
                total_hours=total_hours,
            )
            return True

    def upsert_leave_days(
        self,
        *,
        user_id: int,
        days: Iterable[date],
        leave_type: str,
        tx: Any = None,
    ) -> int:
        count = 0
        with self._db.lock:
            for day in days:
                key = (int(user_id), day)
                existing = self._rows.get(key)
                attendance_id = existing.attendance_id if existing else self._db.next_id("attendance_records")
                self._rows[key] = AttendanceRecord(
                    attendance_id=attendance_id,
                    user_id=int(user_id),
                    work_date=day,
                    check_in_time=None,
                    check_out_time=None,
                    status=AttendanceStatus.LEAVE,
                    leave_type=leave_type,
                    total_hours=Decimal("0.00"),
                )
                count += 1
        return count
