from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Iterable, Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    """Attendance store.

    Writes are compare-and-set: a lost race raises ``StorageConflictError``
    (duplicate (user_id, work_date)) or returns ``False`` (predicate miss).
    """

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_for_range(
        self,
        *,
        start_date: date,
        end_date: date,
        user_ids: Optional[Sequence[int]] = None,
    ) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def total_hours_for_user(self, user_id: int) -> Decimal:
        raise NotImplementedError

    def create_checkin(
        self,
        *,
        user_id: int,
        work_date: date,
        check_in_time: datetime,
        status: AttendanceStatus,
    ) -> int:
        raise NotImplementedError

    def update_checkin(
        self,
        *,
        attendance_id: int,
        check_in_time: datetime,
        status: AttendanceStatus,
        expected_status: AttendanceStatus,
    ) -> bool:
        """Fill check-in on a record that has none and still has ``expected_status``."""

        raise NotImplementedError

    def update_checkout(
        self,
        *,
        attendance_id: int,
        check_out_time: datetime,
        status: AttendanceStatus,
        total_hours: Decimal,
    ) -> bool:
        raise NotImplementedError

    def upsert_leave_days(
        self,
        *,
        user_id: int,
        days: Iterable[date],
        leave_type: str,
        tx: Any = None,
    ) -> int:
        """Write every day as leave (create or overwrite). Returns day count."""

        raise NotImplementedError
