from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Iterable, Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, to_decimal, tx_cursor
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = "attendance_id, user_id, work_date, check_in_time, check_out_time, status, leave_type, total_hours"


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        user_id=int(r["user_id"]),
        work_date=r["work_date"],
        check_in_time=r.get("check_in_time"),
        check_out_time=r.get("check_out_time"),
        status=AttendanceStatus(r["status"]),
        leave_type=r.get("leave_type"),
        total_hours=to_decimal(r.get("total_hours")),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE user_id=%s AND work_date=%s
                """,
                (int(user_id), work_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def list_for_range(
        self,
        *,
        start_date: date,
        end_date: date,
        user_ids: Optional[Sequence[int]] = None,
    ) -> Sequence[AttendanceRecord]:
        clauses = ["work_date BETWEEN %s AND %s"]
        params: list[object] = [start_date, end_date]

        if user_ids is not None:
            if not user_ids:
                return []
            clauses.append(f"user_id IN ({', '.join(['%s'] * len(user_ids))})")
            params.extend(int(u) for u in user_ids)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE {where}
                ORDER BY work_date ASC, user_id ASC
                """,
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def total_hours_for_user(self, user_id: int) -> Decimal:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT COALESCE(SUM(total_hours), 0) AS total FROM attendance_records WHERE user_id=%s",
                (int(user_id),),
            )
            r = fetchone(cur)
            return to_decimal(r["total"] if r else 0)

    def create_checkin(
        self,
        *,
        user_id: int,
        work_date: date,
        check_in_time: datetime,
        status: AttendanceStatus,
    ) -> int:
        # UNIQUE(user_id, work_date) turns a racing insert into StorageConflictError.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(user_id, work_date, check_in_time, status, total_hours)
                VALUES(%s,%s,%s,%s,0)
                """,
                (int(user_id), work_date, check_in_time, status.value),
            )
            return int(cur.lastrowid)

    def update_checkin(
        self,
        *,
        attendance_id: int,
        check_in_time: datetime,
        status: AttendanceStatus,
        expected_status: AttendanceStatus,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET check_in_time=%s, check_out_time=NULL, status=%s, leave_type=NULL, total_hours=0
                WHERE attendance_id=%s AND check_in_time IS NULL AND status=%s
                """,
                (check_in_time, status.value, int(attendance_id), expected_status.value),
            )
            return cur.rowcount > 0

    def update_checkout(
        self,
        *,
        attendance_id: int,
        check_out_time: datetime,
        status: AttendanceStatus,
        total_hours: Decimal,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET check_out_time=%s, status=%s, total_hours=%s
                WHERE attendance_id=%s AND check_in_time IS NOT NULL AND check_out_time IS NULL
                """,
                (check_out_time, status.value, total_hours, int(attendance_id)),
            )
            return cur.rowcount > 0

    def upsert_leave_days(
        self,
        *,
        user_id: int,
        days: Iterable[date],
        leave_type: str,
        tx: Any = None,
    ) -> int:
        rows = [(int(user_id), d, AttendanceStatus.LEAVE.value, leave_type) for d in days]
        if not rows:
            return 0

        with tx_cursor(self._conn_factory, tx) as (_, cur):
            cur.executemany(
                """
                INSERT INTO attendance_records(user_id, work_date, status, leave_type, total_hours)
                VALUES(%s,%s,%s,%s,0)
                ON DUPLICATE KEY UPDATE
                    status=VALUES(status),
                    leave_type=VALUES(leave_type),
                    check_in_time=NULL,
                    check_out_time=NULL,
                    total_hours=0
                """,
                rows,
            )
        return len(rows)
