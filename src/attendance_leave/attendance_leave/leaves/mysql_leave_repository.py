from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, Iterable, Optional, Sequence

from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import LeaveStatus, LeaveType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, tx_cursor
from .model import LeaveRequest
from .repository import ACTIVE_STATUSES, LeaveRepository

_COLUMNS = (
    "request_id, user_id, leave_type, reason, start_date, end_date, status, "
    "created_at, decided_by, decided_at, decision_comment"
)


def _to_leave(r: dict) -> LeaveRequest:
    return LeaveRequest(
        request_id=int(r["request_id"]),
        user_id=int(r["user_id"]),
        leave_type=LeaveType(r["leave_type"]),
        reason=r["reason"],
        start_date=r["start_date"],
        end_date=r["end_date"],
        status=LeaveStatus(r["status"]),
        created_at=r["created_at"],
        decided_by=int(r["decided_by"]) if r.get("decided_by") is not None else None,
        decided_at=r.get("decided_at"),
        decision_comment=r.get("decision_comment"),
    )


def _in_clause(column: str, values: Sequence[object]) -> str:
    return f"{column} IN ({', '.join(['%s'] * len(values))})"


class MySQLLeaveRepository(LeaveRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(
        self,
        *,
        user_id: int,
        leave_type: LeaveType,
        reason: str,
        start_date: date,
        end_date: date,
        created_at: datetime,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_requests(user_id, leave_type, reason, start_date, end_date, status, created_at)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (int(user_id), leave_type.value, reason, start_date, end_date, LeaveStatus.PENDING.value, created_at),
            )
            return int(cur.lastrowid)

    def get(self, request_id: int) -> Optional[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM leave_requests WHERE request_id=%s", (int(request_id),))
            r = fetchone(cur)
            return _to_leave(r) if r else None

    def decide(
        self,
        *,
        request_id: int,
        status: LeaveStatus,
        decided_by: int,
        decided_at: datetime,
        comment: Optional[str],
        tx: Any = None,
    ) -> bool:
        with tx_cursor(self._conn_factory, tx) as (_, cur):
            cur.execute(
                """
                UPDATE leave_requests
                SET status=%s, decided_by=%s, decided_at=%s, decision_comment=%s
                WHERE request_id=%s AND status=%s
                """,
                (
                    status.value,
                    int(decided_by),
                    decided_at,
                    comment,
                    int(request_id),
                    LeaveStatus.PENDING.value,
                ),
            )
            return cur.rowcount > 0

    def list_requests(
        self,
        *,
        status: Optional[LeaveStatus] = None,
        user_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> Sequence[LeaveRequest]:
        clauses = ["1=1"]
        params: list[object] = []

        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)
        if user_id is not None:
            clauses.append("user_id=%s")
            params.append(int(user_id))
        if start_date is not None:
            clauses.append("end_date >= %s")
            params.append(start_date)
        if end_date is not None:
            clauses.append("start_date <= %s")
            params.append(end_date)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM leave_requests
                WHERE {where}
                ORDER BY created_at DESC, request_id DESC
                LIMIT %s
                """,
                tuple(params + [int(limit)]),
            )
            return [_to_leave(r) for r in fetchall(cur)]

    def list_overlapping(
        self,
        *,
        start_date: date,
        end_date: date,
        user_ids: Optional[Sequence[int]] = None,
        statuses: Iterable[LeaveStatus] = ACTIVE_STATUSES,
    ) -> Sequence[LeaveRequest]:
        status_values = [s.value for s in statuses]
        if not status_values:
            return []

        clauses = ["start_date <= %s", "end_date >= %s", _in_clause("status", status_values)]
        params: list[object] = [end_date, start_date, *status_values]

        if user_ids is not None:
            if not user_ids:
                return []
            clauses.append(_in_clause("user_id", user_ids))
            params.extend(int(u) for u in user_ids)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM leave_requests
                WHERE {' AND '.join(clauses)}
                ORDER BY start_date ASC, request_id ASC
                """,
                tuple(params),
            )
            return [_to_leave(r) for r in fetchall(cur)]

    def count_by_status(self) -> Dict[LeaveStatus, int]:
        counts = {s: 0 for s in LeaveStatus}
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT status, COUNT(*) AS n FROM leave_requests GROUP BY status")
            for r in fetchall(cur):
                counts[LeaveStatus(r["status"])] = int(r["n"])
        return counts
