from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from typing import Any, Dict, Iterable, Optional, Sequence

from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import LeaveStatus, LeaveType
from ..database.memory import InMemoryDatabase
from .model import LeaveRequest
from .repository import ACTIVE_STATUSES, LeaveRepository


class InMemoryLeaveRepository(LeaveRepository):
    def __init__(self, db: InMemoryDatabase):
        self._db = db

    @property
    def _rows(self) -> dict:
        return self._db.tables["leave_requests"]

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
        with self._db.lock:
            request_id = self._db.next_id("leave_requests")
            self._rows[request_id] = LeaveRequest(
                request_id=request_id,
                user_id=int(user_id),
                leave_type=leave_type,
                reason=reason,
                start_date=start_date,
                end_date=end_date,
                status=LeaveStatus.PENDING,
                created_at=created_at,
            )
            return request_id

    def get(self, request_id: int) -> Optional[LeaveRequest]:
        with self._db.lock:
            return self._rows.get(int(request_id))

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
        with self._db.lock:
            leave = self._rows.get(int(request_id))
            if not leave or leave.status != LeaveStatus.PENDING:
                return False
            self._rows[leave.request_id] = replace(
                leave,
                status=status,
                decided_by=int(decided_by),
                decided_at=decided_at,
                decision_comment=comment,
            )
            return True

    def list_requests(
        self,
        *,
        status: Optional[LeaveStatus] = None,
        user_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> Sequence[LeaveRequest]:
        with self._db.lock:
            items = list(self._rows.values())

        if status is not None:
            items = [r for r in items if r.status == status]
        if user_id is not None:
            items = [r for r in items if r.user_id == int(user_id)]
        if start_date is not None:
            items = [r for r in items if r.end_date >= start_date]
        if end_date is not None:
            items = [r for r in items if r.start_date <= end_date]

        items.sort(key=lambda r: (r.created_at, r.request_id), reverse=True)
        return items[: int(limit)]

    def list_overlapping(
        self,
        *,
        start_date: date,
        end_date: date,
        user_ids: Optional[Sequence[int]] = None,
        statuses: Iterable[LeaveStatus] = ACTIVE_STATUSES,
    ) -> Sequence[LeaveRequest]:
        wanted_status = set(statuses)
        wanted_users = None if user_ids is None else {int(u) for u in user_ids}
        with self._db.lock:
            items = [
                r
                for r in self._rows.values()
                if r.status in wanted_status
                and r.start_date <= end_date
                and r.end_date >= start_date
                and (wanted_users is None or r.user_id in wanted_users)
            ]
        items.sort(key=lambda r: (r.start_date, r.request_id))
        return items

    def count_by_status(self) -> Dict[LeaveStatus, int]:
        counts = {s: 0 for s in LeaveStatus}
        with self._db.lock:
            for r in self._rows.values():
                counts[r.status] += 1
        return counts
