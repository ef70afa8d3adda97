from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, Iterable, Optional, Protocol, Sequence

from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import LeaveStatus, LeaveType
from .model import LeaveRequest

ACTIVE_STATUSES = (LeaveStatus.PENDING, LeaveStatus.APPROVED)


class LeaveRepository(Protocol):
    """Leave request store.

    ``decide`` only moves a row that is still pending, so two concurrent
    deciders cannot both succeed.
    """

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
        raise NotImplementedError

    def get(self, request_id: int) -> Optional[LeaveRequest]:
        raise NotImplementedError

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
        raise NotImplementedError

    def list_requests(
        self,
        *,
        status: Optional[LeaveStatus] = None,
        user_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> Sequence[LeaveRequest]:
        """Newest first. A date window keeps requests overlapping it."""

        raise NotImplementedError

    def list_overlapping(
        self,
        *,
        start_date: date,
        end_date: date,
        user_ids: Optional[Sequence[int]] = None,
        statuses: Iterable[LeaveStatus] = ACTIVE_STATUSES,
    ) -> Sequence[LeaveRequest]:
        raise NotImplementedError

    def count_by_status(self) -> Dict[LeaveStatus, int]:
        raise NotImplementedError
