from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Optional, Sequence, Union

from ..common.clock import Clock, SystemClock
from ..common.datetime_utils import normalize_day, parse_iso_date
from ..common.validators import require_enum, require_non_empty
from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import LeaveStatus, LeaveType, NotificationEvent, Role
from ..core.exceptions import AuthorizationError, InvalidRange, NotFoundError, NotPending, ValidationError
from ..database.transaction import TransactionManager
from ..notifications.notifier import Notifier, NullNotifier
from ..users.repository import UserRepository
from .model import LeaveRequest
from .repository import LeaveRepository
from .side_effector import LeaveAttendanceWriter

logger = logging.getLogger(__name__)

DateInput = Union[date, str]


def _to_day(value: DateInput, field_name: str) -> date:
    if isinstance(value, date):
        return normalize_day(value)
    if not value:
        raise ValidationError(f"{field_name} is required")
    return parse_iso_date(value)


def _require_manager(current_role: Role) -> None:
    if current_role != Role.MANAGER:
        raise AuthorizationError("Only managers can perform this action")


class LeaveService:
    """Leave request workflow: pending -> approved | rejected."""

    def __init__(
        self,
        leaves: LeaveRepository,
        users: UserRepository,
        side_effector: LeaveAttendanceWriter,
        transactions: TransactionManager,
        *,
        notifier: Optional[Notifier] = None,
        clock: Optional[Clock] = None,
        approve_past_leaves: bool = True,
        reject_overlapping: bool = False,
    ):
        self._leaves = leaves
        self._users = users
        self._side_effector = side_effector
        self._tx = transactions
        self._notifier = notifier or NullNotifier()
        self._clock = clock or SystemClock()
        self._approve_past = bool(approve_past_leaves)
        self._reject_overlapping = bool(reject_overlapping)

    def _notify(self, event: NotificationEvent, leave: LeaveRequest, *, actor_id: int) -> None:
        # Runs after commit; a failed notification never undoes the workflow.
        try:
            self._notifier.notify(event, {"leave": leave, "actor_id": actor_id})
        except Exception:
            logger.exception("Failed to send %s for leave %s", event.value, leave.request_id)

    def apply(
        self,
        *,
        user_id: int,
        leave_type: Union[LeaveType, str],
        reason: str,
        start_date: DateInput,
        end_date: DateInput,
    ) -> LeaveRequest:
        user = self._users.get_by_id(user_id)
        if not user or not user.is_active:
            raise ValidationError("Employee does not exist")

        kind = require_enum(leave_type, LeaveType, "Leave type")
        reason = require_non_empty(reason, "Reason")
        start = _to_day(start_date, "Start date")
        end = _to_day(end_date, "End date")

        if start < self._clock.today():
            raise InvalidRange("Start date cannot be in the past")
        if end < start:
            raise InvalidRange("End date must be on or after start date")

        if self._reject_overlapping and self._leaves.list_overlapping(
            start_date=start, end_date=end, user_ids=[user.user_id]
        ):
            raise InvalidRange("You already have a leave request covering these dates")

        request_id = self._leaves.create(
            user_id=user.user_id,
            leave_type=kind,
            reason=reason,
            start_date=start,
            end_date=end,
            created_at=self._clock.now(),
        )
        leave = self._leaves.get(request_id)
        logger.info("User %s applied for leave %s (%s to %s)", user.user_id, request_id, start, end)

        self._notify(NotificationEvent.LEAVE_APPLIED, leave, actor_id=user.user_id)
        return leave

    def decide(
        self,
        *,
        leave_id: int,
        decided_by: int,
        outcome: Union[LeaveStatus, str],
        comment: str = "",
        current_role: Role,
    ) -> LeaveRequest:
        _require_manager(current_role)

        status = require_enum(outcome, LeaveStatus, "Outcome")
        if status == LeaveStatus.PENDING:
            raise ValidationError("Outcome must be approved or rejected")

        leave = self._leaves.get(leave_id)
        if not leave:
            raise NotFoundError("Leave request not found")
        if not leave.is_pending:
            raise NotPending(f"Leave request is already {leave.status.value}")

        if status == LeaveStatus.APPROVED and not self._approve_past and leave.start_date < self._clock.today():
            raise InvalidRange("Cannot approve a leave that has already started")

        decided = replace(
            leave,
            status=status,
            decided_by=int(decided_by),
            decided_at=self._clock.now(),
            decision_comment=(comment or "").strip() or None,
        )

        with self._tx.atomic() as tx:
            moved = self._leaves.decide(
                request_id=leave.request_id,
                status=status,
                decided_by=decided.decided_by,
                decided_at=decided.decided_at,
                comment=decided.decision_comment,
                tx=tx,
            )
            if not moved:
                raise NotPending("Leave request has already been decided")
            if status == LeaveStatus.APPROVED:
                self._side_effector.apply(decided, tx=tx)

        logger.info("Leave %s %s by %s", leave.request_id, status.value, decided_by)
        self._notify(NotificationEvent.LEAVE_DECIDED, decided, actor_id=int(decided_by))
        return decided

    def approve(self, *, leave_id: int, decided_by: int, comment: str = "", current_role: Role) -> LeaveRequest:
        return self.decide(
            leave_id=leave_id,
            decided_by=decided_by,
            outcome=LeaveStatus.APPROVED,
            comment=comment,
            current_role=current_role,
        )

    def reject(self, *, leave_id: int, decided_by: int, comment: str = "", current_role: Role) -> LeaveRequest:
        return self.decide(
            leave_id=leave_id,
            decided_by=decided_by,
            outcome=LeaveStatus.REJECTED,
            comment=comment,
            current_role=current_role,
        )

    def list_my_requests(self, *, user_id: int, limit: int = DEFAULT_LIST_LIMIT) -> Sequence[LeaveRequest]:
        return self._leaves.list_requests(user_id=int(user_id), limit=limit)

    def list_pending(self, *, current_role: Role, limit: int = DEFAULT_LIST_LIMIT) -> Sequence[LeaveRequest]:
        _require_manager(current_role)
        return self._leaves.list_requests(status=LeaveStatus.PENDING, limit=limit)

    def list_all(
        self,
        *,
        current_role: Role,
        status: Optional[Union[LeaveStatus, str]] = None,
        user_id: Optional[int] = None,
        start_date: Optional[DateInput] = None,
        end_date: Optional[DateInput] = None,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> Sequence[LeaveRequest]:
        _require_manager(current_role)
        return self._leaves.list_requests(
            status=require_enum(status, LeaveStatus, "Status") if status else None,
            user_id=int(user_id) if user_id else None,
            start_date=_to_day(start_date, "Start date") if start_date else None,
            end_date=_to_day(end_date, "End date") if end_date else None,
            limit=limit,
        )

    def stats(self, *, current_role: Role) -> dict:
        _require_manager(current_role)
        counts = self._leaves.count_by_status()
        return {
            "total": sum(counts.values()),
            "pending": counts.get(LeaveStatus.PENDING, 0),
            "approved": counts.get(LeaveStatus.APPROVED, 0),
            "rejected": counts.get(LeaveStatus.REJECTED, 0),
        }

    def with_requesters(self, leaves: Sequence[LeaveRequest]) -> list[dict]:
        """Serialize leaves with the requester's name and department."""
        out: list[dict] = []
        cache: dict[int, Optional[object]] = {}
        for leave in leaves:
            if leave.user_id not in cache:
                cache[leave.user_id] = self._users.get_by_id(leave.user_id)
            user = cache[leave.user_id]
            row = leave.to_dict()
            row["full_name"] = user.full_name if user else ""
            row["department"] = user.department if user else ""
            out.append(row)
        return out
