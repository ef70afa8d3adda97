from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Protocol

from ..common.clock import Clock, SystemClock
from ..core.enums import LeaveStatus, NotificationCategory, NotificationEvent
from ..leaves.model import LeaveRequest
from ..users.repository import UserRepository
from .repository import NotificationRepository

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """Outbound notification port.

    ``payload`` carries ``leave`` (LeaveRequest) and ``actor_id`` (who acted).
    """

    def notify(self, event: NotificationEvent, payload: Mapping[str, Any]) -> None:
        raise NotImplementedError


class NullNotifier:
    def notify(self, event: NotificationEvent, payload: Mapping[str, Any]) -> None:
        logger.debug("Notification %s dropped", event.value)


class StoredNotifier:
    """Persists in-app notifications.

    ``leave_applied`` goes to every manager, ``leave_decided`` to the requester.
    """

    def __init__(self, notifications: NotificationRepository, users: UserRepository, *, clock: Optional[Clock] = None):
        self._notifications = notifications
        self._users = users
        self._clock = clock or SystemClock()

    def _name(self, user_id: int) -> str:
        user = self._users.get_by_id(user_id)
        return user.full_name if user else f"User #{user_id}"

    def notify(self, event: NotificationEvent, payload: Mapping[str, Any]) -> None:
        leave: LeaveRequest = payload["leave"]
        actor_id = int(payload["actor_id"])
        span = f"{leave.start_date.isoformat()} to {leave.end_date.isoformat()}"

        if event == NotificationEvent.LEAVE_APPLIED:
            message = f"{self._name(actor_id)} applied for {leave.leave_type.value} from {span}"
            receivers = [m.user_id for m in self._users.list_managers()]
            category = NotificationCategory.LEAVE
            title = "New leave request"
        elif event == NotificationEvent.LEAVE_DECIDED:
            outcome = "approved" if leave.status == LeaveStatus.APPROVED else "rejected"
            message = f"Your {leave.leave_type.value} from {span} was {outcome} by {self._name(actor_id)}"
            if leave.decision_comment:
                message = f"{message}: {leave.decision_comment}"
            receivers = [leave.user_id]
            category = NotificationCategory.APPROVAL
            title = f"Leave request {outcome}"
        else:
            raise ValueError(f"Unsupported notification event: {event}")

        now = self._clock.now()
        for receiver_id in receivers:
            self._notifications.create(
                sender_id=actor_id,
                receiver_id=receiver_id,
                category=category,
                title=title,
                message=message,
                leave_id=leave.request_id,
                created_at=now,
            )
        logger.info("Sent %s for leave %s to %s receiver(s)", event.value, leave.request_id, len(receivers))
