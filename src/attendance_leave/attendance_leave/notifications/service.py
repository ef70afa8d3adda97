from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

from ..common.clock import Clock, SystemClock
from ..common.validators import require_non_empty
from ..core.constants import BROADCAST_ALL, BROADCAST_GROUPS, DEFAULT_BROADCAST_TITLE, DEFAULT_NOTIFICATION_LIMIT
from ..core.enums import NotificationCategory, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..users.model import User
from ..users.repository import UserRepository
from .model import Notification
from .repository import NotificationRepository

logger = logging.getLogger(__name__)


class NotificationService:
    """In-app notifications. Reads are scoped to their receiver; managers can broadcast notices."""

    def __init__(
        self,
        notifications: NotificationRepository,
        users: UserRepository,
        *,
        clock: Optional[Clock] = None,
    ):
        self._notifications = notifications
        self._users = users
        self._clock = clock or SystemClock()

    def list_for_user(
        self,
        user_id: int,
        *,
        category: Optional[NotificationCategory] = None,
        unread_only: bool = False,
        limit: int = DEFAULT_NOTIFICATION_LIMIT,
    ) -> Sequence[Notification]:
        return self._notifications.list_for_receiver(
            int(user_id), category=category, unread_only=unread_only, limit=limit
        )

    def unread_count(self, user_id: int) -> int:
        return self._notifications.count_unread(int(user_id))

    def mark_read(self, user_id: int, notification_id: int) -> Notification:
        n = self._notifications.get(notification_id)
        if not n or n.receiver_id != int(user_id):
            raise NotFoundError("Notification not found")
        if not n.is_read:
            self._notifications.mark_read(n.notification_id, read_at=self._clock.now())
        return self._notifications.get(n.notification_id) or n

    def mark_all_read(self, user_id: int) -> int:
        return self._notifications.mark_all_read(int(user_id), read_at=self._clock.now())

    def _audience(self, target_group: str) -> List[User]:
        group = require_non_empty(target_group, "Target group").lower()
        if group == BROADCAST_ALL:
            return list(self._users.list_employees())

        departments = BROADCAST_GROUPS.get(group)
        if departments is None:
            # a plain department name is a group of its own
            match = [d for d in self._users.list_departments() if d.lower() == group]
            if not match:
                allowed = ", ".join([BROADCAST_ALL, *BROADCAST_GROUPS])
                raise ValidationError(f"Target group must be one of: {allowed}, or a department name")
            departments = tuple(match)

        seen: Dict[int, User] = {}
        for name in departments:
            for user in self._users.list_employees(department=name):
                seen.setdefault(user.user_id, user)
        return sorted(seen.values(), key=lambda u: u.full_name)

    def broadcast(
        self,
        *,
        sender_id: int,
        target_group: str,
        message: str,
        title: Optional[str] = None,
        current_role: Role,
    ) -> int:
        """Send a notice to every active employee in the group. Returns the number of receivers."""
        if current_role != Role.MANAGER:
            raise AuthorizationError("Only managers can broadcast notices")

        message = require_non_empty(message, "Message")
        title = (title or "").strip() or DEFAULT_BROADCAST_TITLE
        receivers = self._audience(target_group)

        now = self._clock.now()
        for user in receivers:
            self._notifications.create(
                sender_id=int(sender_id),
                receiver_id=user.user_id,
                category=NotificationCategory.NOTICE,
                title=title,
                message=message,
                leave_id=None,
                created_at=now,
            )
        logger.info("User %s broadcast %r to %s receiver(s) in %s", sender_id, title, len(receivers), target_group)
        return len(receivers)
