from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.constants import DEFAULT_NOTIFICATION_LIMIT
from ..core.enums import NotificationCategory
from .model import Notification


class NotificationRepository(Protocol):
    def create(
        self,
        *,
        sender_id: Optional[int],
        receiver_id: int,
        category: NotificationCategory,
        title: str,
        message: str,
        leave_id: Optional[int],
        created_at: datetime,
    ) -> int:
        raise NotImplementedError

    def get(self, notification_id: int) -> Optional[Notification]:
        raise NotImplementedError

    def list_for_receiver(
        self,
        receiver_id: int,
        *,
        category: Optional[NotificationCategory] = None,
        unread_only: bool = False,
        limit: int = DEFAULT_NOTIFICATION_LIMIT,
    ) -> Sequence[Notification]:
        raise NotImplementedError

    def count_unread(self, receiver_id: int) -> int:
        raise NotImplementedError

    def mark_read(self, notification_id: int, *, read_at: datetime) -> bool:
        raise NotImplementedError

    def mark_all_read(self, receiver_id: int, *, read_at: datetime) -> int:
        raise NotImplementedError
