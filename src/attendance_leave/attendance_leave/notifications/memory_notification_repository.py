from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Optional, Sequence

from ..core.constants import DEFAULT_NOTIFICATION_LIMIT
from ..core.enums import NotificationCategory
from ..database.memory import InMemoryDatabase
from .model import Notification
from .repository import NotificationRepository


class InMemoryNotificationRepository(NotificationRepository):
    def __init__(self, db: InMemoryDatabase):
        self._db = db

    @property
    def _rows(self) -> dict:
        return self._db.tables["notifications"]

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
        with self._db.lock:
            notification_id = self._db.next_id("notifications")
            self._rows[notification_id] = Notification(
                notification_id=notification_id,
                sender_id=sender_id,
                receiver_id=int(receiver_id),
                category=category,
                title=title,
                message=message,
                created_at=created_at,
                leave_id=leave_id,
            )
            return notification_id

    def get(self, notification_id: int) -> Optional[Notification]:
        with self._db.lock:
            return self._rows.get(int(notification_id))

    def list_for_receiver(
        self,
        receiver_id: int,
        *,
        category: Optional[NotificationCategory] = None,
        unread_only: bool = False,
        limit: int = DEFAULT_NOTIFICATION_LIMIT,
    ) -> Sequence[Notification]:
        with self._db.lock:
            items = [
                n
                for n in self._rows.values()
                if n.receiver_id == int(receiver_id)
                and (category is None or n.category == category)
                and (not unread_only or not n.is_read)
            ]
        items.sort(key=lambda n: (n.created_at, n.notification_id), reverse=True)
        return items[: int(limit)]

    def count_unread(self, receiver_id: int) -> int:
        with self._db.lock:
            return sum(1 for n in self._rows.values() if n.receiver_id == int(receiver_id) and not n.is_read)

    def mark_read(self, notification_id: int, *, read_at: datetime) -> bool:
        with self._db.lock:
            n = self._rows.get(int(notification_id))
            if not n or n.is_read:
                return False
            self._rows[n.notification_id] = replace(n, is_read=True, read_at=read_at)
            return True

    def mark_all_read(self, receiver_id: int, *, read_at: datetime) -> int:
        count = 0
        with self._db.lock:
            for n in list(self._rows.values()):
                if n.receiver_id == int(receiver_id) and not n.is_read:
                    self._rows[n.notification_id] = replace(n, is_read=True, read_at=read_at)
                    count += 1
        return count
