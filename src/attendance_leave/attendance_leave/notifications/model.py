from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import NotificationCategory


@dataclass(frozen=True)
class Notification:
    notification_id: int
    sender_id: Optional[int]
    receiver_id: int
    category: NotificationCategory
    title: str
    message: str
    created_at: datetime
    leave_id: Optional[int] = None
    is_read: bool = False
    read_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "notification_id": self.notification_id,
            "sender_id": self.sender_id,
            "receiver_id": self.receiver_id,
            "category": self.category.value,
            "title": self.title,
            "message": self.message,
            "leave_id": self.leave_id,
            "is_read": self.is_read,
            "read_at": self.read_at.strftime("%Y-%m-%d %H:%M") if self.read_at else None,
            "created_at": self.created_at.strftime("%Y-%m-%d %H:%M"),
        }
