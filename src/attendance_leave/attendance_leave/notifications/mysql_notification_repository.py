from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.constants import DEFAULT_NOTIFICATION_LIMIT
from ..core.enums import NotificationCategory
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Notification
from .repository import NotificationRepository

_COLUMNS = "notification_id, sender_id, receiver_id, category, title, message, leave_id, is_read, read_at, created_at"


def _to_notification(r: dict) -> Notification:
    return Notification(
        notification_id=int(r["notification_id"]),
        sender_id=int(r["sender_id"]) if r.get("sender_id") is not None else None,
        receiver_id=int(r["receiver_id"]),
        category=NotificationCategory(r["category"]),
        title=r["title"],
        message=r["message"],
        created_at=r["created_at"],
        leave_id=int(r["leave_id"]) if r.get("leave_id") is not None else None,
        is_read=bool(r.get("is_read")),
        read_at=r.get("read_at"),
    )


class MySQLNotificationRepository(NotificationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO notifications(sender_id, receiver_id, category, title, message, leave_id, is_read, created_at)
                VALUES(%s,%s,%s,%s,%s,%s,0,%s)
                """,
                (sender_id, int(receiver_id), category.value, title, message, leave_id, created_at),
            )
            return int(cur.lastrowid)

    def get(self, notification_id: int) -> Optional[Notification]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM notifications WHERE notification_id=%s", (int(notification_id),))
            r = fetchone(cur)
            return _to_notification(r) if r else None

    def list_for_receiver(
        self,
        receiver_id: int,
        *,
        category: Optional[NotificationCategory] = None,
        unread_only: bool = False,
        limit: int = DEFAULT_NOTIFICATION_LIMIT,
    ) -> Sequence[Notification]:
        clauses = ["receiver_id=%s"]
        params: list[object] = [int(receiver_id)]
        if category is not None:
            clauses.append("category=%s")
            params.append(category.value)
        if unread_only:
            clauses.append("is_read=0")

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM notifications
                WHERE {' AND '.join(clauses)}
                ORDER BY created_at DESC, notification_id DESC
                LIMIT %s
                """,
                tuple(params + [int(limit)]),
            )
            return [_to_notification(r) for r in fetchall(cur)]

    def count_unread(self, receiver_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT COUNT(*) AS n FROM notifications WHERE receiver_id=%s AND is_read=0",
                (int(receiver_id),),
            )
            r = fetchone(cur)
            return int(r["n"]) if r else 0

    def mark_read(self, notification_id: int, *, read_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE notifications SET is_read=1, read_at=%s WHERE notification_id=%s AND is_read=0",
                (read_at, int(notification_id)),
            )
            return cur.rowcount > 0

    def mark_all_read(self, receiver_id: int, *, read_at: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE notifications SET is_read=1, read_at=%s WHERE receiver_id=%s AND is_read=0",
                (read_at, int(receiver_id)),
            )
            return int(cur.rowcount)
