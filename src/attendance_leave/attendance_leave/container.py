from __future__ import annotations

from dataclasses import dataclass
from datetime import time
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from .attendance.factory import AttendanceStrategyFactory
from .attendance.memory_attendance_repository import InMemoryAttendanceRepository
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .common.clock import Clock, SystemClock
from .common.datetime_utils import parse_hhmm
from .common.validators import require_enum
from .core.constants import DEFAULT_HALF_DAY_HOURS, DEFAULT_LATE_THRESHOLD
from .core.enums import LeaveCheckinPolicy
from .core.exceptions import ValidationError
from .database.connection import DBConfig, DatabaseConnection
from .database.memory import InMemoryDatabase, InMemoryTransactionManager
from .database.mysql_base import MySQLTransactionManager
from .database.transaction import TransactionManager
from .leaves.memory_leave_repository import InMemoryLeaveRepository
from .leaves.mysql_leave_repository import MySQLLeaveRepository
from .leaves.repository import LeaveRepository
from .leaves.service import LeaveService
from .leaves.side_effector import LeaveAttendanceWriter
from .notifications.memory_notification_repository import InMemoryNotificationRepository
from .notifications.mysql_notification_repository import MySQLNotificationRepository
from .notifications.notifier import Notifier, StoredNotifier
from .notifications.repository import NotificationRepository
from .notifications.service import NotificationService
from .reports.service import ReportService
from .users.memory_user_repository import InMemoryUserRepository
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService, UserService

BACKENDS = ("mysql", "memory")


def _setting(settings: Any, name: str, default: Any) -> Any:
    if isinstance(settings, dict):
        return settings.get(name, default)
    return getattr(settings, name, default)


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


@dataclass(frozen=True)
class EngineSettings:
    """Business rules and backend choice, parsed once from the settings module."""

    storage_backend: str = "mysql"
    timezone: str = ""
    late_threshold: time = DEFAULT_LATE_THRESHOLD
    half_day_hours: Decimal = Decimal(DEFAULT_HALF_DAY_HOURS)
    leave_checkin_policy: LeaveCheckinPolicy = LeaveCheckinPolicy.REJECT
    approve_past_leaves: bool = True
    reject_overlapping_leaves: bool = False

    @classmethod
    def from_settings(cls, settings: Any) -> "EngineSettings":
        backend = str(_setting(settings, "STORAGE_BACKEND", "mysql") or "mysql").strip().lower()
        if backend not in BACKENDS:
            raise ValidationError(f"STORAGE_BACKEND must be one of: {', '.join(BACKENDS)}")

        threshold = _setting(settings, "LATE_THRESHOLD", DEFAULT_LATE_THRESHOLD)
        if not isinstance(threshold, time):
            threshold = parse_hhmm(str(threshold))

        try:
            half_day = Decimal(str(_setting(settings, "HALF_DAY_HOURS", DEFAULT_HALF_DAY_HOURS)))
        except InvalidOperation:
            raise ValidationError("HALF_DAY_HOURS must be a number")

        return cls(
            storage_backend=backend,
            timezone=str(_setting(settings, "TIMEZONE", "") or ""),
            late_threshold=threshold,
            half_day_hours=half_day,
            leave_checkin_policy=require_enum(
                _setting(settings, "LEAVE_CHECKIN_POLICY", LeaveCheckinPolicy.REJECT),
                LeaveCheckinPolicy,
                "LEAVE_CHECKIN_POLICY",
            ),
            approve_past_leaves=_as_bool(_setting(settings, "APPROVE_PAST_LEAVES", True)),
            reject_overlapping_leaves=_as_bool(_setting(settings, "REJECT_OVERLAPPING_LEAVES", False)),
        )


@dataclass(frozen=True)
class Container:
    settings: EngineSettings
    clock: Clock
    transactions: TransactionManager

    users_repo: UserRepository
    attendance_repo: AttendanceRepository
    leaves_repo: LeaveRepository
    notifications_repo: NotificationRepository

    notifier: Notifier
    auth_service: AuthService
    user_service: UserService
    attendance_service: AttendanceService
    leave_service: LeaveService
    report_service: ReportService
    notification_service: NotificationService

    conn: Optional[DatabaseConnection] = None
    memory_db: Optional[InMemoryDatabase] = None


def build_container(
    *,
    settings: Any = None,
    db_config: Optional[dict] = None,
    clock: Optional[Clock] = None,
) -> Container:
    engine = settings if isinstance(settings, EngineSettings) else EngineSettings.from_settings(settings or {})
    clock = clock or SystemClock(engine.timezone or None)

    conn: Optional[DatabaseConnection] = None
    memory_db: Optional[InMemoryDatabase] = None

    if engine.storage_backend == "memory":
        memory_db = InMemoryDatabase()
        users_repo = InMemoryUserRepository(memory_db)
        attendance_repo = InMemoryAttendanceRepository(memory_db)
        leaves_repo = InMemoryLeaveRepository(memory_db)
        notifications_repo = InMemoryNotificationRepository(memory_db)
        transactions = InMemoryTransactionManager(memory_db)
    else:
        if db_config is None:
            db_config = dict(_setting(settings or {}, "DB_CONFIG", {}) or {})
        conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
        users_repo = MySQLUserRepository(conn)
        attendance_repo = MySQLAttendanceRepository(conn)
        leaves_repo = MySQLLeaveRepository(conn)
        notifications_repo = MySQLNotificationRepository(conn)
        transactions = MySQLTransactionManager(conn)

    notifier = StoredNotifier(notifications_repo, users_repo, clock=clock)

    auth_service = AuthService(users_repo)
    user_service = UserService(users_repo)
    attendance_service = AttendanceService(
        attendance_repo,
        users_repo,
        clock=clock,
        strategy_factory=AttendanceStrategyFactory(
            late_threshold=engine.late_threshold,
            half_day_hours=engine.half_day_hours,
        ),
        leave_checkin_policy=engine.leave_checkin_policy,
    )
    leave_service = LeaveService(
        leaves_repo,
        users_repo,
        LeaveAttendanceWriter(attendance_repo),
        transactions,
        notifier=notifier,
        clock=clock,
        approve_past_leaves=engine.approve_past_leaves,
        reject_overlapping=engine.reject_overlapping_leaves,
    )
    report_service = ReportService(
        attendance_repo,
        leaves_repo,
        users_repo,
        clock=clock,
        late_threshold=engine.late_threshold,
    )
    notification_service = NotificationService(notifications_repo, users_repo, clock=clock)

    return Container(
        settings=engine,
        clock=clock,
        transactions=transactions,
        users_repo=users_repo,
        attendance_repo=attendance_repo,
        leaves_repo=leaves_repo,
        notifications_repo=notifications_repo,
        notifier=notifier,
        auth_service=auth_service,
        user_service=user_service,
        attendance_service=attendance_service,
        leave_service=leave_service,
        report_service=report_service,
        notification_service=notification_service,
        conn=conn,
        memory_db=memory_db,
    )
