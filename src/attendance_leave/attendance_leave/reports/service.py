from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, time, timedelta
from typing import Dict, List, Optional, Sequence

from ..attendance.repository import AttendanceRepository
from ..common.clock import Clock, SystemClock
from ..common.datetime_utils import DayLike, month_bounds, normalize_day
from ..core.constants import DASHBOARD_RECENT_DAYS, DEFAULT_HISTORY_LIMIT, DEFAULT_LATE_THRESHOLD
from ..core.enums import DayStatus, LeaveStatus, Role
from ..core.exceptions import AuthorizationError, InvalidRange, NotFoundError, ValidationError
from ..leaves.repository import LeaveRepository
from ..resolution.engine import count_days, resolve_range
from ..resolution.model import DayCounts, ResolvedDay
from ..users.model import User
from ..users.repository import UserRepository

logger = logging.getLogger(__name__)

_NOT_WORKING = (DayStatus.ABSENT, DayStatus.NO_RECORD, DayStatus.LEAVE_PENDING)


def _require_manager(current_role: Role) -> None:
    if current_role != Role.MANAGER:
        raise AuthorizationError("Only managers can view team reports")


@dataclass(frozen=True)
class Viewer:
    """Who is asking: employees may only read their own data."""

    user_id: int
    role: Role

    def ensure_can_view(self, user_id: int) -> None:
        if self.role != Role.MANAGER and int(user_id) != int(self.user_id):
            raise AuthorizationError("You can only view your own attendance")


class ReportService:
    """Read paths over attendance and leaves. Every status comes from the resolution engine."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        leaves: LeaveRepository,
        users: UserRepository,
        *,
        clock: Optional[Clock] = None,
        late_threshold: time = DEFAULT_LATE_THRESHOLD,
    ):
        self._attendance = attendance
        self._leaves = leaves
        self._users = users
        self._clock = clock or SystemClock()
        self._threshold = late_threshold

    # -------- resolution helpers --------
    def _resolve(self, user_ids: Sequence[int], start: date, end: date) -> Dict[int, List[ResolvedDay]]:
        if not user_ids:
            return {}
        records = self._attendance.list_for_range(start_date=start, end_date=end, user_ids=user_ids)
        leaves = self._leaves.list_overlapping(
            start_date=start,
            end_date=end,
            user_ids=user_ids,
            statuses=(LeaveStatus.PENDING, LeaveStatus.APPROVED),
        )
        return {
            uid: resolve_range(uid, start, end, records, leaves, threshold=self._threshold)
            for uid in user_ids
        }

    def _resolve_one(self, user_id: int, start: date, end: date) -> List[ResolvedDay]:
        return self._resolve([int(user_id)], start, end)[int(user_id)]

    def _require_user(self, user_id: int) -> User:
        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("Employee not found")
        return user

    @staticmethod
    def _month_range(year: int, month: int) -> tuple[date, date]:
        start, end = month_bounds(year, month)
        return start.date(), end.date()

    # -------- employee views --------
    def day_detail(self, *, viewer: Viewer, user_id: int, day: DayLike) -> ResolvedDay:
        viewer.ensure_can_view(user_id)
        self._require_user(user_id)
        d = normalize_day(day)
        return self._resolve_one(user_id, d, d)[0]

    def history(
        self,
        *,
        viewer: Viewer,
        user_id: int,
        start: Optional[DayLike] = None,
        end: Optional[DayLike] = None,
        limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> List[ResolvedDay]:
        """Resolved days newest first, skipping days with nothing on them."""
        viewer.ensure_can_view(user_id)
        if int(limit) < 1:
            raise ValidationError("Limit must be at least 1")
        end_d = normalize_day(end) if end else self._clock.today()
        start_d = normalize_day(start) if start else end_d - timedelta(days=int(limit) - 1)
        if end_d < start_d:
            raise InvalidRange("End date must be on or after start date")

        days = [d for d in self._resolve_one(user_id, start_d, end_d) if d.status != DayStatus.NO_RECORD]
        days.reverse()
        return days[: int(limit)]

    def calendar_month(self, *, viewer: Viewer, user_id: int, year: int, month: int) -> List[dict]:
        viewer.ensure_can_view(user_id)
        start, end = self._month_range(year, month)
        return [
            {"date": d.day.isoformat(), "status": d.status.value}
            for d in self._resolve_one(user_id, start, end)
            if d.status != DayStatus.NO_RECORD
        ]

    def monthly_summary(self, *, viewer: Viewer, user_id: int, year: int, month: int) -> dict:
        viewer.ensure_can_view(user_id)
        start, end = self._month_range(year, month)
        counts = count_days(self._resolve_one(user_id, start, end))
        return {"user_id": int(user_id), "year": int(year), "month": int(month), **counts.to_dict()}

    # -------- manager views --------
    def team_calendar(
        self,
        *,
        current_role: Role,
        year: int,
        month: int,
        user_id: Optional[int] = None,
        department: Optional[str] = None,
    ) -> List[dict]:
        _require_manager(current_role)
        start, end = self._month_range(year, month)
        employees = self._employees(user_id=user_id, department=department)
        resolved = self._resolve([u.user_id for u in employees], start, end)

        out: List[dict] = []
        for u in employees:
            for d in resolved[u.user_id]:
                if d.status == DayStatus.NO_RECORD:
                    continue
                out.append(
                    {
                        "user_id": u.user_id,
                        "full_name": u.full_name,
                        "department": u.department,
                        "date": d.day.isoformat(),
                        "status": d.status.value,
                        "leave_type": d.to_dict()["leave_type"],
                    }
                )
        out.sort(key=lambda r: (r["date"], r["full_name"]))
        return out

    def team_summary(
        self,
        *,
        current_role: Role,
        year: int,
        month: int,
        department: Optional[str] = None,
    ) -> dict:
        _require_manager(current_role)
        start, end = self._month_range(year, month)
        employees = self._employees(department=department)
        resolved = self._resolve([u.user_id for u in employees], start, end)

        overall = DayCounts()
        by_department: Dict[str, DayCounts] = defaultdict(DayCounts)
        employees_out: List[dict] = []
        for u in employees:
            counts = count_days(resolved[u.user_id])
            overall.merge(counts)
            by_department[u.department].merge(counts)
            employees_out.append({"user_id": u.user_id, "full_name": u.full_name, "department": u.department, **counts.to_dict()})

        return {
            "year": int(year),
            "month": int(month),
            "total_employees": len(employees),
            "overall": overall.to_dict(),
            "by_department": {name: c.to_dict() for name, c in sorted(by_department.items())},
            "employees": employees_out,
        }

    def _employees(self, *, user_id: Optional[int] = None, department: Optional[str] = None) -> List[User]:
        if user_id:
            user = self._require_user(user_id)
            return [user]
        return list(self._users.list_employees(department=department or None))

    # -------- dashboards --------
    def employee_dashboard(self, *, user_id: int) -> dict:
        today = self._clock.today()
        month_start, month_end = self._month_range(today.year, today.month)
        recent_start = today - timedelta(days=DASHBOARD_RECENT_DAYS - 1)
        start = min(month_start, recent_start)

        days = self._resolve_one(user_id, start, month_end)
        by_day = {d.day: d for d in days}

        month_days = [d for d in days if month_start <= d.day <= month_end]
        recent = [by_day[recent_start + timedelta(days=i)] for i in range(DASHBOARD_RECENT_DAYS)]
        recent.reverse()

        return {
            "today": by_day[today].to_dict(),
            "month": count_days(month_days).to_dict(),
            "total_hours": str(self._attendance.total_hours_for_user(user_id)),
            "recent": [d.to_dict() for d in recent],
        }

    def manager_dashboard(self, *, current_role: Role) -> dict:
        _require_manager(current_role)
        today = self._clock.today()
        trend_start = today - timedelta(days=DASHBOARD_RECENT_DAYS - 1)
        employees = list(self._users.list_employees())
        resolved = self._resolve([u.user_id for u in employees], trend_start, today)

        def today_of(u: User) -> ResolvedDay:
            return resolved[u.user_id][-1]

        present = [u for u in employees if today_of(u).worked]
        late = [u for u in employees if today_of(u).status == DayStatus.LATE]
        on_leave = [u for u in employees if today_of(u).status == DayStatus.LEAVE_APPROVED]
        absent = [u for u in employees if today_of(u).status in _NOT_WORKING]

        trend: List[dict] = []
        for i in range(DASHBOARD_RECENT_DAYS):
            day_statuses = [resolved[u.user_id][i].status for u in employees]
            trend.append(
                {
                    "date": (trend_start + timedelta(days=i)).isoformat(),
                    "present": sum(1 for s in day_statuses if s in (DayStatus.PRESENT, DayStatus.LATE, DayStatus.HALF_DAY)),
                    "late": sum(1 for s in day_statuses if s == DayStatus.LATE),
                    "on_leave": sum(1 for s in day_statuses if s == DayStatus.LEAVE_APPROVED),
                    "absent": sum(1 for s in day_statuses if s in _NOT_WORKING),
                }
            )

        departments: Dict[str, dict] = {}
        for u in employees:
            d = departments.setdefault(u.department, {"department": u.department, "total": 0, "present": 0, "absent": 0})
            d["total"] += 1
            if today_of(u).worked:
                d["present"] += 1
            elif today_of(u).status in _NOT_WORKING:
                d["absent"] += 1

        pending = self._leaves.count_by_status().get(LeaveStatus.PENDING, 0)

        return {
            "date": today.isoformat(),
            "total_employees": len(employees),
            "present_today": len(present),
            "late_today": len(late),
            "on_leave_today": len(on_leave),
            "absent_today": len(absent),
            "pending_leaves": pending,
            "weekly_trend": trend,
            "departments": sorted(departments.values(), key=lambda d: d["department"]),
            "late_arrivals": [
                {
                    "user_id": u.user_id,
                    "full_name": u.full_name,
                    "department": u.department,
                    **today_of(u).lateness.to_dict(),
                }
                for u in late
            ],
            "absent_list": [
                {
                    "user_id": u.user_id,
                    "full_name": u.full_name,
                    "department": u.department,
                    "status": today_of(u).status.value,
                }
                for u in absent
            ],
        }

    # -------- export --------
    def export_rows(
        self,
        *,
        current_role: Role,
        start: DayLike,
        end: DayLike,
        department: Optional[str] = None,
        user_id: Optional[int] = None,
    ) -> List[dict]:
        _require_manager(current_role)
        start_d, end_d = normalize_day(start), normalize_day(end)
        if end_d < start_d:
            raise InvalidRange("End date must be on or after start date")

        employees = self._employees(user_id=user_id, department=department)
        resolved = self._resolve([u.user_id for u in employees], start_d, end_d)

        rows: List[dict] = []
        for u in employees:
            for d in resolved[u.user_id]:
                if d.status == DayStatus.NO_RECORD:
                    continue
                view = d.to_dict()
                rows.append(
                    {
                        "date": view["date"],
                        "employee_code": u.employee_code,
                        "full_name": u.full_name,
                        "department": u.department,
                        "status": view["status"],
                        "check_in": view["check_in_time"] or "",
                        "check_out": view["check_out_time"] or "",
                        "total_hours": view["total_hours"],
                        "leave_type": view["leave_type"] or "",
                    }
                )
        rows.sort(key=lambda r: (r["date"], r["full_name"]))
        logger.info("Exported %s row(s) for %s to %s", len(rows), start_d, end_d)
        return rows
