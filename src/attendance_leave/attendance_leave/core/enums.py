from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User role supplied by the identity layer."""

    EMPLOYEE = "employee"
    MANAGER = "manager"


class AttendanceStatus(str, Enum):
    """Status stored on an attendance record."""

    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    HALF_DAY = "half-day"
    LEAVE = "leave"


class LeaveStatus(str, Enum):
    """Approval workflow state of a leave request."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class LeaveType(str, Enum):
    SICK = "sick leave"
    CASUAL = "casual leave"
    EMERGENCY = "emergency leave"
    ANNUAL = "annual leave"
    MATERNITY = "maternity leave"
    PATERNITY = "paternity leave"
    OTHER = "other"


class DayStatus(str, Enum):
    """Canonical per-day outcome. Only the resolution engine produces it."""

    PRESENT = "present"
    LATE = "late"
    HALF_DAY = "half-day"
    ABSENT = "absent"
    LEAVE_APPROVED = "leave-approved"
    LEAVE_PENDING = "leave-pending"
    NO_RECORD = "no-record"


class LeaveCheckinPolicy(str, Enum):
    """What a check-in does on a day already written as approved leave."""

    REJECT = "reject"
    OVERRIDE = "override"


class NotificationEvent(str, Enum):
    LEAVE_APPLIED = "leave_applied"
    LEAVE_DECIDED = "leave_decided"


class NotificationCategory(str, Enum):
    LEAVE = "leave"
    APPROVAL = "approval"
    NOTICE = "notice"
    ALERT = "alert"
    SYSTEM = "system"
