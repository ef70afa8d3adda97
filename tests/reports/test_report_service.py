from __future__ import annotations

from datetime import date, datetime

import pytest

from src.attendance_leave.attendance_leave.core.enums import DayStatus, Role
from src.attendance_leave.attendance_leave.core.exceptions import AuthorizationError, InvalidRange, ValidationError
from src.attendance_leave.attendance_leave.reports.export import EXPORT_FIELDS, csv_bytes, write_csv
from src.attendance_leave.attendance_leave.reports.service import Viewer


def work(container, clock, user_id, check_in, check_out=None):
    clock.set(check_in)
    container.attendance_service.check_in(user_id)
    if check_out is not None:
        clock.set(check_out)
        container.attendance_service.check_out(user_id)


@pytest.fixture
def first_week(container, clock, people):
    """Alice works Mon-Thu, Carol takes approved leave, Bob asks for leave."""
    work(container, clock, people.alice, datetime(2026, 1, 5, 9, 0), datetime(2026, 1, 5, 17, 0))
    work(container, clock, people.alice, datetime(2026, 1, 6, 9, 45), datetime(2026, 1, 6, 18, 0))
    work(container, clock, people.alice, datetime(2026, 1, 7, 9, 10), datetime(2026, 1, 7, 12, 0))
    work(container, clock, people.alice, datetime(2026, 1, 8, 9, 0), datetime(2026, 1, 8, 17, 0))

    leaves = container.leave_service
    carol = leaves.apply(
        user_id=people.carol, leave_type="annual leave", reason="trip", start_date="2026-01-12", end_date="2026-01-13"
    )
    leaves.approve(leave_id=carol.request_id, decided_by=people.manager, current_role=Role.MANAGER)
    leaves.apply(user_id=people.bob, leave_type="sick leave", reason="dentist", start_date="2026-01-20", end_date="2026-01-20")
    return people


def test_monthly_summary_counts_and_on_time_percentage(container, first_week):
    alice = first_week.alice
    summary = container.report_service.monthly_summary(
        viewer=Viewer(alice, Role.EMPLOYEE), user_id=alice, year=2026, month=1
    )

    assert (summary["present"], summary["late"], summary["half_day"]) == (2, 1, 1)
    assert summary["no_record"] == 31 - 4
    assert summary["worked_days"] == 4
    # 2 on time out of 3 full days
    assert summary["on_time_percentage"] == 67
    assert summary["total_hours"] == "27.08"


def test_team_summary_groups_by_department(container, first_week):
    summary = container.report_service.team_summary(current_role=Role.MANAGER, year=2026, month=1)

    assert summary["total_employees"] == 3
    assert sorted(summary["by_department"]) == ["Engineering", "Sales"]
    eng = summary["by_department"]["Engineering"]
    assert (eng["present"], eng["late"], eng["half_day"], eng["leave_pending"]) == (2, 1, 1, 1)
    assert summary["by_department"]["Sales"]["leave_approved"] == 2
    assert summary["overall"]["present"] == 2
    assert [e["full_name"] for e in summary["employees"]] == ["Alice", "Bob", "Carol"]


def test_team_views_need_manager(container, first_week):
    with pytest.raises(AuthorizationError):
        container.report_service.team_summary(current_role=Role.EMPLOYEE, year=2026, month=1)
    with pytest.raises(AuthorizationError):
        container.report_service.team_calendar(current_role=Role.EMPLOYEE, year=2026, month=1)


def test_calendar_skips_empty_days(container, first_week):
    carol = first_week.carol
    days = container.report_service.calendar_month(
        viewer=Viewer(carol, Role.EMPLOYEE), user_id=carol, year=2026, month=1
    )

    assert days == [
        {"date": "2026-01-12", "status": "leave-approved"},
        {"date": "2026-01-13", "status": "leave-approved"},
    ]


def test_team_calendar_filters_by_department(container, first_week):
    rows = container.report_service.team_calendar(
        current_role=Role.MANAGER, year=2026, month=1, department="Engineering"
    )

    assert {r["full_name"] for r in rows} == {"Alice", "Bob"}
    bob_rows = [r for r in rows if r["full_name"] == "Bob"]
    assert bob_rows == [
        {
            "user_id": first_week.bob,
            "full_name": "Bob",
            "department": "Engineering",
            "date": "2026-01-20",
            "status": "leave-pending",
            "leave_type": "sick leave",
        }
    ]


def test_history_is_newest_first(container, first_week):
    alice = first_week.alice
    days = container.report_service.history(
        viewer=Viewer(alice, Role.EMPLOYEE), user_id=alice, start=date(2026, 1, 1), end=date(2026, 1, 10)
    )

    assert [d.day for d in days] == [date(2026, 1, 8), date(2026, 1, 7), date(2026, 1, 6), date(2026, 1, 5)]
    assert [d.status for d in days] == [DayStatus.PRESENT, DayStatus.HALF_DAY, DayStatus.LATE, DayStatus.PRESENT]


def test_history_rejects_inverted_range(container, first_week):
    alice = first_week.alice
    with pytest.raises(InvalidRange):
        container.report_service.history(
            viewer=Viewer(alice, Role.EMPLOYEE), user_id=alice, start=date(2026, 1, 10), end=date(2026, 1, 1)
        )


@pytest.mark.parametrize("limit", [0, -3])
def test_history_requires_positive_limit(container, first_week, limit):
    alice = first_week.alice
    with pytest.raises(ValidationError):
        container.report_service.history(viewer=Viewer(alice, Role.EMPLOYEE), user_id=alice, limit=limit)


def test_history_limit_counts_back_from_today(container, clock, first_week):
    clock.set(datetime(2026, 1, 8, 18, 0))
    alice = first_week.alice

    days = container.report_service.history(viewer=Viewer(alice, Role.EMPLOYEE), user_id=alice, limit=2)

    assert [d.day for d in days] == [date(2026, 1, 8), date(2026, 1, 7)]


def test_day_detail_reports_lateness(container, first_week):
    alice = first_week.alice
    detail = container.report_service.day_detail(
        viewer=Viewer(first_week.manager, Role.MANAGER), user_id=alice, day=date(2026, 1, 6)
    )

    assert detail.status == DayStatus.LATE
    assert detail.lateness.is_late
    assert detail.lateness.minutes_late == 15
    assert detail.to_dict()["lateness"]["expected_time"] == "09:30"


def test_employees_only_see_themselves(container, first_week):
    with pytest.raises(AuthorizationError):
        container.report_service.day_detail(
            viewer=Viewer(first_week.bob, Role.EMPLOYEE), user_id=first_week.alice, day=date(2026, 1, 6)
        )


def test_manager_dashboard_today(container, clock, people):
    dave = container.users_repo.create_user(
        full_name="Dave", username="dave", password_hash="x", role=Role.EMPLOYEE, department="Sales", employee_code="E4"
    )
    leave = container.leave_service.apply(
        user_id=people.carol, leave_type="casual leave", reason="x", start_date="2026-01-05", end_date="2026-01-05"
    )
    container.leave_service.approve(leave_id=leave.request_id, decided_by=people.manager, current_role=Role.MANAGER)
    container.leave_service.apply(
        user_id=people.bob, leave_type="casual leave", reason="x", start_date="2026-01-10", end_date="2026-01-10"
    )
    work(container, clock, people.alice, datetime(2026, 1, 5, 9, 0))
    work(container, clock, people.bob, datetime(2026, 1, 5, 9, 45))

    board = container.report_service.manager_dashboard(current_role=Role.MANAGER)

    assert board["total_employees"] == 4
    assert board["present_today"] == 2
    assert board["late_today"] == 1
    assert board["on_leave_today"] == 1
    assert board["absent_today"] == 1
    assert board["pending_leaves"] == 1
    assert [a["full_name"] for a in board["late_arrivals"]] == ["Bob"]
    assert board["late_arrivals"][0]["minutes_late"] == 15
    assert board["absent_list"] == [
        {"user_id": dave, "full_name": "Dave", "department": "Sales", "status": "no-record"}
    ]
    assert len(board["weekly_trend"]) == 7
    assert board["weekly_trend"][-1]["date"] == "2026-01-05"
    assert board["weekly_trend"][-1]["present"] == 2
    assert {d["department"]: d["total"] for d in board["departments"]} == {"Engineering": 2, "Sales": 2}


def test_employee_dashboard(container, clock, first_week):
    clock.set(datetime(2026, 1, 8, 18, 0))
    board = container.report_service.employee_dashboard(user_id=first_week.alice)

    assert board["today"]["status"] == "present"
    assert board["month"]["present"] == 2
    assert board["total_hours"] == "27.08"
    assert [d["date"] for d in board["recent"]][:2] == ["2026-01-08", "2026-01-07"]
    assert len(board["recent"]) == 7


def test_export_rows_and_csv(container, first_week):
    rows = container.report_service.export_rows(
        current_role=Role.MANAGER, start=date(2026, 1, 5), end=date(2026, 1, 13)
    )

    assert [(r["date"], r["full_name"], r["status"]) for r in rows][:2] == [
        ("2026-01-05", "Alice", "present"),
        ("2026-01-06", "Alice", "late"),
    ]
    assert rows[-1] == {
        "date": "2026-01-13",
        "employee_code": "E3",
        "full_name": "Carol",
        "department": "Sales",
        "status": "leave-approved",
        "check_in": "",
        "check_out": "",
        "total_hours": "0.00",
        "leave_type": "annual leave",
    }

    text = write_csv(rows)
    lines = text.splitlines()
    assert lines[0] == ",".join(EXPORT_FIELDS)
    assert len(lines) == len(rows) + 1
    assert csv_bytes(rows).startswith(b"\xef\xbb\xbf")

    with pytest.raises(AuthorizationError):
        container.report_service.export_rows(current_role=Role.EMPLOYEE, start=date(2026, 1, 5), end=date(2026, 1, 13))
