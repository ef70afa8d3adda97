from __future__ import annotations

from datetime import datetime

import pytest

from src.attendance_leave.attendance_leave.common.clock import FixedClock
from src.attendance_leave.attendance_leave.main import create_app, status_for
from src.attendance_leave.attendance_leave.core.exceptions import (
    AlreadyCheckedIn,
    DomainError,
    NotFoundError,
    TransientStorageError,
)


@pytest.fixture
def api_clock():
    return FixedClock(datetime(2026, 1, 5, 9, 40))


@pytest.fixture
def app(api_clock):
    return create_app(settings_module="config.testing", clock=api_clock)


def login(app, username, password):
    client = app.test_client()
    res = client.post("/api/auth/login", json={"username": username, "password": password})
    assert res.status_code == 200, res.get_json()
    return client


def test_login_and_me(app):
    client = login(app, "alice", "employee123")

    me = client.get("/api/auth/me").get_json()
    assert me["username"] == "alice"
    assert me["department"] == "Engineering"


def test_bad_password_is_401(app):
    res = app.test_client().post("/api/auth/login", json={"username": "alice", "password": "nope"})

    assert res.status_code == 401
    assert res.get_json()["code"] == "authentication_error"


def test_anonymous_requests_are_401(app):
    res = app.test_client().get("/api/attendance/today")

    assert res.status_code == 401


def test_employees_cannot_reach_manager_routes(app):
    client = login(app, "alice", "employee123")

    for path in ("/api/leaves/pending", "/api/dashboard/manager", "/api/attendance/export.csv"):
        assert client.get(path).status_code == 403


def test_checkin_leave_and_notification_flow(app):
    alice = login(app, "alice", "employee123")
    manager = login(app, "manager", "manager123")

    res = alice.post("/api/attendance/checkin")
    assert res.status_code == 201
    assert res.get_json()["attendance"]["status"] == "late"

    again = alice.post("/api/attendance/checkin")
    assert again.status_code == 409
    assert again.get_json()["code"] == "already_checked_in"

    res = alice.post(
        "/api/leaves",
        json={"leave_type": "sick leave", "reason": "flu", "start_date": "2026-01-06", "end_date": "2026-01-07"},
    )
    assert res.status_code == 201
    leave_id = res.get_json()["request_id"]

    pending = manager.get("/api/leaves/pending").get_json()
    assert [p["request_id"] for p in pending] == [leave_id]
    assert manager.get("/api/notifications/unread-count").get_json() == {"count": 1}

    res = manager.post(f"/api/leaves/{leave_id}/approve", json={"comment": "get well"})
    assert res.status_code == 200
    assert res.get_json()["status"] == "approved"

    again = manager.post(f"/api/leaves/{leave_id}/reject")
    assert again.status_code == 409
    assert again.get_json()["code"] == "not_pending"

    assert alice.get("/api/notifications/unread-count").get_json() == {"count": 1}
    day = alice.get("/api/attendance/date/2026-01-06").get_json()
    assert day["status"] == "leave-approved"
    assert day["leave_type"] == "sick leave"


def test_past_leave_is_invalid_range(app):
    alice = login(app, "alice", "employee123")

    res = alice.post(
        "/api/leaves",
        json={"leave_type": "sick leave", "reason": "flu", "start_date": "2026-01-01", "end_date": "2026-01-02"},
    )

    assert res.status_code == 400
    assert res.get_json()["code"] == "invalid_range"


def test_checkout_without_checkin_is_409(app):
    bob = login(app, "bob", "employee123")

    res = bob.post("/api/attendance/checkout")

    assert res.status_code == 409
    assert res.get_json()["code"] == "not_checked_in"


def test_csv_export(app):
    alice = login(app, "alice", "employee123")
    alice.post("/api/attendance/checkin")
    manager = login(app, "manager", "manager123")

    res = manager.get("/api/attendance/export.csv?start=2026-01-01&end=2026-01-31")

    assert res.status_code == 200
    assert res.mimetype == "text/csv"
    assert "attendance_20260101_20260131.csv" in res.headers["Content-Disposition"]
    body = res.data.decode("utf-8-sig").splitlines()
    assert body[0].startswith("date,employee_code,full_name")
    assert body[1].startswith("2026-01-05,EMP001,Alice Nguyen,Engineering,late,09:40:00")


def test_calendar_and_dashboards(app):
    alice = login(app, "alice", "employee123")
    alice.post("/api/attendance/checkin")

    assert alice.get("/api/calendar/2026/1").get_json() == [{"date": "2026-01-05", "status": "late"}]
    assert alice.get("/api/calendar/2026/13").status_code == 400
    assert alice.get("/api/dashboard/employee").get_json()["today"]["status"] == "late"

    manager = login(app, "manager", "manager123")
    board = manager.get("/api/dashboard/manager").get_json()
    assert board["late_today"] == 1
    assert board["absent_today"] == 2


@pytest.mark.parametrize(
    "error, status",
    [
        (AlreadyCheckedIn("x"), 409),
        (NotFoundError("x"), 404),
        (TransientStorageError("x"), 503),
        (DomainError("x"), 400),
    ],
)
def test_status_mapping(error, status):
    assert status_for(error) == status


def test_profile_view_and_update(app):
    alice = login(app, "alice", "employee123")

    assert alice.get("/api/users/profile").get_json()["full_name"] == "Alice Nguyen"

    res = alice.put("/api/users/profile", json={"full_name": "Alice N.", "department": "Sales"})
    assert res.status_code == 200
    assert res.get_json()["department"] == "Sales"
    assert alice.get("/api/auth/me").get_json()["full_name"] == "Alice N."


def test_broadcast_notice(app):
    manager = login(app, "manager", "manager123")
    alice = login(app, "alice", "employee123")

    res = manager.post("/api/notifications/broadcast", json={"target_group": "Engineering", "message": "Standup at 10"})
    assert res.status_code == 201
    assert res.get_json()["recipients_count"] == 2

    notes = alice.get("/api/notifications?category=notice").get_json()
    assert [n["message"] for n in notes] == ["Standup at 10"]

    assert alice.post("/api/notifications/broadcast", json={"target_group": "all", "message": "x"}).status_code == 403
    bad = manager.post("/api/notifications/broadcast", json={"target_group": "nobody", "message": "x"})
    assert bad.status_code == 400
