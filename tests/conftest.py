from __future__ import annotations

from datetime import datetime
from types import SimpleNamespace

import pytest
from werkzeug.security import generate_password_hash

from src.attendance_leave.attendance_leave.common.clock import FixedClock
from src.attendance_leave.attendance_leave.container import build_container
from src.attendance_leave.attendance_leave.core.enums import Role

# Monday
START = datetime(2026, 1, 5, 9, 0, 0)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(START)


@pytest.fixture
def container(clock):
    return build_container(settings={"STORAGE_BACKEND": "memory"}, clock=clock)


@pytest.fixture
def people(container):
    users = container.users_repo

    def add(name: str, username: str, role: Role, department: str, code: str) -> int:
        return users.create_user(
            full_name=name,
            username=username,
            password_hash=generate_password_hash("secret123"),
            role=role,
            department=department,
            employee_code=code,
        )

    return SimpleNamespace(
        manager=add("Mia Manager", "mia", Role.MANAGER, "Management", "MGR1"),
        alice=add("Alice", "alice", Role.EMPLOYEE, "Engineering", "E1"),
        bob=add("Bob", "bob", Role.EMPLOYEE, "Engineering", "E2"),
        carol=add("Carol", "carol", Role.EMPLOYEE, "Sales", "E3"),
    )
