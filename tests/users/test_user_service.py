from __future__ import annotations

import pytest

from src.attendance_leave.attendance_leave.core.enums import Role
from src.attendance_leave.attendance_leave.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    ValidationError,
)


def test_authenticate(container, people):
    user = container.auth_service.authenticate("alice", "secret123")

    assert user.user_id == people.alice
    assert user.role == Role.EMPLOYEE

    with pytest.raises(AuthenticationError):
        container.auth_service.authenticate("alice", "wrong")


def test_update_profile_changes_name_and_department(container, people):
    user = container.user_service.update_profile(people.alice, full_name=" Alice Tran ", department="Design")

    assert user.full_name == "Alice Tran"
    assert user.department == "Design"
    assert [u.full_name for u in container.users_repo.list_employees(department="Design")] == ["Alice Tran"]


def test_update_profile_keeps_omitted_fields(container, people):
    user = container.user_service.update_profile(people.bob, department="")

    assert user.full_name == "Bob"
    assert user.department == "Unassigned"


def test_update_profile_rejects_blank_name(container, people):
    with pytest.raises(ValidationError):
        container.user_service.update_profile(people.alice, full_name="   ")

    assert container.users_repo.get_by_id(people.alice).full_name == "Alice"


def test_update_profile_unknown_user(container):
    with pytest.raises(NotFoundError):
        container.user_service.update_profile(404, full_name="Ghost")


def test_create_account_is_manager_only(container):
    with pytest.raises(AuthorizationError):
        container.user_service.create_account(
            current_role=Role.EMPLOYEE, full_name="X", username="x", password="secret1", role=Role.EMPLOYEE
        )


def test_create_account_validates_password_and_username(container, people):
    with pytest.raises(ValidationError):
        container.user_service.create_account(
            current_role=Role.MANAGER, full_name="X", username="x", password="123", role=Role.EMPLOYEE
        )
    with pytest.raises(ValidationError):
        container.user_service.create_account(
            current_role=Role.MANAGER, full_name="X", username="alice", password="secret1", role=Role.EMPLOYEE
        )
