from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import require_non_empty
from ..core.constants import UNASSIGNED_DEPARTMENT
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError, NotFoundError, ValidationError
from .model import User
from .repository import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionUser:
    """What we store into Flask session after login."""

    user_id: int
    full_name: str
    role: Role
    department: str


class AuthService:
    """Use case: authenticate user (login)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, username: str, password: str) -> SessionUser:
        user = self._users.get_by_username((username or "").strip())
        if not user or not user.is_active:
            raise AuthenticationError("Invalid username or password")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # placeholder or corrupted hash values
            ok = False

        if not ok:
            raise AuthenticationError("Invalid username or password")

        logger.info("User %s logged in", user.user_id)
        return SessionUser(
            user_id=user.user_id,
            full_name=user.full_name,
            role=user.role,
            department=user.department,
        )


class UserService:
    """Use case: directory lookups and account creation (manager)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def get(self, user_id: int) -> User:
        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def create_account(
        self,
        *,
        current_role: Role,
        full_name: str,
        username: str,
        password: str,
        role: Role,
        department: str = "",
        employee_code: str = "",
    ) -> int:
        if current_role != Role.MANAGER:
            raise AuthorizationError("Only managers can create accounts")

        full_name = require_non_empty(full_name, "Full name")
        username = require_non_empty(username, "Username")
        if not password or len(password) < 6:
            raise ValidationError("Password must be at least 6 characters")

        if self._users.get_by_username(username):
            raise ValidationError("Username already exists")

        user_id = self._users.create_user(
            full_name=full_name,
            username=username,
            password_hash=generate_password_hash(password),
            role=role,
            department=(department or "").strip() or UNASSIGNED_DEPARTMENT,
            employee_code=(employee_code or "").strip(),
        )
        logger.info("Created %s account %s (%s)", role.value, user_id, username)
        return user_id

    def list_employees(self, *, current_role: Role, department: str | None = None):
        if current_role != Role.MANAGER:
            raise AuthorizationError("Only managers can list employees")
        return self._users.list_employees(department=department)

    def list_departments(self):
        return self._users.list_departments()

    def update_profile(
        self,
        user_id: int,
        *,
        full_name: Optional[str] = None,
        department: Optional[str] = None,
    ) -> User:
        """Change the caller's own name and/or department. Omitted fields keep their value."""
        user = self.get(user_id)

        name = user.full_name
        if full_name is not None:
            name = require_non_empty(full_name, "Full name")
        dept = user.department
        if department is not None:
            dept = department.strip() or UNASSIGNED_DEPARTMENT

        # rowcount is 0 on MySQL when nothing changed, so existence was checked above
        self._users.update_profile(user.user_id, full_name=name, department=dept)
        logger.info("User %s updated profile", user.user_id)
        return self.get(user.user_id)
