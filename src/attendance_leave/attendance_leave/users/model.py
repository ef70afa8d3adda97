from __future__ import annotations

from dataclasses import dataclass

from ..core.constants import UNASSIGNED_DEPARTMENT
from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: User.

    Plain data object, no storage access. ``department`` is free text.
    """

    user_id: int
    full_name: str
    username: str
    password_hash: str
    role: Role
    department: str = UNASSIGNED_DEPARTMENT
    employee_code: str = ""
    is_active: bool = True

    @property
    def is_manager(self) -> bool:
        return self.role == Role.MANAGER

    def to_public(self) -> dict:
        return {
            "user_id": self.user_id,
            "full_name": self.full_name,
            "username": self.username,
            "role": self.role.value,
            "department": self.department,
            "employee_code": self.employee_code,
            "is_active": self.is_active,
        }
