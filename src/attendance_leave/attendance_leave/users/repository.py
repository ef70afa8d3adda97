from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import Role
from .model import User


class UserRepository(Protocol):
    """Repository interface for User.

    Services depend on this interface, not on a concrete database.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_username(self, username: str) -> Optional[User]:
        raise NotImplementedError

    def create_user(
        self,
        *,
        full_name: str,
        username: str,
        password_hash: str,
        role: Role,
        department: str,
        employee_code: str,
    ) -> int:
        raise NotImplementedError

    def update_profile(self, user_id: int, *, full_name: str, department: str) -> bool:
        raise NotImplementedError

    def list_employees(self, *, department: Optional[str] = None) -> Sequence[User]:
        """Active employees (role employee), ordered by full name."""

        raise NotImplementedError

    def list_managers(self) -> Sequence[User]:
        raise NotImplementedError

    def list_departments(self) -> Sequence[str]:
        raise NotImplementedError
