from __future__ import annotations

from dataclasses import replace
from typing import Optional, Sequence

from ..core.constants import UNASSIGNED_DEPARTMENT
from ..core.enums import Role
from ..core.exceptions import StorageConflictError
from ..database.memory import InMemoryDatabase
from .model import User
from .repository import UserRepository


class InMemoryUserRepository(UserRepository):
    def __init__(self, db: InMemoryDatabase):
        self._db = db

    @property
    def _rows(self) -> dict:
        return self._db.tables["users"]

    def get_by_id(self, user_id: int) -> Optional[User]:
        with self._db.lock:
            return self._rows.get(int(user_id))

    def get_by_username(self, username: str) -> Optional[User]:
        with self._db.lock:
            return next((u for u in self._rows.values() if u.username == username), None)

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
        with self._db.lock:
            if self.get_by_username(username):
                raise StorageConflictError(f"Username {username!r} already exists")
            user_id = self._db.next_id("users")
            self._rows[user_id] = User(
                user_id=user_id,
                full_name=full_name,
                username=username,
                password_hash=password_hash,
                role=role,
                department=department or UNASSIGNED_DEPARTMENT,
                employee_code=employee_code,
            )
            return user_id

    def update_profile(self, user_id: int, *, full_name: str, department: str) -> bool:
        with self._db.lock:
            user = self._rows.get(int(user_id))
            if not user:
                return False
            self._rows[user.user_id] = replace(user, full_name=full_name, department=department)
            return True

    def list_employees(self, *, department: Optional[str] = None) -> Sequence[User]:
        with self._db.lock:
            items = [
                u
                for u in self._rows.values()
                if u.role == Role.EMPLOYEE and u.is_active and (not department or u.department == department)
            ]
        return sorted(items, key=lambda u: u.full_name)

    def list_managers(self) -> Sequence[User]:
        with self._db.lock:
            items = [u for u in self._rows.values() if u.role == Role.MANAGER and u.is_active]
        return sorted(items, key=lambda u: u.user_id)

    def list_departments(self) -> Sequence[str]:
        return sorted({u.department for u in self.list_employees()})
