from __future__ import annotations

from typing import Optional, Sequence

from ..core.constants import UNASSIGNED_DEPARTMENT
from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import User
from .repository import UserRepository

_COLUMNS = "user_id, full_name, username, password_hash, role, department, employee_code, is_active"


def _to_user(row: dict) -> User:
    return User(
        user_id=int(row["user_id"]),
        full_name=row["full_name"],
        username=row["username"],
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        department=row.get("department") or UNASSIGNED_DEPARTMENT,
        employee_code=row.get("employee_code") or "",
        is_active=bool(row.get("is_active", True)),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE user_id=%s", (int(user_id),))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def get_by_username(self, username: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE username=%s", (username,))
            row = fetchone(cur)
            return _to_user(row) if row else None

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(full_name, username, password_hash, role, department, employee_code, is_active)
                VALUES(%s,%s,%s,%s,%s,%s,1)
                """,
                (full_name, username, password_hash, role.value, department, employee_code),
            )
            return int(cur.lastrowid)

    def update_profile(self, user_id: int, *, full_name: str, department: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE users SET full_name=%s, department=%s WHERE user_id=%s",
                (full_name, department, int(user_id)),
            )
            return cur.rowcount > 0

    def list_employees(self, *, department: Optional[str] = None) -> Sequence[User]:
        clauses = ["role=%s", "is_active=1"]
        params: list[object] = [Role.EMPLOYEE.value]
        if department:
            clauses.append("department=%s")
            params.append(department)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM users WHERE {' AND '.join(clauses)} ORDER BY full_name ASC",
                tuple(params),
            )
            return [_to_user(r) for r in fetchall(cur)]

    def list_managers(self) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM users WHERE role=%s AND is_active=1 ORDER BY user_id ASC",
                (Role.MANAGER.value,),
            )
            return [_to_user(r) for r in fetchall(cur)]

    def list_departments(self) -> Sequence[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT DISTINCT COALESCE(NULLIF(department, ''), %s) AS department
                FROM users
                WHERE role=%s AND is_active=1
                ORDER BY department ASC
                """,
                (UNASSIGNED_DEPARTMENT, Role.EMPLOYEE.value),
            )
            return [r["department"] for r in fetchall(cur)]
