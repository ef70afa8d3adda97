from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

import mysql.connector
from werkzeug.security import generate_password_hash

from ..core.enums import Role
from ..users.repository import UserRepository

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parent / "schema.sql"
SEED_PATH = Path(__file__).resolve().parent / "seed.sql"

# (full_name, username, password, role, department, employee_code)
DEMO_USERS = (
    ("Demo Manager", "manager", "manager123", Role.MANAGER, "Management", "MGR001"),
    ("Alice Nguyen", "alice", "employee123", Role.EMPLOYEE, "Engineering", "EMP001"),
    ("Bob Tran", "bob", "employee123", Role.EMPLOYEE, "Engineering", "EMP002"),
    ("Carol Le", "carol", "employee123", Role.EMPLOYEE, "Sales", "EMP003"),
)


@dataclass(frozen=True)
class DBTarget:
    host: str
    port: int
    user: str
    password: str
    database: str


def _as_target(db_config: dict) -> DBTarget:
    return DBTarget(
        host=str(db_config.get("host", "localhost")),
        port=int(db_config.get("port", 3306)),
        user=str(db_config.get("user", "root")),
        password=str(db_config.get("password", "")),
        database=str(db_config.get("database", "attendance_leave")),
    )


def _connect(target: DBTarget, *, with_database: bool = True):
    kwargs = dict(host=target.host, port=target.port, user=target.user, password=target.password, use_pure=True)
    if with_database:
        kwargs["database"] = target.database
    return mysql.connector.connect(**kwargs)


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql independent of the configured database name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _iter_sql_statements(sql: str) -> Iterable[str]:
    # Minimal SQL splitter for schema/seed files (handles ';' inside quotes and -- comments).
    buf: list[str] = []
    in_single = False
    escape = False

    for line in sql.splitlines(keepends=True):
        if not in_single and line.lstrip().startswith("--"):
            continue
        for ch in line:
            if escape:
                buf.append(ch)
                escape = False
                continue
            if ch == "\\":
                buf.append(ch)
                escape = True
                continue
            if ch == "'":
                in_single = not in_single
            if ch == ";" and not in_single:
                stmt = "".join(buf).strip()
                buf.clear()
                if stmt:
                    yield stmt
                continue
            buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _exec_sql(cur, sql: str) -> None:
    for stmt in _iter_sql_statements(sql):
        cur.execute(stmt)


def ensure_database_exists(db_config: dict) -> None:
    target = _as_target(db_config)
    conn = _connect(target, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_sql_file(db_config: dict, *, path: str | Path) -> None:
    sql = _strip_create_db_and_use(Path(path).read_text(encoding="utf-8"))
    conn = _connect(_as_target(db_config))
    try:
        cur = conn.cursor()
        _exec_sql(cur, sql)
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path = SCHEMA_PATH) -> None:
    ensure_database_exists(db_config)
    apply_sql_file(db_config, path=schema_path)
    logger.info("Applied schema %s", Path(schema_path).name)


def apply_seed_sql(db_config: dict, *, seed_path: str | Path = SEED_PATH) -> None:
    apply_sql_file(db_config, path=seed_path)
    logger.info("Applied seed %s", Path(seed_path).name)


def ensure_demo_users(db_config: dict) -> None:
    """Upsert the demo accounts with freshly hashed passwords."""
    conn = _connect(_as_target(db_config))
    try:
        cur = conn.cursor(dictionary=True)
        for full_name, username, password, role, department, code in DEMO_USERS:
            password_hash = generate_password_hash(password)
            cur.execute("SELECT user_id FROM users WHERE username=%s", (username,))
            if cur.fetchone():
                cur.execute(
                    """
                    UPDATE users
                    SET full_name=%s, password_hash=%s, role=%s, department=%s, employee_code=%s, is_active=1
                    WHERE username=%s
                    """,
                    (full_name, password_hash, role.value, department, code, username),
                )
            else:
                cur.execute(
                    """
                    INSERT INTO users (full_name, username, password_hash, role, department, employee_code)
                    VALUES (%s, %s, %s, %s, %s, %s)
                    """,
                    (full_name, username, password_hash, role.value, department, code),
                )
        conn.commit()
    finally:
        conn.close()


def seed_demo_users(users: UserRepository) -> None:
    """Same demo accounts, written through a repository (in-memory backend)."""
    for full_name, username, password, role, department, code in DEMO_USERS:
        if users.get_by_username(username):
            continue
        users.create_user(
            full_name=full_name,
            username=username,
            password_hash=generate_password_hash(password),
            role=role,
            department=department,
            employee_code=code,
        )


def list_tables(db_config: dict) -> list[str]:
    conn = _connect(_as_target(db_config))
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
