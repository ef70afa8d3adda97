from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Iterator, List, Optional

import mysql.connector

from ..core.exceptions import StorageConflictError
from .connection import DatabaseConnection

logger = logging.getLogger(__name__)

# duplicate key, lock wait timeout, deadlock
_CONFLICT_ERRNOS = {1062, 1205, 1213}


@dataclass
class MySQLTransaction:
    """Open connection + cursor shared by every repository call in one unit."""

    conn: Any
    cur: Any


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.Error as exc:
        conn.rollback()
        if getattr(exc, "errno", None) in _CONFLICT_ERRNOS:
            logger.warning("MySQL write conflict (errno=%s): %s", exc.errno, exc.msg)
            raise StorageConflictError(str(exc.msg)) from exc
        raise
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


@contextmanager
def tx_cursor(conn_factory: DatabaseConnection, tx: Optional[MySQLTransaction] = None):
    """Reuse the caller's transaction when given, else run in a fresh one."""
    if tx is not None:
        yield tx.conn, tx.cur
        return
    with db_cursor(conn_factory) as pair:
        yield pair


class MySQLTransactionManager:
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @contextmanager
    def atomic(self) -> Iterator[MySQLTransaction]:
        with db_cursor(self._conn_factory) as (conn, cur):
            yield MySQLTransaction(conn=conn, cur=cur)


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def to_decimal(value: Any) -> Decimal:
    if value is None:
        return Decimal("0.00")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))
