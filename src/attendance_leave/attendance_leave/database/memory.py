"""In-process storage backend.

Used by the ``testing`` settings and by the test-suite. Records are frozen
dataclasses, so a shallow copy of each table is a complete snapshot.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator

TABLES = ("users", "attendance_records", "leave_requests", "notifications")


class InMemoryDatabase:
    def __init__(self):
        self.lock = threading.RLock()
        self.tables: Dict[str, Dict[Any, Any]] = {name: {} for name in TABLES}
        self._ids: Dict[str, int] = {name: 0 for name in TABLES}

    def next_id(self, table: str) -> int:
        with self.lock:
            self._ids[table] += 1
            return self._ids[table]

    def snapshot(self) -> Dict[str, Dict[Any, Any]]:
        with self.lock:
            return {name: dict(rows) for name, rows in self.tables.items()}

    def restore(self, snapshot: Dict[str, Dict[Any, Any]]) -> None:
        with self.lock:
            for name, rows in snapshot.items():
                self.tables[name] = dict(rows)


class InMemoryTransactionManager:
    """All-or-nothing unit: holds the database lock, restores on error."""

    def __init__(self, db: InMemoryDatabase):
        self._db = db

    @contextmanager
    def atomic(self) -> Iterator[InMemoryDatabase]:
        with self._db.lock:
            snapshot = self._db.snapshot()
            try:
                yield self._db
            except Exception:
                self._db.restore(snapshot)
                raise
