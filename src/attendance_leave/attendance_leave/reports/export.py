from __future__ import annotations

import csv
import io
from typing import Iterable, Mapping

EXPORT_FIELDS = [
    "date",
    "employee_code",
    "full_name",
    "department",
    "status",
    "check_in",
    "check_out",
    "total_hours",
    "leave_type",
]


def write_csv(rows: Iterable[Mapping[str, object]], *, fieldnames: list[str] | None = None) -> str:
    """Render export rows as CSV text (header included)."""

    out = io.StringIO()
    writer = csv.DictWriter(out, fieldnames=fieldnames or EXPORT_FIELDS, extrasaction="ignore")
    writer.writeheader()
    for row in rows:
        writer.writerow(row)
    return out.getvalue()


def csv_bytes(rows: Iterable[Mapping[str, object]]) -> bytes:
    # BOM so spreadsheet apps pick up UTF-8
    return write_csv(rows).encode("utf-8-sig")
