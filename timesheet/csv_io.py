from __future__ import annotations
import csv
from pathlib import Path
from typing import Iterable

from .models import TimesheetEntry


CSV_HEADERS = [
    "employee_id",
    "date",
    "time_in",
    "time_out",
    "regular_hours",
    "overtime_hours",
    "pto_hours",
    "holiday_hours",
    "pto_notes",
    "holiday_name",
    "pay_period_start",
    "pay_period_end",
]


def _iso(value) -> str:
    return value.isoformat() if value is not None else ""


def export_entries(path: Path, entries: Iterable[TimesheetEntry]) -> int:
    count = 0
    with path.open("w", newline="") as handle:
        writer = csv.DictWriter(handle, fieldnames=CSV_HEADERS)
        writer.writeheader()
        for entry in entries:
            writer.writerow(
                {
                    "employee_id": entry.employee_id,
                    "date": entry.date.isoformat(),
                    "time_in": _iso(entry.time_in),
                    "time_out": _iso(entry.time_out),
                    "regular_hours": f"{entry.regular_hours:.2f}",
                    "overtime_hours": f"{entry.overtime_hours:.2f}",
                    "pto_hours": f"{entry.pto_hours:.2f}",
                    "holiday_hours": f"{entry.holiday_hours:.2f}",
                    "pto_notes": entry.pto_notes or "",
                    "holiday_name": entry.holiday_name or "",
                    "pay_period_start": _iso(entry.pay_period_start),
                    "pay_period_end": _iso(entry.pay_period_end),
                }
            )
            count += 1
    return count
