from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Mapping, Optional

from .models import TimesheetEntry

HOURS_PER_PTO_DAY = 8.0

FEDERAL_HOLIDAYS = [
    "New Year's Day",
    "Martin Luther King Jr. Day",
    "Presidents' Day",
    "Memorial Day",
    "Juneteenth",
    "Independence Day",
    "Labor Day",
    "Columbus Day",
    "Veterans Day",
    "Thanksgiving Day",
    "Christmas Day",
]


@dataclass
class PTOUsage:
    date: date
    hours: float
    notes: Optional[str] = None


@dataclass
class PTOSummary:
    employee_id: str
    employee_name: str
    total_pto_hours: float = 0.0
    entries: List[PTOUsage] = field(default_factory=list)

    @property
    def total_pto_days(self) -> float:
        return round(self.total_pto_hours / HOURS_PER_PTO_DAY, 2)


def year_bounds(year: int) -> tuple[date, date]:
    return date(year, 1, 1), date(year, 12, 31)


def pto_summary(
    entries: Iterable[TimesheetEntry],
    year: int,
    employees: Optional[Mapping[str, str]] = None,
) -> List[PTOSummary]:
    """Per-employee PTO usage for one calendar year, ordered by employee name.

    ``employees`` maps employee id to display name. When given, every listed
    employee gets a row (possibly empty) and rows for unknown ids are dropped,
    matching the admin report; otherwise one row per id seen in ``entries``.
    """

    start, end = year_bounds(year)
    summaries: Dict[str, PTOSummary] = {}
    if employees is not None:
        summaries = {emp_id: PTOSummary(employee_id=emp_id, employee_name=name) for emp_id, name in employees.items()}

    for entry in entries:
        if not (start <= entry.date <= end) or entry.pto_hours <= 0:
            continue
        summary = summaries.get(entry.employee_id)
        if summary is None:
            if employees is not None:
                continue
            summary = summaries[entry.employee_id] = PTOSummary(entry.employee_id, entry.employee_id)
        summary.total_pto_hours = round(summary.total_pto_hours + entry.pto_hours, 2)
        summary.entries.append(PTOUsage(date=entry.date, hours=entry.pto_hours, notes=entry.pto_notes))

    for summary in summaries.values():
        summary.entries.sort(key=lambda usage: usage.date)
    return sorted(summaries.values(), key=lambda s: s.employee_name.lower())
