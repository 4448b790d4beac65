from __future__ import annotations
from datetime import datetime
from typing import Optional

from .dates import format_display
from .models import HourTotals, PeriodView


def format_clock(value: Optional[datetime]) -> str:
    if value is None:
        return "-"
    hour = value.hour % 12 or 12
    suffix = "AM" if value.hour < 12 else "PM"
    return f"{hour}:{value.minute:02d} {suffix}"


def _totals_row(label: str, totals: HourTotals) -> str:
    return (
        f"{label:<26}  {totals.regular:>7.2f}  {totals.overtime:>7.2f}  "
        f"{totals.pto:>7.2f}  {totals.holiday:>7.2f}  {totals.total:>7.2f}"
    )


def format_period(view: PeriodView) -> str:
    rows = [
        f"Timesheet for {view.employee_id}",
        f"Pay period {view.period.label}",
    ]
    for week in view.weeks:
        rows.append("")
        rows.append(f"Week {week.week_number}: {format_display(week.start)} - {format_display(week.end)}")
        rows.append("Day  Date        In        Out       Regular  Overtime     PTO  Holiday    Total")
        for day in week.days:
            entry = day.entry
            if entry is None:
                rows.append(f"{day.day_name}  {day.date.isoformat()}  {'-':<8}  {'-':<8}")
                continue
            day_total = entry.regular_hours + entry.overtime_hours + entry.pto_hours + entry.holiday_hours
            rows.append(
                f"{day.day_name}  {day.date.isoformat()}  {format_clock(entry.time_in):<8}  {format_clock(entry.time_out):<8}  "
                f"{entry.regular_hours:>7.2f}  {entry.overtime_hours:>8.2f}  {entry.pto_hours:>6.2f}  "
                f"{entry.holiday_hours:>7.2f}  {day_total:>7.2f}"
            )
        rows.append(_totals_row(f"Week {week.week_number} totals", week.totals))
    rows.append("")
    rows.append(_totals_row("Pay period totals", view.totals))
    return "\n".join(rows)
