from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Iterable, Optional

from .errors import InvariantViolation, ValidationError
from .models import Apportionment, TimesheetEntry
from .pay_period import PAY_PERIOD_ANCHOR, resolve_pay_period, week_number as week_of


def round_hours(value: float) -> float:
    return round(value, 2)


def worked_hours(time_in: Optional[datetime], time_out: Optional[datetime]) -> float:
    if time_in is None or time_out is None:
        raise ValidationError("Both time in and time out are required to compute hours")
    # A punch-out before the punch-in counts as no time worked
    return max(0.0, (time_out - time_in).total_seconds() / 3600)


@dataclass
class WeeklyThresholdRule:
    threshold: float = 40.0

    def split(self, total_worked: float, existing_weekly_hours: float) -> Apportionment:
        available = max(0.0, self.threshold - existing_weekly_hours)
        if total_worked <= available:
            regular, overtime = total_worked, 0.0
        else:
            regular, overtime = available, total_worked - available
        result = Apportionment(regular_hours=round_hours(regular), overtime_hours=round_hours(overtime))
        if result.regular_hours < 0 or result.overtime_hours < 0:
            raise InvariantViolation(f"Negative hours after apportionment: {result}")
        return result


@dataclass
class OvertimeEngine:
    """Weekly overtime apportionment for one day at a time.

    The day being recalculated absorbs all of its own overflow. Hours already
    recorded on other days of the week are never reclassified, so editing the
    days of a week in a different order can move overtime between days.
    """

    weekly_rule: WeeklyThresholdRule = field(default_factory=WeeklyThresholdRule)
    anchor: date = PAY_PERIOD_ANCHOR

    def existing_weekly_hours(
        self,
        entries: Iterable[TimesheetEntry],
        week: int,
        exclude_date: date,
        period_start: date,
    ) -> float:
        return sum(
            entry.regular_hours + entry.overtime_hours
            for entry in entries
            if entry.date != exclude_date and week_of(entry.date, period_start) == week
        )

    def apportion(
        self,
        time_in: Optional[datetime],
        time_out: Optional[datetime],
        week_number: Optional[int],
        exclude_date: date,
        entries: Iterable[TimesheetEntry],
        *,
        period_start: Optional[date] = None,
    ) -> Apportionment:
        if period_start is None:
            period_start = resolve_pay_period(exclude_date, self.anchor).start
        if week_number is None:
            week_number = week_of(exclude_date, period_start)
        total_worked = worked_hours(time_in, time_out)
        existing = self.existing_weekly_hours(entries, week_number, exclude_date, period_start)
        return self.weekly_rule.split(total_worked, existing)

    def split_manual(
        self,
        hours: float,
        week_number: int,
        exclude_date: date,
        entries: Iterable[TimesheetEntry],
        *,
        period_start: date,
    ) -> Apportionment:
        existing = self.existing_weekly_hours(entries, week_number, exclude_date, period_start)
        return self.weekly_rule.split(hours, existing)


def apportion(
    time_in: Optional[datetime],
    time_out: Optional[datetime],
    week_number: Optional[int],
    exclude_date: date,
    entries: Iterable[TimesheetEntry],
    *,
    period_start: Optional[date] = None,
) -> Apportionment:
    return OvertimeEngine().apportion(
        time_in, time_out, week_number, exclude_date, entries, period_start=period_start
    )
