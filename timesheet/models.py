from __future__ import annotations
import math
from dataclasses import dataclass, field, fields, replace
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from .errors import ValidationError

HOUR_FIELDS = ("regular_hours", "overtime_hours", "pto_hours", "holiday_hours")


class Direction(str, Enum):
    NEXT = "next"
    PREV = "prev"


class TimeField(str, Enum):
    TIME_IN = "time_in"
    TIME_OUT = "time_out"


class HourField(str, Enum):
    REGULAR = "regular"
    OVERTIME = "overtime"
    PTO = "pto"
    HOLIDAY = "holiday"

    @property
    def column(self) -> str:
        return f"{self.value}_hours"


def coerce_hours(value: Any, name: str = "hours") -> float:
    if isinstance(value, bool):
        raise ValidationError(f"{name} must be a number")
    try:
        hours = float(value or 0)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"{name} must be a number, got {value!r}") from exc
    if not math.isfinite(hours) or hours < 0:
        raise ValidationError(f"{name} must be a non-negative number")
    return round(hours, 2)


@dataclass
class TimesheetEntry:
    employee_id: str
    date: date
    time_in: Optional[datetime] = None
    time_out: Optional[datetime] = None
    regular_hours: float = 0.0
    overtime_hours: float = 0.0
    pto_hours: float = 0.0
    holiday_hours: float = 0.0
    pto_notes: Optional[str] = None
    holiday_name: Optional[str] = None
    notes: Optional[str] = None
    pay_period_start: Optional[date] = None
    pay_period_end: Optional[date] = None

    @property
    def worked_hours(self) -> float:
        return self.regular_hours + self.overtime_hours

    @property
    def has_complete_punch(self) -> bool:
        return self.time_in is not None and self.time_out is not None

    def updated(self, changes: Mapping[str, Any]) -> "TimesheetEntry":
        """Return a copy with ``changes`` applied; keys outside the row are rejected."""

        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Unknown timesheet fields: {', '.join(sorted(unknown))}")
        cleaned: Dict[str, Any] = dict(changes)
        for name in HOUR_FIELDS:
            if name in cleaned:
                cleaned[name] = coerce_hours(cleaned[name], name)
        return replace(self, **cleaned)


UPDATABLE_FIELDS = frozenset(f.name for f in fields(TimesheetEntry)) - {"employee_id", "date"}


@dataclass(frozen=True)
class PayPeriod:
    start: date
    end: date
    label: str

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


@dataclass
class HourTotals:
    regular: float = 0.0
    overtime: float = 0.0
    pto: float = 0.0
    holiday: float = 0.0

    @property
    def total(self) -> float:
        return round(self.regular + self.overtime + self.pto + self.holiday, 2)

    def add_entry(self, entry: TimesheetEntry) -> None:
        self.regular = round(self.regular + entry.regular_hours, 2)
        self.overtime = round(self.overtime + entry.overtime_hours, 2)
        self.pto = round(self.pto + entry.pto_hours, 2)
        self.holiday = round(self.holiday + entry.holiday_hours, 2)

    def __add__(self, other: "HourTotals") -> "HourTotals":
        return HourTotals(
            regular=round(self.regular + other.regular, 2),
            overtime=round(self.overtime + other.overtime, 2),
            pto=round(self.pto + other.pto, 2),
            holiday=round(self.holiday + other.holiday, 2),
        )


@dataclass
class DayEntry:
    date: date
    day_name: str
    entry: Optional[TimesheetEntry] = None


@dataclass
class WeekBucket:
    week_number: int
    start: date
    end: date
    days: List[DayEntry] = field(default_factory=list)
    totals: HourTotals = field(default_factory=HourTotals)

    def add_day(self, day: DayEntry) -> None:
        self.days.append(day)
        if day.entry is not None:
            self.totals.add_entry(day.entry)


@dataclass
class PeriodView:
    employee_id: str
    period: PayPeriod
    entries: List[TimesheetEntry]
    weeks: List[WeekBucket]
    totals: HourTotals


@dataclass(frozen=True)
class Apportionment:
    regular_hours: float = 0.0
    overtime_hours: float = 0.0

    @property
    def total(self) -> float:
        return round(self.regular_hours + self.overtime_hours, 2)


@dataclass
class ClockStatus:
    is_clocked_in: bool
    is_clocked_out: bool
    time_in: Optional[datetime] = None
    time_out: Optional[datetime] = None
    today_entry: Optional[TimesheetEntry] = None
