from __future__ import annotations
from datetime import date
from typing import Iterable, List, Optional

from .dates import DateLike, add_days, parse_local_date
from .models import DayEntry, HourTotals, TimesheetEntry, WeekBucket
from .pay_period import WEEK_DAYS

DAY_NAMES = ["SUN", "MON", "TUE", "WED", "THU", "FRI", "SAT"]


def day_name(day: date) -> str:
    # date.weekday() is Monday-first
    return DAY_NAMES[(day.weekday() + 1) % 7]


def find_entry(entries: Iterable[TimesheetEntry], day: date) -> Optional[TimesheetEntry]:
    for entry in entries:
        if entry.date == day:
            return entry
    return None


def build_weeks(period_start: DateLike, period_end: DateLike, entries: Iterable[TimesheetEntry]) -> List[WeekBucket]:
    """Split a pay period into two seven-day buckets with per-week hour totals.

    ``period_end`` is accepted for symmetry with the stored period bounds; the
    buckets always cover ``period_start`` through ``period_start + 13``.
    """

    start = parse_local_date(period_start)
    parse_local_date(period_end)
    entries = list(entries)
    weeks: List[WeekBucket] = []
    for index in range(2):
        first = add_days(start, index * WEEK_DAYS)
        bucket = WeekBucket(week_number=index + 1, start=first, end=add_days(first, WEEK_DAYS - 1))
        for offset in range(WEEK_DAYS):
            current = add_days(first, offset)
            bucket.add_day(DayEntry(date=current, day_name=day_name(current), entry=find_entry(entries, current)))
        weeks.append(bucket)
    return weeks


def period_totals(weeks: Iterable[WeekBucket]) -> HourTotals:
    totals = HourTotals()
    for week in weeks:
        totals = totals + week.totals
    return totals
