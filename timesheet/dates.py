from __future__ import annotations
from datetime import date, datetime, time, timedelta
from typing import Union

from .errors import ValidationError

DateLike = Union[date, str]


def parse_local_date(value: DateLike) -> date:
    """Parse ``YYYY-MM-DD`` component-wise so no timezone shift can move the day."""

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    parts = str(value).strip().split("-")
    if len(parts) != 3:
        raise ValidationError(f"Invalid date: {value!r}")
    try:
        year, month, day = (int(p) for p in parts)
        return date(year, month, day)
    except ValueError as exc:
        raise ValidationError(f"Invalid date: {value!r}") from exc


def parse_clock_time(value: Union[time, str]) -> time:
    if isinstance(value, time):
        return value
    parts = str(value).strip().split(":")
    if len(parts) not in (2, 3):
        raise ValidationError(f"Invalid time: {value!r}")
    try:
        return time(*(int(p) for p in parts))
    except ValueError as exc:
        raise ValidationError(f"Invalid time: {value!r}") from exc


def at_time(day: date, value: Union[time, str]) -> datetime:
    return datetime.combine(day, parse_clock_time(value))


def add_days(day: date, days: int) -> date:
    return day + timedelta(days=days)


def days_between(start: date, end: date) -> int:
    return (end - start).days


def format_display(day: date) -> str:
    # M/D/YYYY, no zero padding
    return f"{day.month}/{day.day}/{day.year}"
