"""Fixed 14-day pay periods tiled from a single anchor date."""
from __future__ import annotations
from datetime import date
from typing import Union

from .dates import DateLike, add_days, days_between, format_display, parse_local_date
from .errors import ValidationError
from .models import Direction, PayPeriod

# Monday of the week containing 2026-01-01
PAY_PERIOD_ANCHOR = date(2025, 12, 29)
PERIOD_DAYS = 14
WEEK_DAYS = 7


def resolve_pay_period(value: DateLike, anchor: date = PAY_PERIOD_ANCHOR) -> PayPeriod:
    """Return the pay period enclosing ``value``.

    Floor division keeps dates before the anchor in negative-index periods,
    so periods tile the calendar in both directions.
    """

    day = parse_local_date(value)
    period_index = days_between(anchor, day) // PERIOD_DAYS
    start = add_days(anchor, period_index * PERIOD_DAYS)
    end = add_days(start, PERIOD_DAYS - 1)
    return PayPeriod(start=start, end=end, label=f"{format_display(start)} - {format_display(end)}")


def navigate_pay_period(
    period_start: DateLike,
    direction: Union[Direction, str],
    anchor: date = PAY_PERIOD_ANCHOR,
) -> PayPeriod:
    try:
        step = Direction(direction)
    except ValueError as exc:
        raise ValidationError(f"Direction must be 'next' or 'prev', got {direction!r}") from exc
    offset = PERIOD_DAYS if step is Direction.NEXT else -PERIOD_DAYS
    return resolve_pay_period(add_days(parse_local_date(period_start), offset), anchor)


def week_number(day: date, period_start: date) -> int:
    return 1 if days_between(period_start, day) < WEEK_DAYS else 2


def week_start(period_start: date, number: int) -> date:
    if number not in (1, 2):
        raise ValidationError(f"Week number must be 1 or 2, got {number!r}")
    return add_days(period_start, (number - 1) * WEEK_DAYS)
