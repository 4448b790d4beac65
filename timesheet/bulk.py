"""Apply one edit to many days of one employee's timesheet.

Dates are written one after another, each through the same single-day
operation used for interactive edits. There is no transaction across dates:
a store failure on one date is recorded and the batch moves on, earlier
writes stay in place and nothing is retried. Because each time edit reads the
other days of its week, setting times on several days of the same week in a
different order can produce a different regular/overtime split.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

import structlog
from opentelemetry import metrics, trace

from .dates import DateLike, add_days, parse_clock_time, parse_local_date
from .errors import PersistenceError, ValidationError
from .models import TimeField, TimesheetEntry, coerce_hours
from .pay_period import WEEK_DAYS, week_start
from .time_tracking import TimesheetService

logger = structlog.get_logger(__name__)
tracer = trace.get_tracer(__name__)
meter = metrics.get_meter(__name__)
bulk_writes = meter.create_counter("timesheet.bulk.writes", description="Dates written by bulk edits")

# Standard full-time shift
FULL_TIME_START = "09:00"
FULL_TIME_END = "17:00"


class BulkAction(str, Enum):
    SET_TIME = "set_time"
    CLEAR_TIME = "clear_time"
    SET_PTO = "set_pto"
    CLEAR_PTO = "clear_pto"
    SET_HOLIDAY = "set_holiday"
    CLEAR_HOLIDAY = "clear_holiday"


@dataclass
class BulkResult:
    action: BulkAction
    attempted: List[date] = field(default_factory=list)
    succeeded: List[date] = field(default_factory=list)
    failed: Dict[date, str] = field(default_factory=dict)
    entries: List[TimesheetEntry] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed

    @property
    def summary(self) -> str:
        return f"{len(self.succeeded)} of {len(self.attempted)} succeeded"


def _unique_dates(dates: Iterable[DateLike]) -> List[date]:
    seen: List[date] = []
    for value in dates:
        day = parse_local_date(value)
        if day not in seen:
            seen.append(day)
    return seen


def _build_operation(
    service: TimesheetService,
    employee_id: str,
    action: BulkAction,
    time_in: Optional[str],
    time_out: Optional[str],
    time_field: Optional[str],
    hours: Any,
    note: Optional[str],
) -> Callable[[date], TimesheetEntry]:
    if action is BulkAction.SET_TIME:
        if time_in is None and time_out is None:
            raise ValidationError("set_time needs time_in, time_out or both")
        start = parse_clock_time(time_in) if time_in is not None else None
        end = parse_clock_time(time_out) if time_out is not None else None
        if start is not None and end is not None:
            return lambda day: service.set_times(employee_id, day, start, end)
        if start is not None:
            return lambda day: service.set_time(employee_id, day, TimeField.TIME_IN, start)
        return lambda day: service.set_time(employee_id, day, TimeField.TIME_OUT, end)
    if action is BulkAction.CLEAR_TIME:
        try:
            target = TimeField(time_field)
        except ValueError as exc:
            raise ValidationError(f"clear_time needs field 'time_in' or 'time_out', got {time_field!r}") from exc
        return lambda day: service.clear_time(employee_id, day, target)
    if action is BulkAction.SET_PTO:
        value = coerce_hours(hours, "pto_hours")
        return lambda day: service.set_pto(employee_id, day, value, note)
    if action is BulkAction.CLEAR_PTO:
        return lambda day: service.clear_pto(employee_id, day)
    if action is BulkAction.SET_HOLIDAY:
        value = coerce_hours(hours, "holiday_hours")
        if value > 0 and not (note or "").strip():
            raise ValidationError("A holiday name is required when holiday hours are set")
        return lambda day: service.set_holiday(employee_id, day, value, note)
    return lambda day: service.clear_holiday(employee_id, day)


def apply_bulk(
    service: TimesheetService,
    employee_id: str,
    dates: Iterable[DateLike],
    action: Union[BulkAction, str],
    *,
    time_in: Optional[str] = None,
    time_out: Optional[str] = None,
    time_field: Optional[str] = None,
    hours: Any = None,
    note: Optional[str] = None,
) -> BulkResult:
    try:
        action = BulkAction(action)
    except ValueError as exc:
        raise ValidationError(f"Unknown bulk action: {action!r}") from exc
    days = _unique_dates(dates)
    if not days:
        raise ValidationError("No dates selected")
    operation = _build_operation(service, employee_id, action, time_in, time_out, time_field, hours, note)

    result = BulkResult(action=action, attempted=days)
    with tracer.start_as_current_span("timesheet.bulk") as span:
        span.set_attribute("timesheet.employee_id", employee_id)
        span.set_attribute("timesheet.bulk.action", action.value)
        span.set_attribute("timesheet.bulk.dates", len(days))
        for day in days:
            try:
                entry = operation(day)
            except PersistenceError as exc:
                result.failed[day] = str(exc)
                bulk_writes.add(1, {"action": action.value, "outcome": "failed"})
                logger.warning("bulk_date_failed", employee_id=employee_id, date=day.isoformat(), error=str(exc))
                continue
            result.succeeded.append(day)
            result.entries.append(entry)
            bulk_writes.add(1, {"action": action.value, "outcome": "written"})
        span.set_attribute("timesheet.bulk.failed", len(result.failed))

    logger.info(
        "bulk_applied",
        employee_id=employee_id,
        action=action.value,
        summary=result.summary,
    )
    return result


def full_time_dates(period_start: DateLike, week: int) -> List[date]:
    first = week_start(parse_local_date(period_start), week)
    days = [add_days(first, offset) for offset in range(WEEK_DAYS)]
    # isoweekday: Tue=2 .. Sat=6
    return [d for d in days if 2 <= d.isoweekday() <= 6]


def fill_full_time_week(service: TimesheetService, employee_id: str, period_start: DateLike, week: int) -> BulkResult:
    """Punch a standard 9-to-5 shift on Tuesday through Saturday of one week."""

    return apply_bulk(
        service,
        employee_id,
        full_time_dates(period_start, week),
        BulkAction.SET_TIME,
        time_in=FULL_TIME_START,
        time_out=FULL_TIME_END,
    )
