from __future__ import annotations
from contextlib import contextmanager
from datetime import date, datetime, time
from threading import Lock, RLock
from typing import Any, Dict, Iterator, Optional, Tuple, Union

import structlog

from .dates import DateLike, at_time, parse_local_date
from .errors import ClockStateError, ValidationError
from .models import Apportionment, ClockStatus, HourField, PayPeriod, PeriodView, TimeField, TimesheetEntry, coerce_hours
from .overtime import OvertimeEngine
from .pay_period import resolve_pay_period, week_number, week_start
from .storage import TimesheetStore
from .weeks import build_weeks, period_totals

logger = structlog.get_logger(__name__)

TimeValue = Union[datetime, time, str, None]


class WeekLocks:
    """One re-entrant lock per (employee, week start).

    Recalculating a day reads the other days of its week, so edits to any two
    days of the same week must not interleave.
    """

    def __init__(self) -> None:
        self._guard = Lock()
        self._locks: Dict[Tuple[str, date], RLock] = {}

    @contextmanager
    def hold(self, employee_id: str, first_day: date) -> Iterator[None]:
        with self._guard:
            lock = self._locks.setdefault((employee_id, first_day), RLock())
        with lock:
            yield


class TimesheetService:
    def __init__(
        self,
        store: TimesheetStore,
        engine: Optional[OvertimeEngine] = None,
        locks: Optional[WeekLocks] = None,
    ) -> None:
        self.store = store
        self.engine = engine or OvertimeEngine()
        self.locks = locks or WeekLocks()

    def period_for(self, day: DateLike) -> PayPeriod:
        return resolve_pay_period(day, self.engine.anchor)

    def load_period(self, employee_id: str, day: DateLike) -> PeriodView:
        period = self.period_for(day)
        entries = self.store.find_by_employee_and_date_range(employee_id, period.start, period.end)
        weeks = build_weeks(period.start, period.end, entries)
        return PeriodView(
            employee_id=employee_id,
            period=period,
            entries=entries,
            weeks=weeks,
            totals=period_totals(weeks),
        )

    @contextmanager
    def week_lock(self, employee_id: str, day: date) -> Iterator[PayPeriod]:
        period = self.period_for(day)
        with self.locks.hold(employee_id, week_start(period.start, week_number(day, period.start))):
            yield period

    def set_times(self, employee_id: str, day: DateLike, time_in: TimeValue, time_out: TimeValue) -> TimesheetEntry:
        day = parse_local_date(day)
        return self._apply_times(
            employee_id,
            day,
            {"time_in": _as_datetime(day, time_in), "time_out": _as_datetime(day, time_out)},
        )

    def set_time(self, employee_id: str, day: DateLike, field: Union[TimeField, str], value: TimeValue) -> TimesheetEntry:
        day = parse_local_date(day)
        name = _time_field(field).value
        return self._apply_times(employee_id, day, {name: _as_datetime(day, value)})

    def clear_time(self, employee_id: str, day: DateLike, field: Union[TimeField, str]) -> TimesheetEntry:
        return self.set_time(employee_id, day, field, None)

    def set_hours(self, employee_id: str, day: DateLike, field: Union[HourField, str], hours: Any) -> TimesheetEntry:
        """Manually enter one hour category for a day.

        Only the edited category is written. Regular and overtime are only
        editable on days without punches, and a manual regular figure may not
        exceed what is left of the weekly threshold. Holiday hours need a
        holiday name already on the row; use ``set_holiday`` to set both.
        """

        day = parse_local_date(day)
        try:
            category = HourField(field)
        except ValueError as exc:
            raise ValidationError(f"Unknown hour field: {field!r}") from exc
        value = coerce_hours(hours, category.column)
        if category is HourField.PTO:
            return self._write(employee_id, day, {"pto_hours": value, **_clear_note("pto_notes", value)})
        if category is HourField.HOLIDAY:
            existing = self.store.get(employee_id, day)
            if value > 0 and not (existing is not None and existing.holiday_name):
                raise ValidationError("A holiday name is required when holiday hours are set")
            return self._write(employee_id, day, {"holiday_hours": value, **_clear_note("holiday_name", value)})

        with self.week_lock(employee_id, day) as period:
            existing = self.store.get(employee_id, day)
            if existing is not None and (existing.time_in is not None or existing.time_out is not None):
                raise ValidationError("Hours are computed from time in/out on this day; edit the times instead")
            if category is HourField.OVERTIME:
                return self._write(employee_id, day, {"overtime_hours": value})
            entries = self.store.find_by_employee_and_date_range(employee_id, period.start, period.end)
            split = self.engine.split_manual(
                value, week_number(day, period.start), day, entries, period_start=period.start
            )
            if split.overtime_hours > 0:
                raise ValidationError(
                    f"Only {split.regular_hours:g} regular hours remain this week; enter the rest as overtime"
                )
            return self._write(employee_id, day, {"regular_hours": split.regular_hours})

    def set_pto(self, employee_id: str, day: DateLike, hours: Any, notes: Optional[str] = None) -> TimesheetEntry:
        value = coerce_hours(hours, "pto_hours")
        fields = {"pto_hours": value, "pto_notes": (notes or None) if value > 0 else None}
        return self._write(employee_id, parse_local_date(day), fields)

    def clear_pto(self, employee_id: str, day: DateLike) -> TimesheetEntry:
        return self._write(employee_id, parse_local_date(day), {"pto_hours": 0.0, "pto_notes": None})

    def set_holiday(self, employee_id: str, day: DateLike, hours: Any, holiday_name: Optional[str]) -> TimesheetEntry:
        value = coerce_hours(hours, "holiday_hours")
        name = (holiday_name or "").strip()
        if value > 0 and not name:
            raise ValidationError("A holiday name is required when holiday hours are set")
        fields = {"holiday_hours": value, "holiday_name": name if value > 0 else None}
        return self._write(employee_id, parse_local_date(day), fields)

    def clear_holiday(self, employee_id: str, day: DateLike) -> TimesheetEntry:
        return self._write(employee_id, parse_local_date(day), {"holiday_hours": 0.0, "holiday_name": None})

    def clock_in(self, employee_id: str, at: datetime) -> TimesheetEntry:
        day = at.date()
        with self.week_lock(employee_id, day):
            existing = self.store.get(employee_id, day)
            if existing is not None and existing.time_out is not None:
                raise ClockStateError("Already clocked in and out for today")
            if existing is not None and existing.time_in is not None:
                raise ClockStateError("Already clocked in")
            entry = self._write(
                employee_id,
                day,
                {"time_in": at, "time_out": None, "regular_hours": 0.0, "overtime_hours": 0.0},
            )
        logger.info("clocked_in", employee_id=employee_id, at=at.isoformat())
        return entry

    def clock_out(self, employee_id: str, at: datetime) -> TimesheetEntry:
        day = at.date()
        with self.week_lock(employee_id, day):
            existing = self.store.get(employee_id, day)
            if existing is None:
                raise ClockStateError("No clock in found for today")
            if existing.time_in is None:
                raise ClockStateError("Must clock in first")
            if existing.time_out is not None:
                raise ClockStateError("Already clocked out")
            entry = self._apply_times(employee_id, day, {"time_out": at})
        logger.info(
            "clocked_out",
            employee_id=employee_id,
            at=at.isoformat(),
            regular=entry.regular_hours,
            overtime=entry.overtime_hours,
        )
        return entry

    def clock_status(self, employee_id: str, today: DateLike) -> ClockStatus:
        entry = self.store.get(employee_id, parse_local_date(today))
        if entry is None:
            return ClockStatus(is_clocked_in=False, is_clocked_out=False)
        return ClockStatus(
            is_clocked_in=entry.time_in is not None and entry.time_out is None,
            is_clocked_out=entry.has_complete_punch,
            time_in=entry.time_in,
            time_out=entry.time_out,
            today_entry=entry,
        )

    def _apply_times(self, employee_id: str, day: date, changes: Dict[str, Optional[datetime]]) -> TimesheetEntry:
        with self.week_lock(employee_id, day) as period:
            entries = self.store.find_by_employee_and_date_range(employee_id, period.start, period.end)
            existing = next((e for e in entries if e.date == day), None)
            time_in = changes["time_in"] if "time_in" in changes else (existing.time_in if existing else None)
            time_out = changes["time_out"] if "time_out" in changes else (existing.time_out if existing else None)
            if time_in is not None and time_out is not None:
                split = self.engine.apportion(
                    time_in, time_out, week_number(day, period.start), day, entries, period_start=period.start
                )
            else:
                # an incomplete punch earns nothing
                split = Apportionment()
            entry = self._write(
                employee_id,
                day,
                {
                    "time_in": time_in,
                    "time_out": time_out,
                    "regular_hours": split.regular_hours,
                    "overtime_hours": split.overtime_hours,
                },
            )
        logger.info(
            "timesheet_times_saved",
            employee_id=employee_id,
            date=day.isoformat(),
            regular=split.regular_hours,
            overtime=split.overtime_hours,
        )
        return entry

    def _write(self, employee_id: str, day: date, fields: Dict[str, Any]) -> TimesheetEntry:
        period = self.period_for(day)
        payload = {**fields, "pay_period_start": period.start, "pay_period_end": period.end}
        return self.store.upsert(employee_id, day, payload)


def _time_field(field: Union[TimeField, str]) -> TimeField:
    try:
        return TimeField(field)
    except ValueError as exc:
        raise ValidationError(f"Unknown time field: {field!r}") from exc


def _as_datetime(day: date, value: TimeValue) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        if value.date() != day:
            raise ValidationError(f"Time {value.isoformat()} is not on {day.isoformat()}")
        return value
    return at_time(day, value)


def _clear_note(name: str, hours: float) -> Dict[str, Any]:
    return {} if hours > 0 else {name: None}
