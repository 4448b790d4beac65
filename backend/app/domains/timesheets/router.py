import datetime as dt
from typing import Literal

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from app.core.identity import Identity, ensure_can_access, get_identity, require_admin
from app.core.logging import get_logger
from app.domains.pay_periods.router import PayPeriodOut
from app.domains.timesheets.service import get_timesheet_service
from timesheet.bulk import BulkAction, BulkResult, apply_bulk, fill_full_time_week
from timesheet.models import HourTotals, PeriodView, TimesheetEntry
from timesheet.pto import FEDERAL_HOLIDAYS, pto_summary, year_bounds
from timesheet.time_tracking import TimesheetService

router = APIRouter(prefix="/timesheets", tags=["timesheets"])
logger = get_logger(__name__)


class TimesheetOut(BaseModel):
    employee_id: str
    date: dt.date
    time_in: dt.datetime | None = None
    time_out: dt.datetime | None = None
    regular_hours: float = 0
    overtime_hours: float = 0
    pto_hours: float = 0
    holiday_hours: float = 0
    pto_notes: str | None = None
    holiday_name: str | None = None
    notes: str | None = None
    pay_period_start: dt.date | None = None
    pay_period_end: dt.date | None = None

    @classmethod
    def from_entry(cls, entry: TimesheetEntry) -> "TimesheetOut":
        return cls(**vars(entry))


class TotalsOut(BaseModel):
    regular: float
    overtime: float
    pto: float
    holiday: float
    total: float

    @classmethod
    def from_totals(cls, totals: HourTotals) -> "TotalsOut":
        return cls(
            regular=totals.regular,
            overtime=totals.overtime,
            pto=totals.pto,
            holiday=totals.holiday,
            total=totals.total,
        )


class DayOut(BaseModel):
    date: dt.date
    day_name: str
    timesheet: TimesheetOut | None = None


class WeekOut(BaseModel):
    week_number: int
    start_date: dt.date
    end_date: dt.date
    days: list[DayOut]
    totals: TotalsOut


class PeriodViewOut(BaseModel):
    employee_id: str
    pay_period: PayPeriodOut
    weeks: list[WeekOut]
    totals: TotalsOut

    @classmethod
    def from_view(cls, view: PeriodView) -> "PeriodViewOut":
        return cls(
            employee_id=view.employee_id,
            pay_period=PayPeriodOut.from_period(view.period),
            weeks=[
                WeekOut(
                    week_number=week.week_number,
                    start_date=week.start,
                    end_date=week.end,
                    days=[
                        DayOut(
                            date=day.date,
                            day_name=day.day_name,
                            timesheet=TimesheetOut.from_entry(day.entry) if day.entry else None,
                        )
                        for day in week.days
                    ],
                    totals=TotalsOut.from_totals(week.totals),
                )
                for week in view.weeks
            ],
            totals=TotalsOut.from_totals(view.totals),
        )


class TimesIn(BaseModel):
    time_in: str | None = Field(default=None, description="HH:MM, or null to clear")
    time_out: str | None = Field(default=None, description="HH:MM, or null to clear")


class HoursIn(BaseModel):
    field: Literal["regular", "overtime", "pto", "holiday"]
    hours: float


class PTOIn(BaseModel):
    hours: float
    notes: str | None = None


class HolidayIn(BaseModel):
    hours: float = 8
    holiday_name: str


class BulkIn(BaseModel):
    action: BulkAction
    dates: list[dt.date] = Field(..., min_length=1)
    time_in: str | None = None
    time_out: str | None = None
    field: Literal["time_in", "time_out"] | None = None
    hours: float | None = None
    note: str | None = None


class FillWeekIn(BaseModel):
    period_start: dt.date
    week_number: Literal[1, 2]


class BulkResultOut(BaseModel):
    success: bool
    action: BulkAction
    message: str
    succeeded: list[dt.date]
    failed: dict[dt.date, str]

    @classmethod
    def from_result(cls, result: BulkResult) -> "BulkResultOut":
        return cls(
            success=result.ok,
            action=result.action,
            message=result.summary,
            succeeded=result.succeeded,
            failed=result.failed,
        )


class PTOUsageOut(BaseModel):
    date: dt.date
    hours: float
    notes: str | None = None


class PTOSummaryOut(BaseModel):
    employee_id: str
    employee_name: str
    total_pto_hours: float
    total_pto_days: float
    entries: list[PTOUsageOut]


@router.get("", response_model=PeriodViewOut)
def get_period(
    employee_id: str | None = None,
    day: dt.date | None = Query(default=None, alias="date"),
    identity: Identity = Depends(get_identity),
    service: TimesheetService = Depends(get_timesheet_service),
) -> PeriodViewOut:
    employee_id = employee_id or identity.employee_id
    ensure_can_access(identity, employee_id)
    return PeriodViewOut.from_view(service.load_period(employee_id, day or dt.date.today()))


@router.get("/holidays", response_model=list[str])
def list_holidays() -> list[str]:
    return FEDERAL_HOLIDAYS


@router.get("/pto-summary", response_model=list[PTOSummaryOut])
def get_pto_summary(
    year: int = Query(..., ge=1900, le=2999),
    _: Identity = Depends(require_admin),
    service: TimesheetService = Depends(get_timesheet_service),
) -> list[PTOSummaryOut]:
    start, end = year_bounds(year)
    summaries = pto_summary(service.store.find_by_employee_and_date_range(None, start, end), year)
    return [
        PTOSummaryOut(
            employee_id=s.employee_id,
            employee_name=s.employee_name,
            total_pto_hours=s.total_pto_hours,
            total_pto_days=s.total_pto_days,
            entries=[PTOUsageOut(date=u.date, hours=u.hours, notes=u.notes) for u in s.entries],
        )
        for s in summaries
    ]


@router.put("/{employee_id}/{day}/times", response_model=TimesheetOut)
def put_times(
    employee_id: str,
    day: dt.date,
    payload: TimesIn,
    identity: Identity = Depends(get_identity),
    service: TimesheetService = Depends(get_timesheet_service),
) -> TimesheetOut:
    ensure_can_access(identity, employee_id)
    entry = service.set_times(employee_id, day, payload.time_in, payload.time_out)
    return TimesheetOut.from_entry(entry)


@router.delete("/{employee_id}/{day}/times/{field}", response_model=TimesheetOut)
def delete_time(
    employee_id: str,
    day: dt.date,
    field: Literal["time_in", "time_out"],
    identity: Identity = Depends(get_identity),
    service: TimesheetService = Depends(get_timesheet_service),
) -> TimesheetOut:
    ensure_can_access(identity, employee_id)
    return TimesheetOut.from_entry(service.clear_time(employee_id, day, field))


@router.put("/{employee_id}/{day}/hours", response_model=TimesheetOut)
def put_hours(
    employee_id: str,
    day: dt.date,
    payload: HoursIn,
    identity: Identity = Depends(get_identity),
    service: TimesheetService = Depends(get_timesheet_service),
) -> TimesheetOut:
    ensure_can_access(identity, employee_id)
    return TimesheetOut.from_entry(service.set_hours(employee_id, day, payload.field, payload.hours))


@router.put("/{employee_id}/{day}/pto", response_model=TimesheetOut)
def put_pto(
    employee_id: str,
    day: dt.date,
    payload: PTOIn,
    identity: Identity = Depends(get_identity),
    service: TimesheetService = Depends(get_timesheet_service),
) -> TimesheetOut:
    ensure_can_access(identity, employee_id)
    return TimesheetOut.from_entry(service.set_pto(employee_id, day, payload.hours, payload.notes))


@router.delete("/{employee_id}/{day}/pto", response_model=TimesheetOut)
def delete_pto(
    employee_id: str,
    day: dt.date,
    identity: Identity = Depends(get_identity),
    service: TimesheetService = Depends(get_timesheet_service),
) -> TimesheetOut:
    ensure_can_access(identity, employee_id)
    return TimesheetOut.from_entry(service.clear_pto(employee_id, day))


@router.put("/{employee_id}/{day}/holiday", response_model=TimesheetOut)
def put_holiday(
    employee_id: str,
    day: dt.date,
    payload: HolidayIn,
    identity: Identity = Depends(get_identity),
    service: TimesheetService = Depends(get_timesheet_service),
) -> TimesheetOut:
    ensure_can_access(identity, employee_id)
    return TimesheetOut.from_entry(service.set_holiday(employee_id, day, payload.hours, payload.holiday_name))


@router.delete("/{employee_id}/{day}/holiday", response_model=TimesheetOut)
def delete_holiday(
    employee_id: str,
    day: dt.date,
    identity: Identity = Depends(get_identity),
    service: TimesheetService = Depends(get_timesheet_service),
) -> TimesheetOut:
    ensure_can_access(identity, employee_id)
    return TimesheetOut.from_entry(service.clear_holiday(employee_id, day))


@router.post("/{employee_id}/bulk", response_model=BulkResultOut)
def post_bulk(
    employee_id: str,
    payload: BulkIn,
    identity: Identity = Depends(get_identity),
    service: TimesheetService = Depends(get_timesheet_service),
) -> BulkResultOut:
    ensure_can_access(identity, employee_id)
    result = apply_bulk(
        service,
        employee_id,
        payload.dates,
        payload.action,
        time_in=payload.time_in,
        time_out=payload.time_out,
        time_field=payload.field,
        hours=payload.hours,
        note=payload.note,
    )
    logger.info("bulk_request_done", employee_id=employee_id, by=identity.employee_id, summary=result.summary)
    return BulkResultOut.from_result(result)


@router.post("/{employee_id}/fill-week", response_model=BulkResultOut)
def post_fill_week(
    employee_id: str,
    payload: FillWeekIn,
    identity: Identity = Depends(get_identity),
    service: TimesheetService = Depends(get_timesheet_service),
) -> BulkResultOut:
    ensure_can_access(identity, employee_id)
    period = service.period_for(payload.period_start)
    return BulkResultOut.from_result(fill_full_time_week(service, employee_id, period.start, payload.week_number))
