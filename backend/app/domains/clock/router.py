import datetime as dt
from typing import Literal

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from app.core.identity import Identity, ensure_can_access, get_identity
from app.domains.timesheets.router import TimesheetOut
from app.domains.timesheets.service import get_timesheet_service
from timesheet.time_tracking import TimesheetService

router = APIRouter(prefix="/clock", tags=["clock"])


class ClockIn(BaseModel):
    action: Literal["clock_in", "clock_out"]
    employee_id: str | None = None


class ClockResult(BaseModel):
    success: bool = True
    message: str
    timesheet: TimesheetOut


class ClockStatusOut(BaseModel):
    is_clocked_in: bool
    is_clocked_out: bool
    time_in: dt.datetime | None = None
    time_out: dt.datetime | None = None
    today_entry: TimesheetOut | None = None


def now() -> dt.datetime:
    return dt.datetime.now().replace(microsecond=0)


@router.get("", response_model=ClockStatusOut)
def clock_status(
    employee_id: str | None = None,
    identity: Identity = Depends(get_identity),
    service: TimesheetService = Depends(get_timesheet_service),
) -> ClockStatusOut:
    employee_id = employee_id or identity.employee_id
    ensure_can_access(identity, employee_id)
    status = service.clock_status(employee_id, now().date())
    return ClockStatusOut(
        is_clocked_in=status.is_clocked_in,
        is_clocked_out=status.is_clocked_out,
        time_in=status.time_in,
        time_out=status.time_out,
        today_entry=TimesheetOut.from_entry(status.today_entry) if status.today_entry else None,
    )


@router.post("", response_model=ClockResult)
def clock(
    payload: ClockIn,
    identity: Identity = Depends(get_identity),
    service: TimesheetService = Depends(get_timesheet_service),
) -> ClockResult:
    employee_id = payload.employee_id or identity.employee_id
    ensure_can_access(identity, employee_id)
    at = now()
    if payload.action == "clock_in":
        entry = service.clock_in(employee_id, at)
        return ClockResult(message="Clocked in successfully", timesheet=TimesheetOut.from_entry(entry))
    entry = service.clock_out(employee_id, at)
    message = (
        f"Clocked out successfully. Hours: {entry.worked_hours:.2f} "
        f"(Regular: {entry.regular_hours:.2f}, OT: {entry.overtime_hours:.2f})"
    )
    return ClockResult(message=message, timesheet=TimesheetOut.from_entry(entry))
