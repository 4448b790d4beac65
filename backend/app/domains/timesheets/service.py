from fastapi import Depends
from sqlalchemy.orm import Session

from app.core.config import settings
from app.db.session import get_session
from app.repositories.timesheets import SqlTimesheetStore
from timesheet.overtime import OvertimeEngine, WeeklyThresholdRule
from timesheet.time_tracking import TimesheetService, WeekLocks

engine = OvertimeEngine(
    weekly_rule=WeeklyThresholdRule(threshold=settings.weekly_regular_threshold),
    anchor=settings.pay_period_anchor,
)
# shared by every request so concurrent edits to one week are serialized
week_locks = WeekLocks()


def get_timesheet_service(db: Session = Depends(get_session)) -> TimesheetService:
    return TimesheetService(SqlTimesheetStore(db), engine, week_locks)
