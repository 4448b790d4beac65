from datetime import date, datetime, time

from sqlalchemy.orm import Session

from app.db.session import Base, engine, session_scope
from app.repositories.timesheets import SqlTimesheetStore
from timesheet.bulk import fill_full_time_week
from timesheet.dates import add_days
from timesheet.time_tracking import TimesheetService


def seed(session: Session, employee_id: str = "demo-employee", day: date | None = None) -> TimesheetService:
    """Fill one pay period with a typical mix of shifts, PTO, a holiday and an open clock-in."""
    service = TimesheetService(SqlTimesheetStore(session))
    period = service.period_for(day or date.today())

    fill_full_time_week(service, employee_id, period.start, 1)
    # a long Monday after the full week lands entirely in overtime
    service.set_times(employee_id, period.start, "08:00", "18:30")

    week_two = add_days(period.start, 7)
    service.set_times(employee_id, add_days(week_two, 1), "09:00", "17:00")
    service.set_pto(employee_id, add_days(week_two, 2), 8, "Family visit")
    service.set_holiday(employee_id, add_days(week_two, 3), 8, "Independence Day")
    service.clock_in(employee_id, datetime.combine(add_days(week_two, 4), time(9, 0)))
    return service


if __name__ == "__main__":
    Base.metadata.create_all(bind=engine)
    with session_scope() as db:
        seed(db)
