from datetime import date
from typing import Any, List, Mapping, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.logging import get_logger
from app.models.timesheet import Timesheet
from timesheet.errors import PersistenceError
from timesheet.models import HOUR_FIELDS, TimesheetEntry

logger = get_logger(__name__)


def to_entry(row: Timesheet) -> TimesheetEntry:
    return TimesheetEntry(
        employee_id=row.employee_id,
        date=row.date,
        time_in=row.time_in,
        time_out=row.time_out,
        regular_hours=float(row.regular_hours or 0),
        overtime_hours=float(row.overtime_hours or 0),
        pto_hours=float(row.pto_hours or 0),
        holiday_hours=float(row.holiday_hours or 0),
        pto_notes=row.pto_notes,
        holiday_name=row.holiday_name,
        notes=row.notes,
        pay_period_start=row.pay_period_start,
        pay_period_end=row.pay_period_end,
    )


class SqlTimesheetStore:
    """Timesheet rows in the ``timesheets`` table, one per employee and date."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def find_by_employee_and_date_range(
        self, employee_id: Optional[str], start: date, end: date
    ) -> List[TimesheetEntry]:
        query = self.db.query(Timesheet).filter(Timesheet.date >= start, Timesheet.date <= end)
        if employee_id is not None:
            query = query.filter(Timesheet.employee_id == employee_id)
        try:
            rows = query.order_by(Timesheet.date.asc(), Timesheet.employee_id.asc()).all()
        except SQLAlchemyError as exc:
            logger.error("timesheet_query_failed", employee_id=employee_id, error=str(exc))
            raise PersistenceError("Failed to fetch timesheets") from exc
        return [to_entry(r) for r in rows]

    def get(self, employee_id: str, day: date) -> Optional[TimesheetEntry]:
        try:
            row = self._row(employee_id, day)
        except SQLAlchemyError as exc:
            raise PersistenceError("Failed to fetch timesheet") from exc
        return to_entry(row) if row else None

    def upsert(self, employee_id: str, day: date, fields: Mapping[str, Any]) -> TimesheetEntry:
        try:
            row = self._row(employee_id, day)
            current = to_entry(row) if row else TimesheetEntry(employee_id=employee_id, date=day)
            entry = current.updated(fields)
            if row is None:
                row = Timesheet(employee_id=employee_id, date=day)
                self.db.add(row)
            for name in fields:
                setattr(row, name, getattr(entry, name))
            for name in HOUR_FIELDS:
                if getattr(row, name) is None:
                    setattr(row, name, 0)
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("timesheet_upsert_failed", employee_id=employee_id, date=day.isoformat(), error=str(exc))
            raise PersistenceError("Failed to save timesheet") from exc
        return entry

    def _row(self, employee_id: str, day: date) -> Optional[Timesheet]:
        return (
            self.db.query(Timesheet)
            .filter(Timesheet.employee_id == employee_id, Timesheet.date == day)
            .one_or_none()
        )
