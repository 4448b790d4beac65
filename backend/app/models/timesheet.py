from datetime import datetime

from sqlalchemy import Column, Date, DateTime, Integer, Numeric, String, Text, UniqueConstraint

from app.db.session import Base


class Timesheet(Base):
    __tablename__ = "timesheets"
    __table_args__ = (UniqueConstraint("employee_id", "date", name="uq_timesheets_employee_date"),)

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(String(64), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)

    time_in = Column(DateTime, nullable=True)
    time_out = Column(DateTime, nullable=True)

    regular_hours = Column(Numeric(6, 2), nullable=False, default=0)
    overtime_hours = Column(Numeric(6, 2), nullable=False, default=0)
    pto_hours = Column(Numeric(6, 2), nullable=False, default=0)
    holiday_hours = Column(Numeric(6, 2), nullable=False, default=0)

    pto_notes = Column(Text, nullable=True)
    holiday_name = Column(String(100), nullable=True)
    notes = Column(Text, nullable=True)

    # period the row was last written in
    pay_period_start = Column(Date, nullable=True)
    pay_period_end = Column(Date, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
