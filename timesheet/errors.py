from __future__ import annotations


class TimesheetError(Exception):
    """Base class for timesheet engine failures."""


class ValidationError(TimesheetError, ValueError):
    """Input rejected before anything was written."""


class ClockStateError(ValidationError):
    pass


class PersistenceError(TimesheetError):
    """The timesheet store failed to read or write a row."""


class InvariantViolation(TimesheetError, AssertionError):
    pass
