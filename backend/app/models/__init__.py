from .timesheet import Timesheet

__all__ = ["Timesheet"]
