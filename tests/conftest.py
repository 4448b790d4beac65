import pytest
import structlog

from timesheet.errors import PersistenceError
from timesheet.storage import JsonTimesheetStore
from timesheet.time_tracking import TimesheetService


@pytest.fixture(autouse=True)
def _restore_structlog_config():
    """The CLI reconfigures structlog onto pytest's captured stderr; undo that after each test."""
    saved = structlog.get_config()
    yield
    structlog.configure(**saved)


@pytest.fixture
def store(tmp_path):
    return JsonTimesheetStore(tmp_path / "timesheets.json")


@pytest.fixture
def service(store):
    return TimesheetService(store)


class FlakyStore(JsonTimesheetStore):
    """JSON store whose writes fail for selected dates."""

    def __init__(self, path):
        super().__init__(path)
        self.failing_dates = set()

    def upsert(self, employee_id, day, fields):
        if day in self.failing_dates:
            raise PersistenceError(f"connection reset while saving {day.isoformat()}")
        return super().upsert(employee_id, day, fields)


@pytest.fixture
def flaky_store(tmp_path):
    return FlakyStore(tmp_path / "flaky.json")


@pytest.fixture
def flaky_service(flaky_store):
    return TimesheetService(flaky_store)
