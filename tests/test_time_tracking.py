from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime, time, timedelta

import pytest

from timesheet.errors import ClockStateError, PersistenceError, ValidationError
from timesheet.storage import JsonTimesheetStore
from timesheet.time_tracking import TimesheetService

PERIOD_START = date(2025, 12, 29)
WEEK_ONE = [PERIOD_START + timedelta(days=i) for i in range(7)]


def test_set_times_computes_and_persists_hours(service, store):
    entry = service.set_times("emp1", "2026-01-02", "09:00", "17:30")

    assert entry.time_in == datetime(2026, 1, 2, 9, 0)
    assert entry.time_out == datetime(2026, 1, 2, 17, 30)
    assert entry.regular_hours == 8.5
    assert entry.overtime_hours == 0
    assert entry.pay_period_start == PERIOD_START
    assert entry.pay_period_end == date(2026, 1, 11)

    reloaded = JsonTimesheetStore(store.path).get("emp1", date(2026, 1, 2))
    assert reloaded == entry


def test_day_that_crosses_forty_hours_takes_the_overtime(service):
    for day in WEEK_ONE[:4]:
        service.set_times("emp1", day, "08:00", "18:00")

    friday = service.set_times("emp1", WEEK_ONE[4], "09:00", "17:00")

    assert friday.regular_hours == 0
    assert friday.overtime_hours == 8
    view = service.load_period("emp1", PERIOD_START)
    assert [d.entry.regular_hours for d in view.weeks[0].days[:4]] == [10, 10, 10, 10]
    assert view.weeks[0].totals.regular == 40
    assert view.weeks[0].totals.overtime == 8


def test_edit_order_decides_which_day_shows_overtime(service):
    # Friday entered first keeps its regular hours; the last edit absorbs the overflow
    service.set_times("emp1", WEEK_ONE[4], "09:00", "17:00")
    for day in WEEK_ONE[:4]:
        service.set_times("emp1", day, "08:00", "18:00")

    view = service.load_period("emp1", PERIOD_START)
    days = {d.date: d.entry for d in view.weeks[0].days if d.entry}

    assert days[WEEK_ONE[4]].regular_hours == 8
    assert days[WEEK_ONE[3]].regular_hours == 2
    assert days[WEEK_ONE[3]].overtime_hours == 8
    assert view.weeks[0].totals.regular == 40
    assert view.weeks[0].totals.overtime == 8


def test_re_editing_a_day_recomputes_only_that_day(service):
    for day in WEEK_ONE[:5]:
        service.set_times("emp1", day, "09:00", "17:00")

    monday = service.set_times("emp1", WEEK_ONE[0], "09:00", "19:00")

    assert monday.regular_hours == 8
    assert monday.overtime_hours == 2


def test_clearing_either_time_zeroes_computed_hours(service):
    service.set_times("emp1", WEEK_ONE[1], "09:00", "17:00")

    entry = service.clear_time("emp1", WEEK_ONE[1], "time_in")

    assert entry.time_in is None
    assert entry.time_out == datetime(2025, 12, 30, 17, 0)
    assert entry.regular_hours == 0
    assert entry.overtime_hours == 0

    entry = service.set_time("emp1", WEEK_ONE[1], "time_in", "10:00")
    assert entry.regular_hours == 7

    entry = service.clear_time("emp1", WEEK_ONE[1], "time_out")
    assert entry.time_in == datetime(2025, 12, 30, 10, 0)
    assert (entry.regular_hours, entry.overtime_hours) == (0, 0)


def test_single_punch_earns_no_hours(service):
    entry = service.set_time("emp1", WEEK_ONE[2], "time_in", time(9, 0))

    assert entry.time_out is None
    assert entry.regular_hours == 0


def test_time_edits_leave_pto_and_holiday_alone(service):
    service.set_pto("emp1", WEEK_ONE[2], 4, "Dentist")

    entry = service.set_times("emp1", WEEK_ONE[2], "13:00", "17:00")

    assert entry.pto_hours == 4
    assert entry.pto_notes == "Dentist"
    assert entry.regular_hours == 4


def test_invalid_time_is_rejected_before_writing(service, store):
    with pytest.raises(ValidationError):
        service.set_times("emp1", WEEK_ONE[0], "25:00", "17:00")
    with pytest.raises(ValidationError):
        service.set_time("emp1", WEEK_ONE[0], "lunch", "12:00")

    assert store.get("emp1", WEEK_ONE[0]) is None


def test_store_failure_leaves_previous_row_unchanged(flaky_service, flaky_store):
    before = flaky_service.set_times("emp1", WEEK_ONE[0], "09:00", "17:00")
    flaky_store.failing_dates.add(WEEK_ONE[0])

    with pytest.raises(PersistenceError):
        flaky_service.set_times("emp1", WEEK_ONE[0], "09:00", "20:00")

    assert flaky_store.get("emp1", WEEK_ONE[0]) == before


def test_manual_regular_hours_respect_weekly_threshold(service):
    for day in WEEK_ONE[:4]:
        service.set_hours("emp1", day, "regular", 9)

    with pytest.raises(ValidationError, match="Only 4 regular hours remain"):
        service.set_hours("emp1", WEEK_ONE[4], "regular", 8)

    entry = service.set_hours("emp1", WEEK_ONE[4], "regular", 4)
    assert entry.regular_hours == 4
    assert entry.overtime_hours == 0
    assert entry.time_in is None


def test_manual_regular_keeps_manual_overtime(service):
    service.set_hours("emp1", WEEK_ONE[0], "overtime", 3)

    entry = service.set_hours("emp1", WEEK_ONE[0], "regular", 4)

    assert entry.regular_hours == 4
    assert entry.overtime_hours == 3


def test_manual_holiday_hours_need_a_holiday_name(service):
    with pytest.raises(ValidationError):
        service.set_hours("emp1", date(2026, 1, 1), "holiday", 8)
    assert service.store.get("emp1", date(2026, 1, 1)) is None

    service.set_holiday("emp1", date(2026, 1, 1), 8, "New Year's Day")
    entry = service.set_hours("emp1", date(2026, 1, 1), "holiday", 4)
    assert (entry.holiday_hours, entry.holiday_name) == (4, "New Year's Day")

    entry = service.set_hours("emp1", date(2026, 1, 1), "holiday", 0)
    assert (entry.holiday_hours, entry.holiday_name) == (0, None)


def test_manual_hours_rejected_on_punched_day(service):
    service.set_times("emp1", WEEK_ONE[0], "09:00", "17:00")

    with pytest.raises(ValidationError):
        service.set_hours("emp1", WEEK_ONE[0], "regular", 4)


@pytest.mark.parametrize("hours", [-1, "eight", float("nan")])
def test_bad_hour_values_are_rejected(service, hours):
    with pytest.raises(ValidationError):
        service.set_hours("emp1", WEEK_ONE[0], "pto", hours)


def test_pto_notes_only_kept_with_hours(service):
    entry = service.set_pto("emp1", WEEK_ONE[0], 8, "Vacation")
    assert (entry.pto_hours, entry.pto_notes) == (8, "Vacation")

    entry = service.set_pto("emp1", WEEK_ONE[0], 0, "Vacation")
    assert (entry.pto_hours, entry.pto_notes) == (0, None)

    service.set_pto("emp1", WEEK_ONE[1], 8, "Vacation")
    entry = service.clear_pto("emp1", WEEK_ONE[1])
    assert (entry.pto_hours, entry.pto_notes) == (0, None)


def test_holiday_needs_a_name(service):
    with pytest.raises(ValidationError):
        service.set_holiday("emp1", date(2026, 1, 1), 8, "  ")

    entry = service.set_holiday("emp1", date(2026, 1, 1), 8, "New Year's Day")
    assert entry.holiday_name == "New Year's Day"

    entry = service.clear_holiday("emp1", date(2026, 1, 1))
    assert (entry.holiday_hours, entry.holiday_name) == (0, None)


def test_clock_in_and_out(service):
    start = datetime(2026, 1, 6, 9, 0)

    entry = service.clock_in("emp1", start)
    assert entry.time_in == start
    assert service.clock_status("emp1", start.date()).is_clocked_in

    with pytest.raises(ClockStateError, match="Already clocked in"):
        service.clock_in("emp1", start + timedelta(minutes=5))

    entry = service.clock_out("emp1", datetime(2026, 1, 6, 17, 30))
    assert entry.regular_hours == 8.5

    status = service.clock_status("emp1", "2026-01-06")
    assert status.is_clocked_out
    assert not status.is_clocked_in

    with pytest.raises(ClockStateError, match="Already clocked out"):
        service.clock_out("emp1", datetime(2026, 1, 6, 18, 0))
    with pytest.raises(ClockStateError, match="Already clocked in and out"):
        service.clock_in("emp1", datetime(2026, 1, 6, 18, 0))


def test_clock_out_without_clock_in(service):
    with pytest.raises(ClockStateError, match="No clock in found"):
        service.clock_out("emp1", datetime(2026, 1, 6, 17, 0))

    service.set_pto("emp1", date(2026, 1, 7), 4)
    with pytest.raises(ClockStateError, match="Must clock in first"):
        service.clock_out("emp1", datetime(2026, 1, 7, 17, 0))


def test_clock_status_for_empty_day(service):
    status = service.clock_status("emp1", date(2026, 1, 8))

    assert not status.is_clocked_in
    assert not status.is_clocked_out
    assert status.today_entry is None


def test_concurrent_edits_to_one_week_never_exceed_threshold(tmp_path):
    service = TimesheetService(JsonTimesheetStore(tmp_path / "store.json"))

    with ThreadPoolExecutor(max_workers=6) as pool:
        list(pool.map(lambda day: service.set_times("emp1", day, "09:00", "17:00"), WEEK_ONE[:6]))

    week = service.load_period("emp1", PERIOD_START).weeks[0]
    assert week.totals.regular == 40
    assert week.totals.overtime == 8


def test_load_period_only_includes_requested_employee(service):
    service.set_times("emp1", WEEK_ONE[0], "09:00", "17:00")
    service.set_times("emp2", WEEK_ONE[0], "09:00", "12:00")

    view = service.load_period("emp1", "2026-01-10")

    assert view.period.start == PERIOD_START
    assert [e.employee_id for e in view.entries] == ["emp1"]
    assert view.totals.regular == 8
