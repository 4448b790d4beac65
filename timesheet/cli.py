from __future__ import annotations
import argparse
import logging
import sys
from datetime import date, datetime
from pathlib import Path

import structlog

from .bulk import BulkAction, apply_bulk, fill_full_time_week
from .csv_io import export_entries
from .dates import parse_local_date
from .errors import TimesheetError, ValidationError
from .models import HourField, TimeField
from .pay_period import navigate_pay_period, resolve_pay_period
from .pto import FEDERAL_HOLIDAYS, pto_summary, year_bounds
from .storage import JsonTimesheetStore
from .time_tracking import TimesheetService
from .views import format_clock, format_period


DEFAULT_DATA_PATH = Path("data/timesheets.json")


def service_from_args(args: argparse.Namespace) -> TimesheetService:
    return TimesheetService(JsonTimesheetStore(args.data or DEFAULT_DATA_PATH))


def parse_timestamp(value: str | None) -> datetime:
    if not value:
        return datetime.now()
    try:
        return datetime.fromisoformat(value)
    except ValueError as exc:
        raise ValidationError(f"Invalid timestamp: {value!r}") from exc


def print_entry(entry) -> None:
    print(
        f"{entry.date.isoformat()} in={format_clock(entry.time_in)} out={format_clock(entry.time_out)} "
        f"regular={entry.regular_hours:.2f} overtime={entry.overtime_hours:.2f} "
        f"pto={entry.pto_hours:.2f} holiday={entry.holiday_hours:.2f}"
    )


def print_bulk(result) -> None:
    print(f"{result.action.value}: {result.summary}")
    for day, error in sorted(result.failed.items()):
        print(f"  failed {day.isoformat()}: {error}")


def cmd_period(args: argparse.Namespace) -> None:
    service = service_from_args(args)
    period = resolve_pay_period(args.date or date.today())
    for _ in range(abs(args.shift)):
        period = navigate_pay_period(period.start, "next" if args.shift > 0 else "prev")
    print(format_period(service.load_period(args.employee, period.start)))


def cmd_set_times(args: argparse.Namespace) -> None:
    service = service_from_args(args)
    print_entry(service.set_times(args.employee, args.date, args.time_in, args.time_out))


def cmd_clear_time(args: argparse.Namespace) -> None:
    service = service_from_args(args)
    print_entry(service.clear_time(args.employee, args.date, args.field))


def cmd_set_hours(args: argparse.Namespace) -> None:
    service = service_from_args(args)
    print_entry(service.set_hours(args.employee, args.date, args.field, args.hours))


def cmd_pto(args: argparse.Namespace) -> None:
    service = service_from_args(args)
    print_entry(service.set_pto(args.employee, args.date, args.hours, args.notes))


def cmd_clear_pto(args: argparse.Namespace) -> None:
    service = service_from_args(args)
    print_entry(service.clear_pto(args.employee, args.date))


def cmd_holiday(args: argparse.Namespace) -> None:
    service = service_from_args(args)
    print_entry(service.set_holiday(args.employee, args.date, args.hours, args.name))


def cmd_clear_holiday(args: argparse.Namespace) -> None:
    service = service_from_args(args)
    print_entry(service.clear_holiday(args.employee, args.date))


def cmd_bulk(args: argparse.Namespace) -> None:
    service = service_from_args(args)
    result = apply_bulk(
        service,
        args.employee,
        args.dates,
        args.action,
        time_in=args.time_in,
        time_out=args.time_out,
        time_field=args.field,
        hours=args.hours,
        note=args.note,
    )
    print_bulk(result)


def cmd_fill_week(args: argparse.Namespace) -> None:
    service = service_from_args(args)
    period = resolve_pay_period(args.date)
    print_bulk(fill_full_time_week(service, args.employee, period.start, args.week))


def cmd_clock_in(args: argparse.Namespace) -> None:
    service = service_from_args(args)
    entry = service.clock_in(args.employee, parse_timestamp(args.at))
    print(f"Clocked in at {format_clock(entry.time_in)}")


def cmd_clock_out(args: argparse.Namespace) -> None:
    service = service_from_args(args)
    entry = service.clock_out(args.employee, parse_timestamp(args.at))
    print(
        f"Clocked out at {format_clock(entry.time_out)}. "
        f"Hours: {entry.worked_hours:.2f} (Regular: {entry.regular_hours:.2f}, OT: {entry.overtime_hours:.2f})"
    )


def cmd_export(args: argparse.Namespace) -> None:
    service = service_from_args(args)
    period = resolve_pay_period(args.date or date.today())
    entries = service.store.find_by_employee_and_date_range(args.employee, period.start, period.end)
    count = export_entries(Path(args.path), entries)
    print(f"Exported {count} entries for {period.label} to {args.path}")


def cmd_pto_report(args: argparse.Namespace) -> None:
    service = service_from_args(args)
    start, end = year_bounds(args.year)
    for summary in pto_summary(service.store.find_by_employee_and_date_range(None, start, end), args.year):
        print(f"{summary.employee_name}: {summary.total_pto_hours:.2f}h ({summary.total_pto_days:g} days)")
        for usage in summary.entries:
            print(f"  {usage.date.isoformat()} {usage.hours:.2f}h {usage.notes or ''}".rstrip())


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Timesheet pay-period CLI")
    parser.add_argument("--data", type=Path, help=f"Timesheet JSON file (default {DEFAULT_DATA_PATH})")
    parser.add_argument("--verbose", action="store_true", help="Log engine events to stderr")
    sub = parser.add_subparsers(dest="command", required=True)

    period = sub.add_parser("period", help="Render a pay period timesheet")
    period.add_argument("employee")
    period.add_argument("--date", type=parse_local_date, help="Any date in the pay period (default today)")
    period.add_argument("--shift", type=int, default=0, help="Move this many periods forward (or back if negative)")
    period.set_defaults(func=cmd_period)

    set_times = sub.add_parser("set-times", help="Set time in and time out for a day")
    set_times.add_argument("employee")
    set_times.add_argument("date", type=parse_local_date)
    set_times.add_argument("time_in", help="HH:MM")
    set_times.add_argument("time_out", help="HH:MM")
    set_times.set_defaults(func=cmd_set_times)

    clear_time = sub.add_parser("clear-time", help="Clear time in or time out for a day")
    clear_time.add_argument("employee")
    clear_time.add_argument("date", type=parse_local_date)
    clear_time.add_argument("field", choices=[f.value for f in TimeField])
    clear_time.set_defaults(func=cmd_clear_time)

    set_hours = sub.add_parser("set-hours", help="Manually enter hours for a day without punches")
    set_hours.add_argument("employee")
    set_hours.add_argument("date", type=parse_local_date)
    set_hours.add_argument("field", choices=[f.value for f in HourField])
    set_hours.add_argument("hours", type=float)
    set_hours.set_defaults(func=cmd_set_hours)

    pto = sub.add_parser("pto", help="Record PTO hours")
    pto.add_argument("employee")
    pto.add_argument("date", type=parse_local_date)
    pto.add_argument("hours", type=float)
    pto.add_argument("--notes")
    pto.set_defaults(func=cmd_pto)

    clear_pto = sub.add_parser("clear-pto", help="Remove PTO hours from a day")
    clear_pto.add_argument("employee")
    clear_pto.add_argument("date", type=parse_local_date)
    clear_pto.set_defaults(func=cmd_clear_pto)

    holiday = sub.add_parser("holiday", help="Record holiday hours")
    holiday.add_argument("employee")
    holiday.add_argument("date", type=parse_local_date)
    holiday.add_argument("hours", type=float)
    holiday.add_argument("name", help=f"Holiday name, e.g. {FEDERAL_HOLIDAYS[0]!r}")
    holiday.set_defaults(func=cmd_holiday)

    clear_holiday = sub.add_parser("clear-holiday", help="Remove holiday hours from a day")
    clear_holiday.add_argument("employee")
    clear_holiday.add_argument("date", type=parse_local_date)
    clear_holiday.set_defaults(func=cmd_clear_holiday)

    bulk = sub.add_parser("bulk", help="Apply one edit to several days")
    bulk.add_argument("employee")
    bulk.add_argument("action", choices=[a.value for a in BulkAction])
    bulk.add_argument("dates", nargs="+")
    bulk.add_argument("--time-in")
    bulk.add_argument("--time-out")
    bulk.add_argument("--field", choices=[f.value for f in TimeField])
    bulk.add_argument("--hours", type=float)
    bulk.add_argument("--note", help="PTO note or holiday name")
    bulk.set_defaults(func=cmd_bulk)

    fill_week = sub.add_parser("fill-week", help="Fill Tue-Sat with 9am-5pm")
    fill_week.add_argument("employee")
    fill_week.add_argument("date", type=parse_local_date, help="Any date in the pay period")
    fill_week.add_argument("week", type=int, choices=[1, 2])
    fill_week.set_defaults(func=cmd_fill_week)

    clock_in = sub.add_parser("clock-in", help="Clock in")
    clock_in.add_argument("employee")
    clock_in.add_argument("--at", help="ISO timestamp (default now)")
    clock_in.set_defaults(func=cmd_clock_in)

    clock_out = sub.add_parser("clock-out", help="Clock out")
    clock_out.add_argument("employee")
    clock_out.add_argument("--at", help="ISO timestamp (default now)")
    clock_out.set_defaults(func=cmd_clock_out)

    export = sub.add_parser("export", help="Export a pay period to CSV")
    export.add_argument("path")
    export.add_argument("--employee")
    export.add_argument("--date", type=parse_local_date)
    export.set_defaults(func=cmd_export)

    report = sub.add_parser("pto-report", help="PTO usage per employee for a year")
    report.add_argument("year", type=int)
    report.set_defaults(func=cmd_pto_report)

    return parser


def configure_cli_logging(verbose: bool) -> None:
    structlog.configure(
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
        wrapper_class=structlog.make_filtering_bound_logger(logging.INFO if verbose else logging.WARNING),
    )


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_cli_logging(args.verbose)
    try:
        args.func(args)
    except TimesheetError as exc:
        parser.exit(1, f"error: {exc}\n")


if __name__ == "__main__":
    main()
