from __future__ import annotations
import json
from dataclasses import asdict
from datetime import date, datetime
from pathlib import Path
from threading import RLock
from typing import Any, Dict, List, Mapping, Optional, Protocol, Tuple

from .errors import PersistenceError
from .models import TimesheetEntry


class TimesheetStore(Protocol):
    def find_by_employee_and_date_range(
        self, employee_id: Optional[str], start: date, end: date
    ) -> List[TimesheetEntry]:
        ...

    def get(self, employee_id: str, day: date) -> Optional[TimesheetEntry]:
        ...

    def upsert(self, employee_id: str, day: date, fields: Mapping[str, Any]) -> TimesheetEntry:
        ...


class JsonTimesheetStore:
    """Timesheet rows kept in a single JSON document, keyed by employee and date."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self.entries: Dict[Tuple[str, date], TimesheetEntry] = {}
        self._lock = RLock()
        if path.exists():
            self.load()

    def load(self) -> None:
        try:
            content = json.loads(self.path.read_text())
        except (OSError, ValueError) as exc:
            raise PersistenceError(f"Could not read timesheet store {self.path}: {exc}") from exc
        entries = (self._deserialize_entry(t) for t in content.get("timesheets", []))
        self.entries = {(e.employee_id, e.date): e for e in entries}

    def save(self) -> None:
        payload = {
            "timesheets": [
                self._serialize_entry(e) for e in sorted(self.entries.values(), key=lambda e: (e.employee_id, e.date))
            ],
        }
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(payload, indent=2))
        except OSError as exc:
            raise PersistenceError(f"Could not write timesheet store {self.path}: {exc}") from exc

    def find_by_employee_and_date_range(
        self, employee_id: Optional[str], start: date, end: date
    ) -> List[TimesheetEntry]:
        with self._lock:
            entries = [e for e in self.entries.values() if start <= e.date <= end]
        if employee_id is not None:
            entries = [e for e in entries if e.employee_id == employee_id]
        return sorted(entries, key=lambda e: (e.date, e.employee_id))

    def get(self, employee_id: str, day: date) -> Optional[TimesheetEntry]:
        with self._lock:
            return self.entries.get((employee_id, day))

    def upsert(self, employee_id: str, day: date, fields: Mapping[str, Any]) -> TimesheetEntry:
        with self._lock:
            previous = self.entries.get((employee_id, day))
            entry = (previous or TimesheetEntry(employee_id=employee_id, date=day)).updated(fields)
            self.entries[(employee_id, day)] = entry
            try:
                self.save()
            except PersistenceError:
                # keep memory in line with what is on disk
                if previous is None:
                    del self.entries[(employee_id, day)]
                else:
                    self.entries[(employee_id, day)] = previous
                raise
            return entry

    @staticmethod
    def _parse_date(value: Optional[str]) -> Optional[date]:
        return date.fromisoformat(value) if value else None

    @staticmethod
    def _parse_datetime(value: Optional[str]) -> Optional[datetime]:
        return datetime.fromisoformat(value) if value else None

    def _serialize_entry(self, entry: TimesheetEntry) -> dict:
        payload = asdict(entry)
        for key in ("date", "pay_period_start", "pay_period_end", "time_in", "time_out"):
            value = payload[key]
            payload[key] = value.isoformat() if value is not None else None
        return payload

    def _deserialize_entry(self, data: dict) -> TimesheetEntry:
        data = dict(data)
        data["date"] = date.fromisoformat(data["date"])
        data["pay_period_start"] = self._parse_date(data.get("pay_period_start"))
        data["pay_period_end"] = self._parse_date(data.get("pay_period_end"))
        data["time_in"] = self._parse_datetime(data.get("time_in"))
        data["time_out"] = self._parse_datetime(data.get("time_out"))
        return TimesheetEntry(**data)
