from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app import main as main_module
from app.db.session import Base, get_session
from app.domains.timesheets.service import get_timesheet_service
from app.main import app
from timesheet.errors import PersistenceError
from timesheet.time_tracking import TimesheetService

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

ADMIN = {"X-Employee-Id": "manager", "X-Employee-Role": "admin"}
EMP1 = {"X-Employee-Id": "emp1"}


def override_get_session():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_session] = override_get_session


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


class UnavailableStore:
    def find_by_employee_and_date_range(self, employee_id, start, end):
        raise PersistenceError("Failed to fetch timesheets")

    def get(self, employee_id, day):
        raise PersistenceError("Failed to fetch timesheet")

    def upsert(self, employee_id, day, fields):
        raise PersistenceError("Failed to save timesheet")


def test_health():
    with TestClient(app) as client:
        response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_resolve_and_navigate_pay_periods():
    with TestClient(app) as client:
        resolved = client.get("/pay-periods/resolve", params={"date": "2025-12-28"})
        following = client.get("/pay-periods/2025-12-29/next")
        previous = client.get("/pay-periods/2025-12-29/prev")
        bad = client.get("/pay-periods/2025-12-29/sideways")

    assert resolved.json() == {"start": "2025-12-15", "end": "2025-12-28", "label": "12/15/2025 - 12/28/2025"}
    assert following.json()["label"] == "1/12/2026 - 1/25/2026"
    assert previous.json()["start"] == "2025-12-15"
    assert bad.status_code == 422


def test_put_times_and_read_period():
    with TestClient(app) as client:
        for day in ("2026-01-05", "2026-01-06", "2026-01-07", "2026-01-08"):
            client.put(f"/timesheets/emp1/{day}/times", json={"time_in": "08:00", "time_out": "18:00"}, headers=EMP1)
        friday = client.put(
            "/timesheets/emp1/2026-01-09/times", json={"time_in": "09:00", "time_out": "17:00"}, headers=ADMIN
        )
        view = client.get("/timesheets", params={"employee_id": "emp1", "date": "2026-01-09"}, headers=ADMIN)

    assert friday.status_code == 200
    assert friday.json()["regular_hours"] == 0
    assert friday.json()["overtime_hours"] == 8
    assert friday.json()["pay_period_start"] == "2025-12-29"

    body = view.json()
    assert body["pay_period"]["label"] == "12/29/2025 - 1/11/2026"
    week_two = body["weeks"][1]
    assert [d["day_name"] for d in week_two["days"]] == ["MON", "TUE", "WED", "THU", "FRI", "SAT", "SUN"]
    assert week_two["totals"]["regular"] == 40
    assert week_two["totals"]["overtime"] == 8
    assert body["weeks"][0]["totals"]["total"] == 0
    assert body["totals"]["total"] == 48


def test_employee_cannot_touch_another_timesheet():
    with TestClient(app) as client:
        put = client.put("/timesheets/emp2/2026-01-05/times", json={"time_in": "09:00"}, headers=EMP1)
        view = client.get("/timesheets", params={"employee_id": "emp2"}, headers=EMP1)
        report = client.get("/timesheets/pto-summary", params={"year": 2026}, headers=EMP1)

    assert put.status_code == 403
    assert view.status_code == 403
    assert report.status_code == 403


def test_bad_input_is_rejected():
    with TestClient(app) as client:
        no_identity = client.get("/timesheets")
        bad_time = client.put("/timesheets/emp1/2026-01-05/times", json={"time_in": "25:00"}, headers=EMP1)
        no_name = client.put("/timesheets/emp1/2026-01-05/holiday", json={"hours": 8, "holiday_name": " "}, headers=EMP1)

    assert no_identity.status_code == 422
    assert bad_time.status_code == 422
    assert "25:00" in bad_time.json()["detail"]
    assert no_name.status_code == 422


def test_clear_time_pto_and_holiday():
    with TestClient(app) as client:
        client.put("/timesheets/emp1/2026-01-05/times", json={"time_in": "09:00", "time_out": "17:00"}, headers=EMP1)
        client.put("/timesheets/emp1/2026-01-05/pto", json={"hours": 2, "notes": "Dentist"}, headers=EMP1)
        client.put("/timesheets/emp1/2026-01-06/holiday", json={"holiday_name": "Epiphany"}, headers=EMP1)

        cleared = client.delete("/timesheets/emp1/2026-01-05/times/time_out", headers=EMP1)
        no_pto = client.delete("/timesheets/emp1/2026-01-05/pto", headers=EMP1)
        no_holiday = client.delete("/timesheets/emp1/2026-01-06/holiday", headers=EMP1)

    assert cleared.json()["time_out"] is None
    assert cleared.json()["regular_hours"] == 0
    assert cleared.json()["pto_hours"] == 2
    assert (no_pto.json()["pto_hours"], no_pto.json()["pto_notes"]) == (0, None)
    assert (no_holiday.json()["holiday_hours"], no_holiday.json()["holiday_name"]) == (0, None)


def test_manual_hours():
    with TestClient(app) as client:
        response = client.put("/timesheets/emp1/2026-01-05/hours", json={"field": "regular", "hours": 6}, headers=EMP1)
        bad = client.put("/timesheets/emp1/2026-01-05/hours", json={"field": "regular", "hours": -1}, headers=EMP1)
        unnamed = client.put("/timesheets/emp1/2026-01-06/hours", json={"field": "holiday", "hours": 8}, headers=EMP1)

    assert response.status_code == 200
    assert response.json()["regular_hours"] == 6
    assert bad.status_code == 422
    assert unnamed.status_code == 422
    assert unnamed.json()["detail"] == "A holiday name is required when holiday hours are set"


def test_bulk_and_fill_week():
    with TestClient(app) as client:
        bulk = client.post(
            "/timesheets/emp1/bulk",
            json={"action": "set_pto", "dates": ["2026-01-12", "2026-01-13"], "hours": 8, "note": "Ski trip"},
            headers=EMP1,
        )
        fill = client.post(
            "/timesheets/emp1/fill-week", json={"period_start": "2026-01-06", "week_number": 2}, headers=EMP1
        )
        unknown = client.post("/timesheets/emp1/bulk", json={"action": "archive", "dates": ["2026-01-12"]}, headers=EMP1)
        missing = client.post("/timesheets/emp1/bulk", json={"action": "set_time", "dates": ["2026-01-12"]}, headers=EMP1)
        view = client.get("/timesheets", params={"date": "2026-01-06"}, headers=EMP1)

    assert bulk.json() == {
        "success": True,
        "action": "set_pto",
        "message": "2 of 2 succeeded",
        "succeeded": ["2026-01-12", "2026-01-13"],
        "failed": {},
    }
    assert fill.json()["message"] == "5 of 5 succeeded"
    assert fill.json()["succeeded"][0] == "2026-01-06"
    assert unknown.status_code == 422
    assert missing.status_code == 422
    assert view.json()["weeks"][1]["totals"]["regular"] == 40


def test_clock_flow():
    with TestClient(app) as client:
        before = client.get("/clock", headers=EMP1)
        clock_in = client.post("/clock", json={"action": "clock_in"}, headers=EMP1)
        again = client.post("/clock", json={"action": "clock_in"}, headers=EMP1)
        status = client.get("/clock", headers=EMP1)
        clock_out = client.post("/clock", json={"action": "clock_out"}, headers=EMP1)
        after = client.post("/clock", json={"action": "clock_in"}, headers=EMP1)

    assert before.json()["is_clocked_in"] is False
    assert clock_in.json()["message"] == "Clocked in successfully"
    assert again.status_code == 409
    assert again.json()["detail"] == "Already clocked in"
    assert status.json()["is_clocked_in"] is True
    assert clock_out.json()["message"].startswith("Clocked out successfully. Hours:")
    assert clock_out.json()["timesheet"]["time_out"] is not None
    assert after.status_code == 409


def test_clock_out_before_clock_in():
    with TestClient(app) as client:
        response = client.post("/clock", json={"action": "clock_out"}, headers=EMP1)

    assert response.status_code == 409
    assert response.json()["detail"] == "No clock in found for today"


def test_pto_summary_and_holidays():
    with TestClient(app) as client:
        client.put("/timesheets/emp1/2026-01-07/pto", json={"hours": 8, "notes": "Trip"}, headers=EMP1)
        client.put("/timesheets/emp2/2026-02-02/pto", json={"hours": 4}, headers=ADMIN)
        report = client.get("/timesheets/pto-summary", params={"year": 2026}, headers=ADMIN)
        holidays = client.get("/timesheets/holidays")

    summaries = report.json()
    assert [s["employee_id"] for s in summaries] == ["emp1", "emp2"]
    assert summaries[0]["total_pto_days"] == 1
    assert summaries[0]["entries"] == [{"date": "2026-01-07", "hours": 8.0, "notes": "Trip"}]
    assert summaries[1]["total_pto_hours"] == 4
    assert "Juneteenth" in holidays.json()


def test_store_outage_maps_to_503():
    app.dependency_overrides[get_timesheet_service] = lambda: TimesheetService(UnavailableStore())
    try:
        with TestClient(app) as client:
            response = client.put(
                "/timesheets/emp1/2026-01-05/times", json={"time_in": "09:00", "time_out": "17:00"}, headers=EMP1
            )
    finally:
        del app.dependency_overrides[get_timesheet_service]

    assert response.status_code == 503
    assert response.json()["detail"] == "Failed to fetch timesheets"


def test_run_serves_the_app_with_uvicorn(monkeypatch):
    calls = []
    monkeypatch.setattr(main_module.uvicorn, "run", lambda *args, **kwargs: calls.append((args, kwargs)))

    main_module.run(port=9000)

    assert calls == [((app,), {"host": "0.0.0.0", "port": 9000, "log_config": None})]
