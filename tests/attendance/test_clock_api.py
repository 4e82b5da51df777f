from datetime import date, datetime, timezone
from types import SimpleNamespace

from flask import Flask

from shiftclock.attendance.controller import register
from shiftclock.attendance.model import AttendanceSession, ClosureDecision, TodaySummary
from shiftclock.common.http import register_error_handlers
from shiftclock.core.enums import ClockInFailure, ClosureReason
from shiftclock.core.exceptions import ClockInRejected
from shiftclock.settings import OrgSettings

CLOCK_IN = datetime(2024, 1, 8, 14, 0, tzinfo=timezone.utc)


class StubAttendanceService:
    def __init__(self):
        self.clock_ins = []

    def clock_in(self, *, employee_id, location_id, coordinates=None):
        if employee_id == 13:
            raise ClockInRejected(ClockInFailure.OUTSIDE_OPERATING_HOURS, "The workplace is closed on Monday.")
        self.clock_ins.append((employee_id, location_id, coordinates))
        return 42

    def clock_out(self, *, employee_id):
        return AttendanceSession(
            session_id=42,
            employee_id=employee_id,
            location_id=3,
            clock_in_time=CLOCK_IN,
            clock_out_time=datetime(2024, 1, 8, 22, 0, tzinfo=timezone.utc),
            closure_reason=ClosureReason.MANUAL,
        )

    def current_session(self, employee_id):
        return None

    def today_summary(self, employee_id):
        return TodaySummary(employee_id=employee_id, day=date(2024, 1, 8), sessions_count=1, raw_minutes=52, rounded_minutes=45)

    def run_auto_close(self):
        return [ClosureDecision(session_id=5, clock_out_time=CLOCK_IN, reason=ClosureReason.AUTO_SHIFT_END, shift_id="persisted:1")]


def _app(service):
    app = Flask(__name__)
    register_error_handlers(app)
    register(app, SimpleNamespace(attendance_service=service, settings=OrgSettings()))
    return app


def test_clock_in_passes_coordinates():
    service = StubAttendanceService()

    resp = _app(service).test_client().post(
        "/api/clock/in", json={"employee_id": 7, "location_id": 3, "latitude": 40.7, "longitude": -74.0}
    )

    assert resp.status_code == 201
    assert resp.get_json()["session_id"] == 42
    assert service.clock_ins == [(7, 3, (40.7, -74.0))]


def test_clock_in_rejection_is_reported_with_reason():
    resp = _app(StubAttendanceService()).test_client().post("/api/clock/in", json={"employee_id": 13, "location_id": 3})

    assert resp.status_code == 400
    assert resp.get_json()["reason"] == "outside_operating_hours"


def test_clock_out_returns_closed_session():
    resp = _app(StubAttendanceService()).test_client().post("/api/clock/out", json={"employee_id": 7})

    session = resp.get_json()["session"]
    assert session["closure_reason"] == "manual"
    assert session["is_open"] is False


def test_today_summary_formats_worked_time():
    resp = _app(StubAttendanceService()).test_client().get("/api/attendance/7/today")

    assert resp.get_json()["worked"] == "45m"


def test_auto_close_cli_command_reports_count():
    runner = _app(StubAttendanceService()).test_cli_runner()

    result = runner.invoke(args=["auto-close"])

    assert "closed 1 session(s)" in result.output
