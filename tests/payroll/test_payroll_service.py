from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Optional

import pytest

from shiftclock.attendance.model import AttendanceSession
from shiftclock.common.timezones import combine_local
from shiftclock.core.enums import ClosureReason
from shiftclock.core.exceptions import ValidationError
from shiftclock.employees.model import Employee
from shiftclock.payroll.calculator.standard_calculator import StandardPayrollCalculator
from shiftclock.payroll.service import PayrollReportService, split_overtime
from shiftclock.settings import OrgSettings

SETTINGS = OrgSettings(timezone="America/New_York")
ZONE = SETTINGS.zone
MONDAY = date(2024, 1, 8)


def _at(day: date, hour: int, minute: int = 0, second: int = 0) -> datetime:
    return combine_local(ZONE, day, time(hour, minute, second))


def _closed(session_id, employee_id, clock_in, clock_out) -> AttendanceSession:
    return AttendanceSession(
        session_id=session_id,
        employee_id=employee_id,
        location_id=3,
        clock_in_time=clock_in,
        clock_out_time=clock_out,
        closure_reason=ClosureReason.MANUAL,
    )


class InMemorySessions:
    def __init__(self, sessions):
        self._sessions = list(sessions)

    def list_in_range(self, *, start, end, employee_id=None):
        return [
            s
            for s in self._sessions
            if start <= s.clock_in_time <= end and (employee_id is None or s.employee_id == employee_id)
        ]


class InMemoryEmployees:
    def __init__(self, employees):
        self._by_id = {e.employee_id: e for e in employees}

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        return self._by_id.get(employee_id)

    def list_all(self, *, active_only: bool = True):
        return list(self._by_id.values())


EMPLOYEES = InMemoryEmployees(
    [Employee(employee_id=7, full_name="Ana Ruiz", hourly_rate=20.0), Employee(employee_id=8, full_name="Bo Chen", hourly_rate=15.0)]
)

SESSIONS = [
    _closed(1, 7, _at(MONDAY, 9), _at(MONDAY, 17, 52)),
    AttendanceSession(session_id=2, employee_id=7, location_id=3, clock_in_time=_at(MONDAY, 18)),
    _closed(3, 8, _at(MONDAY, 9), _at(MONDAY, 9, 0, 30)),
    _closed(4, 8, _at(MONDAY, 12), _at(MONDAY, 16, 56)),
    _closed(5, 8, _at(MONDAY + timedelta(days=1), 9), _at(MONDAY + timedelta(days=1), 10)),
]


def test_finalized_report_uses_rounded_minutes_and_excludes_open_sessions():
    service = PayrollReportService(InMemorySessions(SESSIONS), EMPLOYEES, SETTINGS)

    report = service.build_payroll_report(start=MONDAY, end=MONDAY, now=_at(MONDAY, 18, 52))

    ana, bo = report.employees
    assert (ana.employee_name, ana.raw_minutes, ana.rounded_minutes, ana.total_pay) == ("Ana Ruiz", 532, 525, 175.0)
    assert (bo.employee_name, bo.rounded_minutes, bo.total_pay, bo.sessions_count) == ("Bo Chen", 300, 75.0, 1)
    assert report.total_pay == 250.0
    assert [line.session_id for line in report.lines] == [1, 4]


def test_live_report_counts_open_session_until_now():
    service = PayrollReportService(InMemorySessions(SESSIONS), EMPLOYEES, SETTINGS)

    report = service.build_payroll_report(start=MONDAY, end=MONDAY, now=_at(MONDAY, 18, 52), finalized=False)

    ana = report.employees[0]
    assert ana.rounded_minutes == 525 + 45
    assert ana.total_pay == 190.0
    assert not report.finalized


def test_report_window_follows_org_dates():
    service = PayrollReportService(InMemorySessions(SESSIONS), EMPLOYEES, SETTINGS)

    report = service.build_payroll_report(start=MONDAY, end=MONDAY + timedelta(days=1), now=_at(MONDAY, 23))

    assert [line.session_id for line in report.lines] == [1, 4, 5]
    assert report.lines[-1].work_date == MONDAY + timedelta(days=1)


def test_overtime_is_split_per_week():
    week = [
        _closed(10 + i, 7, _at(MONDAY + timedelta(days=i), 9), _at(MONDAY + timedelta(days=i), 18)) for i in range(5)
    ]
    service = PayrollReportService(
        InMemorySessions(week), EMPLOYEES, SETTINGS, calculator=StandardPayrollCalculator()
    )

    report = service.build_payroll_report(start=MONDAY, end=MONDAY + timedelta(days=6), now=_at(MONDAY, 9))

    (ana,) = report.employees
    assert (ana.regular_hours, ana.overtime_hours) == (40.0, 5.0)
    assert ana.total_pay == 900.0


def test_split_overtime_keeps_weeks_apart():
    weekly = {date(2024, 1, 7): 38 * 60, date(2024, 1, 14): 42 * 60}

    assert split_overtime(weekly, 40) == (78.0, 2.0)


def test_unknown_employee_is_paid_nothing():
    service = PayrollReportService(
        InMemorySessions([_closed(1, 99, _at(MONDAY, 9), _at(MONDAY, 10))]), EMPLOYEES, SETTINGS
    )

    (row,) = service.build_payroll_report(start=MONDAY, end=MONDAY, now=_at(MONDAY, 12)).employees

    assert (row.employee_name, row.total_pay) == ("Unknown", 0.0)


def test_employee_filter_and_range_validation():
    service = PayrollReportService(InMemorySessions(SESSIONS), EMPLOYEES, SETTINGS)

    report = service.build_payroll_report(start=MONDAY, end=MONDAY, employee_id=8, now=_at(MONDAY, 23))
    assert [e.employee_id for e in report.employees] == [8]

    with pytest.raises(ValidationError):
        service.build_payroll_report(start=MONDAY, end=MONDAY - timedelta(days=1))
