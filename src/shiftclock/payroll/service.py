from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date, datetime, timedelta
from typing import Optional

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import now_utc
from ..common.timezones import day_window_for_date, local_date
from ..common.validators import require_aware
from ..core.exceptions import ValidationError
from ..employees.repository import EmployeeRepository
from ..settings import OrgSettings
from ..shifts.resolver import UNKNOWN_NAME
from .calculator.base import PayrollCalculator
from .calculator.factory import PayrollCalculatorFactory
from .model import EmployeePayroll, PayrollLine, PayrollReport

logger = logging.getLogger(__name__)


def split_overtime(weekly_minutes: dict[date, int], threshold_hours: float) -> tuple[float, float]:
    """Split worked time into (regular, overtime) hours, threshold applied per week."""
    threshold = max(float(threshold_hours), 0.0) * 60
    regular = overtime = 0.0
    for minutes in weekly_minutes.values():
        regular += min(minutes, threshold)
        overtime += max(minutes - threshold, 0)
    return round(regular / 60, 2), round(overtime / 60, 2)


class PayrollReportService:
    def __init__(
        self,
        sessions: AttendanceRepository,
        employees: EmployeeRepository,
        settings: OrgSettings,
        *,
        calculator: Optional[PayrollCalculator] = None,
    ):
        self._sessions = sessions
        self._employees = employees
        self._settings = settings
        self._calculator = calculator or PayrollCalculatorFactory().for_settings(settings.payroll)

    def _week_of(self, day: date) -> date:
        return day - timedelta(days=(day.weekday() - self._settings.week_start) % 7)

    def build_payroll_report(
        self,
        *,
        start: date,
        end: date,
        now: Optional[datetime] = None,
        finalized: bool = True,
        employee_id: Optional[int] = None,
    ) -> PayrollReport:
        """Aggregate attendance sessions started in ``[start, end]`` (org-local dates).

        A finalized report ignores sessions that are still open; a live one
        counts them up to ``now``.
        """
        if end < start:
            raise ValidationError("End date must be on or after start date")
        now = now or now_utc()
        require_aware(now, "now")

        zone = self._settings.zone
        window_start, _ = day_window_for_date(zone, start)
        _, window_end = day_window_for_date(zone, end)
        sessions = self._sessions.list_in_range(start=window_start, end=window_end, employee_id=employee_id)

        lines: list[PayrollLine] = []
        for session in sessions:
            if finalized and session.is_open:
                continue
            raw = self._calculator.raw_minutes(session, now)
            if not session.is_open and raw < 1:
                continue
            lines.append(
                PayrollLine(
                    session_id=session.session_id,
                    employee_id=session.employee_id,
                    location_id=session.location_id,
                    work_date=local_date(zone, session.clock_in_time),
                    clock_in_time=session.clock_in_time,
                    clock_out_time=session.clock_out_time,
                    raw_minutes=raw,
                    rounded_minutes=self._calculator.worked_minutes(session, now),
                )
            )

        by_employee: dict[int, list[PayrollLine]] = defaultdict(list)
        for line in lines:
            by_employee[line.employee_id].append(line)

        employees = [self._summarize(emp_id, emp_lines) for emp_id, emp_lines in by_employee.items()]
        employees.sort(key=lambda e: (e.employee_name, e.employee_id))
        report = PayrollReport(
            period_start=start,
            period_end=end,
            settings=self._settings.payroll,
            finalized=finalized,
            employees=employees,
            lines=sorted(lines, key=lambda line: (line.clock_in_time, line.session_id)),
        )
        logger.info(
            "Payroll %s..%s: %d employees, %d sessions, total=%.2f",
            start.isoformat(),
            end.isoformat(),
            len(employees),
            len(lines),
            report.total_pay,
        )
        return report

    def _summarize(self, employee_id: int, lines: list[PayrollLine]) -> EmployeePayroll:
        employee = self._employees.get_by_id(employee_id)
        if employee is None:
            logger.warning("Payroll lines for unknown employee %s", employee_id)
        rate = employee.hourly_rate if employee else 0.0

        rounded = sum(line.rounded_minutes for line in lines)
        weekly: dict[date, int] = defaultdict(int)
        for line in lines:
            weekly[self._week_of(line.work_date)] += line.rounded_minutes
        regular, overtime = split_overtime(weekly, self._settings.payroll.overtime_threshold_hours)

        return EmployeePayroll(
            employee_id=employee_id,
            employee_name=employee.full_name if employee else UNKNOWN_NAME,
            hourly_rate=rate,
            raw_minutes=sum(line.raw_minutes for line in lines),
            rounded_minutes=rounded,
            regular_hours=regular,
            overtime_hours=overtime,
            total_pay=round(rounded / 60 * rate, 2),
            sessions_count=len(lines),
        )
