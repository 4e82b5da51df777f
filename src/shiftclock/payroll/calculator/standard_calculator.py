from __future__ import annotations

from datetime import datetime

from ...attendance.model import AttendanceSession
from .base import PayrollCalculator


class StandardPayrollCalculator(PayrollCalculator):
    """Exact rule: paid minutes are the raw clock-in to clock-out minutes."""

    def worked_minutes(self, session: AttendanceSession, now: datetime) -> int:
        return self.raw_minutes(session, now)
