from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from ...attendance.model import AttendanceSession


class PayrollCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll)."""

    def raw_minutes(self, session: AttendanceSession, now: datetime) -> int:
        """Whole minutes from clock-in to clock-out (or ``now`` while open), never negative."""

        end = session.clock_out_time or now
        seconds = (end - session.clock_in_time).total_seconds()
        return max(int(seconds // 60), 0)

    @abstractmethod
    def worked_minutes(self, session: AttendanceSession, now: datetime) -> int:
        raise NotImplementedError
