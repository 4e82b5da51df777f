from __future__ import annotations

from datetime import datetime

from ...attendance.model import AttendanceSession
from ..model import PayrollSettings
from ..rounding import apply_rounding
from .base import PayrollCalculator


class RoundingPayrollCalculator(PayrollCalculator):
    """Organization rule: raw minutes rounded per session with interval/buffer."""

    def __init__(self, settings: PayrollSettings):
        self._settings = settings

    def worked_minutes(self, session: AttendanceSession, now: datetime) -> int:
        return apply_rounding(
            self.raw_minutes(session, now),
            self._settings.rounding_interval,
            self._settings.rounding_buffer,
        )
