from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import ClosureReason


@dataclass(frozen=True)
class AttendanceSession:
    """Domain entity: one clock-in, optionally closed by a clock-out.

    Created on clock-in and closed exactly once, either manually or by the
    auto-close job. Never deleted.
    """

    session_id: int
    employee_id: int
    location_id: int
    clock_in_time: datetime
    clock_out_time: Optional[datetime] = None
    closure_reason: Optional[ClosureReason] = None

    @property
    def is_open(self) -> bool:
        return self.clock_out_time is None


@dataclass(frozen=True)
class ClosureDecision:
    """Outcome of the auto-close check for one open session."""

    session_id: int
    clock_out_time: datetime
    reason: ClosureReason
    shift_id: Optional[str] = None


@dataclass(frozen=True)
class TodaySummary:
    employee_id: int
    day: date
    sessions_count: int
    raw_minutes: int
    rounded_minutes: int
    open_session: Optional[AttendanceSession] = None
