from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import ClosureReason
from .model import AttendanceSession


class AttendanceRepository(Protocol):
    def get_by_id(self, session_id: int) -> Optional[AttendanceSession]:
        raise NotImplementedError

    def get_open_for_employee(self, employee_id: int) -> Optional[AttendanceSession]:
        raise NotImplementedError

    def list_open(self) -> Sequence[AttendanceSession]:
        raise NotImplementedError

    def list_in_range(
        self,
        *,
        start: datetime,
        end: datetime,
        employee_id: Optional[int] = None,
    ) -> Sequence[AttendanceSession]:
        """Sessions whose clock-in falls within ``[start, end]``."""

        raise NotImplementedError

    def create_clock_in(self, *, employee_id: int, location_id: int, clock_in_time: datetime) -> int:
        raise NotImplementedError

    def close_if_open(self, *, session_id: int, clock_out_time: datetime, reason: ClosureReason) -> bool:
        """Set the clock-out only if the session is still open.

        Returns False when another writer closed it first.
        """

        raise NotImplementedError
