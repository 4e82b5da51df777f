from __future__ import annotations

from datetime import date, datetime
from typing import Optional
from zoneinfo import ZoneInfo

from ...core.enums import ClosureReason
from ...locations.model import LocationProfile
from ...shifts.model import EffectiveShift
from .base import AutoCloseStrategy


class ShiftEndStrategy(AutoCloseStrategy):
    """A scheduled shift governs the session: it ends with the shift."""

    reason = ClosureReason.AUTO_SHIFT_END

    def expected_out(
        self,
        *,
        day: date,
        shift: Optional[EffectiveShift],
        location: Optional[LocationProfile],
        zone: ZoneInfo,
    ) -> Optional[datetime]:
        return shift.end_time if shift else None
