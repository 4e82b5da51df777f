from __future__ import annotations

from datetime import date, datetime
from typing import Optional
from zoneinfo import ZoneInfo

from ...core.enums import ClosureReason
from ...locations.hours import close_time_for
from ...locations.model import LocationProfile
from ...shifts.model import EffectiveShift
from .base import AutoCloseStrategy


class LocationCloseStrategy(AutoCloseStrategy):
    """No shift that day: the session ends when the site closes (if it ever opens)."""

    reason = ClosureReason.AUTO_LOCATION_CLOSE

    def expected_out(
        self,
        *,
        day: date,
        shift: Optional[EffectiveShift],
        location: Optional[LocationProfile],
        zone: ZoneInfo,
    ) -> Optional[datetime]:
        return close_time_for(location, day, zone)
