from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Optional
from zoneinfo import ZoneInfo

from ...core.enums import ClosureReason
from ...locations.model import LocationProfile
from ...shifts.model import EffectiveShift


class AutoCloseStrategy(ABC):
    """Strategy Pattern: encapsulate where an open session is expected to end."""

    reason: ClosureReason

    @abstractmethod
    def expected_out(
        self,
        *,
        day: date,
        shift: Optional[EffectiveShift],
        location: Optional[LocationProfile],
        zone: ZoneInfo,
    ) -> Optional[datetime]:
        raise NotImplementedError
