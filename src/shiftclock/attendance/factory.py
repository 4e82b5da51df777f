from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..shifts.model import EffectiveShift
from .strategies.base import AutoCloseStrategy
from .strategies.location_close_strategy import LocationCloseStrategy
from .strategies.shift_end_strategy import ShiftEndStrategy


@dataclass
class AutoCloseStrategyFactory:
    """Factory Pattern: choose the auto-close rule for a session."""

    def for_session(self, *, shift: Optional[EffectiveShift]) -> AutoCloseStrategy:
        if shift:
            return ShiftEndStrategy()
        return LocationCloseStrategy()
