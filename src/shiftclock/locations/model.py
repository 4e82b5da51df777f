from __future__ import annotations

from dataclasses import dataclass, field
from datetime import time
from typing import Optional

from ..core.constants import DEFAULT_GEOFENCE_RADIUS_METERS


@dataclass(frozen=True)
class DayHours:
    """Operating hours of one weekday, in the organization's timezone."""

    is_open: bool = False
    open_time: Optional[time] = None
    close_time: Optional[time] = None


@dataclass(frozen=True)
class LocationProfile:
    """Domain entity: a work site.

    ``operating_hours`` is keyed by ``date.weekday()`` (0 = Monday); a missing
    weekday means the site is closed that day.
    """

    location_id: int
    name: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    geofence_radius_m: int = DEFAULT_GEOFENCE_RADIUS_METERS
    operating_hours: dict[int, DayHours] = field(default_factory=dict)

    def hours_for(self, weekday: int) -> DayHours:
        return self.operating_hours.get(weekday) or DayHours()

    @property
    def has_operating_hours(self) -> bool:
        return bool(self.operating_hours)
