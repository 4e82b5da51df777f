from __future__ import annotations

from enum import Enum


class ClosureReason(str, Enum):
    """Why an attendance session was closed."""

    MANUAL = "manual"
    AUTO_SHIFT_END = "auto_shift_end"
    AUTO_LOCATION_CLOSE = "auto_location_close"


class EditScope(str, Enum):
    """How far an edit/delete propagates across a recurrence series."""

    THIS = "this"
    FUTURE = "future"
    ALL = "all"


class RepeatMode(str, Enum):
    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    CUSTOM = "custom"


class ClockInFailure(str, Enum):
    """Typed clock-in rejections returned to the clock API."""

    OUTSIDE_GEOFENCE = "outside_geofence"
    OUTSIDE_OPERATING_HOURS = "outside_operating_hours"
    OUTSIDE_SHIFT_HOURS = "outside_shift_hours"
    ALREADY_CLOCKED_IN = "already_clocked_in"


class ShiftStatus(str, Enum):
    SCHEDULED = "scheduled"
    CANCELLED = "cancelled"
