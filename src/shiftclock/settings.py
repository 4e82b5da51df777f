from __future__ import annotations

from dataclasses import dataclass, field
from types import ModuleType
from zoneinfo import ZoneInfo

from .common.timezones import get_zone, resolve_timezone
from .core.constants import (
    DEFAULT_CLOCK_IN_GRACE_MINUTES,
    DEFAULT_OVERTIME_THRESHOLD_HOURS,
    DEFAULT_ROUNDING_BUFFER,
    DEFAULT_ROUNDING_INTERVAL,
    DEFAULT_TIMEZONE,
    DEFAULT_WEEK_START,
)
from .payroll.model import PayrollSettings


@dataclass(frozen=True)
class OrgSettings:
    """Organization-wide configuration passed explicitly into every resolution call."""

    timezone: str = DEFAULT_TIMEZONE
    week_start: int = DEFAULT_WEEK_START
    payroll: PayrollSettings = field(default_factory=PayrollSettings)
    clock_in_grace_minutes: int = DEFAULT_CLOCK_IN_GRACE_MINUTES
    enforce_shift_hours: bool = False

    @property
    def zone(self) -> ZoneInfo:
        return get_zone(self.timezone)


def org_settings_from_module(settings: ModuleType) -> OrgSettings:
    """Build ``OrgSettings`` from a ``config.<env>`` settings module."""

    payroll = PayrollSettings(
        rounding_interval=int(getattr(settings, "PAYROLL_ROUNDING_INTERVAL", DEFAULT_ROUNDING_INTERVAL)),
        rounding_buffer=int(getattr(settings, "PAYROLL_ROUNDING_BUFFER", DEFAULT_ROUNDING_BUFFER)),
        overtime_threshold_hours=float(
            getattr(settings, "OVERTIME_THRESHOLD_HOURS", DEFAULT_OVERTIME_THRESHOLD_HOURS)
        ),
    )
    return OrgSettings(
        timezone=resolve_timezone(getattr(settings, "ORG_TIMEZONE", DEFAULT_TIMEZONE)),
        week_start=int(getattr(settings, "WEEK_START", DEFAULT_WEEK_START)) % 7,
        payroll=payroll,
        clock_in_grace_minutes=int(getattr(settings, "CLOCK_IN_GRACE_MINUTES", DEFAULT_CLOCK_IN_GRACE_MINUTES)),
        enforce_shift_hours=bool(getattr(settings, "ENFORCE_SHIFT_HOURS", False)),
    )
