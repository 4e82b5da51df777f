from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional
from zoneinfo import ZoneInfo

from ..common.timezones import combine_local
from .model import LocationProfile


@dataclass(frozen=True)
class HoursCheck:
    is_valid: bool
    reason: Optional[str] = None


def _fmt(value) -> str:
    return value.strftime("%I:%M %p").lstrip("0")


def close_time_for(location: Optional[LocationProfile], day: date, zone: ZoneInfo) -> Optional[datetime]:
    """UTC instant the site closes on ``day``, or None when it is closed all day."""
    if location is None:
        return None
    hours = location.hours_for(day.weekday())
    if not hours.is_open or hours.close_time is None:
        return None
    return combine_local(zone, day, hours.close_time)


def is_within_operating_hours(location: LocationProfile, instant: datetime, zone: ZoneInfo) -> HoursCheck:
    """Whether the site is open at ``instant``. A site without configured hours is always open."""
    if not location.has_operating_hours:
        return HoursCheck(is_valid=True)

    local = instant.astimezone(zone)
    day_name = local.strftime("%A")
    hours = location.hours_for(local.weekday())
    if not hours.is_open:
        return HoursCheck(is_valid=False, reason=f"The workplace is closed on {day_name}.")

    now_t = local.time().replace(second=0, microsecond=0)
    if hours.open_time is not None and now_t < hours.open_time:
        return HoursCheck(is_valid=False, reason=f"The workplace doesn't open until {_fmt(hours.open_time)}.")
    if hours.close_time is not None and now_t > hours.close_time:
        return HoursCheck(is_valid=False, reason=f"The workplace closed at {_fmt(hours.close_time)}.")
    return HoursCheck(is_valid=True)
