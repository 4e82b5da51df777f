"""Organization timezone helpers.

All instants handled by the engine are timezone-aware and normalized to UTC.
Calendar dates and wall-clock times are always interpreted in the
organization's zone, never with a fixed UTC offset: a local day is 23 or 25
hours long on a DST transition date.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..core.constants import DEFAULT_TIMEZONE
from .validators import require_aware

logger = logging.getLogger(__name__)

TZ_LABELS: dict[str, str] = {
    "Eastern Standard Time (EST)": "America/New_York",
    "Pacific Standard Time (PST)": "America/Los_Angeles",
    "Central Standard Time (CST)": "America/Chicago",
    "Mountain Standard Time (MST)": "America/Denver",
}

WEEKDAY_KEYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")

END_OF_DAY = time(23, 59, 59, 999000)


def resolve_timezone(label: str | None) -> str:
    """Map an admin-facing timezone label to an IANA identifier.

    Canonical IANA names pass through. Unknown labels fall back to
    ``DEFAULT_TIMEZONE`` instead of raising.
    """
    value = (label or "").strip()
    if value in TZ_LABELS:
        return TZ_LABELS[value]
    if value in TZ_LABELS.values():
        return value
    if value:
        try:
            return ZoneInfo(value).key
        except (ZoneInfoNotFoundError, ValueError):
            pass
    logger.warning("Unknown timezone label %r, falling back to %s", label, DEFAULT_TIMEZONE)
    return DEFAULT_TIMEZONE


def get_zone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Timezone %r not available, falling back to %s", name, DEFAULT_TIMEZONE)
        return ZoneInfo(DEFAULT_TIMEZONE)


def local_date(zone: ZoneInfo, instant: datetime) -> date:
    require_aware(instant, "instant")
    return instant.astimezone(zone).date()


def combine_local(zone: ZoneInfo, day: date, time_of_day: time) -> datetime:
    """UTC instant of ``time_of_day`` on ``day`` in ``zone``.

    Wall-clock times skipped by a spring-forward gap resolve with the
    pre-transition offset (``fold=0``).
    """
    return datetime.combine(day, time_of_day, tzinfo=zone).astimezone(timezone.utc)


def day_window_for_date(zone: ZoneInfo, day: date) -> tuple[datetime, datetime]:
    return combine_local(zone, day, time.min), combine_local(zone, day, END_OF_DAY)


def day_window(zone: ZoneInfo, instant: datetime) -> tuple[datetime, datetime]:
    """``[local 00:00:00.000, local 23:59:59.999]`` of the date containing ``instant``."""
    return day_window_for_date(zone, local_date(zone, instant))


def week_window(zone: ZoneInfo, instant: datetime, *, week_start: int = 6) -> tuple[datetime, datetime]:
    """Local week containing ``instant``; ``week_start`` uses ``date.weekday()`` numbering."""
    day = local_date(zone, instant)
    first = day - timedelta(days=(day.weekday() - week_start) % 7)
    last = first + timedelta(days=6)
    return combine_local(zone, first, time.min), combine_local(zone, last, END_OF_DAY)


def weekday_key(day: date) -> str:
    return WEEKDAY_KEYS[day.weekday()]


def local_time(zone: ZoneInfo, instant: datetime) -> tuple[str, str]:
    """Current ``HH:MM`` and lower-case weekday name at ``instant`` in ``zone``."""
    require_aware(instant, "instant")
    local = instant.astimezone(zone)
    return local.strftime("%H:%M"), weekday_key(local.date())


def iter_dates(start: date, end: date):
    cursor = start
    while cursor <= end:
        yield cursor
        cursor += timedelta(days=1)
