from __future__ import annotations

from datetime import datetime, time

from ..core.exceptions import ValidationError


def require_positive_id(value, field_name: str) -> int:
    try:
        ident = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} is invalid")
    if ident <= 0:
        raise ValidationError(f"{field_name} is invalid")
    return ident


def require_aware(value: datetime, field_name: str) -> datetime:
    if value.tzinfo is None or value.utcoffset() is None:
        raise ValidationError(f"{field_name} must be timezone-aware")
    return value


def require_time_range(start: time, end: time) -> None:
    if end <= start:
        raise ValidationError("End time must be after start time")


def require_rounding(interval: int, buffer: int) -> None:
    if interval < 0:
        raise ValidationError("Rounding interval cannot be negative")
    if interval == 0:
        return
    if buffer < 0 or buffer >= interval:
        raise ValidationError("Rounding buffer must be at least 0 and less than the interval")
