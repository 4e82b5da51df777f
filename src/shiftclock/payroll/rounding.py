from __future__ import annotations

from typing import Optional

from ..common.validators import require_rounding


def apply_rounding(raw_minutes: Optional[int], interval: int, buffer: int) -> int:
    """Round a raw duration into payroll minutes.

    A remainder within ``buffer`` minutes of the next interval boundary rounds
    up; anything else rounds down. ``interval == 0`` keeps the exact value.
    """
    require_rounding(interval, buffer)

    minutes = raw_minutes if raw_minutes is not None and raw_minutes > 0 else 0
    if interval == 0:
        return minutes

    blocks, remainder = divmod(minutes, interval)
    if remainder == 0:
        return minutes
    if remainder >= interval - buffer:
        return (blocks + 1) * interval
    return blocks * interval


def format_hours_minutes(minutes: int) -> str:
    h, m = divmod(int(round(max(minutes or 0, 0))), 60)
    if h == 0:
        return f"{m}m"
    if m == 0:
        return f"{h}h"
    return f"{h}h {m}m"
