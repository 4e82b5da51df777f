from __future__ import annotations

import calendar
from datetime import date, timedelta
from typing import Iterable, Optional
from zoneinfo import ZoneInfo

from ..common.timezones import combine_local, iter_dates
from ..core.constants import MAX_DAILY_OCCURRENCES, MAX_MONTHLY_OCCURRENCES, MAX_WEEKLY_OCCURRENCES
from ..core.enums import RepeatMode
from ..core.exceptions import ValidationError
from .model import ShiftTemplate, VirtualOccurrence


def expand(template: ShiftTemplate, window_start: date, window_end: date, zone: ZoneInfo) -> list[VirtualOccurrence]:
    """Virtual occurrences of ``template`` for every matching date in ``[window_start, window_end]``.

    Pure: same inputs, same output, nothing persisted.
    """
    if window_end < window_start:
        raise ValidationError("Window end must be on or after window start")

    first = max(window_start, template.effective_from)
    last = window_end
    if template.effective_until is not None:
        last = min(last, template.effective_until)
    if last < first:
        return []

    # jump to the first matching weekday, then step by weeks
    cursor = first + timedelta(days=(template.weekday - first.weekday()) % 7)
    out: list[VirtualOccurrence] = []
    while cursor <= last:
        out.append(
            VirtualOccurrence(
                template=template,
                work_date=cursor,
                start_time=combine_local(zone, cursor, template.start_time),
                end_time=combine_local(zone, cursor, template.end_time),
            )
        )
        cursor += timedelta(days=7)
    return out


def expand_all(
    templates: Iterable[ShiftTemplate],
    window_start: date,
    window_end: date,
    zone: ZoneInfo,
) -> list[VirtualOccurrence]:
    out: list[VirtualOccurrence] = []
    for t in templates:
        out.extend(expand(t, window_start, window_end, zone))
    out.sort(key=lambda o: (o.start_time, o.template.employee_id, o.template.template_id))
    return out


def _add_months(day: date, months: int) -> date:
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def repeat_dates(
    first_day: date,
    *,
    mode: RepeatMode,
    until: Optional[date] = None,
    weekdays: Iterable[int] = (),
) -> list[date]:
    """Dates of a repeating one-off series, first day included.

    Without ``until`` (or with ``RepeatMode.NONE``) only ``first_day`` is
    returned. ``weekdays`` is only used by ``RepeatMode.CUSTOM``.
    """
    if mode == RepeatMode.NONE or until is None:
        return [first_day]
    if until < first_day:
        raise ValidationError("Repeat-until date must be on or after the first shift date")

    out: list[date] = []
    if mode == RepeatMode.DAILY:
        for d in iter_dates(first_day, until):
            out.append(d)
            if len(out) >= MAX_DAILY_OCCURRENCES:
                break
    elif mode == RepeatMode.WEEKLY:
        cursor = first_day
        while cursor <= until and len(out) < MAX_WEEKLY_OCCURRENCES:
            out.append(cursor)
            cursor += timedelta(days=7)
    elif mode == RepeatMode.MONTHLY:
        step = 0
        cursor = first_day
        while cursor <= until and len(out) < MAX_MONTHLY_OCCURRENCES:
            out.append(cursor)
            step += 1
            cursor = _add_months(first_day, step)
    elif mode == RepeatMode.CUSTOM:
        selected = {int(w) % 7 for w in weekdays}
        if not selected:
            raise ValidationError("Pick at least one weekday for a custom repeat")
        for d in iter_dates(first_day, until):
            if d.weekday() in selected:
                out.append(d)
                if len(out) >= MAX_DAILY_OCCURRENCES:
                    break

    return out or [first_day]
