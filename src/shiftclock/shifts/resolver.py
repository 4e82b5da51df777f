"""Merge template occurrences with persisted instances into effective shifts.

Every source record (virtual occurrence, override, one-off) is normalized into
one ``EffectiveShift`` type before any reconciliation happens. The result holds
at most one shift per (employee, date); data anomalies are resolved
deterministically and logged instead of raised, so a schedule always renders.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Iterable, Mapping, Optional, Sequence

from ..settings import OrgSettings
from .model import EffectiveShift, PersistedRef, ShiftInstance, ShiftTemplate, VirtualOccurrence, VirtualRef
from .recurrence import expand_all

logger = logging.getLogger(__name__)

UNKNOWN_NAME = "Unknown"

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _recency(instance: ShiftInstance) -> tuple:
    # newest updated_at first, then highest id
    return (instance.updated_at or _EPOCH, instance.instance_id)


def _sort_key(shift: EffectiveShift) -> tuple:
    return (shift.start_time, shift.employee_id, shift.location_id, shift.ref.key)


def pick_override(candidates: Sequence[ShiftInstance]) -> ShiftInstance:
    """The instance that wins among several for one (series, date): most recently modified."""
    return max(candidates, key=_recency)


def group_overrides(instances: Iterable[ShiftInstance]) -> dict[tuple[str, date], list[ShiftInstance]]:
    grouped: dict[tuple[str, date], list[ShiftInstance]] = {}
    for inst in instances:
        if inst.series_id:
            grouped.setdefault((inst.series_id, inst.work_date), []).append(inst)
    return grouped


def find_duplicate_instances(instances: Iterable[ShiftInstance]) -> list[int]:
    """Ids of persisted instances that lose the (series, date) tie-break."""
    losers: list[int] = []
    for candidates in group_overrides(instances).values():
        if len(candidates) < 2:
            continue
        winner = pick_override(candidates)
        losers.extend(c.instance_id for c in candidates if c.instance_id != winner.instance_id)
    return sorted(losers)


class _Names:
    def __init__(self, employees: Optional[Mapping[int, str]], locations: Optional[Mapping[int, str]]):
        self._employees = employees or {}
        self._locations = locations or {}

    def employee(self, employee_id: int) -> str:
        return self._employees.get(employee_id) or UNKNOWN_NAME

    def location(self, location_id: int) -> str:
        return self._locations.get(location_id) or UNKNOWN_NAME


def _from_virtual(occ: VirtualOccurrence, names: _Names) -> EffectiveShift:
    t = occ.template
    return EffectiveShift(
        ref=VirtualRef(template_id=t.template_id, series_id=t.series_id, work_date=occ.work_date),
        employee_id=t.employee_id,
        employee_name=names.employee(t.employee_id),
        location_id=t.location_id,
        location_name=names.location(t.location_id),
        work_date=occ.work_date,
        start_time=occ.start_time,
        end_time=occ.end_time,
        series_id=t.series_id,
    )


def _from_instance(inst: ShiftInstance, names: _Names) -> EffectiveShift:
    return EffectiveShift(
        ref=PersistedRef(instance_id=inst.instance_id),
        employee_id=inst.employee_id,
        employee_name=names.employee(inst.employee_id),
        location_id=inst.location_id,
        location_name=names.location(inst.location_id),
        work_date=inst.work_date,
        start_time=inst.start_time,
        end_time=inst.end_time,
        series_id=inst.series_id,
    )


def resolve(
    templates: Iterable[ShiftTemplate],
    instances: Iterable[ShiftInstance],
    window_start: date,
    window_end: date,
    settings: OrgSettings,
    *,
    employee_names: Optional[Mapping[int, str]] = None,
    location_names: Optional[Mapping[int, str]] = None,
) -> list[EffectiveShift]:
    """Effective shifts for ``[window_start, window_end]`` sorted by start time."""

    names = _Names(employee_names, location_names)
    occurrences = expand_all(templates, window_start, window_end, settings.zone)

    in_window = [i for i in instances if window_start <= i.work_date <= window_end]
    overrides = group_overrides(in_window)
    one_offs = [i for i in in_window if not i.series_id and not i.cancelled]

    resolved: list[EffectiveShift] = []

    for occ in occurrences:
        key = (occ.template.series_id, occ.work_date)
        if key in overrides:
            continue
        resolved.append(_from_virtual(occ, names))

    # overrides win over their occurrence; series without a live template
    # (e.g. repeated one-off series) are emitted the same way
    for key, candidates in overrides.items():
        winner = pick_override(candidates)
        if len(candidates) > 1:
            logger.warning(
                "Duplicate overrides for series=%s date=%s: %s; using instance %s",
                key[0],
                key[1].isoformat(),
                sorted(c.instance_id for c in candidates),
                winner.instance_id,
            )
        if winner.cancelled:
            continue
        resolved.append(_from_instance(winner, names))

    resolved.extend(_from_instance(i, names) for i in one_offs)

    return sorted(_one_per_employee_day(resolved), key=_sort_key)


def _priority(shift: EffectiveShift) -> tuple:
    # one-offs beat overrides beat virtual occurrences
    if shift.is_virtual:
        rank = 2
    elif shift.series_id:
        rank = 1
    else:
        rank = 0
    return (rank, shift.start_time, shift.ref.key)


def _one_per_employee_day(shifts: list[EffectiveShift]) -> list[EffectiveShift]:
    by_day: dict[tuple[int, date], list[EffectiveShift]] = {}
    for s in shifts:
        by_day.setdefault((s.employee_id, s.work_date), []).append(s)

    out: list[EffectiveShift] = []
    for (employee_id, work_date), group in by_day.items():
        group.sort(key=_priority)
        keep = group[0]
        out.append(keep)
        dropped = group[1:]
        if not dropped:
            continue
        # a one-off shadowing virtual occurrences is expected; anything else is an anomaly
        shadowed = not keep.is_virtual and not keep.series_id and all(s.is_virtual for s in dropped)
        if not shadowed:
            logger.warning(
                "Multiple shifts for employee=%s date=%s; keeping %s, dropping %s",
                employee_id,
                work_date.isoformat(),
                keep.ref.key,
                [s.ref.key for s in dropped],
            )
    return out
