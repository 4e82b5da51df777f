"""Turn an edit/delete of one effective shift into the writes for its series.

Planning is pure: the propagator only returns a ``ShiftBatch``; the schedule
service applies it with a single ``apply_batch`` call.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, time, timedelta
from typing import Optional, Sequence

from ..common.timezones import combine_local
from ..common.validators import require_time_range
from ..core.enums import EditScope, ShiftStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..settings import OrgSettings
from ..shifts.model import (
    EffectiveShift,
    NewShiftInstance,
    PersistedRef,
    ShiftBatch,
    ShiftInstance,
    ShiftTemplate,
    TemplateTermination,
)


@dataclass(frozen=True)
class ShiftEdit:
    """New wall-clock start/end (and optionally a new site) for the edited shifts."""

    start_time: time
    end_time: time
    location_id: Optional[int] = None

    def __post_init__(self):
        require_time_range(self.start_time, self.end_time)


class ScopePropagator:
    def __init__(self, settings: OrgSettings):
        self._settings = settings

    def _effective_scope(self, target: EffectiveShift, scope: EditScope) -> EditScope:
        # one-off shifts have no series to propagate to
        if not target.series_id:
            return EditScope.THIS
        return scope

    def _require_instance(self, target: EffectiveShift, instance: Optional[ShiftInstance]) -> ShiftInstance:
        if not isinstance(target.ref, PersistedRef):
            raise ValidationError("Shift is not persisted")
        if instance is None or instance.instance_id != target.ref.instance_id:
            raise NotFoundError(f"Shift {target.ref.instance_id} not found")
        return instance

    def _retime(self, instance: ShiftInstance, edit: ShiftEdit, now: datetime) -> ShiftInstance:
        zone = self._settings.zone
        return replace(
            instance,
            start_time=combine_local(zone, instance.work_date, edit.start_time),
            end_time=combine_local(zone, instance.work_date, edit.end_time),
            location_id=edit.location_id or instance.location_id,
            updated_at=now,
        )

    def _materialize(self, target: EffectiveShift, edit: Optional[ShiftEdit], status: ShiftStatus) -> NewShiftInstance:
        start, end = target.start_time, target.end_time
        location_id = target.location_id
        if edit is not None:
            zone = self._settings.zone
            start = combine_local(zone, target.work_date, edit.start_time)
            end = combine_local(zone, target.work_date, edit.end_time)
            location_id = edit.location_id or target.location_id
        return NewShiftInstance(
            employee_id=target.employee_id,
            location_id=location_id,
            work_date=target.work_date,
            start_time=start,
            end_time=end,
            series_id=target.series_id,
            status=status,
        )

    def _in_scope(
        self,
        target: EffectiveShift,
        scope: EditScope,
        series_instances: Sequence[ShiftInstance],
        instance: Optional[ShiftInstance],
    ) -> list[ShiftInstance]:
        lower = target.work_date if scope == EditScope.FUTURE else None
        picked: dict[int, ShiftInstance] = {}
        candidates = list(series_instances)
        if instance is not None:
            candidates.append(instance)
        for inst in candidates:
            if inst.series_id != target.series_id:
                continue
            if lower is not None and inst.work_date < lower:
                continue
            picked[inst.instance_id] = inst
        return [picked[k] for k in sorted(picked)]

    def plan_edit(
        self,
        *,
        target: EffectiveShift,
        scope: EditScope,
        edit: ShiftEdit,
        now: datetime,
        instance: Optional[ShiftInstance] = None,
        series_instances: Sequence[ShiftInstance] = (),
    ) -> ShiftBatch:
        """Writes for editing ``target``.

        ``this`` on a virtual occurrence materializes it into an override.
        ``future``/``all`` give every persisted instance of the series the new
        wall-clock times on its own date; virtual dates without an override keep
        the template's times.
        """
        scope = self._effective_scope(target, scope)

        if scope == EditScope.THIS:
            if target.is_virtual:
                return ShiftBatch(creates=(self._materialize(target, edit, ShiftStatus.SCHEDULED),))
            inst = self._require_instance(target, instance)
            return ShiftBatch(updates=(self._retime(inst, edit, now),))

        if not target.is_virtual:
            instance = self._require_instance(target, instance)

        updates = tuple(
            self._retime(inst, edit, now)
            for inst in self._in_scope(target, scope, series_instances, instance)
            if not inst.cancelled
        )
        creates: tuple[NewShiftInstance, ...] = ()
        if target.is_virtual:
            creates = (self._materialize(target, edit, ShiftStatus.SCHEDULED),)
        return ShiftBatch(creates=creates, updates=updates)

    def plan_delete(
        self,
        *,
        target: EffectiveShift,
        scope: EditScope,
        now: datetime,
        template: Optional[ShiftTemplate] = None,
        instance: Optional[ShiftInstance] = None,
        series_instances: Sequence[ShiftInstance] = (),
    ) -> ShiftBatch:
        """Writes for deleting ``target``.

        A single occurrence still produced by a live template is replaced by a
        cancelled tombstone, otherwise the template would bring it back.
        ``future``/``all`` remove the persisted instances and end the template's
        validity in the same batch.
        """
        scope = self._effective_scope(target, scope)

        if scope == EditScope.THIS:
            if target.is_virtual:
                return ShiftBatch(creates=(self._materialize(target, None, ShiftStatus.CANCELLED),))
            inst = self._require_instance(target, instance)
            if inst.series_id and template is not None and template.is_active_on(inst.work_date):
                tombstone = replace(inst, status=ShiftStatus.CANCELLED, updated_at=now)
                return ShiftBatch(updates=(tombstone,))
            return ShiftBatch(deletes=(inst.instance_id,))

        if not target.is_virtual:
            instance = self._require_instance(target, instance)

        deletes = tuple(i.instance_id for i in self._in_scope(target, scope, series_instances, instance))

        terminations: tuple[TemplateTermination, ...] = ()
        if template is not None:
            if scope == EditScope.FUTURE:
                until = target.work_date - timedelta(days=1)
            else:
                until = template.effective_from - timedelta(days=1)
            if template.effective_until is None or template.effective_until > until:
                terminations = (TemplateTermination(series_id=template.series_id, effective_until=until),)

        return ShiftBatch(deletes=deletes, terminations=terminations)
