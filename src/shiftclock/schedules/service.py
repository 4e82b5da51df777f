from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Iterable, Optional, Sequence

from ..common.datetime_utils import now_utc
from ..common.timezones import combine_local
from ..common.validators import require_positive_id, require_time_range
from ..core.constants import DEFAULT_SCHEDULE_DAYS
from ..core.enums import EditScope, RepeatMode
from ..core.exceptions import NotFoundError, ValidationError
from ..employees.repository import EmployeeRepository
from ..locations.repository import LocationRepository
from ..settings import OrgSettings
from ..shifts.model import (
    EffectiveShift,
    NewShiftInstance,
    PersistedRef,
    ShiftBatch,
    ShiftTemplate,
    TemplateTermination,
    parse_shift_ref,
)
from ..shifts.recurrence import repeat_dates
from ..shifts.repository import ShiftInstanceRepository, ShiftTemplateRepository
from ..shifts.resolver import UNKNOWN_NAME, find_duplicate_instances, resolve
from .scope import ScopePropagator, ShiftEdit

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BatchResult:
    created_ids: list[int]
    updated: int
    deleted: int
    terminated: int


def new_series_id() -> str:
    return f"rg-{uuid.uuid4().hex}"


class ScheduleService:
    def __init__(
        self,
        templates: ShiftTemplateRepository,
        instances: ShiftInstanceRepository,
        employees: EmployeeRepository,
        locations: LocationRepository,
        settings: OrgSettings,
        *,
        propagator: Optional[ScopePropagator] = None,
    ):
        self._templates = templates
        self._instances = instances
        self._employees = employees
        self._locations = locations
        self._settings = settings
        self._propagator = propagator or ScopePropagator(settings)

    def _names(self) -> tuple[dict[int, str], dict[int, str]]:
        employees = {e.employee_id: e.full_name for e in self._employees.list_all(active_only=False)}
        locations = {loc.location_id: loc.name for loc in self._locations.list_all()}
        return employees, locations

    def _apply(self, batch: ShiftBatch, *, action: str) -> BatchResult:
        if batch.is_empty:
            return BatchResult(created_ids=[], updated=0, deleted=0, terminated=0)
        created_ids = self._instances.apply_batch(batch)
        logger.info(
            "%s: applied batch of %d writes (created=%d updated=%d deleted=%d terminated=%d)",
            action,
            batch.size,
            len(batch.creates),
            len(batch.updates),
            len(batch.deletes),
            len(batch.terminations),
        )
        return BatchResult(
            created_ids=list(created_ids),
            updated=len(batch.updates),
            deleted=len(batch.deletes),
            terminated=len(batch.terminations),
        )

    def _require_employee(self, employee_id) -> int:
        employee_id = require_positive_id(employee_id, "Employee")
        if not self._employees.get_by_id(employee_id):
            raise NotFoundError("Employee not found")
        return employee_id

    def _require_location(self, location_id) -> int:
        location_id = require_positive_id(location_id, "Location")
        if not self._locations.get_by_id(location_id):
            raise NotFoundError("Location not found")
        return location_id

    # --- reads ---

    def effective_shifts(self, *, start: date, end: date, employee_id: Optional[int] = None) -> list[EffectiveShift]:
        if end < start:
            raise ValidationError("End date must be on or after start date")

        templates = self._templates.list_for_range(start=start, end=end, employee_id=employee_id)
        instances = self._instances.list_in_range(start=start, end=end, employee_id=employee_id)
        employee_names, location_names = self._names()
        return resolve(
            templates,
            instances,
            start,
            end,
            self._settings,
            employee_names=employee_names,
            location_names=location_names,
        )

    def effective_shifts_on(self, *, day: date, employee_id: Optional[int] = None) -> list[EffectiveShift]:
        return self.effective_shifts(start=day, end=day, employee_id=employee_id)

    def find_shift(self, shift_key: str) -> EffectiveShift:
        ref = parse_shift_ref(shift_key)
        if isinstance(ref, PersistedRef):
            inst = self._instances.get_by_id(ref.instance_id)
            if inst is None or inst.cancelled:
                raise NotFoundError("Shift not found")
            day, employee_id = inst.work_date, inst.employee_id
        else:
            template = self._templates.get_by_series(series_id=ref.series_id)
            if template is None or not template.is_active_on(ref.work_date):
                raise NotFoundError("Shift not found")
            day, employee_id = ref.work_date, template.employee_id

        for shift in self.effective_shifts_on(day=day, employee_id=employee_id):
            if shift.shift_id == shift_key:
                return shift
            # an occurrence that was materialized in the meantime
            if not isinstance(ref, PersistedRef) and shift.series_id == ref.series_id:
                return shift
        if isinstance(ref, PersistedRef):
            # a duplicate hidden by the resolver is still addressable for edits/deletes
            employee_names, location_names = self._names()
            return EffectiveShift(
                ref=ref,
                employee_id=inst.employee_id,
                employee_name=employee_names.get(inst.employee_id, UNKNOWN_NAME),
                location_id=inst.location_id,
                location_name=location_names.get(inst.location_id, UNKNOWN_NAME),
                work_date=inst.work_date,
                start_time=inst.start_time,
                end_time=inst.end_time,
                series_id=inst.series_id,
            )
        raise NotFoundError("Shift not found")

    # --- templates ---

    def create_template(
        self,
        *,
        employee_id: int,
        location_id: int,
        weekday: int,
        start_time: time,
        end_time: time,
        effective_from: date,
        effective_until: Optional[date] = None,
    ) -> ShiftTemplate:
        employee_id = self._require_employee(employee_id)
        location_id = self._require_location(location_id)
        if int(weekday) not in range(7):
            raise ValidationError("Weekday must be between 0 (Monday) and 6 (Sunday)")
        require_time_range(start_time, end_time)
        if effective_until is not None and effective_until < effective_from:
            raise ValidationError("Effective-until must be on or after effective-from")

        series_id = new_series_id()
        template_id = self._templates.create(
            series_id=series_id,
            employee_id=employee_id,
            location_id=location_id,
            weekday=int(weekday),
            start_time=start_time,
            end_time=end_time,
            effective_from=effective_from,
            effective_until=effective_until,
        )
        logger.info("Created shift template %s (series=%s employee=%s)", template_id, series_id, employee_id)
        return ShiftTemplate(
            template_id=template_id,
            series_id=series_id,
            employee_id=employee_id,
            location_id=location_id,
            weekday=int(weekday),
            start_time=start_time,
            end_time=end_time,
            effective_from=effective_from,
            effective_until=effective_until,
        )

    def terminate_template(self, *, series_id: str, last_day: date) -> BatchResult:
        template = self._templates.get_by_series(series_id=series_id)
        if template is None:
            raise NotFoundError("Shift template not found")
        if template.effective_until is not None and template.effective_until <= last_day:
            raise ValidationError("Template already ends on or before that date")
        # instances past the new end go with the series
        orphans = self._instances.list_by_series(series_id=series_id, from_date=last_day + timedelta(days=1))
        batch = ShiftBatch(
            deletes=tuple(i.instance_id for i in orphans),
            terminations=(TemplateTermination(series_id=series_id, effective_until=last_day),),
        )
        return self._apply(batch, action="terminate_template")

    # --- one-off shifts ---

    def schedule_shift(
        self,
        *,
        employee_id: int,
        location_id: int,
        work_date: date,
        start_time: time,
        end_time: time,
        repeat: RepeatMode = RepeatMode.NONE,
        repeat_until: Optional[date] = None,
        weekdays: Iterable[int] = (),
    ) -> BatchResult:
        """Persist one shift, or a repeating series of shifts sharing one series id."""
        employee_id = self._require_employee(employee_id)
        location_id = self._require_location(location_id)
        require_time_range(start_time, end_time)

        dates = repeat_dates(work_date, mode=repeat, until=repeat_until, weekdays=weekdays)
        series_id = new_series_id() if len(dates) > 1 else None
        zone = self._settings.zone
        creates = tuple(
            NewShiftInstance(
                employee_id=employee_id,
                location_id=location_id,
                work_date=d,
                start_time=combine_local(zone, d, start_time),
                end_time=combine_local(zone, d, end_time),
                series_id=series_id,
            )
            for d in dates
        )
        return self._apply(ShiftBatch(creates=creates), action="schedule_shift")

    # --- scoped edit / delete ---

    def _load_context(self, target: EffectiveShift, scope: EditScope):
        instance = None
        if isinstance(target.ref, PersistedRef):
            instance = self._instances.get_by_id(target.ref.instance_id)
        template = None
        series_instances: Sequence = ()
        if target.series_id:
            template = self._templates.get_by_series(series_id=target.series_id)
            from_date = target.work_date if scope == EditScope.FUTURE else None
            series_instances = self._instances.list_by_series(series_id=target.series_id, from_date=from_date)
        return instance, template, series_instances

    def edit_shift(
        self,
        *,
        shift_key: str,
        scope: EditScope,
        edit: ShiftEdit,
        now: Optional[datetime] = None,
    ) -> BatchResult:
        now = now or now_utc()
        target = self.find_shift(shift_key)
        if edit.location_id is not None:
            self._require_location(edit.location_id)
        instance, _, series_instances = self._load_context(target, scope)
        batch = self._propagator.plan_edit(
            target=target,
            scope=scope,
            edit=edit,
            now=now,
            instance=instance,
            series_instances=series_instances,
        )
        return self._apply(batch, action=f"edit_shift[{scope.value}]")

    def delete_shift(self, *, shift_key: str, scope: EditScope, now: Optional[datetime] = None) -> BatchResult:
        now = now or now_utc()
        target = self.find_shift(shift_key)
        instance, template, series_instances = self._load_context(target, scope)
        batch = self._propagator.plan_delete(
            target=target,
            scope=scope,
            now=now,
            template=template,
            instance=instance,
            series_instances=series_instances,
        )
        return self._apply(batch, action=f"delete_shift[{scope.value}]")

    def clean_duplicates(self, *, start: date, end: date) -> BatchResult:
        """Delete persisted instances that lose the (series, date) tie-break."""
        if end < start:
            raise ValidationError("End date must be on or after start date")
        instances = self._instances.list_in_range(start=start, end=end)
        losers = find_duplicate_instances(instances)
        if losers:
            logger.warning("Removing %d duplicate shift instances: %s", len(losers), losers)
        return self._apply(ShiftBatch(deletes=tuple(losers)), action="clean_duplicates")

    def default_window(self, today: date) -> tuple[date, date]:
        return today, today + timedelta(days=DEFAULT_SCHEDULE_DAYS - 1)
