from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional, Union

from ..core.enums import ShiftStatus
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class ShiftTemplate:
    """Domain entity: a weekly recurring shift rule.

    ``weekday`` uses ``date.weekday()`` numbering (0 = Monday). A template is
    never deleted; it is terminated by moving ``effective_until``. A template
    whose ``effective_until`` is before ``effective_from`` is retired.
    """

    template_id: int
    series_id: str
    employee_id: int
    location_id: int
    weekday: int
    start_time: time
    end_time: time
    effective_from: date
    effective_until: Optional[date] = None

    def is_active_on(self, day: date) -> bool:
        if day < self.effective_from:
            return False
        if self.effective_until is not None and day > self.effective_until:
            return False
        return day.weekday() == self.weekday

    def overlaps(self, start: date, end: date) -> bool:
        if self.effective_until is not None and self.effective_until < max(start, self.effective_from):
            return False
        return self.effective_from <= end


@dataclass(frozen=True)
class ShiftInstance:
    """Domain entity: a persisted shift for one calendar date.

    With ``series_id`` it overrides that date's virtual occurrence; without it
    it is a one-off. A ``cancelled`` instance is a tombstone: it suppresses the
    occurrence and is never shown.
    """

    instance_id: int
    employee_id: int
    location_id: int
    work_date: date
    start_time: datetime
    end_time: datetime
    series_id: Optional[str] = None
    status: ShiftStatus = ShiftStatus.SCHEDULED
    updated_at: Optional[datetime] = None

    @property
    def cancelled(self) -> bool:
        return self.status == ShiftStatus.CANCELLED


@dataclass(frozen=True)
class NewShiftInstance:
    """Instance to be created inside a batch (no id yet)."""

    employee_id: int
    location_id: int
    work_date: date
    start_time: datetime
    end_time: datetime
    series_id: Optional[str] = None
    status: ShiftStatus = ShiftStatus.SCHEDULED


@dataclass(frozen=True)
class VirtualOccurrence:
    """A template-derived occurrence; never persisted."""

    template: ShiftTemplate
    work_date: date
    start_time: datetime
    end_time: datetime


@dataclass(frozen=True)
class VirtualRef:
    template_id: int
    series_id: str
    work_date: date

    @property
    def key(self) -> str:
        return f"virtual:{self.series_id}:{self.work_date.isoformat()}"


@dataclass(frozen=True)
class PersistedRef:
    instance_id: int

    @property
    def key(self) -> str:
        return f"persisted:{self.instance_id}"


ShiftRef = Union[VirtualRef, PersistedRef]


@dataclass(frozen=True)
class EffectiveShift:
    """Read-model: the single authoritative shift of one employee on one date."""

    ref: ShiftRef
    employee_id: int
    employee_name: str
    location_id: int
    location_name: str
    work_date: date
    start_time: datetime
    end_time: datetime
    series_id: Optional[str] = None

    @property
    def is_virtual(self) -> bool:
        return isinstance(self.ref, VirtualRef)

    @property
    def shift_id(self) -> str:
        return self.ref.key


@dataclass(frozen=True)
class TemplateTermination:
    series_id: str
    effective_until: date


@dataclass(frozen=True)
class ShiftBatch:
    """All writes of one schedule mutation; applied as a single unit or not at all."""

    creates: tuple[NewShiftInstance, ...] = ()
    updates: tuple[ShiftInstance, ...] = ()
    deletes: tuple[int, ...] = ()
    terminations: tuple[TemplateTermination, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not (self.creates or self.updates or self.deletes or self.terminations)

    @property
    def size(self) -> int:
        return len(self.creates) + len(self.updates) + len(self.deletes) + len(self.terminations)


def parse_shift_ref(key: str) -> ShiftRef:
    """Inverse of ``ShiftRef.key`` (``persisted:<id>`` / ``virtual:<series>:<YYYY-MM-DD>``)."""
    kind, _, rest = (key or "").partition(":")
    try:
        if kind == "persisted":
            return PersistedRef(instance_id=int(rest))
        if kind == "virtual":
            series_id, _, day = rest.rpartition(":")
            if series_id:
                return VirtualRef(template_id=0, series_id=series_id, work_date=date.fromisoformat(day))
    except ValueError:
        pass
    raise ValidationError(f"Invalid shift id: {key!r}")
