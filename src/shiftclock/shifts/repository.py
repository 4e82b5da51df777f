from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import ShiftBatch, ShiftInstance, ShiftTemplate


class ShiftTemplateRepository(Protocol):
    def list_for_range(self, *, start: date, end: date, employee_id: Optional[int] = None) -> Sequence[ShiftTemplate]:
        """Templates whose validity window overlaps ``[start, end]``."""

        raise NotImplementedError

    def get_by_series(self, *, series_id: str) -> Optional[ShiftTemplate]:
        raise NotImplementedError

    def create(
        self,
        *,
        series_id: str,
        employee_id: int,
        location_id: int,
        weekday: int,
        start_time,
        end_time,
        effective_from: date,
        effective_until: Optional[date] = None,
    ) -> int:
        raise NotImplementedError


class ShiftInstanceRepository(Protocol):
    def list_in_range(self, *, start: date, end: date, employee_id: Optional[int] = None) -> Sequence[ShiftInstance]:
        """Persisted instances (including tombstones) with ``work_date`` in ``[start, end]``."""

        raise NotImplementedError

    def list_by_series(self, *, series_id: str, from_date: Optional[date] = None) -> Sequence[ShiftInstance]:
        raise NotImplementedError

    def get_by_id(self, instance_id: int) -> Optional[ShiftInstance]:
        raise NotImplementedError

    def apply_batch(self, batch: ShiftBatch) -> list[int]:
        """Apply every write of ``batch`` atomically.

        Returns ids of created instances. Template terminations are part of the
        same transaction.
        """

        raise NotImplementedError
