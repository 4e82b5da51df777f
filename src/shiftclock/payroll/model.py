from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..common.validators import require_rounding
from ..core.constants import (
    DEFAULT_OVERTIME_THRESHOLD_HOURS,
    DEFAULT_ROUNDING_BUFFER,
    DEFAULT_ROUNDING_INTERVAL,
)


@dataclass(frozen=True)
class PayrollSettings:
    """Rounding interval/buffer in minutes (interval 0 = exact time)."""

    rounding_interval: int = DEFAULT_ROUNDING_INTERVAL
    rounding_buffer: int = DEFAULT_ROUNDING_BUFFER
    overtime_threshold_hours: float = DEFAULT_OVERTIME_THRESHOLD_HOURS

    def __post_init__(self):
        require_rounding(int(self.rounding_interval), int(self.rounding_buffer))


@dataclass(frozen=True)
class PayrollLine:
    """One attendance session as it counts towards payroll."""

    session_id: int
    employee_id: int
    location_id: int
    work_date: date
    clock_in_time: datetime
    clock_out_time: Optional[datetime]
    raw_minutes: int
    rounded_minutes: int


@dataclass(frozen=True)
class EmployeePayroll:
    employee_id: int
    employee_name: str
    hourly_rate: float
    raw_minutes: int
    rounded_minutes: int
    regular_hours: float
    overtime_hours: float
    total_pay: float
    sessions_count: int


@dataclass(frozen=True)
class PayrollReport:
    period_start: date
    period_end: date
    settings: PayrollSettings
    finalized: bool
    employees: list[EmployeePayroll] = field(default_factory=list)
    lines: list[PayrollLine] = field(default_factory=list)

    @property
    def total_pay(self) -> float:
        return round(sum(e.total_pay for e in self.employees), 2)

    @property
    def total_rounded_minutes(self) -> int:
        return sum(e.rounded_minutes for e in self.employees)
