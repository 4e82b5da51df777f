from __future__ import annotations

from dataclasses import dataclass

from ..model import PayrollSettings
from .base import PayrollCalculator
from .rounding_calculator import RoundingPayrollCalculator
from .standard_calculator import StandardPayrollCalculator


@dataclass
class PayrollCalculatorFactory:
    """Factory Pattern: exact minutes when rounding is off, else the rounding rule."""

    def for_settings(self, settings: PayrollSettings) -> PayrollCalculator:
        if settings.rounding_interval == 0:
            return StandardPayrollCalculator()
        return RoundingPayrollCalculator(settings)
