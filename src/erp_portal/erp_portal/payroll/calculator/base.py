from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from decimal import Decimal

from ..model import PayrollAttendance, PayrollBreakdown, SalaryStructure


class PayrollCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll)."""

    @abstractmethod
    def calculate(
        self,
        *,
        structure: SalaryStructure,
        month: date,
        da_amount: Decimal,
        attendance: PayrollAttendance,
    ) -> PayrollBreakdown:
        raise NotImplementedError
