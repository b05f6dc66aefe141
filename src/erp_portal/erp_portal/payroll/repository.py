from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import DAEntry, PayrollBreakdown, SalaryComponent, SalaryStructure


class SalaryStructureRepository(Protocol):
    def list_for_employee(self, employee_id: int) -> Sequence[SalaryStructure]:
        """All versions, newest first, with active components."""

        raise NotImplementedError

    def get(self, structure_id: int) -> Optional[SalaryStructure]:
        raise NotImplementedError

    def get_active_on(self, employee_id: int, on_date: date) -> Optional[SalaryStructure]:
        raise NotImplementedError

    def create_version(
        self,
        *,
        employee_id: int,
        values: dict,
        components: Sequence[SalaryComponent],
    ) -> tuple[int, int]:
        """Deactivate previous versions and insert the next one atomically.

        Returns (structure_id, version).
        """

        raise NotImplementedError

    def update(self, structure_id: int, *, values: dict, components: Optional[Sequence[SalaryComponent]]) -> bool:
        raise NotImplementedError


class DAScheduleRepository(Protocol):
    def list(self) -> Sequence[DAEntry]:
        raise NotImplementedError

    def get(self, entry_id: int) -> Optional[DAEntry]:
        raise NotImplementedError

    def create(self, *, values: dict) -> int:
        raise NotImplementedError

    def update(self, entry_id: int, *, values: dict) -> bool:
        raise NotImplementedError

    def get_for_date(self, on_date: date) -> Optional[DAEntry]:
        raise NotImplementedError


class PayrollSlipRepository(Protocol):
    def employees_with_structure_on(self, on_date: date) -> Sequence[int]:
        raise NotImplementedError

    def insert_slip(self, breakdown: PayrollBreakdown) -> int:
        """Raises ConflictError when a slip exists for (employee, month)."""

        raise NotImplementedError

    def list_slips(self, *, month: Optional[date] = None, employee_id: Optional[int] = None) -> Sequence[dict]:
        raise NotImplementedError
