from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Mapping, Optional

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import month_end
from ..common.validators import to_bool
from ..core.enums import AttendanceStatus
from ..core.exceptions import ConflictError, DomainError, NotFoundError, ValidationError
from ..resources.model import FieldSpec
from ..resources.service import coerce_value
from .calculator.base import PayrollCalculator
from .calculator.standard_calculator import StandardPayrollCalculator
from .model import PayrollAttendance, PayrollBreakdown
from .repository import DAScheduleRepository, PayrollSlipRepository, SalaryStructureRepository
from .statutory import DEFAULT_CONFIG, PayrollConfig

logger = logging.getLogger(__name__)

FULL_DAY_STATUSES = frozenset(
    {
        AttendanceStatus.PRESENT,
        AttendanceStatus.LATE,
        AttendanceStatus.EARLY_OUT,
        AttendanceStatus.LATE_AND_EARLY_OUT,
    }
)

_DA_SPECS = (
    FieldSpec("da_amount", "decimal", min_value=Decimal("0")),
    FieldSpec("effective_from", "date"),
    FieldSpec("effective_to", "date"),
    FieldSpec("is_active", "bool"),
    FieldSpec("remarks"),
)


class PayrollService:
    def __init__(
        self,
        structures: SalaryStructureRepository,
        da_schedule: DAScheduleRepository,
        slips: PayrollSlipRepository,
        attendance: AttendanceRepository,
        *,
        calculator: Optional[PayrollCalculator] = None,
        config: Optional[PayrollConfig] = None,
    ):
        self._structures = structures
        self._da = da_schedule
        self._slips = slips
        self._attendance = attendance
        self._config = config or DEFAULT_CONFIG
        self._calculator = calculator or StandardPayrollCalculator(self._config)

    # DA schedule

    def list_da(self) -> list[dict]:
        return [e.to_dict() for e in self._da.list()]

    def current_da(self, on_date: date) -> dict:
        entry = self._da.get_for_date(on_date)
        if entry:
            return entry.to_dict()
        return {
            "id": None,
            "da_amount": self._config.da_fixed_amount,
            "effective_from": on_date,
            "effective_to": None,
            "is_active": False,
            "remarks": None,
        }

    def da_amount_for(self, on_date: date) -> Decimal:
        entry = self._da.get_for_date(on_date)
        return entry.da_amount if entry else self._config.da_fixed_amount

    def _coerce_da(self, data: Mapping[str, Any]) -> dict:
        return {spec.name: coerce_value(spec, data[spec.name]) for spec in _DA_SPECS if spec.name in data}

    def create_da(self, data: Mapping[str, Any]) -> int:
        values = self._coerce_da(data)
        if values.get("da_amount") is None or not values.get("effective_from"):
            raise ValidationError("da_amount and effective_from are required")
        values["is_active"] = to_bool(data.get("is_active", True))
        if values.get("effective_to") and values["effective_to"] < values["effective_from"]:
            raise ValidationError("effective_to must be on or after effective_from")
        entry_id = self._da.create(values=values)
        logger.info("DA schedule entry #%d: %s from %s", entry_id, values["da_amount"], values["effective_from"])
        return entry_id

    def update_da(self, entry_id: int, data: Mapping[str, Any]) -> dict:
        if not self._da.get(entry_id):
            raise NotFoundError("DA schedule entry not found")
        self._da.update(entry_id, values=self._coerce_da(data))
        entry = self._da.get(entry_id)
        return entry.to_dict() if entry else {}

    # Payroll

    def attendance_for(self, employee_id: int, month: date, standard_days: int) -> PayrollAttendance:
        rows = self._attendance.list_computed(
            start_date=month.replace(day=1),
            end_date=month_end(month),
            employee_id=employee_id,
        )
        if not rows:
            # Nothing recorded: pay the full month
            full = Decimal(standard_days)
            return PayrollAttendance(standard_working_days=standard_days, days_present=full, payable_days=full)

        present = Decimal("0")
        absent = half_days = overtime = 0
        for r in rows:
            overtime += int(r.overtime_minutes or 0)
            if r.status in FULL_DAY_STATUSES:
                present += 1
            elif r.status == AttendanceStatus.HALF_DAY:
                present += Decimal("0.5")
                half_days += 1
            elif r.status == AttendanceStatus.ABSENT:
                absent += 1

        return PayrollAttendance(
            standard_working_days=standard_days,
            days_present=present,
            days_absent=absent,
            half_days=half_days,
            payable_days=present,
            lop_days=max(Decimal("0"), Decimal(standard_days) - present),
            overtime_minutes=overtime,
            has_attendance_data=True,
        )

    def calculate(self, employee_id: int, month: date) -> PayrollBreakdown:
        month = month.replace(day=1)
        structure = self._structures.get_active_on(employee_id, month)
        if not structure:
            raise NotFoundError(f"No active salary structure for employee {employee_id} in {month.strftime('%Y-%m')}")

        attendance = self.attendance_for(employee_id, month, structure.standard_working_days)
        return self._calculator.calculate(
            structure=structure,
            month=month,
            da_amount=self.da_amount_for(month),
            attendance=attendance,
        )

    def generate(self, month: date, employee_id: Optional[int] = None) -> dict:
        """Save slips for one employee (duplicate -> ConflictError) or everyone."""

        month = month.replace(day=1)
        if employee_id is not None:
            breakdown = self.calculate(employee_id, month)
            slip_id = self._slips.insert_slip(breakdown)
            logger.info("Payroll slip #%d generated for employee %d (%s)", slip_id, employee_id, month)
            return {"slip_id": slip_id, "data": breakdown.to_dict()}

        result = {"total": 0, "success": 0, "skipped": 0, "failed": 0, "errors": []}
        for emp_id in self._slips.employees_with_structure_on(month):
            result["total"] += 1
            try:
                self._slips.insert_slip(self.calculate(emp_id, month))
                result["success"] += 1
            except ConflictError:
                result["skipped"] += 1
            except DomainError as e:
                result["failed"] += 1
                result["errors"].append({"employee_id": emp_id, "error": str(e)})

        logger.info(
            "Payroll run %s: %d employees, %d generated, %d skipped, %d failed",
            month.strftime("%Y-%m"),
            result["total"],
            result["success"],
            result["skipped"],
            result["failed"],
        )
        return result

    def list_slips(self, *, month: Optional[date] = None, employee_id: Optional[int] = None) -> list[dict]:
        return list(self._slips.list_slips(month=month, employee_id=employee_id))
