from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import CalculationType, ComponentType

ZERO = Decimal("0")


@dataclass(frozen=True)
class SalaryComponent:
    component_name: str
    component_code: str
    component_type: ComponentType
    calculation_type: CalculationType = CalculationType.FIXED
    fixed_amount: Decimal = ZERO
    percentage_value: Optional[Decimal] = None
    percentage_of: Optional[str] = None
    max_amount: Optional[Decimal] = None
    is_taxable: bool = True
    is_statutory: bool = False
    display_order: int = 0
    id: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "component_name": self.component_name,
            "component_code": self.component_code,
            "component_type": self.component_type.value,
            "calculation_type": self.calculation_type.value,
            "fixed_amount": self.fixed_amount,
            "percentage_value": self.percentage_value,
            "percentage_of": self.percentage_of,
            "max_amount": self.max_amount,
            "is_taxable": self.is_taxable,
            "is_statutory": self.is_statutory,
            "display_order": self.display_order,
        }


@dataclass(frozen=True)
class SalaryStructure:
    """One version of an employee's pay setup."""

    id: int
    employee_id: int
    version: int
    effective_from: date
    effective_to: Optional[date]
    is_active: bool
    gross_salary: Decimal
    ctc: Decimal = ZERO
    pf_applicable: bool = True
    esic_applicable: bool = False
    pt_applicable: bool = True
    mlwf_applicable: bool = True
    pf_wage_ceiling: str = "15000"
    standard_working_days: int = 26
    standard_hours_per_day: Decimal = Decimal("8")
    ot_multiplier: Decimal = Decimal("1.5")
    remarks: Optional[str] = None
    components: tuple[SalaryComponent, ...] = ()
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "employee_id": self.employee_id,
            "version": self.version,
            "effective_from": self.effective_from,
            "effective_to": self.effective_to,
            "is_active": self.is_active,
            "gross_salary": self.gross_salary,
            "ctc": self.ctc,
            "pf_applicable": self.pf_applicable,
            "esic_applicable": self.esic_applicable,
            "pt_applicable": self.pt_applicable,
            "mlwf_applicable": self.mlwf_applicable,
            "pf_wage_ceiling": self.pf_wage_ceiling,
            "standard_working_days": self.standard_working_days,
            "standard_hours_per_day": self.standard_hours_per_day,
            "ot_multiplier": self.ot_multiplier,
            "remarks": self.remarks,
            "created_at": self.created_at,
            "components": [c.to_dict() for c in self.components],
        }


@dataclass(frozen=True)
class DAEntry:
    id: int
    da_amount: Decimal
    effective_from: date
    effective_to: Optional[date]
    is_active: bool
    remarks: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "da_amount": self.da_amount,
            "effective_from": self.effective_from,
            "effective_to": self.effective_to,
            "is_active": self.is_active,
            "remarks": self.remarks,
        }


@dataclass(frozen=True)
class PayrollAttendance:
    standard_working_days: int
    days_present: Decimal
    days_absent: int = 0
    half_days: int = 0
    payable_days: Decimal = ZERO
    lop_days: Decimal = ZERO
    overtime_minutes: int = 0
    has_attendance_data: bool = False

    def to_dict(self) -> dict:
        return {
            "standard_working_days": self.standard_working_days,
            "days_present": self.days_present,
            "days_absent": self.days_absent,
            "half_days": self.half_days,
            "payable_days": self.payable_days,
            "lop_days": self.lop_days,
            "overtime_minutes": self.overtime_minutes,
            "has_attendance_data": self.has_attendance_data,
        }


@dataclass
class PayrollBreakdown:
    employee_id: int
    month: date
    salary_structure_id: int
    full_gross: Decimal
    gross: Decimal
    lop_deduction: Decimal
    da_used: Decimal
    basic: Decimal
    da: Decimal
    hra: Decimal
    conveyance: Decimal
    call_allowance: Decimal
    other_allowances: Decimal
    total_earnings: Decimal
    pf_employee: Decimal
    esic_employee: Decimal
    pt: Decimal
    mlwf: Decimal
    other_deductions: Decimal
    total_deductions: Decimal
    net_pay: Decimal
    pf_employer_epf: Decimal
    pf_employer_eps: Decimal
    pf_admin: Decimal
    edli: Decimal
    esic_employer: Decimal
    mlwf_employer: Decimal
    gratuity: Decimal
    total_employer_contributions: Decimal
    employer_cost: Decimal
    attendance: PayrollAttendance
    components: list[dict] = field(default_factory=list)

    @property
    def pf_employer(self) -> Decimal:
        return self.pf_employer_epf + self.pf_employer_eps

    def to_dict(self) -> dict:
        return {
            "employee_id": self.employee_id,
            "month": self.month.strftime("%Y-%m"),
            "salary_structure_id": self.salary_structure_id,
            "full_month": {"gross": self.full_gross},
            "gross": self.gross,
            "lop_deduction": self.lop_deduction,
            "da_used": self.da_used,
            "earnings": {
                "basic": self.basic,
                "da": self.da,
                "hra": self.hra,
                "conveyance": self.conveyance,
                "call_allowance": self.call_allowance,
                "other_allowances": self.other_allowances,
            },
            "total_earnings": self.total_earnings,
            "deductions": {
                "pf_employee": self.pf_employee,
                "esic_employee": self.esic_employee,
                "pt": self.pt,
                "mlwf": self.mlwf,
                "other_deductions": self.other_deductions,
            },
            "total_deductions": self.total_deductions,
            "net_pay": self.net_pay,
            "employer_contributions": {
                "pf_employer": self.pf_employer,
                "epf": self.pf_employer_epf,
                "eps": self.pf_employer_eps,
                "pf_admin": self.pf_admin,
                "edli": self.edli,
                "esic_employer": self.esic_employer,
                "mlwf_employer": self.mlwf_employer,
                "gratuity": self.gratuity,
            },
            "total_employer_contributions": self.total_employer_contributions,
            "employer_cost": self.employer_cost,
            "attendance": self.attendance.to_dict(),
            "components": list(self.components),
        }
