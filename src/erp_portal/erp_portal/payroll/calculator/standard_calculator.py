from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Iterable

from ...core.enums import CalculationType, ComponentType
from ..model import PayrollAttendance, PayrollBreakdown, SalaryComponent, SalaryStructure
from ..statutory import (
    DEFAULT_CONFIG,
    PayrollConfig,
    calculate_esic,
    calculate_pf,
    mlwf,
    percent_of,
    professional_tax,
    round_half_up,
)
from .base import PayrollCalculator


class StandardPayrollCalculator(PayrollCalculator):
    """Monthly pay pro-rated by attendance.

    Gross is split into Basic+DA / HRA / Conveyance / Call allowance by fixed
    percentages; statutory deductions run on the pro-rated gross, PT on the
    full-month gross.
    """

    def __init__(self, config: PayrollConfig | None = None):
        self._config = config or DEFAULT_CONFIG

    @staticmethod
    def attendance_factor(attendance: PayrollAttendance) -> Decimal:
        standard = Decimal(int(attendance.standard_working_days or 0))
        if standard <= 0:
            return Decimal("1")
        return min(Decimal("1"), Decimal(str(attendance.payable_days)) / standard)

    def _component_amount(self, c: SalaryComponent, *, factor: Decimal, gross: Decimal, basic_da: Decimal) -> Decimal:
        if c.calculation_type == CalculationType.PERCENTAGE:
            base = basic_da if (c.percentage_of or "gross") == "basic" else gross
            amount = percent_of(base, c.percentage_value or 0)
        elif c.component_type == ComponentType.EARNING:
            amount = round_half_up(Decimal(str(c.fixed_amount or 0)) * factor)
        else:
            amount = round_half_up(c.fixed_amount or 0)

        if c.max_amount is not None:
            amount = min(amount, round_half_up(c.max_amount))
        return amount

    def _components(
        self,
        components: Iterable[SalaryComponent],
        kind: ComponentType,
        *,
        factor: Decimal,
        gross: Decimal,
        basic_da: Decimal,
    ) -> list[dict]:
        out = []
        for c in sorted(components, key=lambda x: x.display_order):
            if c.component_type != kind:
                continue
            out.append(
                {
                    "component_code": c.component_code,
                    "component_name": c.component_name,
                    "component_type": kind.value,
                    "amount": self._component_amount(c, factor=factor, gross=gross, basic_da=basic_da),
                }
            )
        return out

    def calculate(
        self,
        *,
        structure: SalaryStructure,
        month: date,
        da_amount: Decimal,
        attendance: PayrollAttendance,
    ) -> PayrollBreakdown:
        cfg = self._config
        factor = self.attendance_factor(attendance)

        full_gross = round_half_up(structure.gross_salary or 0)
        gross = round_half_up(full_gross * factor)
        lop_deduction = full_gross - gross

        # Earnings
        basic_da_total = percent_of(gross, cfg.basic_da_percent)
        da = round_half_up(Decimal(str(da_amount or 0)) * factor)
        basic = basic_da_total - da
        hra = percent_of(gross, cfg.hra_percent)
        conveyance = percent_of(gross, cfg.conveyance_percent)
        call_allowance = percent_of(gross, cfg.call_allowance_percent)

        extra_earnings = self._components(
            structure.components, ComponentType.EARNING, factor=factor, gross=gross, basic_da=basic_da_total
        )
        other_allowances = sum((e["amount"] for e in extra_earnings), Decimal("0"))
        total_earnings = basic + da + hra + conveyance + call_allowance + other_allowances

        # Employee deductions
        pf = calculate_pf(gross, applicable=structure.pf_applicable, ceiling=structure.pf_wage_ceiling, config=cfg)
        esic_employee, esic_employer = calculate_esic(gross, applicable=structure.esic_applicable, config=cfg)
        pt = professional_tax(full_gross, config=cfg) if structure.pt_applicable else Decimal("0")
        mlwf_employee, mlwf_employer = mlwf(month.month, applicable=structure.mlwf_applicable, config=cfg)

        extra_deductions = self._components(
            structure.components, ComponentType.DEDUCTION, factor=factor, gross=gross, basic_da=basic_da_total
        )
        other_deductions = sum((d["amount"] for d in extra_deductions), Decimal("0"))
        total_deductions = pf.employee + esic_employee + pt + mlwf_employee + other_deductions

        # Employer side; gratuity accrues on the full month Basic+DA
        gratuity = percent_of(percent_of(full_gross, cfg.basic_da_percent), cfg.gratuity_percent)
        total_employer = pf.employer_total + pf.pf_admin + pf.edli + esic_employer + mlwf_employer + gratuity

        return PayrollBreakdown(
            employee_id=structure.employee_id,
            month=month.replace(day=1),
            salary_structure_id=structure.id,
            full_gross=full_gross,
            gross=gross,
            lop_deduction=lop_deduction,
            da_used=Decimal(str(da_amount or 0)),
            basic=basic,
            da=da,
            hra=hra,
            conveyance=conveyance,
            call_allowance=call_allowance,
            other_allowances=other_allowances,
            total_earnings=total_earnings,
            pf_employee=pf.employee,
            esic_employee=esic_employee,
            pt=pt,
            mlwf=mlwf_employee,
            other_deductions=other_deductions,
            total_deductions=total_deductions,
            net_pay=total_earnings - total_deductions,
            pf_employer_epf=pf.employer_epf,
            pf_employer_eps=pf.employer_eps,
            pf_admin=pf.pf_admin,
            edli=pf.edli,
            esic_employer=esic_employer,
            mlwf_employer=mlwf_employer,
            gratuity=gratuity,
            total_employer_contributions=total_employer,
            employer_cost=total_earnings + total_employer,
            attendance=attendance,
            components=extra_earnings + extra_deductions,
        )
