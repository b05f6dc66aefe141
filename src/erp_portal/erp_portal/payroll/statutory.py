"""Indian statutory payroll rules (PF, ESIC, professional tax, MLWF)."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

HUNDRED = Decimal("100")


def round_half_up(value) -> Decimal:
    """Round to whole rupees, .5 going up."""
    return Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)


def percent_of(amount, pct) -> Decimal:
    return round_half_up(Decimal(str(amount)) * Decimal(str(pct)) / HUNDRED)


@dataclass(frozen=True)
class PayrollConfig:
    basic_da_percent: Decimal = Decimal("60")
    hra_percent: Decimal = Decimal("20")
    conveyance_percent: Decimal = Decimal("10")
    call_allowance_percent: Decimal = Decimal("10")

    employee_pf_percent: Decimal = Decimal("12")
    employer_epf_percent: Decimal = Decimal("3.67")
    employer_eps_percent: Decimal = Decimal("8.33")
    pf_admin_percent: Decimal = Decimal("0.5")
    edli_percent: Decimal = Decimal("0.5")
    pf_wage_ceiling: Decimal = Decimal("15000")

    employee_esic_percent: Decimal = Decimal("0.75")
    employer_esic_percent: Decimal = Decimal("3.25")
    esic_salary_ceiling: Decimal = Decimal("21000")

    gratuity_percent: Decimal = Decimal("4.81")

    # (gross above, monthly PT), checked top-down
    pt_slabs: tuple[tuple[Decimal, Decimal], ...] = (
        (Decimal("10000"), Decimal("200")),
        (Decimal("7500"), Decimal("175")),
        (Decimal("5000"), Decimal("150")),
    )

    mlwf_employee: Decimal = Decimal("25")
    mlwf_employer: Decimal = Decimal("75")
    mlwf_months: tuple[int, ...] = (6, 12)

    standard_working_days: int = 26
    standard_hours_per_day: Decimal = Decimal("8")
    ot_multiplier: Decimal = Decimal("1.5")
    da_fixed_amount: Decimal = Decimal("0")


DEFAULT_CONFIG = PayrollConfig()


@dataclass(frozen=True)
class PFBreakdown:
    wage_base: Decimal
    employee: Decimal
    employer_epf: Decimal
    employer_eps: Decimal
    pf_admin: Decimal
    edli: Decimal

    @property
    def employer_total(self) -> Decimal:
        return self.employer_epf + self.employer_eps


def calculate_pf(gross, *, applicable: bool, ceiling: str = "15000", config: PayrollConfig = DEFAULT_CONFIG) -> PFBreakdown:
    if not applicable:
        z = Decimal("0")
        return PFBreakdown(wage_base=z, employee=z, employer_epf=z, employer_eps=z, pf_admin=z, edli=z)

    gross = Decimal(str(gross))
    wage_base = gross if str(ceiling).lower() == "actual" else min(gross, config.pf_wage_ceiling)
    eps_base = min(gross, config.pf_wage_ceiling)
    return PFBreakdown(
        wage_base=wage_base,
        employee=percent_of(wage_base, config.employee_pf_percent),
        employer_epf=percent_of(wage_base, config.employer_epf_percent),
        employer_eps=percent_of(eps_base, config.employer_eps_percent),
        pf_admin=percent_of(wage_base, config.pf_admin_percent),
        edli=percent_of(wage_base, config.edli_percent),
    )


def calculate_esic(gross, *, applicable: bool, config: PayrollConfig = DEFAULT_CONFIG) -> tuple[Decimal, Decimal]:
    """(employee, employer); zero unless applicable and gross within the ceiling."""

    gross = Decimal(str(gross))
    if not applicable or gross > config.esic_salary_ceiling:
        return Decimal("0"), Decimal("0")
    return percent_of(gross, config.employee_esic_percent), percent_of(gross, config.employer_esic_percent)


def professional_tax(gross, *, config: PayrollConfig = DEFAULT_CONFIG) -> Decimal:
    gross = Decimal(str(gross))
    for threshold, amount in config.pt_slabs:
        if gross > threshold:
            return amount
    return Decimal("0")


def mlwf(month: int, *, applicable: bool, config: PayrollConfig = DEFAULT_CONFIG) -> tuple[Decimal, Decimal]:
    """(employee, employer) welfare fund, charged only in the configured months."""

    if not applicable or int(month) not in config.mlwf_months:
        return Decimal("0"), Decimal("0")
    return config.mlwf_employee, config.mlwf_employer
