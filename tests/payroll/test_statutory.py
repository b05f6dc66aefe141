from decimal import Decimal

import pytest

from src.erp_portal.erp_portal.payroll.statutory import (
    calculate_esic,
    calculate_pf,
    mlwf,
    percent_of,
    professional_tax,
    round_half_up,
)


def test_round_half_up_rounds_halves_away_from_zero():
    assert round_half_up("550.5") == Decimal("551")
    assert round_half_up("550.49") == Decimal("550")
    assert round_half_up(Decimal("1249.5")) == Decimal("1250")


def test_percent_of_rounds_to_rupees():
    assert percent_of(15000, "3.67") == Decimal("551")
    assert percent_of(18000, "4.81") == Decimal("866")


def test_pf_caps_wage_base_at_ceiling():
    pf = calculate_pf(Decimal("30000"), applicable=True)

    assert pf.wage_base == Decimal("15000")
    assert pf.employee == Decimal("1800")
    assert pf.employer_epf == Decimal("551")
    assert pf.employer_eps == Decimal("1250")
    assert pf.pf_admin == Decimal("75")
    assert pf.edli == Decimal("75")


def test_pf_on_actual_wage_keeps_eps_capped():
    pf = calculate_pf(Decimal("30000"), applicable=True, ceiling="actual")

    assert pf.wage_base == Decimal("30000")
    assert pf.employee == Decimal("3600")
    assert pf.employer_eps == Decimal("1250")


def test_pf_not_applicable_is_zero():
    pf = calculate_pf(Decimal("30000"), applicable=False)

    assert pf.employee == 0
    assert pf.employer_total == 0


def test_esic_only_within_ceiling():
    assert calculate_esic(Decimal("20000"), applicable=True) == (Decimal("150"), Decimal("650"))
    assert calculate_esic(Decimal("21000.01"), applicable=True) == (Decimal("0"), Decimal("0"))
    assert calculate_esic(Decimal("20000"), applicable=False) == (Decimal("0"), Decimal("0"))


@pytest.mark.parametrize(
    "gross, expected",
    [
        ("25000", "200"),
        ("10000.01", "200"),
        ("10000", "175"),
        ("7500.5", "175"),
        ("7500", "150"),
        ("5001", "150"),
        ("5000", "0"),
    ],
)
def test_professional_tax_slabs(gross, expected):
    assert professional_tax(Decimal(gross)) == Decimal(expected)


def test_mlwf_only_in_june_and_december():
    assert mlwf(6, applicable=True) == (Decimal("25"), Decimal("75"))
    assert mlwf(12, applicable=True) == (Decimal("25"), Decimal("75"))
    assert mlwf(3, applicable=True) == (Decimal("0"), Decimal("0"))
    assert mlwf(6, applicable=False) == (Decimal("0"), Decimal("0"))
