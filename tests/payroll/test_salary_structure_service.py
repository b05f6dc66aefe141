from __future__ import annotations

from dataclasses import replace
from datetime import date, timedelta
from decimal import Decimal

import pytest

from src.erp_portal.erp_portal.core.enums import CalculationType, ComponentType
from src.erp_portal.erp_portal.core.exceptions import NotFoundError, ValidationError
from src.erp_portal.erp_portal.payroll.model import SalaryStructure
from src.erp_portal.erp_portal.payroll.salary_service import SalaryStructureService, parse_component


class FakeStructureRepo:
    def __init__(self):
        self.structures: dict[int, SalaryStructure] = {}

    def list_for_employee(self, employee_id):
        rows = [s for s in self.structures.values() if s.employee_id == employee_id]
        return sorted(rows, key=lambda s: s.version, reverse=True)

    def get(self, structure_id):
        return self.structures.get(int(structure_id))

    def get_active_on(self, employee_id, on_date):
        return None

    def create_version(self, *, employee_id, values, components):
        version = max((s.version for s in self.list_for_employee(employee_id)), default=0) + 1
        effective_from = values["effective_from"]
        for sid, s in list(self.structures.items()):
            if s.employee_id == employee_id and s.is_active:
                self.structures[sid] = replace(s, is_active=False, effective_to=effective_from - timedelta(days=1))
        structure_id = len(self.structures) + 1
        self.structures[structure_id] = SalaryStructure(
            id=structure_id,
            employee_id=employee_id,
            version=version,
            effective_from=effective_from,
            effective_to=None,
            is_active=True,
            gross_salary=values.get("gross_salary") or Decimal("0"),
            components=tuple(components),
        )
        return structure_id, version

    def update(self, structure_id, *, values, components):
        s = self.structures[int(structure_id)]
        changes = {k: v for k, v in values.items() if k in ("gross_salary", "remarks", "effective_from")}
        if components is not None:
            changes["components"] = tuple(components)
        self.structures[int(structure_id)] = replace(s, **changes)
        return True


class FakeEmployees:
    def __init__(self, ids):
        self.ids = set(ids)

    def exists(self, employee_id):
        return int(employee_id) in self.ids


@pytest.fixture
def repo():
    return FakeStructureRepo()


@pytest.fixture
def service(repo):
    return SalaryStructureService(repo, FakeEmployees({7, 8}))


def test_versions_leave_exactly_one_active(service, repo):
    first = service.create_version(7, {"effective_from": "2026-01-01", "gross_salary": "30000"})
    second = service.create_version(7, {"effective_from": "2026-04-01", "gross_salary": "35000"})
    service.create_version(8, {"effective_from": "2026-01-01", "gross_salary": "20000"})

    listing = service.list_for_employee(7)

    assert (first["version"], second["version"]) == (1, 2)
    assert [s["version"] for s in listing["data"]] == [2, 1]
    assert [s["is_active"] for s in listing["data"]] == [True, False]
    assert listing["active"]["id"] == second["id"]
    assert listing["data"][1]["effective_to"] == date(2026, 3, 31)


def test_effective_from_is_required(service):
    with pytest.raises(ValidationError):
        service.create_version(7, {"gross_salary": "30000"})


def test_unknown_employee_is_404(service):
    with pytest.raises(NotFoundError):
        service.create_version(99, {"effective_from": "2026-01-01"})
    with pytest.raises(NotFoundError):
        service.list_for_employee(99)


def test_update_only_for_owning_employee(service):
    created = service.create_version(7, {"effective_from": "2026-01-01", "gross_salary": "30000"})

    with pytest.raises(NotFoundError):
        service.update(8, created["id"], {"gross_salary": "1"})

    updated = service.update(
        7,
        created["id"],
        {"gross_salary": "32000", "components": [{"component_name": "Site", "component_code": "site", "component_type": "earning", "fixed_amount": 500}]},
    )
    assert updated["gross_salary"] == Decimal("32000")
    assert updated["components"][0]["component_code"] == "SITE"


def test_invalid_structure_values(service):
    with pytest.raises(ValidationError):
        service.create_version(7, {"effective_from": "2026-01-01", "pf_wage_ceiling": "20000"})
    with pytest.raises(ValidationError):
        service.create_version(7, {"effective_from": "2026-01-01", "gross_salary": "-5"})


def test_parse_component_percentage_defaults_to_gross():
    c = parse_component(
        {"component_name": "Bonus", "component_code": "bon", "component_type": "earning", "calculation_type": "percentage", "percentage_value": "5"},
        2,
    )

    assert c.calculation_type == CalculationType.PERCENTAGE
    assert c.component_type == ComponentType.EARNING
    assert c.percentage_of == "gross"
    assert c.percentage_value == Decimal("5")
    assert c.display_order == 2


@pytest.mark.parametrize(
    "raw",
    [
        {"component_name": "X", "component_code": "X", "component_type": "bonus"},
        {"component_name": "X", "component_code": "X", "component_type": "earning", "calculation_type": "percentage"},
        {"component_name": "X", "component_code": "X", "component_type": "earning", "fixed_amount": -1},
        {"component_code": "X", "component_type": "earning"},
        "not a component",
    ],
)
def test_parse_component_rejects(raw):
    with pytest.raises(ValidationError):
        parse_component(raw, 0)
