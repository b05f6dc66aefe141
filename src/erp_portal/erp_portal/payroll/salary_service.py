from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Mapping, Optional, Protocol, Sequence

from ..common.validators import require_choice, require_non_empty, to_bool, to_decimal, to_int
from ..core.enums import CalculationType, ComponentType
from ..core.exceptions import NotFoundError, ValidationError
from ..resources.service import coerce_value
from ..resources.model import FieldSpec
from .model import SalaryComponent, SalaryStructure
from .repository import SalaryStructureRepository

logger = logging.getLogger(__name__)

PF_CEILINGS = ("15000", "actual")
PERCENTAGE_BASES = ("gross", "basic")


class EmployeeDirectory(Protocol):
    def exists(self, employee_id: int) -> bool:
        raise NotImplementedError


def parse_component(data: Any, index: int) -> SalaryComponent:
    if not isinstance(data, dict):
        raise ValidationError(f"components[{index}] must be an object")
    where = f"components[{index}]"

    component_type = require_choice(
        str(data.get("component_type") or "").strip(), f"{where}.component_type", [t.value for t in ComponentType]
    )
    calculation_type = require_choice(
        str(data.get("calculation_type") or "fixed").strip(),
        f"{where}.calculation_type",
        [t.value for t in CalculationType],
    )

    percentage_value = to_decimal(data.get("percentage_value"), f"{where}.percentage_value")
    percentage_of = (str(data.get("percentage_of") or "").strip() or None)
    if calculation_type == CalculationType.PERCENTAGE.value:
        if percentage_value is None:
            raise ValidationError(f"{where}.percentage_value is required for percentage components")
        percentage_of = require_choice(percentage_of or "gross", f"{where}.percentage_of", PERCENTAGE_BASES)

    fixed_amount = to_decimal(data.get("fixed_amount"), f"{where}.fixed_amount") or Decimal("0")
    if fixed_amount < 0:
        raise ValidationError(f"{where}.fixed_amount must be >= 0")

    return SalaryComponent(
        component_name=require_non_empty(data.get("component_name"), f"{where}.component_name"),
        component_code=require_non_empty(data.get("component_code"), f"{where}.component_code").upper(),
        component_type=ComponentType(component_type),
        calculation_type=CalculationType(calculation_type),
        fixed_amount=fixed_amount,
        percentage_value=percentage_value,
        percentage_of=percentage_of,
        max_amount=to_decimal(data.get("max_amount"), f"{where}.max_amount"),
        is_taxable=to_bool(data.get("is_taxable", True)),
        is_statutory=to_bool(data.get("is_statutory", False)),
        display_order=to_int(data.get("display_order"), f"{where}.display_order") or index,
    )


_STRUCTURE_SPECS = (
    FieldSpec("effective_from", "date"),
    FieldSpec("effective_to", "date"),
    FieldSpec("gross_salary", "decimal", min_value=Decimal("0")),
    FieldSpec("ctc", "decimal", min_value=Decimal("0")),
    FieldSpec("pf_applicable", "bool"),
    FieldSpec("esic_applicable", "bool"),
    FieldSpec("pt_applicable", "bool"),
    FieldSpec("mlwf_applicable", "bool"),
    FieldSpec("pf_wage_ceiling", choices=PF_CEILINGS),
    FieldSpec("standard_working_days", "int", min_value=Decimal("1"), max_value=Decimal("31")),
    FieldSpec("standard_hours_per_day", "decimal", min_value=Decimal("0")),
    FieldSpec("ot_multiplier", "decimal", min_value=Decimal("0")),
    FieldSpec("remarks"),
)


class SalaryStructureService:
    def __init__(self, structures: SalaryStructureRepository, employees: EmployeeDirectory):
        self._structures = structures
        self._employees = employees

    def _require_employee(self, employee_id: int) -> None:
        if not self._employees.exists(employee_id):
            raise NotFoundError("Employee not found")

    @staticmethod
    def _coerce(data: Mapping[str, Any]) -> dict:
        values = {}
        for spec in _STRUCTURE_SPECS:
            if spec.name in data:
                values[spec.name] = coerce_value(spec, data[spec.name])
        for flag in ("pf_applicable", "esic_applicable", "pt_applicable", "mlwf_applicable"):
            if flag in values:
                values[flag] = 1 if values[flag] else 0
        return values

    @staticmethod
    def _components(data: Mapping[str, Any]) -> Optional[list[SalaryComponent]]:
        raw = data.get("components")
        if raw is None:
            return None
        if not isinstance(raw, list):
            raise ValidationError("components must be a list")
        return [parse_component(c, i) for i, c in enumerate(raw)]

    def list_for_employee(self, employee_id: int) -> dict:
        self._require_employee(employee_id)
        versions: Sequence[SalaryStructure] = self._structures.list_for_employee(employee_id)
        active = next((s for s in versions if s.is_active), None)
        return {
            "data": [s.to_dict() for s in versions],
            "active": active.to_dict() if active else None,
        }

    def create_version(self, employee_id: int, data: Mapping[str, Any]) -> dict:
        self._require_employee(employee_id)
        values = self._coerce(data)
        if not values.get("effective_from"):
            raise ValidationError("effective_from is required")
        values.pop("effective_to", None)
        components = self._components(data) or []

        structure_id, version = self._structures.create_version(
            employee_id=employee_id,
            values=values,
            components=components,
        )
        logger.info("Salary structure v%d (#%d) created for employee %d", version, structure_id, employee_id)
        return {"id": structure_id, "version": version}

    def update(self, employee_id: int, structure_id: int, data: Mapping[str, Any]) -> dict:
        existing = self._structures.get(structure_id)
        if not existing or existing.employee_id != int(employee_id):
            raise NotFoundError("Salary structure not found")

        values = self._coerce(data)
        if "effective_from" in values and values["effective_from"] is None:
            raise ValidationError("effective_from cannot be empty")
        self._structures.update(structure_id, values=values, components=self._components(data))
        updated = self._structures.get(structure_id)
        return updated.to_dict() if updated else {}
