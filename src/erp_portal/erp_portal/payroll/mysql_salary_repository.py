from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal
from typing import Optional, Sequence

from ..core.enums import CalculationType, ComponentType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, placeholders
from .model import SalaryComponent, SalaryStructure
from .repository import SalaryStructureRepository

STRUCTURE_FIELDS = (
    "gross_salary",
    "ctc",
    "pf_applicable",
    "esic_applicable",
    "pt_applicable",
    "mlwf_applicable",
    "pf_wage_ceiling",
    "standard_working_days",
    "standard_hours_per_day",
    "ot_multiplier",
    "remarks",
)


def _dec(value, default: str = "0") -> Decimal:
    return Decimal(str(value)) if value is not None else Decimal(default)


def _to_component(r: dict) -> SalaryComponent:
    return SalaryComponent(
        id=int(r["id"]),
        component_name=r["component_name"],
        component_code=r["component_code"],
        component_type=ComponentType(r["component_type"]),
        calculation_type=CalculationType(r.get("calculation_type") or "fixed"),
        fixed_amount=_dec(r.get("fixed_amount")),
        percentage_value=_dec(r["percentage_value"]) if r.get("percentage_value") is not None else None,
        percentage_of=r.get("percentage_of"),
        max_amount=_dec(r["max_amount"]) if r.get("max_amount") is not None else None,
        is_taxable=bool(r.get("is_taxable", 1)),
        is_statutory=bool(r.get("is_statutory", 0)),
        display_order=int(r.get("display_order") or 0),
    )


def _to_structure(r: dict, components: Sequence[SalaryComponent]) -> SalaryStructure:
    return SalaryStructure(
        id=int(r["id"]),
        employee_id=int(r["employee_id"]),
        version=int(r["version"]),
        effective_from=r["effective_from"],
        effective_to=r.get("effective_to"),
        is_active=bool(r.get("is_active")),
        gross_salary=_dec(r.get("gross_salary")),
        ctc=_dec(r.get("ctc")),
        pf_applicable=bool(r.get("pf_applicable", 1)),
        esic_applicable=bool(r.get("esic_applicable", 0)),
        pt_applicable=bool(r.get("pt_applicable", 1)),
        mlwf_applicable=bool(r.get("mlwf_applicable", 1)),
        pf_wage_ceiling=str(r.get("pf_wage_ceiling") or "15000"),
        standard_working_days=int(r.get("standard_working_days") or 26),
        standard_hours_per_day=_dec(r.get("standard_hours_per_day"), "8"),
        ot_multiplier=_dec(r.get("ot_multiplier"), "1.5"),
        remarks=r.get("remarks"),
        components=tuple(components),
        created_at=r.get("created_at"),
    )


class MySQLSalaryStructureRepository(SalaryStructureRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _components_for(self, cur, structure_ids: Sequence[int]) -> dict[int, list[SalaryComponent]]:
        out: dict[int, list[SalaryComponent]] = {int(i): [] for i in structure_ids}
        if not structure_ids:
            return out
        cur.execute(
            f"""
            SELECT *
            FROM salary_structure_components
            WHERE salary_structure_id IN ({placeholders(len(structure_ids))}) AND is_active=1
            ORDER BY display_order ASC, id ASC
            """,
            tuple(int(i) for i in structure_ids),
        )
        for r in fetchall(cur):
            out[int(r["salary_structure_id"])].append(_to_component(r))
        return out

    @staticmethod
    def _insert_components(cur, structure_id: int, components: Sequence[SalaryComponent]) -> None:
        for idx, c in enumerate(components):
            cur.execute(
                """
                INSERT INTO salary_structure_components(
                    salary_structure_id, component_name, component_code, component_type, calculation_type,
                    fixed_amount, percentage_value, percentage_of, max_amount, is_taxable, is_statutory, display_order
                ) VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(structure_id),
                    c.component_name,
                    c.component_code,
                    c.component_type.value,
                    c.calculation_type.value,
                    c.fixed_amount,
                    c.percentage_value,
                    c.percentage_of,
                    c.max_amount,
                    1 if c.is_taxable else 0,
                    1 if c.is_statutory else 0,
                    c.display_order or idx,
                ),
            )

    def list_for_employee(self, employee_id: int) -> Sequence[SalaryStructure]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT * FROM salary_structures WHERE employee_id=%s ORDER BY version DESC",
                (int(employee_id),),
            )
            rows = fetchall(cur)
            components = self._components_for(cur, [int(r["id"]) for r in rows])
        return [_to_structure(r, components[int(r["id"])]) for r in rows]

    def get(self, structure_id: int) -> Optional[SalaryStructure]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT * FROM salary_structures WHERE id=%s", (int(structure_id),))
            r = fetchone(cur)
            if not r:
                return None
            components = self._components_for(cur, [int(r["id"])])
        return _to_structure(r, components[int(r["id"])])

    def get_active_on(self, employee_id: int, on_date: date) -> Optional[SalaryStructure]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT *
                FROM salary_structures
                WHERE employee_id=%s
                  AND is_active=1
                  AND effective_from <= %s
                  AND (effective_to IS NULL OR effective_to >= %s)
                ORDER BY version DESC
                LIMIT 1
                """,
                (int(employee_id), on_date, on_date),
            )
            r = fetchone(cur)
            if not r:
                return None
            components = self._components_for(cur, [int(r["id"])])
        return _to_structure(r, components[int(r["id"])])

    def create_version(
        self,
        *,
        employee_id: int,
        values: dict,
        components: Sequence[SalaryComponent],
    ) -> tuple[int, int]:
        effective_from: date = values["effective_from"]
        columns = ["employee_id", "version", "effective_from", "is_active"] + [f for f in STRUCTURE_FIELDS if f in values]

        with db_cursor(self._conn_factory) as (_, cur):
            # Lock this employee's versions for the rest of the transaction
            cur.execute(
                "SELECT COALESCE(MAX(version), 0) AS v FROM salary_structures WHERE employee_id=%s FOR UPDATE",
                (int(employee_id),),
            )
            version = int((fetchone(cur) or {}).get("v") or 0) + 1

            cur.execute(
                """
                UPDATE salary_structures
                SET is_active=0, effective_to=%s
                WHERE employee_id=%s AND is_active=1
                """,
                (effective_from - timedelta(days=1), int(employee_id)),
            )

            params = [int(employee_id), version, effective_from, 1] + [values[f] for f in STRUCTURE_FIELDS if f in values]
            cur.execute(
                f"INSERT INTO salary_structures({', '.join(columns)}) VALUES({placeholders(len(columns))})",
                tuple(params),
            )
            structure_id = int(cur.lastrowid)
            self._insert_components(cur, structure_id, components)

        return structure_id, version

    def update(self, structure_id: int, *, values: dict, components: Optional[Sequence[SalaryComponent]]) -> bool:
        fields = [f for f in STRUCTURE_FIELDS + ("effective_from", "effective_to") if f in values]
        with db_cursor(self._conn_factory) as (_, cur):
            if fields:
                cur.execute(
                    f"UPDATE salary_structures SET {', '.join(f'{f}=%s' for f in fields)} WHERE id=%s",
                    tuple(values[f] for f in fields) + (int(structure_id),),
                )
            if components is not None:
                cur.execute(
                    "DELETE FROM salary_structure_components WHERE salary_structure_id=%s",
                    (int(structure_id),),
                )
                self._insert_components(cur, structure_id, components)
        return True
