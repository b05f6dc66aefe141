from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

import mysql.connector

from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, decode_json, encode_json, fetchall, is_duplicate_key, placeholders
from .model import PayrollBreakdown
from .repository import PayrollSlipRepository

SLIP_COLUMNS = (
    "employee_id",
    "month",
    "salary_structure_id",
    "gross",
    "da_used",
    "basic",
    "da",
    "hra",
    "conveyance",
    "call_allowance",
    "other_allowances",
    "total_earnings",
    "pf_employee",
    "esic_employee",
    "pt",
    "mlwf",
    "other_deductions",
    "total_deductions",
    "net_pay",
    "pf_employer",
    "pf_admin",
    "edli",
    "esic_employer",
    "mlwf_employer",
    "gratuity",
    "total_employer_contributions",
    "employer_cost",
    "payable_days",
    "lop_days",
    "lop_deduction",
    "breakdown",
)


def _slip_values(b: PayrollBreakdown) -> tuple:
    values = {
        "employee_id": b.employee_id,
        "month": b.month,
        "salary_structure_id": b.salary_structure_id,
        "gross": b.gross,
        "da_used": b.da_used,
        "basic": b.basic,
        "da": b.da,
        "hra": b.hra,
        "conveyance": b.conveyance,
        "call_allowance": b.call_allowance,
        "other_allowances": b.other_allowances,
        "total_earnings": b.total_earnings,
        "pf_employee": b.pf_employee,
        "esic_employee": b.esic_employee,
        "pt": b.pt,
        "mlwf": b.mlwf,
        "other_deductions": b.other_deductions,
        "total_deductions": b.total_deductions,
        "net_pay": b.net_pay,
        "pf_employer": b.pf_employer,
        "pf_admin": b.pf_admin,
        "edli": b.edli,
        "esic_employer": b.esic_employer,
        "mlwf_employer": b.mlwf_employer,
        "gratuity": b.gratuity,
        "total_employer_contributions": b.total_employer_contributions,
        "employer_cost": b.employer_cost,
        "payable_days": b.attendance.payable_days,
        "lop_days": b.attendance.lop_days,
        "lop_deduction": b.lop_deduction,
        "breakdown": encode_json(b.to_dict()),
    }
    return tuple(values[c] for c in SLIP_COLUMNS)


class MySQLPayrollSlipRepository(PayrollSlipRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def employees_with_structure_on(self, on_date: date) -> Sequence[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT DISTINCT ss.employee_id
                FROM salary_structures ss
                JOIN employees e ON e.id = ss.employee_id
                WHERE ss.is_active=1
                  AND e.status='Active'
                  AND ss.effective_from <= %s
                  AND (ss.effective_to IS NULL OR ss.effective_to >= %s)
                ORDER BY ss.employee_id ASC
                """,
                (on_date, on_date),
            )
            return [int(r["employee_id"]) for r in fetchall(cur)]

    def insert_slip(self, breakdown: PayrollBreakdown) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"INSERT INTO payroll_slips({', '.join(SLIP_COLUMNS)}) VALUES({placeholders(len(SLIP_COLUMNS))})",
                    _slip_values(breakdown),
                )
                return int(cur.lastrowid)
        except mysql.connector.IntegrityError as e:
            if is_duplicate_key(e):
                raise ConflictError(
                    f"Payroll already generated for employee {breakdown.employee_id} "
                    f"for {breakdown.month.strftime('%Y-%m')}"
                )
            raise

    def list_slips(self, *, month: Optional[date] = None, employee_id: Optional[int] = None) -> Sequence[dict]:
        clauses = ["1=1"]
        params: list[object] = []
        if month is not None:
            clauses.append("ps.month=%s")
            params.append(month.replace(day=1))
        if employee_id is not None:
            clauses.append("ps.employee_id=%s")
            params.append(int(employee_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT ps.*, e.employee_code, CONCAT_WS(' ', e.first_name, e.last_name) AS employee_name, e.department
                FROM payroll_slips ps
                JOIN employees e ON e.id = ps.employee_id
                WHERE {' AND '.join(clauses)}
                ORDER BY ps.month DESC, e.first_name ASC, ps.id ASC
                """,
                tuple(params),
            )
            rows = fetchall(cur)

        out = []
        for r in rows:
            row = dict(r)
            row["breakdown"] = decode_json(row.get("breakdown"), None)
            out.append(row)
        return out
