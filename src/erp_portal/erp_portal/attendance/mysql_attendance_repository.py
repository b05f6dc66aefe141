from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

import mysql.connector

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, decode_json, encode_json, fetchall, is_duplicate_key, placeholders
from .compute import summarize_attendance
from .model import AttendanceSummary, ComputedAttendance, ComputedAttendanceRow, EmployeeRef, SaveResult
from .repository import AttendanceRepository

_COLUMNS = (
    "employee_id, biometric_code, attendance_date, first_in, last_out, work_duration_minutes, work_duration, "
    "late_by_minutes, early_out_minutes, overtime_minutes, status, total_punches, punch_details"
)


def _row_params(r: ComputedAttendance) -> tuple:
    return (
        int(r.employee_id),
        r.biometric_code,
        r.attendance_date,
        r.first_in,
        r.last_out,
        int(r.work_duration_minutes),
        r.work_duration,
        int(r.late_by_minutes),
        int(r.early_out_minutes),
        int(r.overtime_minutes),
        r.status.value,
        int(r.total_punches),
        encode_json(list(r.punch_details)),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_employees_with_biometric(self) -> Sequence[EmployeeRef]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, biometric_code, CONCAT_WS(' ', first_name, last_name) AS full_name
                FROM employees
                WHERE biometric_code IS NOT NULL AND biometric_code <> ''
                ORDER BY id ASC
                """
            )
            return [
                EmployeeRef(
                    employee_id=int(r["id"]),
                    biometric_code=str(r["biometric_code"]),
                    full_name=r.get("full_name") or "",
                )
                for r in fetchall(cur)
            ]

    def save_computed(self, records: Sequence[ComputedAttendance], *, overwrite: bool) -> SaveResult:
        inserted = updated = skipped = 0
        verb = "REPLACE" if overwrite else "INSERT"
        sql = f"{verb} INTO computed_attendance({_COLUMNS}) VALUES({placeholders(13)})"

        with db_cursor(self._conn_factory) as (_, cur):
            for r in records:
                try:
                    cur.execute(sql, _row_params(r))
                except mysql.connector.IntegrityError as e:
                    if not is_duplicate_key(e):
                        raise
                    skipped += 1
                    continue
                if overwrite:
                    updated += 1
                else:
                    inserted += 1
        return SaveResult(inserted=inserted, updated=updated, skipped=skipped)

    @staticmethod
    def _where(
        *,
        start_date: Optional[date],
        end_date: Optional[date],
        employee_id: Optional[int],
        status: Optional[AttendanceStatus] = None,
    ) -> tuple[str, list[object]]:
        clauses = ["1=1"]
        params: list[object] = []
        if start_date is not None:
            clauses.append("ca.attendance_date >= %s")
            params.append(start_date)
        if end_date is not None:
            clauses.append("ca.attendance_date <= %s")
            params.append(end_date)
        if employee_id is not None:
            clauses.append("ca.employee_id=%s")
            params.append(int(employee_id))
        if status is not None:
            clauses.append("ca.status=%s")
            params.append(status.value)
        return " AND ".join(clauses), params

    def list_computed(
        self,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        employee_id: Optional[int] = None,
        status: Optional[AttendanceStatus] = None,
    ) -> Sequence[ComputedAttendanceRow]:
        where, params = self._where(start_date=start_date, end_date=end_date, employee_id=employee_id, status=status)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT
                    ca.id, ca.employee_id, ca.biometric_code, ca.attendance_date, ca.first_in, ca.last_out,
                    ca.work_duration_minutes, ca.work_duration, ca.late_by_minutes, ca.early_out_minutes,
                    ca.overtime_minutes, ca.status, ca.total_punches, ca.punch_details,
                    CONCAT_WS(' ', e.first_name, e.last_name) AS employee_name,
                    e.department
                FROM computed_attendance ca
                LEFT JOIN employees e ON e.id = ca.employee_id
                WHERE {where}
                ORDER BY ca.attendance_date DESC, employee_name ASC, ca.id ASC
                """,
                tuple(params),
            )
            rows = fetchall(cur)

        return [
            ComputedAttendanceRow(
                id=int(r["id"]),
                employee_id=int(r["employee_id"]),
                employee_name=r.get("employee_name") or "",
                department=r.get("department"),
                biometric_code=str(r["biometric_code"]),
                attendance_date=r["attendance_date"],
                first_in=r.get("first_in"),
                last_out=r.get("last_out"),
                work_duration_minutes=int(r.get("work_duration_minutes") or 0),
                work_duration=r.get("work_duration") or "00:00",
                late_by_minutes=int(r.get("late_by_minutes") or 0),
                early_out_minutes=int(r.get("early_out_minutes") or 0),
                overtime_minutes=int(r.get("overtime_minutes") or 0),
                status=AttendanceStatus(r["status"]),
                total_punches=int(r.get("total_punches") or 0),
                punch_details=tuple(decode_json(r.get("punch_details"), [])),
            )
            for r in rows
        ]

    def summarize(
        self,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> AttendanceSummary:
        where, params = self._where(start_date=start_date, end_date=end_date, employee_id=None)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT ca.employee_id, ca.attendance_date, ca.status, ca.work_duration_minutes
                FROM computed_attendance ca
                WHERE {where}
                """,
                tuple(params),
            )
            rows = fetchall(cur)

        return summarize_attendance(rows)
