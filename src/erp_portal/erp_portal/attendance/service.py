from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime, time
from typing import Any, Optional, Sequence

from ..common.datetime_utils import parse_datetime
from ..common.validators import require_non_empty
from ..core.enums import AttendanceStatus
from ..core.exceptions import ValidationError
from .compute import compute_attendance
from .factory import AttendanceStrategyFactory
from .model import ComputedAttendanceRow, ComputeStats, Punch, ShiftPolicy
from .repository import AttendanceRepository, PunchRepository

logger = logging.getLogger(__name__)


class AttendanceService:
    def __init__(
        self,
        punches: PunchRepository,
        attendance: AttendanceRepository,
        *,
        policy: ShiftPolicy | None = None,
        strategy_factory: AttendanceStrategyFactory | None = None,
    ):
        self._punches = punches
        self._attendance = attendance
        self._policy = policy or ShiftPolicy()
        self._factory = strategy_factory or AttendanceStrategyFactory()

    @property
    def policy(self) -> ShiftPolicy:
        return self._policy

    def import_punches(self, items: Sequence[Any]) -> dict:
        if not isinstance(items, (list, tuple)) or not items:
            raise ValidationError("punches must be a non-empty list")

        punches: list[Punch] = []
        for idx, item in enumerate(items):
            if not isinstance(item, dict):
                raise ValidationError(f"punches[{idx}] must be an object")
            code = require_non_empty(item.get("biometric_code"), f"punches[{idx}].biometric_code")
            raw_time = item.get("punch_time")
            if not raw_time:
                raise ValidationError(f"punches[{idx}].punch_time is required")
            punches.append(
                Punch(
                    biometric_code=code,
                    punch_time=parse_datetime(raw_time),
                    direction=(str(item["direction"]).strip() or None) if item.get("direction") else None,
                    device_id=(str(item["device_id"]).strip() or None) if item.get("device_id") else None,
                )
            )

        stored = self._punches.insert_punches(punches)
        logger.info("Imported %d biometric punches (%d new)", len(punches), stored)
        return {"received": len(punches), "stored": stored, "duplicates": len(punches) - stored}

    def list_punches(self, *, start: date, end: date, biometric_code: Optional[str] = None) -> list[dict]:
        self._check_range(start, end)
        rows = self._punches.list_punches(
            start=datetime.combine(start, time.min),
            end=datetime.combine(end, time.max),
            biometric_code=biometric_code,
        )
        return [
            {
                "biometric_code": p.biometric_code,
                "punch_time": p.punch_time,
                "direction": p.direction,
                "device_id": p.device_id,
            }
            for p in rows
        ]

    def compute_and_store(self, *, start: date, end: date, overwrite: bool = False) -> dict:
        """Recompute attendance for [start, end] from the stored punches."""

        self._check_range(start, end)
        date_range = {"startDate": start.isoformat(), "endDate": end.isoformat()}
        stats = ComputeStats()

        employees = self._attendance.list_employees_with_biometric()
        if not employees:
            return {
                "message": "No employees with biometric codes found",
                "dateRange": date_range,
                "stats": stats.to_dict(),
            }
        stats.employees_processed = len(employees)
        by_code = {e.biometric_code: e.employee_id for e in employees}

        punches = self._punches.list_punches(
            start=datetime.combine(start, time.min),
            end=datetime.combine(end, time.max),
        )
        stats.raw_punches_found = len(punches)
        if not punches:
            return {
                "message": "No punch data found for the specified date range",
                "dateRange": date_range,
                "stats": stats.to_dict(),
            }

        computed = compute_attendance(punches, self._policy, factory=self._factory)
        stats.records_computed = len(computed)

        to_save = []
        for record in computed:
            employee_id = by_code.get(record.biometric_code)
            if employee_id is None:
                stats.skipped += 1
                continue
            to_save.append(replace(record, employee_id=int(employee_id)))

        result = self._attendance.save_computed(to_save, overwrite=bool(overwrite))
        stats.inserted += result.inserted
        stats.updated += result.updated
        stats.skipped += result.skipped

        logger.info(
            "Attendance computed for %s..%s: %d records (%d inserted, %d updated, %d skipped)",
            start,
            end,
            stats.records_computed,
            stats.inserted,
            stats.updated,
            stats.skipped,
        )
        return {
            "message": "Attendance computed successfully",
            "dateRange": date_range,
            "stats": stats.to_dict(),
        }

    def list_computed(
        self,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
        employee_id: Optional[int] = None,
        status: Optional[str] = None,
        include_details: bool = False,
    ) -> dict:
        if start and end:
            self._check_range(start, end)
        rows = self._computed_rows(start=start, end=end, employee_id=employee_id, status=status)
        summary = self._attendance.summarize(start_date=start, end_date=end)
        return {
            "data": [r.to_dict(include_details=include_details) for r in rows],
            "summary": summary.to_dict(),
        }

    def export_rows(
        self,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
        employee_id: Optional[int] = None,
        status: Optional[str] = None,
    ) -> list[dict]:
        rows = self._computed_rows(start=start, end=end, employee_id=employee_id, status=status)
        return [
            {
                "attendance_date": r.attendance_date.strftime("%Y-%m-%d"),
                "employee_id": r.employee_id,
                "employee_name": r.employee_name,
                "department": r.department or "-",
                "biometric_code": r.biometric_code,
                "first_in": r.first_in.strftime("%H:%M") if r.first_in else "-",
                "last_out": r.last_out.strftime("%H:%M") if r.last_out else "-",
                "work_duration": r.work_duration,
                "late_by_minutes": r.late_by_minutes,
                "early_out_minutes": r.early_out_minutes,
                "overtime_minutes": r.overtime_minutes,
                "status": r.status.value,
            }
            for r in rows
        ]

    def _computed_rows(self, *, start, end, employee_id, status) -> Sequence[ComputedAttendanceRow]:
        parsed_status = None
        if status:
            try:
                parsed_status = AttendanceStatus(status)
            except ValueError:
                raise ValidationError(f"Unknown attendance status: {status}")
        return self._attendance.list_computed(
            start_date=start,
            end_date=end,
            employee_id=employee_id,
            status=parsed_status,
        )

    @staticmethod
    def _check_range(start: date, end: date) -> None:
        if start > end:
            raise ValidationError("startDate must be on or before endDate")
