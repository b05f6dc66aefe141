from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional

from ..common.datetime_utils import parse_hhmm
from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class Punch:
    """One raw biometric device event."""

    biometric_code: str
    punch_time: datetime
    direction: Optional[str] = None
    device_id: Optional[str] = None

    def to_detail(self) -> dict:
        return {
            "time": self.punch_time.strftime("%H:%M:%S"),
            "direction": self.direction,
            "device_id": self.device_id,
        }


@dataclass(frozen=True)
class ShiftPolicy:
    start_time: time = time(9, 0)
    end_time: time = time(18, 0)
    half_day_hours: float = 4
    late_grace_minutes: int = 15

    @classmethod
    def from_config(cls, cfg: Optional[dict]) -> "ShiftPolicy":
        cfg = cfg or {}
        default = cls()

        def _time(value, fallback: time) -> time:
            if value is None:
                return fallback
            if isinstance(value, time):
                return value
            return parse_hhmm(str(value))

        return cls(
            start_time=_time(cfg.get("start_time"), default.start_time),
            end_time=_time(cfg.get("end_time"), default.end_time),
            half_day_hours=float(cfg.get("half_day_hours", default.half_day_hours)),
            late_grace_minutes=int(cfg.get("late_grace_minutes", default.late_grace_minutes)),
        )


@dataclass(frozen=True)
class DayMetrics:
    """Measurements for one employee-day, before a status is chosen."""

    biometric_code: str
    attendance_date: date
    first_in: datetime
    last_out: datetime
    work_minutes: int
    worked_hours: float
    late_by_minutes: int
    early_out_minutes: int
    overtime_minutes: int


@dataclass(frozen=True)
class ComputedAttendance:
    biometric_code: str
    attendance_date: date
    first_in: datetime
    last_out: datetime
    work_duration_minutes: int
    work_duration: str
    late_by_minutes: int
    early_out_minutes: int
    overtime_minutes: int
    status: AttendanceStatus
    total_punches: int
    punch_details: tuple[dict, ...] = ()
    employee_id: Optional[int] = None


@dataclass(frozen=True)
class EmployeeRef:
    employee_id: int
    biometric_code: str
    full_name: str = ""


@dataclass(frozen=True)
class ComputedAttendanceRow:
    """Read-model for listings and CSV export (joined with employee data)."""

    id: int
    employee_id: int
    employee_name: str
    department: Optional[str]
    biometric_code: str
    attendance_date: date
    first_in: Optional[datetime]
    last_out: Optional[datetime]
    work_duration_minutes: int
    work_duration: str
    late_by_minutes: int
    early_out_minutes: int
    overtime_minutes: int
    status: AttendanceStatus
    total_punches: int
    punch_details: tuple[dict, ...] = ()

    def to_dict(self, *, include_details: bool = False) -> dict:
        out = {
            "id": self.id,
            "employee_id": self.employee_id,
            "employee_name": self.employee_name,
            "department": self.department,
            "biometric_code": self.biometric_code,
            "attendance_date": self.attendance_date,
            "first_in": self.first_in,
            "last_out": self.last_out,
            "work_duration_minutes": self.work_duration_minutes,
            "work_duration": self.work_duration,
            "late_by_minutes": self.late_by_minutes,
            "early_out_minutes": self.early_out_minutes,
            "overtime_minutes": self.overtime_minutes,
            "status": self.status.value,
            "total_punches": self.total_punches,
        }
        if include_details:
            out["punch_details"] = list(self.punch_details)
        return out


@dataclass
class ComputeStats:
    employees_processed: int = 0
    raw_punches_found: int = 0
    records_computed: int = 0
    inserted: int = 0
    updated: int = 0
    skipped: int = 0

    def to_dict(self) -> dict:
        return {
            "employeesProcessed": self.employees_processed,
            "rawPunchesFound": self.raw_punches_found,
            "recordsComputed": self.records_computed,
            "inserted": self.inserted,
            "updated": self.updated,
            "skipped": self.skipped,
        }


@dataclass(frozen=True)
class SaveResult:
    inserted: int = 0
    updated: int = 0
    skipped: int = 0


@dataclass
class AttendanceSummary:
    total_records: int = 0
    unique_employees: int = 0
    unique_dates: int = 0
    present_count: int = 0
    late_count: int = 0
    half_day_count: int = 0
    early_out_count: int = 0
    avg_work_minutes: float = 0.0

    def to_dict(self) -> dict:
        return {
            "total_records": self.total_records,
            "unique_employees": self.unique_employees,
            "unique_dates": self.unique_dates,
            "present_count": self.present_count,
            "late_count": self.late_count,
            "half_day_count": self.half_day_count,
            "early_out_count": self.early_out_count,
            "avg_work_minutes": round(float(self.avg_work_minutes), 2),
        }
