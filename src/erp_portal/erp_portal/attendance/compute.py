"""Turn raw biometric punches into one attendance row per employee-day."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Iterable, Mapping, Optional

from ..common.datetime_utils import format_minutes
from ..core.enums import AttendanceStatus
from .factory import AttendanceStrategyFactory
from .model import AttendanceSummary, ComputedAttendance, DayMetrics, Punch, ShiftPolicy


def _floor_minutes(start: datetime, end: datetime) -> int:
    return int((end - start).total_seconds() // 60)


def measure_day(biometric_code: str, day: date, punches: list[Punch], policy: ShiftPolicy) -> DayMetrics:
    """`punches` must be sorted by time and non-empty."""

    first_in = punches[0].punch_time
    last_out = punches[-1].punch_time

    shift_start = datetime.combine(day, policy.start_time)
    shift_end = datetime.combine(day, policy.end_time)

    late_by = max(0, _floor_minutes(shift_start, first_in) - int(policy.late_grace_minutes))
    early_out = max(0, _floor_minutes(last_out, shift_end))
    overtime = max(0, _floor_minutes(shift_end, last_out))
    # Half Day is judged on whole elapsed minutes
    work_minutes = max(0, _floor_minutes(first_in, last_out))

    return DayMetrics(
        biometric_code=biometric_code,
        attendance_date=day,
        first_in=first_in,
        last_out=last_out,
        work_minutes=work_minutes,
        worked_hours=work_minutes / 60.0,
        late_by_minutes=late_by,
        early_out_minutes=early_out,
        overtime_minutes=overtime,
    )


def compute_attendance(
    punches: Iterable[Punch],
    policy: ShiftPolicy,
    *,
    factory: Optional[AttendanceStrategyFactory] = None,
) -> list[ComputedAttendance]:
    """Group punches by (biometric code, calendar day) and classify each day.

    Earliest punch of the day is clock-in, latest is clock-out. Output is
    ordered by biometric code, then date.
    """

    factory = factory or AttendanceStrategyFactory()

    groups: dict[tuple[str, date], list[Punch]] = {}
    for p in punches:
        key = (str(p.biometric_code), p.punch_time.date())
        groups.setdefault(key, []).append(p)

    out: list[ComputedAttendance] = []
    for (code, day), day_punches in sorted(groups.items()):
        day_punches.sort(key=lambda p: p.punch_time)
        metrics = measure_day(code, day, day_punches, policy)
        decision = factory.for_day(metrics=metrics, policy=policy).decide(metrics=metrics, policy=policy)

        out.append(
            ComputedAttendance(
                biometric_code=code,
                attendance_date=day,
                first_in=metrics.first_in,
                last_out=metrics.last_out,
                work_duration_minutes=metrics.work_minutes,
                work_duration=format_minutes(metrics.work_minutes),
                late_by_minutes=metrics.late_by_minutes,
                early_out_minutes=metrics.early_out_minutes,
                overtime_minutes=metrics.overtime_minutes,
                status=decision.status,
                total_punches=len(day_punches),
                punch_details=tuple(p.to_detail() for p in day_punches),
            )
        )
    return out


def summarize_attendance(rows: Iterable[Mapping[str, Any]]) -> AttendanceSummary:
    """Totals over computed rows; each count matches one exact status."""

    summary = AttendanceSummary()
    employees: set = set()
    dates: set = set()
    minutes = 0
    for r in rows:
        summary.total_records += 1
        employees.add(r.get("employee_id"))
        dates.add(r.get("attendance_date"))
        minutes += int(r.get("work_duration_minutes") or 0)
        status = r.get("status")
        if status == AttendanceStatus.PRESENT:
            summary.present_count += 1
        elif status == AttendanceStatus.LATE:
            summary.late_count += 1
        elif status == AttendanceStatus.HALF_DAY:
            summary.half_day_count += 1
        elif status == AttendanceStatus.EARLY_OUT:
            summary.early_out_count += 1

    summary.unique_employees = len(employees)
    summary.unique_dates = len(dates)
    if summary.total_records:
        summary.avg_work_minutes = minutes / summary.total_records
    return summary
