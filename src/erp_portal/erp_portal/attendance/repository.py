from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceSummary, ComputedAttendance, ComputedAttendanceRow, EmployeeRef, Punch, SaveResult


class PunchRepository(Protocol):
    def insert_punches(self, punches: Sequence[Punch]) -> int:
        """Store punches, ignoring exact duplicates; returns rows stored."""

        raise NotImplementedError

    def list_punches(
        self,
        *,
        start: datetime,
        end: datetime,
        biometric_code: Optional[str] = None,
    ) -> Sequence[Punch]:
        raise NotImplementedError


class AttendanceRepository(Protocol):
    def list_employees_with_biometric(self) -> Sequence[EmployeeRef]:
        raise NotImplementedError

    def save_computed(self, records: Sequence[ComputedAttendance], *, overwrite: bool) -> SaveResult:
        raise NotImplementedError

    def list_computed(
        self,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        employee_id: Optional[int] = None,
        status: Optional[AttendanceStatus] = None,
    ) -> Sequence[ComputedAttendanceRow]:
        raise NotImplementedError

    def summarize(
        self,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> AttendanceSummary:
        """Totals over the date range only; employee and status filters do not apply."""
