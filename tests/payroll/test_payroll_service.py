from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import pytest

from src.erp_portal.erp_portal.attendance.model import ComputedAttendanceRow
from src.erp_portal.erp_portal.core.enums import AttendanceStatus
from src.erp_portal.erp_portal.core.exceptions import ConflictError, NotFoundError, ValidationError
from src.erp_portal.erp_portal.payroll.model import DAEntry, SalaryStructure
from src.erp_portal.erp_portal.payroll.service import PayrollService


class FakeStructures:
    def __init__(self, structures):
        self.structures = {s.employee_id: s for s in structures}

    def get_active_on(self, employee_id, on_date):
        s = self.structures.get(employee_id)
        return s if s and s.effective_from <= on_date else None


class FakeDA:
    def __init__(self):
        self.entries: dict[int, DAEntry] = {}

    def list(self):
        return list(self.entries.values())

    def get(self, entry_id):
        return self.entries.get(int(entry_id))

    def create(self, *, values):
        entry_id = len(self.entries) + 1
        self.entries[entry_id] = DAEntry(
            id=entry_id,
            da_amount=values["da_amount"],
            effective_from=values["effective_from"],
            effective_to=values.get("effective_to"),
            is_active=values["is_active"],
        )
        return entry_id

    def update(self, entry_id, *, values):
        return True

    def get_for_date(self, on_date):
        for e in self.entries.values():
            if e.is_active and e.effective_from <= on_date and (e.effective_to is None or on_date <= e.effective_to):
                return e
        return None


class FakeSlips:
    def __init__(self, employee_ids):
        self.employee_ids = employee_ids
        self.slips: dict[tuple[int, date], object] = {}

    def employees_with_structure_on(self, on_date):
        return self.employee_ids

    def insert_slip(self, breakdown):
        key = (breakdown.employee_id, breakdown.month)
        if key in self.slips:
            raise ConflictError("Payroll slip already exists for this employee and month")
        self.slips[key] = breakdown
        return len(self.slips)

    def list_slips(self, *, month=None, employee_id=None):
        return [
            {"employee_id": b.employee_id, "net_pay": b.net_pay}
            for (emp, m), b in self.slips.items()
            if (month is None or m == month) and (employee_id is None or emp == employee_id)
        ]


class FakeAttendance:
    def __init__(self, rows_by_employee=None):
        self.rows_by_employee = rows_by_employee or {}

    def list_computed(self, *, start_date=None, end_date=None, employee_id=None, status=None):
        return self.rows_by_employee.get(employee_id, [])


def _structure(employee_id, gross="26000"):
    return SalaryStructure(
        id=employee_id * 10,
        employee_id=employee_id,
        version=1,
        effective_from=date(2026, 1, 1),
        effective_to=None,
        is_active=True,
        gross_salary=Decimal(gross),
    )


def _row(day, status, overtime=0):
    return ComputedAttendanceRow(
        id=day,
        employee_id=7,
        employee_name="Asha Rao",
        department=None,
        biometric_code="B001",
        attendance_date=date(2026, 3, day),
        first_in=datetime(2026, 3, day, 9, 0),
        last_out=datetime(2026, 3, day, 18, 0),
        work_duration_minutes=540,
        work_duration="09:00",
        late_by_minutes=0,
        early_out_minutes=0,
        overtime_minutes=overtime,
        status=status,
        total_punches=2,
    )


def _service(*, structures=(), attendance=None, employee_ids=()):
    slips = FakeSlips(list(employee_ids))
    service = PayrollService(
        FakeStructures(structures),
        FakeDA(),
        slips,
        FakeAttendance(attendance),
    )
    return service, slips


def test_attendance_summary_counts_half_days_and_lop():
    rows = [_row(d, AttendanceStatus.PRESENT, overtime=10) for d in range(1, 21)]
    rows += [_row(21, AttendanceStatus.LATE), _row(22, AttendanceStatus.HALF_DAY), _row(23, AttendanceStatus.EARLY_OUT)]
    service, _ = _service(attendance={7: rows})

    summary = service.attendance_for(7, date(2026, 3, 1), 26)

    assert summary.days_present == Decimal("22.5")
    assert summary.payable_days == Decimal("22.5")
    assert summary.half_days == 1
    assert summary.lop_days == Decimal("3.5")
    assert summary.overtime_minutes == 200
    assert summary.has_attendance_data


def test_no_attendance_records_pays_full_month():
    service, _ = _service()

    summary = service.attendance_for(7, date(2026, 3, 1), 26)

    assert summary.payable_days == Decimal("26")
    assert summary.lop_days == 0
    assert not summary.has_attendance_data


def test_calculate_uses_da_schedule_and_attendance():
    service, _ = _service(structures=[_structure(7)], attendance={7: [_row(d, AttendanceStatus.PRESENT) for d in range(1, 14)]})
    service.create_da({"da_amount": "1300", "effective_from": "2026-01-01"})

    b = service.calculate(7, date(2026, 3, 17))

    assert b.month == date(2026, 3, 1)
    assert b.gross == Decimal("13000")
    assert b.lop_deduction == Decimal("13000")
    assert b.da == Decimal("650")
    assert b.da_used == Decimal("1300")


def test_calculate_without_structure_is_404():
    service, _ = _service()

    with pytest.raises(NotFoundError):
        service.calculate(7, date(2026, 3, 1))


def test_generate_single_employee_twice_conflicts():
    service, slips = _service(structures=[_structure(7)])

    result = service.generate(date(2026, 3, 1), employee_id=7)

    assert result["slip_id"] == 1
    assert result["data"]["month"] == "2026-03"
    with pytest.raises(ConflictError):
        service.generate(date(2026, 3, 1), employee_id=7)


def test_monthly_run_counts_success_skipped_failed():
    service, slips = _service(structures=[_structure(7), _structure(8)], employee_ids=[7, 8, 9])
    service.generate(date(2026, 3, 1), employee_id=7)

    result = service.generate(date(2026, 3, 1))

    assert result["total"] == 3
    assert result["success"] == 1
    assert result["skipped"] == 1
    assert result["failed"] == 1
    assert result["errors"][0]["employee_id"] == 9
    assert len(service.list_slips(month=date(2026, 3, 1))) == 2


def test_da_defaults_to_fixed_amount_and_validates():
    service, _ = _service()

    assert service.current_da(date(2026, 3, 1))["da_amount"] == Decimal("0")
    with pytest.raises(ValidationError):
        service.create_da({"da_amount": "100"})
    with pytest.raises(ValidationError):
        service.create_da({"da_amount": "100", "effective_from": "2026-03-01", "effective_to": "2026-02-01"})
    with pytest.raises(NotFoundError):
        service.update_da(5, {"da_amount": "1"})
