from __future__ import annotations

from datetime import date, datetime

import pytest

from src.erp_portal.erp_portal.attendance.compute import summarize_attendance
from src.erp_portal.erp_portal.attendance.model import (
    ComputedAttendanceRow,
    EmployeeRef,
    Punch,
    SaveResult,
)
from src.erp_portal.erp_portal.attendance.service import AttendanceService
from src.erp_portal.erp_portal.core.enums import AttendanceStatus
from src.erp_portal.erp_portal.core.exceptions import ValidationError


class FakePunchRepo:
    def __init__(self, punches=None):
        self.punches: list[Punch] = list(punches or [])

    def insert_punches(self, punches):
        stored = 0
        for p in punches:
            if any(q.biometric_code == p.biometric_code and q.punch_time == p.punch_time for q in self.punches):
                continue
            self.punches.append(p)
            stored += 1
        return stored

    def list_punches(self, *, start, end, biometric_code=None):
        return [
            p
            for p in self.punches
            if start <= p.punch_time <= end and (biometric_code is None or p.biometric_code == biometric_code)
        ]


class FakeAttendanceRepo:
    def __init__(self, employees=None):
        self.employees = list(employees or [])
        self.saved: dict[tuple[int, date], object] = {}
        self.rows: list[ComputedAttendanceRow] = []
        self.list_calls: list[dict] = []
        self.summary_calls: list[dict] = []

    def list_employees_with_biometric(self):
        return self.employees

    def save_computed(self, records, *, overwrite):
        inserted = updated = skipped = 0
        for r in records:
            key = (r.employee_id, r.attendance_date)
            if key in self.saved:
                if overwrite:
                    updated += 1
                    self.saved[key] = r
                else:
                    skipped += 1
                continue
            self.saved[key] = r
            inserted += 1
        return SaveResult(inserted=inserted, updated=updated, skipped=skipped)

    def list_computed(self, **kwargs):
        self.list_calls.append(kwargs)
        return self.rows

    def summarize(self, **kwargs):
        self.summary_calls.append(kwargs)
        return summarize_attendance([r.to_dict() for r in self.rows])


def _punches():
    return [
        Punch("B001", datetime(2026, 3, 2, 9, 0)),
        Punch("B001", datetime(2026, 3, 2, 18, 0)),
        Punch("B001", datetime(2026, 3, 3, 9, 40)),
        Punch("B001", datetime(2026, 3, 3, 18, 0)),
        Punch("B999", datetime(2026, 3, 2, 9, 0)),
        Punch("B999", datetime(2026, 3, 2, 18, 0)),
    ]


def _service(punches=None, employees=None):
    punch_repo = FakePunchRepo(punches)
    attendance_repo = FakeAttendanceRepo(employees)
    return AttendanceService(punch_repo, attendance_repo), punch_repo, attendance_repo


def test_compute_and_store_inserts_and_skips_unknown_codes():
    service, _, repo = _service(_punches(), [EmployeeRef(7, "B001", "Asha Rao")])

    result = service.compute_and_store(start=date(2026, 3, 1), end=date(2026, 3, 31))

    assert result["dateRange"] == {"startDate": "2026-03-01", "endDate": "2026-03-31"}
    assert result["stats"] == {
        "employeesProcessed": 1,
        "rawPunchesFound": 6,
        "recordsComputed": 3,
        "inserted": 2,
        "updated": 0,
        "skipped": 1,
    }
    assert repo.saved[(7, date(2026, 3, 3))].status == AttendanceStatus.LATE


def test_recompute_skips_without_overwrite_and_replaces_with_overwrite():
    service, _, _ = _service(_punches(), [EmployeeRef(7, "B001")])
    service.compute_and_store(start=date(2026, 3, 1), end=date(2026, 3, 31))

    again = service.compute_and_store(start=date(2026, 3, 1), end=date(2026, 3, 31))
    forced = service.compute_and_store(start=date(2026, 3, 1), end=date(2026, 3, 31), overwrite=True)

    assert again["stats"]["inserted"] == 0
    assert again["stats"]["skipped"] == 3
    assert forced["stats"]["updated"] == 2
    assert forced["stats"]["skipped"] == 1


def test_compute_without_employees_returns_zero_counts():
    service, _, _ = _service(_punches(), [])

    result = service.compute_and_store(start=date(2026, 3, 1), end=date(2026, 3, 31))

    assert result["message"] == "No employees with biometric codes found"
    assert result["stats"]["recordsComputed"] == 0


def test_compute_without_punches_in_range():
    service, _, _ = _service(_punches(), [EmployeeRef(7, "B001")])

    result = service.compute_and_store(start=date(2026, 4, 1), end=date(2026, 4, 30))

    assert result["message"] == "No punch data found for the specified date range"
    assert result["stats"]["employeesProcessed"] == 1
    assert result["stats"]["rawPunchesFound"] == 0


def test_compute_rejects_inverted_range():
    service, _, _ = _service()

    with pytest.raises(ValidationError):
        service.compute_and_store(start=date(2026, 3, 31), end=date(2026, 3, 1))


def test_import_punches_counts_duplicates():
    service, repo, _ = _service()
    payload = [
        {"biometric_code": "B001", "punch_time": "09:00:00", "direction": "in"},
        {"biometric_code": "B001", "punch_time": "2026-03-02T09:00:00"},
        {"biometric_code": "B001", "punch_time": "2026-03-02 18:01"},
    ]

    result = service.import_punches(payload)

    assert result == {"received": 3, "stored": 2, "duplicates": 1}
    assert repo.punches[0].direction == "in"


@pytest.mark.parametrize(
    "payload",
    [
        [],
        None,
        [{"punch_time": "2026-03-02 09:00"}],
        [{"biometric_code": "B001"}],
        [{"biometric_code": "B001", "punch_time": "yesterday"}],
    ],
)
def test_import_punches_rejects_bad_payloads(payload):
    service, _, _ = _service()

    with pytest.raises(ValidationError):
        service.import_punches(payload)


def _row(**overrides):
    values = dict(
        id=1,
        employee_id=7,
        employee_name="Asha Rao",
        department=None,
        biometric_code="B001",
        attendance_date=date(2026, 3, 2),
        first_in=datetime(2026, 3, 2, 9, 0),
        last_out=datetime(2026, 3, 2, 18, 0),
        work_duration_minutes=540,
        work_duration="09:00",
        late_by_minutes=0,
        early_out_minutes=0,
        overtime_minutes=0,
        status=AttendanceStatus.PRESENT,
        total_punches=2,
        punch_details=({"time": "09:00:00", "direction": None, "device_id": None},),
    )
    values.update(overrides)
    return ComputedAttendanceRow(**values)


def test_list_computed_includes_details_only_on_request():
    service, _, repo = _service()
    repo.rows = [_row()]

    plain = service.list_computed(start=date(2026, 3, 1), end=date(2026, 3, 31))
    detailed = service.list_computed(start=date(2026, 3, 1), end=date(2026, 3, 31), include_details=True)

    assert "punch_details" not in plain["data"][0]
    assert detailed["data"][0]["punch_details"][0]["time"] == "09:00:00"
    assert plain["summary"]["total_records"] == 1
    assert plain["summary"]["avg_work_minutes"] == 540.0


def test_list_computed_parses_status_filter():
    service, _, repo = _service()

    service.list_computed(status="Half Day")

    assert repo.list_calls[-1]["status"] == AttendanceStatus.HALF_DAY
    with pytest.raises(ValidationError):
        service.list_computed(status="Sleeping")


def test_export_rows_formats_for_csv():
    service, _, repo = _service()
    repo.rows = [_row(status=AttendanceStatus.LATE, late_by_minutes=12)]

    rows = service.export_rows()

    assert rows == [
        {
            "attendance_date": "2026-03-02",
            "employee_id": 7,
            "employee_name": "Asha Rao",
            "department": "-",
            "biometric_code": "B001",
            "first_in": "09:00",
            "last_out": "18:00",
            "work_duration": "09:00",
            "late_by_minutes": 12,
            "early_out_minutes": 0,
            "overtime_minutes": 0,
            "status": "Late",
        }
    ]


def test_summary_covers_the_date_range_not_the_employee_filter():
    service, _, repo = _service()
    repo.rows = [_row()]

    service.list_computed(start=date(2026, 3, 1), end=date(2026, 3, 31), employee_id=7, status="Present")

    assert repo.list_calls[-1]["employee_id"] == 7
    assert repo.summary_calls[-1] == {"start_date": date(2026, 3, 1), "end_date": date(2026, 3, 31)}
