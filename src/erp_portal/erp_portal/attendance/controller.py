from __future__ import annotations

import csv
import io
from typing import Optional

from flask import Flask, request

from ..common.datetime_utils import parse_date_param
from ..common.http import api_route, json_body, ok
from ..common.validators import to_bool, to_int
from ..container import Container

CSV_FIELDS = [
    "attendance_date",
    "employee_id",
    "employee_name",
    "department",
    "biometric_code",
    "first_in",
    "last_out",
    "work_duration",
    "late_by_minutes",
    "early_out_minutes",
    "overtime_minutes",
    "status",
]


def register(app: Flask, container: Container) -> None:
    def _optional_date(name: str):
        value = request.args.get(name)
        return parse_date_param(value, name) if value else None

    def _filters() -> dict:
        return {
            "start": _optional_date("startDate"),
            "end": _optional_date("endDate"),
            "employee_id": to_int(request.args.get("employeeId"), "employeeId"),
            "status": request.args.get("status") or None,
        }

    @app.route("/api/attendance/punches", methods=["POST"], endpoint="attendance_import_punches")
    @api_route
    def attendance_import_punches():
        data = json_body()
        result = container.attendance_service.import_punches(data.get("punches"))
        return ok(201, message="Punches imported", **result)

    @app.route("/api/attendance/punches", methods=["GET"], endpoint="attendance_list_punches")
    @api_route
    def attendance_list_punches():
        start = parse_date_param(request.args.get("startDate"), "startDate")
        end = parse_date_param(request.args.get("endDate"), "endDate")
        code: Optional[str] = request.args.get("biometricCode") or None
        rows = container.attendance_service.list_punches(start=start, end=end, biometric_code=code)
        return ok(data=rows, total=len(rows))

    @app.route("/api/attendance/compute", methods=["POST"], endpoint="attendance_compute")
    @api_route
    def attendance_compute():
        data = json_body()
        start = parse_date_param(data.get("startDate"), "startDate")
        end = parse_date_param(data.get("endDate"), "endDate")
        result = container.attendance_service.compute_and_store(
            start=start,
            end=end,
            overwrite=to_bool(data.get("overwrite", False)),
        )
        return ok(**result)

    @app.route("/api/attendance/computed", methods=["GET"], endpoint="attendance_computed")
    @api_route
    def attendance_computed():
        result = container.attendance_service.list_computed(
            include_details=to_bool(request.args.get("includeDetails", "false")),
            **_filters(),
        )
        return ok(**result)

    @app.route("/api/attendance/computed.csv", methods=["GET"], endpoint="attendance_computed_csv")
    @api_route
    def attendance_computed_csv():
        filters = _filters()
        rows = container.attendance_service.export_rows(**filters)

        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=CSV_FIELDS)
        writer.writeheader()
        for row in rows:
            writer.writerow(row)

        start, end = filters["start"], filters["end"]
        suffix = f"_{start.strftime('%Y%m%d')}_{end.strftime('%Y%m%d')}" if start and end else ""
        csv_bytes = out.getvalue().encode("utf-8-sig")
        return app.response_class(
            csv_bytes,
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename=attendance{suffix}.csv"},
        )
