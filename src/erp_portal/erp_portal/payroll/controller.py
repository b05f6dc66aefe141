from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import now_local, parse_date_param, parse_month
from ..common.http import api_route, json_body, ok
from ..common.validators import require_positive_id, to_int
from ..container import Container


def register(app: Flask, container: Container) -> None:
    salaries = container.salary_structure_service
    payroll = container.payroll_service

    @app.route("/api/employees/<int:employee_id>/salary-structures", methods=["GET"], endpoint="salary_structures_list")
    @api_route
    def salary_structures_list(employee_id: int):
        return ok(**salaries.list_for_employee(employee_id))

    @app.route("/api/employees/<int:employee_id>/salary-structures", methods=["POST"], endpoint="salary_structures_create")
    @api_route
    def salary_structures_create(employee_id: int):
        result = salaries.create_version(employee_id, json_body())
        return ok(201, message="Salary structure created", **result)

    @app.route(
        "/api/employees/<int:employee_id>/salary-structures/<int:structure_id>",
        methods=["PUT"],
        endpoint="salary_structures_update",
    )
    @api_route
    def salary_structures_update(employee_id: int, structure_id: int):
        data = salaries.update(employee_id, structure_id, json_body())
        return ok(message="Salary structure updated", data=data)

    @app.route("/api/payroll/da-schedule", methods=["GET"], endpoint="da_schedule_list")
    @api_route
    def da_schedule_list():
        return ok(data=payroll.list_da())

    @app.route("/api/payroll/da-schedule", methods=["POST"], endpoint="da_schedule_create")
    @api_route
    def da_schedule_create():
        entry_id = payroll.create_da(json_body())
        return ok(201, message="DA schedule entry created", id=entry_id)

    @app.route("/api/payroll/da-schedule/<int:entry_id>", methods=["PUT"], endpoint="da_schedule_update")
    @api_route
    def da_schedule_update(entry_id: int):
        return ok(message="DA schedule entry updated", data=payroll.update_da(entry_id, json_body()))

    @app.route("/api/payroll/da-schedule/current", methods=["GET"], endpoint="da_schedule_current")
    @api_route
    def da_schedule_current():
        raw = request.args.get("date")
        on_date = parse_date_param(raw, "date") if raw else now_local().date()
        return ok(data=payroll.current_da(on_date))

    @app.route("/api/payroll/calculate", methods=["POST"], endpoint="payroll_calculate")
    @api_route
    def payroll_calculate():
        data = json_body()
        employee_id = require_positive_id(data.get("employee_id"), "employee_id")
        breakdown = payroll.calculate(employee_id, parse_month(data.get("month")))
        return ok(data=breakdown.to_dict())

    @app.route("/api/payroll/generate", methods=["POST"], endpoint="payroll_generate")
    @api_route
    def payroll_generate():
        data = json_body()
        month = parse_month(data.get("month"))
        employee_id = to_int(data.get("employee_id"), "employee_id")
        result = payroll.generate(month, employee_id)
        if employee_id is not None:
            return ok(201, message="Payroll generated", **result)
        return ok(message="Payroll run completed", results=result)

    @app.route("/api/payroll/slips", methods=["GET"], endpoint="payroll_slips")
    @api_route
    def payroll_slips():
        raw_month = request.args.get("month")
        rows = payroll.list_slips(
            month=parse_month(raw_month) if raw_month else None,
            employee_id=to_int(request.args.get("employee_id"), "employee_id"),
        )
        return ok(data=rows, total=len(rows))
