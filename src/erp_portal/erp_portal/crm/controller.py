from __future__ import annotations

import csv
import io

from flask import Flask, jsonify, request

from ..common.http import api_route, json_body, ok, paged
from ..common.pagination import parse_page_request
from ..container import Container
from ..core.exceptions import ValidationError
from ..resources.controller import register_resource
from .service import ProposalChildService


def _read_import_rows() -> list:
    """Rows from a JSON `{companies: [...]}` body or an uploaded CSV file."""

    upload = request.files.get("file")
    if upload is None:
        return json_body().get("companies") or []
    if not (upload.filename or "").lower().endswith(".csv"):
        raise ValidationError("Only CSV files can be imported")
    try:
        text = upload.read().decode("utf-8-sig")
    except UnicodeDecodeError:
        raise ValidationError("CSV file must be UTF-8 encoded")
    return list(csv.DictReader(io.StringIO(text)))


def _register_children(app: Flask, segment: str, service: ProposalChildService) -> None:
    base = f"/api/proposals/<int:proposal_id>/{segment}"
    prefix = service.definition.endpoint_prefix
    label = service.definition.label

    @app.route(base, methods=["GET"], endpoint=f"{prefix}_list")
    @api_route
    def list_children(proposal_id: int):
        page = parse_page_request(
            request.args,
            default_limit=app.config["DEFAULT_PAGE_SIZE"],
            max_limit=app.config["MAX_PAGE_SIZE"],
        )
        return paged(service.list_for(proposal_id, page))

    @app.route(base, methods=["POST"], endpoint=f"{prefix}_create")
    @api_route
    def add_child(proposal_id: int):
        row = service.add(proposal_id, json_body())
        return ok(201, message=f"{label} created", data=row)

    @app.route(f"{base}/<int:item_id>", methods=["PUT"], endpoint=f"{prefix}_update")
    @api_route
    def edit_child(proposal_id: int, item_id: int):
        row = service.edit(proposal_id, item_id, json_body())
        return ok(message=f"{label} updated", data=row)

    @app.route(f"{base}/<int:item_id>", methods=["DELETE"], endpoint=f"{prefix}_delete")
    @api_route
    def remove_child(proposal_id: int, item_id: int):
        service.remove(proposal_id, item_id)
        return ok(message=f"{label} deleted")


def register(app: Flask, container: Container) -> None:
    companies = container.company_service
    proposals = container.proposal_service

    @app.route("/api/companies/import", methods=["POST"], endpoint="companies_import")
    @api_route
    def companies_import():
        result = companies.import_rows(_read_import_rows())
        if not result["imported"]:
            return jsonify({"success": False, "error": "No companies were imported", **result}), 400
        return ok(201, **result)

    @app.route("/api/proposals/next-id", methods=["GET"], endpoint="proposals_next_id")
    @api_route
    def proposals_next_id():
        return ok(data={"proposal_id": proposals.next_proposal_id()})

    @app.route("/api/proposals/convert", methods=["POST"], endpoint="proposals_convert")
    @api_route
    def proposals_convert():
        data = json_body()
        ref = data.get("proposalId") or data.get("id")
        result = proposals.convert(ref)
        return ok(201, message="Proposal converted to project", data=result["project"], **result)

    register_resource(app, companies)
    register_resource(app, proposals)
    register_resource(app, container.followup_service)

    for segment, service in container.proposal_children.items():
        _register_children(app, segment, service)
