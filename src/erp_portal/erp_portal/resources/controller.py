from __future__ import annotations

from flask import Flask, request

from ..common.http import api_route, json_body, ok, paged
from ..common.pagination import parse_page_request
from ..container import Container
from .service import ResourceService


def register_resource(app: Flask, service: ResourceService) -> None:
    """Mount list/create/get/update/delete for one resource at /api/<name>."""

    d = service.definition
    base = f"/api/{d.name}"
    prefix = d.endpoint_prefix

    @app.route(base, methods=["GET"], endpoint=f"{prefix}_list")
    @api_route
    def list_items():
        page = parse_page_request(
            request.args,
            default_limit=app.config["DEFAULT_PAGE_SIZE"],
            max_limit=app.config["MAX_PAGE_SIZE"],
        )
        return paged(service.list(service.build_query(request.args), page), **service.list_extras())

    @app.route(base, methods=["POST"], endpoint=f"{prefix}_create")
    @api_route
    def create_item():
        row = service.create(json_body())
        return ok(201, message=f"{d.label} created", data=row)

    @app.route(f"{base}/<int:item_id>", methods=["GET"], endpoint=f"{prefix}_get")
    @api_route
    def get_item(item_id: int):
        return ok(data=service.get(item_id))

    @app.route(f"{base}/<int:item_id>", methods=["PUT"], endpoint=f"{prefix}_update")
    @api_route
    def update_item(item_id: int):
        row = service.update(item_id, json_body())
        return ok(message=f"{d.label} updated", data=row)

    @app.route(f"{base}/<int:item_id>", methods=["DELETE"], endpoint=f"{prefix}_delete")
    @api_route
    def delete_item(item_id: int):
        service.delete(item_id)
        return ok(message=f"{d.label} deleted")


def register(app: Flask, container: Container) -> None:
    for service in container.resources.values():
        register_resource(app, service)
