from __future__ import annotations

from flask import Flask

from ..common.http import api_route, ok
from ..container import Container
from ..resources.controller import register_resource
from .service import DocumentService


def _register_kind(app: Flask, service: DocumentService) -> None:
    d = service.definition

    @app.route(f"/api/{d.name}/next-number", methods=["GET"], endpoint=f"{d.endpoint_prefix}_next_number")
    @api_route
    def next_number():
        number = service.next_number()
        return ok(data={service.kind.number_field: number, "next_number": number})

    register_resource(app, service)


def register(app: Flask, container: Container) -> None:
    for service in container.documents.values():
        _register_kind(app, service)
