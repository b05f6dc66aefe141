from __future__ import annotations

from flask import Flask, request

from ..common.http import api_route, json_body, ok
from ..common.pagination import parse_page_request
from ..container import Container


def register(app: Flask, container: Container) -> None:
    tickets = container.ticket_service

    @app.route("/api/tickets", methods=["POST"], endpoint="tickets_create")
    @api_route
    def tickets_create():
        result = tickets.create(json_body())
        return ok(201, message="Ticket created", **result)

    @app.route("/api/tickets", methods=["GET"], endpoint="tickets_list")
    @api_route
    def tickets_list():
        page = parse_page_request(
            request.args,
            default_limit=app.config["DEFAULT_PAGE_SIZE"],
            max_limit=app.config["MAX_PAGE_SIZE"],
        )
        result = tickets.list(request.args, page)
        return ok(data=[t.to_dict() for t in result.items], pagination=result.meta())

    @app.route("/api/tickets/<int:ticket_id>", methods=["GET"], endpoint="tickets_get")
    @api_route
    def tickets_get(ticket_id: int):
        return ok(data=tickets.get_with_comments(ticket_id))

    @app.route("/api/tickets/<int:ticket_id>", methods=["PUT"], endpoint="tickets_update")
    @api_route
    def tickets_update(ticket_id: int):
        return ok(message="Ticket updated", data=tickets.update(ticket_id, json_body()))

    @app.route("/api/tickets/<int:ticket_id>/comments", methods=["POST"], endpoint="tickets_add_comment")
    @api_route
    def tickets_add_comment(ticket_id: int):
        comment_id = tickets.add_comment(ticket_id, json_body())
        return ok(201, message="Comment added", id=comment_id)
