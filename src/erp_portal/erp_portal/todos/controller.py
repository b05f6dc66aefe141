from __future__ import annotations

from flask import Flask, request

from ..common.http import api_route, json_body, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    todos = container.todo_service

    @app.route("/api/todos", methods=["GET"], endpoint="todos_list")
    @api_route
    def todos_list():
        rows = todos.list(request.args)
        return ok(data=rows, total=len(rows))

    @app.route("/api/todos", methods=["POST"], endpoint="todos_create")
    @api_route
    def todos_create():
        return ok(201, message="Todo created", data=todos.create(json_body()))

    @app.route("/api/todos/<int:todo_id>", methods=["PUT"], endpoint="todos_update")
    @api_route
    def todos_update(todo_id: int):
        return ok(message="Todo updated", data=todos.update(todo_id, json_body()))

    @app.route("/api/todos/<int:todo_id>", methods=["DELETE"], endpoint="todos_delete")
    @api_route
    def todos_delete(todo_id: int):
        user_id = request.args.get("user_id")
        if user_id is None:
            user_id = json_body().get("user_id")
        todos.delete(todo_id, user_id)
        return ok(message="Todo deleted")
