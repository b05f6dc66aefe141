from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Mapping, Optional

from ..common.datetime_utils import now_local, parse_date_param
from ..common.validators import require_choice, require_max_length, require_non_empty, require_positive_id, to_bool
from ..core.enums import TodoPriority, TodoStatus
from ..core.exceptions import NotFoundError
from .model import Todo
from .repository import TodoRepository

PRIORITIES = [p.value for p in TodoPriority]
STATUSES = [s.value for s in TodoStatus]


class TodoService:
    def __init__(self, todos: TodoRepository, *, clock: Callable[[], datetime] = now_local):
        self._todos = todos
        self._clock = clock

    def list(self, args: Mapping[str, Any]) -> list[dict]:
        user_id = require_positive_id(args.get("user_id"), "user_id")
        status: Optional[TodoStatus] = None
        if args.get("status"):
            status = TodoStatus(require_choice(args["status"], "status", STATUSES))
        rows = self._todos.list_for_user(
            user_id,
            status=status,
            include_completed=to_bool(args.get("show_completed", False)),
        )
        return [t.to_dict() for t in rows]

    def create(self, data: Mapping[str, Any]) -> dict:
        values = {
            "user_id": require_positive_id(data.get("user_id"), "user_id"),
            "title": require_max_length(require_non_empty(data.get("title"), "title"), "title", 255),
            "description": (str(data.get("description") or "").strip() or None),
            "priority": require_choice(str(data.get("priority") or "medium"), "priority", PRIORITIES),
            "status": TodoStatus.PENDING.value,
            "due_date": parse_date_param(data["due_date"], "due_date") if data.get("due_date") else None,
        }
        todo_id = self._todos.create(values=values)
        return self._get(todo_id).to_dict()

    def _get(self, todo_id: int, *, user_id: Optional[int] = None) -> Todo:
        todo = self._todos.get(todo_id)
        if not todo or (user_id is not None and todo.user_id != int(user_id)):
            raise NotFoundError("Todo not found")
        return todo

    def update(self, todo_id: int, data: Mapping[str, Any]) -> dict:
        user_id = require_positive_id(data.get("user_id"), "user_id")
        current = self._get(todo_id, user_id=user_id)
        values: dict = {}

        if "title" in data:
            values["title"] = require_max_length(require_non_empty(data.get("title"), "title"), "title", 255)
        if "description" in data:
            values["description"] = str(data.get("description") or "").strip() or None
        if data.get("priority"):
            values["priority"] = require_choice(data["priority"], "priority", PRIORITIES)
        if "due_date" in data:
            values["due_date"] = parse_date_param(data["due_date"], "due_date") if data.get("due_date") else None
        if data.get("status"):
            status = TodoStatus(require_choice(data["status"], "status", STATUSES))
            values["status"] = status.value
            if status == TodoStatus.COMPLETED and current.status != TodoStatus.COMPLETED:
                values["completed_at"] = self._clock()
            elif status != TodoStatus.COMPLETED:
                values["completed_at"] = None

        self._todos.update(todo_id, values=values)
        return self._get(todo_id).to_dict()

    def delete(self, todo_id: int, user_id: Any) -> None:
        if not self._todos.delete(todo_id, user_id=require_positive_id(user_id, "user_id")):
            raise NotFoundError("Todo not found")
