from __future__ import annotations

from dataclasses import replace
from datetime import date

import pytest

from src.erp_portal.erp_portal.core.enums import TodoPriority, TodoStatus
from src.erp_portal.erp_portal.core.exceptions import NotFoundError, ValidationError
from src.erp_portal.erp_portal.todos.model import Todo
from src.erp_portal.erp_portal.todos.service import TodoService


class FakeTodoRepo:
    def __init__(self):
        self.todos: dict[int, Todo] = {}

    def list_for_user(self, user_id, *, status=None, include_completed=False):
        rows = [t for t in self.todos.values() if t.user_id == int(user_id)]
        if status is not None:
            rows = [t for t in rows if t.status == status]
        elif not include_completed:
            rows = [t for t in rows if t.status != TodoStatus.COMPLETED]
        return sorted(rows, key=Todo.sort_key)

    def get(self, todo_id):
        return self.todos.get(int(todo_id))

    def create(self, *, values):
        todo_id = len(self.todos) + 1
        self.todos[todo_id] = Todo(
            id=todo_id,
            user_id=values["user_id"],
            title=values["title"],
            description=values["description"],
            priority=TodoPriority(values["priority"]),
            status=TodoStatus(values["status"]),
            due_date=values["due_date"],
        )
        return todo_id

    def update(self, todo_id, *, values):
        changes = dict(values)
        if "priority" in changes:
            changes["priority"] = TodoPriority(changes["priority"])
        if "status" in changes:
            changes["status"] = TodoStatus(changes["status"])
        self.todos[int(todo_id)] = replace(self.todos[int(todo_id)], **changes)
        return True

    def delete(self, todo_id, *, user_id):
        todo = self.todos.get(int(todo_id))
        if not todo or todo.user_id != int(user_id):
            return False
        del self.todos[int(todo_id)]
        return True


@pytest.fixture
def service(clock):
    return TodoService(FakeTodoRepo(), clock=clock)


def test_list_orders_by_priority_status_then_due_date(service):
    low = service.create({"user_id": 1, "title": "Archive mail", "priority": "low"})
    late = service.create({"user_id": 1, "title": "Submit timesheet", "priority": "high", "due_date": "2026-03-20"})
    soon = service.create({"user_id": 1, "title": "Approve PO", "priority": "high", "due_date": "2026-03-12"})
    undated = service.create({"user_id": 1, "title": "Book travel", "priority": "high"})
    busy = service.create({"user_id": 1, "title": "Review invoice", "priority": "high", "due_date": "2026-04-01"})
    service.update(busy["id"], {"user_id": 1, "status": "in_progress"})
    service.create({"user_id": 2, "title": "Someone else's"})

    titles = [t["title"] for t in service.list({"user_id": "1"})]

    assert titles == [busy["title"], soon["title"], late["title"], undated["title"], low["title"]]


def test_completed_hidden_unless_requested(service):
    done = service.create({"user_id": 1, "title": "Done"})
    service.create({"user_id": 1, "title": "Open"})
    service.update(done["id"], {"user_id": 1, "status": "completed"})

    assert [t["title"] for t in service.list({"user_id": 1})] == ["Open"]
    assert len(service.list({"user_id": 1, "show_completed": "true"})) == 2
    assert [t["title"] for t in service.list({"user_id": 1, "status": "completed"})] == ["Done"]


def test_completion_stamps_and_reopening_clears(service, fixed_now):
    todo = service.create({"user_id": 1, "title": "Call vendor", "due_date": "2026-03-11"})

    completed = service.update(todo["id"], {"user_id": 1, "status": "completed"})
    reopened = service.update(todo["id"], {"user_id": 1, "status": "pending"})

    assert todo["due_date"] == date(2026, 3, 11)
    assert completed["completed_at"] == fixed_now
    assert reopened["completed_at"] is None


def test_user_id_and_title_required(service):
    with pytest.raises(ValidationError):
        service.list({})
    with pytest.raises(ValidationError):
        service.create({"user_id": 1, "title": " "})
    with pytest.raises(ValidationError):
        service.create({"user_id": 1, "title": "x", "priority": "urgent"})


def test_other_users_todo_is_not_found(service):
    todo = service.create({"user_id": 1, "title": "Mine"})

    with pytest.raises(NotFoundError):
        service.update(todo["id"], {"user_id": 2, "title": "Yours now"})
    with pytest.raises(NotFoundError):
        service.delete(todo["id"], 2)

    service.delete(todo["id"], 1)
    with pytest.raises(NotFoundError):
        service.delete(todo["id"], 1)
