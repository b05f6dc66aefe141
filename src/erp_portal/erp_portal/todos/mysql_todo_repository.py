from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import TodoPriority, TodoStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Todo
from .repository import TodoRepository

_UPDATABLE = ("title", "description", "priority", "status", "due_date", "completed_at")


def _to_todo(r: dict) -> Todo:
    return Todo(
        id=int(r["id"]),
        user_id=int(r["user_id"]),
        title=r["title"],
        description=r.get("description"),
        priority=TodoPriority(r.get("priority") or "medium"),
        status=TodoStatus(r.get("status") or "pending"),
        due_date=r.get("due_date"),
        completed_at=r.get("completed_at"),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


class MySQLTodoRepository(TodoRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_for_user(
        self,
        user_id: int,
        *,
        status: Optional[TodoStatus] = None,
        include_completed: bool = False,
    ) -> Sequence[Todo]:
        clauses = ["user_id=%s"]
        params: list[object] = [int(user_id)]
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)
        elif not include_completed:
            clauses.append("status<>'completed'")

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT * FROM todos
                WHERE {' AND '.join(clauses)}
                ORDER BY
                    FIELD(priority, 'high', 'medium', 'low'),
                    FIELD(status, 'in_progress', 'pending', 'completed'),
                    due_date IS NULL, due_date ASC, id ASC
                """,
                tuple(params),
            )
            return [_to_todo(r) for r in fetchall(cur)]

    def get(self, todo_id: int) -> Optional[Todo]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT * FROM todos WHERE id=%s", (int(todo_id),))
            r = fetchone(cur)
            return _to_todo(r) if r else None

    def create(self, *, values: dict) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO todos(user_id, title, description, priority, status, due_date)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(values["user_id"]),
                    values["title"],
                    values.get("description"),
                    values.get("priority", "medium"),
                    values.get("status", "pending"),
                    values.get("due_date"),
                ),
            )
            return int(cur.lastrowid)

    def update(self, todo_id: int, *, values: dict) -> bool:
        fields = [f for f in _UPDATABLE if f in values]
        if not fields:
            return True
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE todos SET {', '.join(f'{f}=%s' for f in fields)} WHERE id=%s",
                tuple(values[f] for f in fields) + (int(todo_id),),
            )
            return cur.rowcount > 0

    def delete(self, todo_id: int, *, user_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM todos WHERE id=%s AND user_id=%s", (int(todo_id), int(user_id)))
            return cur.rowcount > 0
