from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import TodoPriority, TodoStatus

PRIORITY_RANK = {TodoPriority.HIGH: 0, TodoPriority.MEDIUM: 1, TodoPriority.LOW: 2}
STATUS_RANK = {TodoStatus.IN_PROGRESS: 0, TodoStatus.PENDING: 1, TodoStatus.COMPLETED: 2}


@dataclass(frozen=True)
class Todo:
    id: int
    user_id: int
    title: str
    description: Optional[str] = None
    priority: TodoPriority = TodoPriority.MEDIUM
    status: TodoStatus = TodoStatus.PENDING
    due_date: Optional[date] = None
    completed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def sort_key(self) -> tuple:
        # Undated items sink below dated ones
        return (
            PRIORITY_RANK[self.priority],
            STATUS_RANK[self.status],
            self.due_date is None,
            self.due_date or date.max,
            self.id,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "title": self.title,
            "description": self.description,
            "priority": self.priority.value,
            "status": self.status.value,
            "due_date": self.due_date,
            "completed_at": self.completed_at,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
