from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import TodoStatus
from .model import Todo


class TodoRepository(Protocol):
    def list_for_user(
        self,
        user_id: int,
        *,
        status: Optional[TodoStatus] = None,
        include_completed: bool = False,
    ) -> Sequence[Todo]:
        raise NotImplementedError

    def get(self, todo_id: int) -> Optional[Todo]:
        raise NotImplementedError

    def create(self, *, values: dict) -> int:
        raise NotImplementedError

    def update(self, todo_id: int, *, values: dict) -> bool:
        raise NotImplementedError

    def delete(self, todo_id: int, *, user_id: int) -> bool:
        """False when the row is missing or belongs to someone else."""

        raise NotImplementedError
