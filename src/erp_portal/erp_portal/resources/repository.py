from __future__ import annotations

from typing import Any, Optional, Protocol

from ..common.pagination import Page, PageRequest
from .model import ListQuery, ResourceDefinition


class ResourceRepository(Protocol):
    """Row storage for one `ResourceDefinition`; rows are plain dicts."""

    definition: ResourceDefinition

    def list(self, query: ListQuery, page: PageRequest) -> Page[dict]:
        raise NotImplementedError

    def get(self, item_id: int) -> Optional[dict]:
        raise NotImplementedError

    def find_by(self, column: str, value: Any, *, exclude_id: Optional[int] = None) -> Optional[dict]:
        raise NotImplementedError

    def insert(self, values: dict) -> int:
        raise NotImplementedError

    def update(self, item_id: int, values: dict) -> bool:
        raise NotImplementedError

    def delete(self, item_id: int) -> bool:
        raise NotImplementedError

    def count_by(self, column: str) -> dict[str, int]:
        raise NotImplementedError

    def last_value(self, column: str, prefix: str) -> Optional[str]:
        """Highest `column` value starting with `prefix`, by numeric suffix."""

        raise NotImplementedError

    def values_ending_with(self, column: str, suffix: str) -> list[str]:
        raise NotImplementedError
