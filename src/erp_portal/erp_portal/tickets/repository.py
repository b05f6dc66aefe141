from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..common.pagination import Page, PageRequest
from .model import Ticket, TicketComment


class TicketRepository(Protocol):
    def create(self, *, values: dict, number_prefix: str) -> tuple[int, str]:
        """Insert with the next number under `number_prefix`; returns (id, number)."""

        raise NotImplementedError

    def get(self, ticket_id: int) -> Optional[Ticket]:
        raise NotImplementedError

    def list(self, *, filters: dict, page: PageRequest) -> Page[Ticket]:
        """Ordered urgent -> low, then newest first."""

        raise NotImplementedError

    def update(self, ticket_id: int, *, values: dict) -> bool:
        raise NotImplementedError

    def add_comment(self, *, ticket_id: int, user_id: int, comment: str, is_internal: bool) -> int:
        raise NotImplementedError

    def list_comments(self, ticket_id: int) -> Sequence[TicketComment]:
        raise NotImplementedError
