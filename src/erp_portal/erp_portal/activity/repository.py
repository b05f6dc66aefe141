from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..common.pagination import Page, PageRequest
from .model import ActivityEntry, UserStatus


class ActivityRepository(Protocol):
    def insert_activities(self, entries: Sequence[ActivityEntry]) -> int:
        raise NotImplementedError

    def list_activities(self, *, filters: dict, page: PageRequest) -> Page[dict]:
        raise NotImplementedError

    def touch_activity(self, user_id: int, *, at: datetime, page: Optional[str]) -> None:
        raise NotImplementedError

    def upsert_heartbeat(
        self,
        user_id: int,
        *,
        at: datetime,
        is_idle: bool,
        current_page: Optional[str],
        active_ms: int,
        idle_ms: int,
    ) -> None:
        raise NotImplementedError

    def open_session_if_none(self, user_id: int, *, at: datetime) -> bool:
        """True when a new work session was opened."""

        raise NotImplementedError

    def close_session(self, user_id: int, *, at: datetime, active_ms: int, idle_ms: int, reason: str) -> Optional[int]:
        """Close the open session; returns its duration in seconds or None."""

        raise NotImplementedError

    def mark_offline(self, user_id: int, *, at: datetime) -> None:
        raise NotImplementedError

    def statuses_seen_since(self, since: datetime) -> Sequence[UserStatus]:
        raise NotImplementedError
