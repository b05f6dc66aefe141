from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Presence


@dataclass(frozen=True)
class ActivityEntry:
    user_id: int
    action_type: str
    resource_type: str
    resource_id: Optional[str] = None
    description: Optional[str] = None
    details: Optional[dict] = None
    duration_ms: Optional[int] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


@dataclass(frozen=True)
class UserStatus:
    user_id: int
    is_online: bool
    is_idle: bool
    current_page: Optional[str]
    last_activity: Optional[datetime]
    last_heartbeat: Optional[datetime]
    session_started_at: Optional[datetime] = None
    active_ms: int = 0
    idle_ms: int = 0
    full_name: Optional[str] = None
    email: Optional[str] = None


def classify_presence(
    status: UserStatus,
    *,
    now: datetime,
    idle_threshold_seconds: int,
    active_window_seconds: int,
) -> Presence:
    """Offline outside the active window; idle when flagged or silent too long."""

    last_seen = max((t for t in (status.last_heartbeat, status.last_activity) if t is not None), default=None)
    if not status.is_online or last_seen is None:
        return Presence.OFFLINE
    if (now - last_seen).total_seconds() > active_window_seconds:
        return Presence.OFFLINE

    if status.is_idle:
        return Presence.IDLE
    if status.last_activity is None or (now - status.last_activity).total_seconds() > idle_threshold_seconds:
        return Presence.IDLE
    return Presence.ACTIVE
