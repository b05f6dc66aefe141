from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Any, Callable, Mapping, Optional

from ..common.datetime_utils import now_local
from ..common.pagination import Page, PageRequest
from ..common.validators import require_positive_id, to_bool, to_int
from ..core.constants import DEFAULT_ACTIVE_WINDOW_SECONDS, DEFAULT_IDLE_THRESHOLD_SECONDS, MIN_PAGE_VIEW_MS
from ..core.enums import Presence
from ..core.exceptions import ValidationError
from .model import ActivityEntry, classify_presence
from .repository import ActivityRepository

logger = logging.getLogger(__name__)

VIEW_PAGE = "view_page"


def _pick(data: Mapping[str, Any], *names: str) -> Any:
    for name in names:
        if data.get(name) not in (None, ""):
            return data[name]
    return None


def parse_activity(raw: Any, *, user_id: Optional[int], index: int = 0) -> ActivityEntry:
    """Accepts the tracker's camelCase keys as well as snake_case."""

    if not isinstance(raw, dict):
        raise ValidationError(f"activities[{index}] must be an object")

    uid = to_int(_pick(raw, "user_id", "userId"), "user_id") or user_id
    if not uid:
        raise ValidationError("user_id is required")
    action_type = _pick(raw, "actionType", "action_type")
    resource_type = _pick(raw, "resourceType", "resource_type")
    if not action_type or not resource_type:
        raise ValidationError("actionType and resourceType are required")

    resource_id = _pick(raw, "resourceId", "resource_id")
    details = _pick(raw, "details", "metadata")
    if action_type == VIEW_PAGE:
        resource_id = _pick(raw, "page", "pageUrl", "resourceId", "resource_id") or resource_id

    return ActivityEntry(
        user_id=int(uid),
        action_type=str(action_type),
        resource_type=str(resource_type),
        resource_id=str(resource_id) if resource_id is not None else None,
        description=_pick(raw, "description"),
        details=details if isinstance(details, dict) else None,
        duration_ms=to_int(_pick(raw, "durationMs", "duration_ms"), "duration_ms"),
    )


class ActivityService:
    def __init__(
        self,
        activities: ActivityRepository,
        *,
        idle_threshold_seconds: int = DEFAULT_IDLE_THRESHOLD_SECONDS,
        active_window_seconds: int = DEFAULT_ACTIVE_WINDOW_SECONDS,
        clock: Callable[[], datetime] = now_local,
    ):
        self._activities = activities
        self._idle_threshold = int(idle_threshold_seconds)
        self._active_window = int(active_window_seconds)
        self._clock = clock

    def track(self, data: Mapping[str, Any], *, ip_address: Optional[str] = None, user_agent: Optional[str] = None) -> dict:
        user_id = to_int(_pick(data, "user_id", "userId"), "user_id")
        if to_bool(data.get("batch", False)):
            raw_items = data.get("activities")
            if not isinstance(raw_items, list):
                raise ValidationError("activities must be a list when batch is true")
        else:
            raw_items = [data]

        entries = []
        ignored = 0
        for idx, raw in enumerate(raw_items):
            entry = parse_activity(raw, user_id=user_id, index=idx)
            # Bounce-through navigation is not a page view
            if entry.action_type == VIEW_PAGE and entry.duration_ms is not None and entry.duration_ms < MIN_PAGE_VIEW_MS:
                ignored += 1
                continue
            entries.append(
                replace(entry, ip_address=ip_address, user_agent=user_agent)
            )

        logged = self._activities.insert_activities(entries)
        now = self._clock()
        for uid in sorted({e.user_id for e in entries}):
            last_page = next(
                (e.resource_id for e in reversed(entries) if e.user_id == uid and e.action_type == VIEW_PAGE),
                None,
            )
            self._activities.touch_activity(uid, at=now, page=last_page)
        return {"logged": logged, "ignored": ignored}

    def list(self, args: Mapping[str, Any], page: PageRequest) -> Page[dict]:
        filters = {
            "user_id": to_int(args.get("user_id"), "user_id"),
            "action_type": args.get("action_type") or None,
        }
        return self._activities.list_activities(filters=filters, page=page)

    def heartbeat(self, data: Mapping[str, Any]) -> dict:
        user_id = require_positive_id(_pick(data, "user_id", "userId"), "user_id")
        is_idle = to_bool(_pick(data, "is_idle", "isIdle") or False)
        now = self._clock()

        self._activities.upsert_heartbeat(
            user_id,
            at=now,
            is_idle=is_idle,
            current_page=_pick(data, "current_page", "currentPage"),
            active_ms=to_int(_pick(data, "active_ms", "activeMs"), "active_ms") or 0,
            idle_ms=to_int(_pick(data, "idle_ms", "idleMs"), "idle_ms") or 0,
        )
        opened = self._activities.open_session_if_none(user_id, at=now)
        if opened:
            logger.info("Work session opened for user %d", user_id)
        return {"status": "idle" if is_idle else "active", "session_started": opened}

    def end_session(self, data: Mapping[str, Any]) -> dict:
        user_id = require_positive_id(_pick(data, "user_id", "userId"), "user_id")
        now = self._clock()
        duration = self._activities.close_session(
            user_id,
            at=now,
            active_ms=to_int(_pick(data, "active_ms", "activeMs"), "active_ms") or 0,
            idle_ms=to_int(_pick(data, "idle_ms", "idleMs"), "idle_ms") or 0,
            reason=str(_pick(data, "reason") or "page_unload"),
        )
        self._activities.mark_offline(user_id, at=now)
        if duration is not None:
            logger.info("Work session closed for user %d after %ds", user_id, duration)
        return {"session_duration_seconds": duration}

    def active_users(self) -> list[dict]:
        now = self._clock()
        statuses = self._activities.statuses_seen_since(now - timedelta(seconds=self._active_window))

        out = []
        for s in statuses:
            presence = classify_presence(
                s,
                now=now,
                idle_threshold_seconds=self._idle_threshold,
                active_window_seconds=self._active_window,
            )
            if presence is Presence.OFFLINE:
                continue
            out.append(
                {
                    "user_id": s.user_id,
                    "full_name": s.full_name,
                    "email": s.email,
                    "presence": presence.value,
                    "current_page": s.current_page,
                    "last_activity": s.last_activity,
                    "last_heartbeat": s.last_heartbeat,
                    "session_started_at": s.session_started_at,
                    "session_duration_seconds": (
                        max(0, int((now - s.session_started_at).total_seconds())) if s.session_started_at else 0
                    ),
                    "active_ms": s.active_ms,
                    "idle_ms": s.idle_ms,
                }
            )
        return out
