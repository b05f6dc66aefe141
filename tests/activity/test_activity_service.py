from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from src.erp_portal.erp_portal.activity.model import UserStatus, classify_presence
from src.erp_portal.erp_portal.activity.service import ActivityService
from src.erp_portal.erp_portal.common.pagination import Page, PageRequest
from src.erp_portal.erp_portal.core.enums import Presence
from src.erp_portal.erp_portal.core.exceptions import ValidationError


class FakeActivityRepo:
    def __init__(self):
        self.entries = []
        self.touched = []
        self.heartbeats = []
        self.open_sessions: dict[int, datetime] = {}
        self.closed = []
        self.offline = []
        self.statuses: list[UserStatus] = []
        self.seen_since = None

    def insert_activities(self, entries):
        self.entries.extend(entries)
        return len(entries)

    def list_activities(self, *, filters, page):
        rows = [e.__dict__ for e in self.entries if filters.get("user_id") in (None, e.user_id)]
        return Page(items=rows, page=page.page, limit=page.limit, total=len(rows))

    def touch_activity(self, user_id, *, at, page):
        self.touched.append((user_id, at, page))

    def upsert_heartbeat(self, user_id, **kwargs):
        self.heartbeats.append((user_id, kwargs))

    def open_session_if_none(self, user_id, *, at):
        if user_id in self.open_sessions:
            return False
        self.open_sessions[user_id] = at
        return True

    def close_session(self, user_id, *, at, active_ms, idle_ms, reason):
        started = self.open_sessions.pop(user_id, None)
        if started is None:
            return None
        self.closed.append((user_id, reason, active_ms, idle_ms))
        return int((at - started).total_seconds())

    def mark_offline(self, user_id, *, at):
        self.offline.append(user_id)

    def statuses_seen_since(self, since):
        self.seen_since = since
        return self.statuses


@pytest.fixture
def repo():
    return FakeActivityRepo()


@pytest.fixture
def service(repo, clock):
    return ActivityService(repo, idle_threshold_seconds=300, active_window_seconds=600, clock=clock)


def test_single_activity_is_logged_and_touches_status(service, repo, fixed_now):
    result = service.track(
        {"user_id": 4, "actionType": "view_page", "resourceType": "page", "page": "/projects", "durationMs": 5000},
        ip_address="10.0.0.5",
        user_agent="pytest",
    )

    assert result == {"logged": 1, "ignored": 0}
    entry = repo.entries[0]
    assert entry.resource_id == "/projects"
    assert entry.ip_address == "10.0.0.5"
    assert repo.touched == [(4, fixed_now, "/projects")]


def test_batch_accepts_snake_case_and_per_item_user(service, repo):
    result = service.track(
        {
            "batch": True,
            "activities": [
                {"user_id": 4, "action_type": "create", "resource_type": "invoice", "resource_id": 12},
                {"userId": 5, "actionType": "update", "resourceType": "lead", "details": {"field": "city"}},
            ],
        }
    )

    assert result["logged"] == 2
    assert [e.user_id for e in repo.entries] == [4, 5]
    assert repo.entries[0].resource_id == "12"
    assert repo.entries[1].details == {"field": "city"}
    assert sorted(t[0] for t in repo.touched) == [4, 5]


def test_bounce_page_views_are_ignored(service, repo):
    result = service.track({"user_id": 4, "actionType": "view_page", "resourceType": "page", "durationMs": 300})

    assert result == {"logged": 0, "ignored": 1}
    assert repo.entries == []


@pytest.mark.parametrize(
    "payload",
    [
        {"actionType": "create", "resourceType": "lead"},
        {"user_id": 4, "resourceType": "lead"},
        {"user_id": 4, "actionType": "create"},
        {"user_id": 4, "batch": True, "activities": "nope"},
        {"user_id": 4, "batch": True, "activities": ["nope"]},
    ],
)
def test_track_validation(service, payload):
    with pytest.raises(ValidationError):
        service.track(payload)


def test_heartbeat_opens_one_session(service, repo):
    first = service.heartbeat({"user_id": 4, "current_page": "/dashboard", "active_ms": 1000})
    second = service.heartbeat({"user_id": 4, "is_idle": True})

    assert first == {"status": "active", "session_started": True}
    assert second == {"status": "idle", "session_started": False}
    assert repo.heartbeats[0][1]["current_page"] == "/dashboard"
    assert repo.heartbeats[1][1]["is_idle"] is True


def test_end_session_closes_and_marks_offline(service, repo, fixed_now):
    repo.open_sessions[4] = fixed_now - timedelta(minutes=30)

    result = service.end_session({"userId": 4, "activeMs": 1200000, "reason": "logout"})
    again = service.end_session({"user_id": 4})

    assert result == {"session_duration_seconds": 1800}
    assert again == {"session_duration_seconds": None}
    assert repo.closed == [(4, "logout", 1200000, 0)]
    assert repo.offline == [4, 4]


def _status(now, *, activity_ago, heartbeat_ago=None, is_idle=False, online=True, **extra):
    return UserStatus(
        user_id=extra.pop("user_id", 1),
        is_online=online,
        is_idle=is_idle,
        current_page="/home",
        last_activity=now - timedelta(seconds=activity_ago) if activity_ago is not None else None,
        last_heartbeat=now - timedelta(seconds=heartbeat_ago) if heartbeat_ago is not None else None,
        **extra,
    )


def test_classify_presence(fixed_now):
    def presence(**kwargs):
        return classify_presence(
            _status(fixed_now, **kwargs), now=fixed_now, idle_threshold_seconds=300, active_window_seconds=600
        )

    assert presence(activity_ago=10) == Presence.ACTIVE
    assert presence(activity_ago=10, is_idle=True) == Presence.IDLE
    assert presence(activity_ago=400, heartbeat_ago=20) == Presence.IDLE
    assert presence(activity_ago=None, heartbeat_ago=20) == Presence.IDLE
    assert presence(activity_ago=700) == Presence.OFFLINE
    assert presence(activity_ago=10, online=False) == Presence.OFFLINE
    assert presence(activity_ago=None) == Presence.OFFLINE


def test_active_users_reports_presence_and_session_length(service, repo, fixed_now):
    repo.statuses = [
        _status(fixed_now, activity_ago=30, user_id=1, session_started_at=fixed_now - timedelta(hours=2)),
        _status(fixed_now, activity_ago=420, heartbeat_ago=15, user_id=2),
        _status(fixed_now, activity_ago=900, user_id=3),
    ]

    users = service.active_users()

    assert repo.seen_since == fixed_now - timedelta(seconds=600)
    assert [(u["user_id"], u["presence"]) for u in users] == [(1, "active"), (2, "idle")]
    assert users[0]["session_duration_seconds"] == 7200
    assert users[1]["session_duration_seconds"] == 0
    assert users[0]["current_page"] == "/home"


def test_list_passes_filters(service, repo):
    service.track({"user_id": 4, "actionType": "create", "resourceType": "lead"})
    service.track({"user_id": 5, "actionType": "create", "resourceType": "lead"})

    page = service.list({"user_id": "5"}, PageRequest())

    assert page.total == 1
