from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..common.pagination import Page, PageRequest
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, decode_json, encode_json, fetchall, fetchone
from .model import ActivityEntry, UserStatus
from .repository import ActivityRepository


class MySQLActivityRepository(ActivityRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def insert_activities(self, entries: Sequence[ActivityEntry]) -> int:
        if not entries:
            return 0
        with db_cursor(self._conn_factory) as (_, cur):
            for e in entries:
                cur.execute(
                    """
                    INSERT INTO user_activity_logs(
                        user_id, action_type, resource_type, resource_id, description, details,
                        duration_ms, ip_address, user_agent
                    ) VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        int(e.user_id),
                        e.action_type,
                        e.resource_type,
                        e.resource_id,
                        e.description,
                        encode_json(e.details),
                        e.duration_ms,
                        e.ip_address,
                        e.user_agent,
                    ),
                )
        return len(entries)

    def list_activities(self, *, filters: dict, page: PageRequest) -> Page[dict]:
        clauses = ["1=1"]
        params: list[object] = []
        if filters.get("user_id") is not None:
            clauses.append("l.user_id=%s")
            params.append(int(filters["user_id"]))
        if filters.get("action_type"):
            clauses.append("l.action_type=%s")
            params.append(filters["action_type"])
        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM user_activity_logs l WHERE {where}", tuple(params))
            total = int((fetchone(cur) or {}).get("total") or 0)
            cur.execute(
                f"""
                SELECT l.*, u.full_name AS user_name
                FROM user_activity_logs l
                LEFT JOIN users u ON u.id = l.user_id
                WHERE {where}
                ORDER BY l.created_at DESC, l.id DESC
                LIMIT %s OFFSET %s
                """,
                tuple(params) + (page.limit, page.offset),
            )
            rows = fetchall(cur)

        items = []
        for r in rows:
            row = dict(r)
            row["details"] = decode_json(row.get("details"), None)
            items.append(row)
        return Page(items=items, page=page.page, limit=page.limit, total=total)

    def touch_activity(self, user_id: int, *, at: datetime, page: Optional[str]) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO user_status(user_id, is_online, is_idle, current_page, last_activity, last_heartbeat)
                VALUES(%s, 1, 0, %s, %s, %s)
                ON DUPLICATE KEY UPDATE
                    is_online=1, is_idle=0,
                    current_page=COALESCE(VALUES(current_page), current_page),
                    last_activity=VALUES(last_activity)
                """,
                (int(user_id), page, at, at),
            )

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
        with db_cursor(self._conn_factory) as (_, cur):
            # last_activity only moves while the user is not idle
            cur.execute(
                """
                INSERT INTO user_status(
                    user_id, is_online, is_idle, current_page, last_activity, last_heartbeat,
                    session_started_at, active_ms, idle_ms
                ) VALUES(%s, 1, %s, %s, %s, %s, %s, %s, %s)
                ON DUPLICATE KEY UPDATE
                    is_online=1,
                    is_idle=VALUES(is_idle),
                    current_page=COALESCE(VALUES(current_page), current_page),
                    last_activity=IF(VALUES(is_idle)=1, last_activity, VALUES(last_activity)),
                    last_heartbeat=VALUES(last_heartbeat),
                    session_started_at=COALESCE(session_started_at, VALUES(session_started_at)),
                    active_ms=VALUES(active_ms),
                    idle_ms=VALUES(idle_ms)
                """,
                (
                    int(user_id),
                    1 if is_idle else 0,
                    current_page,
                    None if is_idle else at,
                    at,
                    at,
                    int(active_ms),
                    int(idle_ms),
                ),
            )

    def open_session_if_none(self, user_id: int, *, at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT id FROM user_work_sessions WHERE user_id=%s AND ended_at IS NULL LIMIT 1 FOR UPDATE",
                (int(user_id),),
            )
            if fetchone(cur):
                return False
            cur.execute(
                "INSERT INTO user_work_sessions(user_id, started_at) VALUES(%s,%s)",
                (int(user_id), at),
            )
            cur.execute(
                "UPDATE user_status SET session_started_at=%s WHERE user_id=%s",
                (at, int(user_id)),
            )
            return True

    def close_session(self, user_id: int, *, at: datetime, active_ms: int, idle_ms: int, reason: str) -> Optional[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, started_at FROM user_work_sessions
                WHERE user_id=%s AND ended_at IS NULL
                ORDER BY started_at DESC
                LIMIT 1
                FOR UPDATE
                """,
                (int(user_id),),
            )
            row = fetchone(cur)
            if not row:
                return None
            duration = max(0, int((at - row["started_at"]).total_seconds()))
            cur.execute(
                """
                UPDATE user_work_sessions
                SET ended_at=%s, duration_seconds=%s, active_ms=%s, idle_ms=%s, end_reason=%s
                WHERE id=%s
                """,
                (at, duration, int(active_ms), int(idle_ms), reason, int(row["id"])),
            )
            return duration

    def mark_offline(self, user_id: int, *, at: datetime) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE user_status
                SET is_online=0, is_idle=0, last_heartbeat=%s, session_started_at=NULL
                WHERE user_id=%s
                """,
                (at, int(user_id)),
            )

    def statuses_seen_since(self, since: datetime) -> Sequence[UserStatus]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT s.*, u.full_name, u.email
                FROM user_status s
                LEFT JOIN users u ON u.id = s.user_id
                WHERE s.is_online=1 AND GREATEST(COALESCE(s.last_heartbeat, s.last_activity), COALESCE(s.last_activity, s.last_heartbeat)) >= %s
                ORDER BY s.last_activity DESC
                """,
                (since,),
            )
            return [
                UserStatus(
                    user_id=int(r["user_id"]),
                    is_online=bool(r.get("is_online")),
                    is_idle=bool(r.get("is_idle")),
                    current_page=r.get("current_page"),
                    last_activity=r.get("last_activity"),
                    last_heartbeat=r.get("last_heartbeat"),
                    session_started_at=r.get("session_started_at"),
                    active_ms=int(r.get("active_ms") or 0),
                    idle_ms=int(r.get("idle_ms") or 0),
                    full_name=r.get("full_name"),
                    email=r.get("email"),
                )
                for r in fetchall(cur)
            ]
