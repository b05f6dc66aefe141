from __future__ import annotations

from typing import Optional, Sequence

from ..common.pagination import Page, PageRequest
from ..core.enums import TicketCategory, TicketPriority, TicketQueue, TicketStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Ticket, TicketComment, next_ticket_number
from .repository import TicketRepository

_UPDATABLE = ("status", "priority", "assigned_to", "resolution_notes", "resolved_at", "resolved_by")
_FILTERABLE = ("status", "priority", "category", "routed_to", "user_id")


def _to_ticket(r: dict) -> Ticket:
    return Ticket(
        id=int(r["id"]),
        ticket_number=r["ticket_number"],
        user_id=int(r["user_id"]),
        subject=r["subject"],
        description=r.get("description") or "",
        category=TicketCategory(r["category"]),
        priority=TicketPriority(r["priority"]),
        status=TicketStatus(r["status"]),
        routed_to=TicketQueue(r["routed_to"]),
        assigned_to=int(r["assigned_to"]) if r.get("assigned_to") is not None else None,
        resolution_notes=r.get("resolution_notes"),
        resolved_at=r.get("resolved_at"),
        resolved_by=int(r["resolved_by"]) if r.get("resolved_by") is not None else None,
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
        requester_name=r.get("requester_name"),
    )


_SELECT = """
    SELECT t.*, u.full_name AS requester_name
    FROM support_tickets t
    LEFT JOIN users u ON u.id = t.user_id
"""


class MySQLTicketRepository(TicketRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, *, values: dict, number_prefix: str) -> tuple[int, str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT ticket_number FROM support_tickets
                WHERE ticket_number LIKE %s
                ORDER BY ticket_number DESC
                LIMIT 1
                FOR UPDATE
                """,
                (f"{number_prefix}%",),
            )
            last = fetchone(cur)
            number = next_ticket_number(number_prefix, last["ticket_number"] if last else None)
            cur.execute(
                """
                INSERT INTO support_tickets(ticket_number, user_id, subject, description, category, priority, status, routed_to)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    number,
                    int(values["user_id"]),
                    values["subject"],
                    values["description"],
                    values["category"],
                    values["priority"],
                    values["status"],
                    values["routed_to"],
                ),
            )
            return int(cur.lastrowid), number

    def get(self, ticket_id: int) -> Optional[Ticket]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE t.id=%s", (int(ticket_id),))
            r = fetchone(cur)
            return _to_ticket(r) if r else None

    def list(self, *, filters: dict, page: PageRequest) -> Page[Ticket]:
        clauses = ["1=1"]
        params: list[object] = []
        for name in _FILTERABLE:
            if filters.get(name) is not None:
                clauses.append(f"t.{name}=%s")
                params.append(filters[name])
        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM support_tickets t WHERE {where}", tuple(params))
            total = int((fetchone(cur) or {}).get("total") or 0)
            cur.execute(
                _SELECT
                + f"""
                WHERE {where}
                ORDER BY FIELD(t.priority, 'urgent', 'high', 'medium', 'low'), t.created_at DESC, t.id DESC
                LIMIT %s OFFSET %s
                """,
                tuple(params) + (page.limit, page.offset),
            )
            rows = fetchall(cur)
        return Page(items=[_to_ticket(r) for r in rows], page=page.page, limit=page.limit, total=total)

    def update(self, ticket_id: int, *, values: dict) -> bool:
        fields = [f for f in _UPDATABLE if f in values]
        if not fields:
            return True
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE support_tickets SET {', '.join(f'{f}=%s' for f in fields)} WHERE id=%s",
                tuple(values[f] for f in fields) + (int(ticket_id),),
            )
            return cur.rowcount > 0

    def add_comment(self, *, ticket_id: int, user_id: int, comment: str, is_internal: bool) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO ticket_comments(ticket_id, user_id, comment, is_internal)
                VALUES(%s,%s,%s,%s)
                """,
                (int(ticket_id), int(user_id), comment, 1 if is_internal else 0),
            )
            return int(cur.lastrowid)

    def list_comments(self, ticket_id: int) -> Sequence[TicketComment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT c.*, u.full_name AS user_name
                FROM ticket_comments c
                LEFT JOIN users u ON u.id = c.user_id
                WHERE c.ticket_id=%s
                ORDER BY c.created_at ASC, c.id ASC
                """,
                (int(ticket_id),),
            )
            return [
                TicketComment(
                    id=int(r["id"]),
                    ticket_id=int(r["ticket_id"]),
                    user_id=int(r["user_id"]),
                    comment=r["comment"],
                    is_internal=bool(r.get("is_internal")),
                    created_at=r.get("created_at"),
                    user_name=r.get("user_name"),
                )
                for r in fetchall(cur)
            ]
