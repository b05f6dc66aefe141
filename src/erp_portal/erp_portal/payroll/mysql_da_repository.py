from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import DAEntry
from .repository import DAScheduleRepository


def _to_entry(r: dict) -> DAEntry:
    return DAEntry(
        id=int(r["id"]),
        da_amount=Decimal(str(r["da_amount"])),
        effective_from=r["effective_from"],
        effective_to=r.get("effective_to"),
        is_active=bool(r.get("is_active")),
        remarks=r.get("remarks"),
    )


class MySQLDAScheduleRepository(DAScheduleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list(self) -> Sequence[DAEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT * FROM da_schedule ORDER BY effective_from DESC, id DESC")
            return [_to_entry(r) for r in fetchall(cur)]

    def get(self, entry_id: int) -> Optional[DAEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT * FROM da_schedule WHERE id=%s", (int(entry_id),))
            r = fetchone(cur)
            return _to_entry(r) if r else None

    def create(self, *, values: dict) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            if values.get("is_active"):
                # Only one active DA rate at a time
                cur.execute("UPDATE da_schedule SET is_active=0 WHERE is_active=1")
            cur.execute(
                """
                INSERT INTO da_schedule(da_amount, effective_from, effective_to, is_active, remarks)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (
                    values["da_amount"],
                    values["effective_from"],
                    values.get("effective_to"),
                    1 if values.get("is_active") else 0,
                    values.get("remarks"),
                ),
            )
            return int(cur.lastrowid)

    def update(self, entry_id: int, *, values: dict) -> bool:
        fields = [f for f in ("da_amount", "effective_from", "effective_to", "is_active", "remarks") if f in values]
        with db_cursor(self._conn_factory) as (_, cur):
            if values.get("is_active"):
                cur.execute("UPDATE da_schedule SET is_active=0 WHERE id<>%s", (int(entry_id),))
            if fields:
                cur.execute(
                    f"UPDATE da_schedule SET {', '.join(f'{f}=%s' for f in fields)} WHERE id=%s",
                    tuple((1 if values[f] else 0) if f == "is_active" else values[f] for f in fields) + (int(entry_id),),
                )
        return True

    def get_for_date(self, on_date: date) -> Optional[DAEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT *
                FROM da_schedule
                WHERE is_active=1
                  AND %s BETWEEN effective_from AND COALESCE(effective_to, '9999-12-31')
                ORDER BY effective_from DESC
                LIMIT 1
                """,
                (on_date,),
            )
            r = fetchone(cur)
            return _to_entry(r) if r else None
