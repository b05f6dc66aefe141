from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import Punch
from .repository import PunchRepository


class MySQLPunchRepository(PunchRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def insert_punches(self, punches: Sequence[Punch]) -> int:
        if not punches:
            return 0
        stored = 0
        with db_cursor(self._conn_factory) as (_, cur):
            for p in punches:
                # UNIQUE(biometric_code, punch_time) drops re-imported events
                cur.execute(
                    """
                    INSERT IGNORE INTO raw_punches(biometric_code, punch_time, direction, device_id)
                    VALUES(%s,%s,%s,%s)
                    """,
                    (p.biometric_code, p.punch_time, p.direction, p.device_id),
                )
                stored += max(int(cur.rowcount or 0), 0)
        return stored

    def list_punches(
        self,
        *,
        start: datetime,
        end: datetime,
        biometric_code: Optional[str] = None,
    ) -> Sequence[Punch]:
        clauses = ["punch_time BETWEEN %s AND %s"]
        params: list[object] = [start, end]
        if biometric_code:
            clauses.append("biometric_code=%s")
            params.append(str(biometric_code))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT biometric_code, punch_time, direction, device_id
                FROM raw_punches
                WHERE {' AND '.join(clauses)}
                ORDER BY biometric_code ASC, punch_time ASC
                """,
                tuple(params),
            )
            return [
                Punch(
                    biometric_code=str(r["biometric_code"]),
                    punch_time=r["punch_time"],
                    direction=r.get("direction"),
                    device_id=r.get("device_id"),
                )
                for r in fetchall(cur)
            ]
