from __future__ import annotations

import re
from typing import Any, Optional

import mysql.connector

from ..common.pagination import Page, PageRequest
from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, decode_json, encode_json, fetchall, fetchone, is_duplicate_key, placeholders
from .model import ListQuery, ResourceDefinition
from .repository import ResourceRepository

_IDENT = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _q(name: str) -> str:
    # Identifiers come from ResourceDefinition, never from the request
    if not _IDENT.match(name):
        raise ValueError(f"Invalid SQL identifier: {name!r}")
    return f"`{name}`"


class MySQLResourceRepository(ResourceRepository):
    def __init__(self, conn_factory: DatabaseConnection, definition: ResourceDefinition):
        self._conn_factory = conn_factory
        self.definition = definition

    def _decode(self, row: dict) -> dict:
        d = self.definition
        out = dict(row)
        for name in d.fields_of_kind("json"):
            if name in out:
                out[name] = decode_json(out[name], None)
        for name in d.fields_of_kind("bool"):
            if out.get(name) is not None:
                out[name] = bool(out[name])
        return out

    def _encode(self, values: dict) -> dict:
        json_fields = set(self.definition.fields_of_kind("json"))
        return {k: (encode_json(v) if k in json_fields else v) for k, v in values.items()}

    def _select(self) -> str:
        return ", ".join(_q(c) for c in self.definition.columns)

    def list(self, query: ListQuery, page: PageRequest) -> Page[dict]:
        d = self.definition
        clauses = ["1=1"]
        params: list[Any] = []

        if query.search and d.search_fields:
            term = f"%{query.search.strip().lower()}%"
            clauses.append("(" + " OR ".join(f"LOWER({_q(c)}) LIKE %s" for c in d.search_fields) + ")")
            params.extend([term] * len(d.search_fields))

        for column, value in query.filters:
            clauses.append(f"{_q(column)}=%s")
            params.append(value)

        sort_by = query.sort_by if query.sort_by in d.sort_fields else d.default_sort
        order = "ASC" if str(query.sort_order).lower() == "asc" else "DESC"
        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM {_q(d.table)} WHERE {where}", tuple(params))
            total = int((fetchone(cur) or {}).get("total") or 0)

            # Primary key tie-break keeps page windows stable
            cur.execute(
                f"""
                SELECT {self._select()}
                FROM {_q(d.table)}
                WHERE {where}
                ORDER BY {_q(sort_by)} {order}, {_q(d.pk)} {order}
                LIMIT %s OFFSET %s
                """,
                tuple(params) + (page.limit, page.offset),
            )
            rows = fetchall(cur)

        return Page(items=[self._decode(r) for r in rows], page=page.page, limit=page.limit, total=total)

    def get(self, item_id: int) -> Optional[dict]:
        d = self.definition
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {self._select()} FROM {_q(d.table)} WHERE {_q(d.pk)}=%s", (int(item_id),))
            row = fetchone(cur)
        return self._decode(row) if row else None

    def find_by(self, column: str, value: Any, *, exclude_id: Optional[int] = None) -> Optional[dict]:
        d = self.definition
        sql = f"SELECT {self._select()} FROM {_q(d.table)} WHERE {_q(column)}=%s"
        params: list[Any] = [value]
        if exclude_id is not None:
            sql += f" AND {_q(d.pk)}<>%s"
            params.append(int(exclude_id))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql + " LIMIT 1", tuple(params))
            row = fetchone(cur)
        return self._decode(row) if row else None

    def insert(self, values: dict) -> int:
        d = self.definition
        encoded = self._encode(values)
        columns = ", ".join(_q(c) for c in encoded)
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"INSERT INTO {_q(d.table)}({columns}) VALUES({placeholders(len(encoded))})",
                    tuple(encoded.values()),
                )
                return int(cur.lastrowid)
        except mysql.connector.IntegrityError as e:
            if is_duplicate_key(e):
                raise ConflictError(f"{d.label} already exists")
            raise

    def update(self, item_id: int, values: dict) -> bool:
        d = self.definition
        if not values:
            return True
        encoded = self._encode(values)
        assignments = ", ".join(f"{_q(c)}=%s" for c in encoded)
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"UPDATE {_q(d.table)} SET {assignments}, `updated_at`=CURRENT_TIMESTAMP WHERE {_q(d.pk)}=%s",
                    tuple(encoded.values()) + (int(item_id),),
                )
                return cur.rowcount > 0
        except mysql.connector.IntegrityError as e:
            if is_duplicate_key(e):
                raise ConflictError(f"{d.label} already exists")
            raise

    def delete(self, item_id: int) -> bool:
        d = self.definition
        with db_cursor(self._conn_factory) as (_, cur):
            if d.soft_delete:
                column, value = d.soft_delete
                cur.execute(
                    f"UPDATE {_q(d.table)} SET {_q(column)}=%s, `updated_at`=CURRENT_TIMESTAMP WHERE {_q(d.pk)}=%s",
                    (value, int(item_id)),
                )
            else:
                cur.execute(f"DELETE FROM {_q(d.table)} WHERE {_q(d.pk)}=%s", (int(item_id),))
            return cur.rowcount > 0

    def count_by(self, column: str) -> dict[str, int]:
        d = self.definition
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_q(column)} AS k, COUNT(*) AS n FROM {_q(d.table)} GROUP BY {_q(column)}")
            return {str(r["k"]): int(r["n"]) for r in fetchall(cur) if r.get("k") is not None}

    def last_value(self, column: str, prefix: str) -> Optional[str]:
        d = self.definition
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_q(column)} AS v
                FROM {_q(d.table)}
                WHERE {_q(column)} LIKE %s
                ORDER BY CAST(SUBSTRING({_q(column)}, %s) AS UNSIGNED) DESC
                LIMIT 1
                """,
                (f"{prefix}%", len(prefix) + 1),
            )
            row = fetchone(cur)
        return str(row["v"]) if row else None

    def values_ending_with(self, column: str, suffix: str) -> list[str]:
        d = self.definition
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_q(column)} AS v FROM {_q(d.table)} WHERE {_q(column)} LIKE %s",
                (f"%{suffix}",),
            )
            return [str(r["v"]) for r in fetchall(cur)]
