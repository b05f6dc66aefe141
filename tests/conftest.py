from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

import pytest

from src.erp_portal.erp_portal.common.pagination import Page


class FakeResourceRepo:
    """In-memory stand-in for MySQLResourceRepository."""

    def __init__(self, definition, rows: Optional[list[dict]] = None):
        self.definition = definition
        self.rows: dict[int, dict] = {}
        self._next_id = 1
        for row in rows or []:
            self.insert(dict(row))

    def _blank(self) -> dict:
        return {c: None for c in self.definition.columns}

    def list(self, query, page):
        d = self.definition
        rows = list(self.rows.values())
        if query.search:
            term = query.search.lower()
            rows = [r for r in rows if any(term in str(r.get(c) or "").lower() for c in d.search_fields)]
        for column, value in query.filters:
            rows = [r for r in rows if str(r.get(column)) == str(value)]

        sort_by = query.sort_by if query.sort_by in d.sort_fields else d.default_sort
        reverse = str(query.sort_order).lower() != "asc"
        rows.sort(key=lambda r: (r.get(sort_by) is not None, r.get(sort_by) or "", r[d.pk]), reverse=reverse)

        window = rows[page.offset : page.offset + page.limit]
        return Page(items=[dict(r) for r in window], page=page.page, limit=page.limit, total=len(rows))

    def get(self, item_id):
        row = self.rows.get(int(item_id))
        return dict(row) if row else None

    def find_by(self, column, value, *, exclude_id=None):
        for row in self.rows.values():
            if row.get(column) == value and (exclude_id is None or row["id"] != int(exclude_id)):
                return dict(row)
        return None

    def insert(self, values: dict) -> int:
        new_id = self._next_id
        self._next_id += 1
        row = self._blank()
        row.update(values)
        row["id"] = new_id
        row["created_at"] = row["updated_at"] = datetime(2026, 3, 1, 9, 0, 0 + new_id % 60)
        self.rows[new_id] = row
        return new_id

    def update(self, item_id, values):
        if int(item_id) not in self.rows:
            return False
        self.rows[int(item_id)].update(values)
        return True

    def delete(self, item_id):
        if int(item_id) not in self.rows:
            return False
        if self.definition.soft_delete:
            column, value = self.definition.soft_delete
            self.rows[int(item_id)][column] = value
        else:
            del self.rows[int(item_id)]
        return True

    def count_by(self, column) -> dict[str, int]:
        out: dict[str, int] = {}
        for row in self.rows.values():
            if row.get(column) is not None:
                out[str(row[column])] = out.get(str(row[column]), 0) + 1
        return out

    def last_value(self, column, prefix) -> Optional[str]:
        values = [str(r[column]) for r in self.rows.values() if str(r.get(column) or "").startswith(prefix)]
        if not values:
            return None

        def seq(v: str) -> int:
            digits = "".join(ch for ch in v[len(prefix) :] if ch.isdigit())
            return int(digits) if digits else 0

        return max(values, key=seq)

    def values_ending_with(self, column, suffix) -> list[str]:
        return [str(r[column]) for r in self.rows.values() if str(r.get(column) or "").endswith(suffix)]


@pytest.fixture
def fixed_now():
    return datetime(2026, 3, 10, 11, 0, 0)


@pytest.fixture
def clock(fixed_now):
    return lambda: fixed_now


@pytest.fixture
def resource_repo():
    """Factory: resource_repo(definition, rows=None) -> FakeResourceRepo."""

    def make(definition, rows: Optional[list[Any]] = None) -> FakeResourceRepo:
        return FakeResourceRepo(definition, rows)

    return make
