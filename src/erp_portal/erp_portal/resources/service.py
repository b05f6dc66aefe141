from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Mapping, Optional

from ..common.datetime_utils import parse_datetime, parse_iso_date
from ..common.pagination import Page, PageRequest
from ..common.validators import require_choice, require_max_length, to_bool, to_decimal, to_int
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from .model import SERVER_MANAGED, FieldSpec, ListQuery, ResourceDefinition
from .repository import ResourceRepository

logger = logging.getLogger(__name__)


def coerce_value(spec: FieldSpec, value: Any) -> Any:
    """Convert one JSON value to the column's Python type (None stays None)."""

    if value is None or (isinstance(value, str) and not value.strip() and spec.kind != "str"):
        return None

    if spec.kind == "str":
        text = str(value).strip()
        if spec.max_length:
            require_max_length(text, spec.name, spec.max_length)
        if spec.choices and text:
            require_choice(text, spec.name, spec.choices)
        return text or None

    if spec.kind == "int":
        result = to_int(value, spec.name)
    elif spec.kind == "decimal":
        result = to_decimal(value, spec.name)
    elif spec.kind == "bool":
        return to_bool(value)
    elif spec.kind == "date":
        if isinstance(value, date):
            return value
        try:
            return parse_iso_date(str(value).strip()[:10])
        except ValueError:
            raise ValidationError(f"{spec.name} must be a date in YYYY-MM-DD format")
    elif spec.kind == "datetime":
        if isinstance(value, datetime):
            return value
        return parse_datetime(value)
    else:
        if not isinstance(value, (list, dict)):
            raise ValidationError(f"{spec.name} must be a JSON array or object")
        return value

    if spec.min_value is not None and result < spec.min_value:
        raise ValidationError(f"{spec.name} must be >= {spec.min_value}")
    if spec.max_value is not None and result > spec.max_value:
        raise ValidationError(f"{spec.name} must be <= {spec.max_value}")
    return result


class ResourceService:
    """CRUD use cases shared by every simple table."""

    def __init__(self, repo: ResourceRepository):
        self._repo = repo

    @property
    def definition(self) -> ResourceDefinition:
        return self._repo.definition

    def coerce(self, data: Mapping[str, Any], *, partial: bool) -> dict:
        d = self.definition
        values: dict = {}
        for spec in d.fields:
            if spec.name in SERVER_MANAGED:
                continue
            if spec.name not in data:
                if not partial and spec.default is not None:
                    values[spec.name] = spec.default
                continue
            values[spec.name] = coerce_value(spec, data[spec.name])

        for spec in d.fields:
            if not spec.required:
                continue
            if partial and spec.name not in values:
                continue
            value = values.get(spec.name)
            if value is None or (isinstance(value, str) and not value):
                raise ValidationError(f"{spec.name} is required")
        return values

    def build_query(self, args: Mapping[str, Any]) -> ListQuery:
        d = self.definition
        filters = []
        for name in d.filter_fields:
            value = args.get(name)
            if value is None or value == "":
                continue
            spec = d.field(name)
            if spec is not None and spec.kind == "bool":
                value = 1 if to_bool(value) else 0
            filters.append((name, value))
        return ListQuery(
            search=(args.get("search") or "").strip() or None,
            filters=tuple(filters),
            sort_by=args.get("sortBy") or None,
            sort_order=str(args.get("sortOrder") or d.default_order),
        )

    def list(self, query: ListQuery, page: PageRequest) -> Page[dict]:
        return self._repo.list(query, page)

    def get(self, item_id: int) -> dict:
        row = self._repo.get(item_id)
        if not row:
            raise NotFoundError(f"{self.definition.label} not found")
        return row

    def create(self, data: Mapping[str, Any]) -> dict:
        values = self.coerce(data, partial=False)
        self._check_unique(values)
        self.prepare(values, item_id=None)
        new_id = self._repo.insert(values)
        logger.info("Created %s #%s", self.definition.label.lower(), new_id)
        return self.get(new_id)

    def update(self, item_id: int, data: Mapping[str, Any]) -> dict:
        self.get(item_id)
        values = self.coerce(data, partial=True)
        self._check_unique(values, exclude_id=item_id)
        self.prepare(values, item_id=item_id)
        self._repo.update(item_id, values)
        return self.get(item_id)

    def delete(self, item_id: int) -> None:
        self.get(item_id)
        if not self._repo.delete(item_id):
            raise NotFoundError(f"{self.definition.label} not found")
        logger.info("Deleted %s #%s", self.definition.label.lower(), item_id)

    def prepare(self, values: dict, *, item_id: Optional[int]) -> None:
        """Hook for cross-table rules and derived columns; may modify `values`."""

    def list_extras(self) -> dict:
        return {}

    def _check_unique(self, values: dict, *, exclude_id: Optional[int] = None) -> None:
        for column in self.definition.unique_fields:
            value = values.get(column)
            if value is None or value == "":
                continue
            if self._repo.find_by(column, value, exclude_id=exclude_id):
                raise ConflictError(f"{self.definition.label} with {column} '{value}' already exists")
