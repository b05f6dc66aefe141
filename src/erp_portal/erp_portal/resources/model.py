from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Optional

FIELD_KINDS = ("str", "int", "decimal", "date", "datetime", "bool", "json")

# Columns the database owns; ignored when clients send them
SERVER_MANAGED = frozenset({"id", "created_at", "updated_at"})


@dataclass(frozen=True)
class FieldSpec:
    name: str
    kind: str = "str"
    required: bool = False
    choices: tuple[str, ...] = ()
    max_length: Optional[int] = None
    min_value: Optional[Decimal] = None
    max_value: Optional[Decimal] = None
    default: Any = None

    def __post_init__(self):
        if self.kind not in FIELD_KINDS:
            raise ValueError(f"Unsupported field kind {self.kind!r} for {self.name}")


@dataclass(frozen=True)
class ResourceDefinition:
    """Describes one table exposed as a REST collection."""

    name: str
    table: str
    label: str
    fields: tuple[FieldSpec, ...]
    pk: str = "id"
    search_fields: tuple[str, ...] = ()
    filter_fields: tuple[str, ...] = ()
    sort_fields: tuple[str, ...] = ("created_at",)
    default_sort: str = "created_at"
    default_order: str = "desc"
    unique_fields: tuple[str, ...] = ()
    # (column, value) written instead of deleting the row
    soft_delete: Optional[tuple[str, str]] = None

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(f.name for f in self.fields)

    @property
    def columns(self) -> tuple[str, ...]:
        return (self.pk,) + self.field_names + ("created_at", "updated_at")

    def field(self, name: str) -> Optional[FieldSpec]:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def fields_of_kind(self, kind: str) -> tuple[str, ...]:
        return tuple(f.name for f in self.fields if f.kind == kind)

    @property
    def endpoint_prefix(self) -> str:
        return self.name.replace("-", "_")


@dataclass(frozen=True)
class ListQuery:
    search: Optional[str] = None
    filters: tuple[tuple[str, Any], ...] = ()
    sort_by: Optional[str] = None
    sort_order: str = "desc"
