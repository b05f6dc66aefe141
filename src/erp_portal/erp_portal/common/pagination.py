from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, Mapping, Sequence, TypeVar

from ..core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from ..core.exceptions import ValidationError

T = TypeVar("T")


@dataclass(frozen=True)
class PageRequest:
    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True)
class Page(Generic[T]):
    items: Sequence[T]
    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        if self.total <= 0:
            return 0
        return (self.total + self.limit - 1) // self.limit

    def meta(self) -> dict:
        return {
            "page": self.page,
            "limit": self.limit,
            "total": self.total,
            "total_pages": self.total_pages,
        }


def parse_page_request(
    args: Mapping[str, Any],
    *,
    default_limit: int = DEFAULT_PAGE_SIZE,
    max_limit: int = MAX_PAGE_SIZE,
) -> PageRequest:
    """Read `page`/`limit` from query args, rejecting out-of-range values."""

    raw_page = args.get("page") or 1
    raw_limit = args.get("limit") or default_limit
    try:
        page = int(raw_page)
        limit = int(raw_limit)
    except (TypeError, ValueError):
        raise ValidationError("page and limit must be integers")

    if page < 1:
        raise ValidationError("page must be >= 1")
    if limit < 1 or limit > max_limit:
        raise ValidationError(f"limit must be between 1 and {max_limit}")
    return PageRequest(page=page, limit=limit)
