from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from ..core.constants import DOCUMENT_NUMBER_WIDTH
from ..resources.repository import ResourceRepository
from ..resources.service import ResourceService
from .definitions import DERIVED_FIELDS, DocumentKind
from .totals import DEFAULT_TAX_RATE, compute_totals, normalize_items, next_document_number

logger = logging.getLogger(__name__)

_TOTAL_INPUTS = ("items", "tax_rate", "discount")


class DocumentService(ResourceService):
    """Numbered commercial document with server-computed totals."""

    def __init__(self, kind: DocumentKind, repo: ResourceRepository):
        super().__init__(repo)
        self.kind = kind

    def next_number(self) -> str:
        last = self._repo.last_value(self.kind.number_field, self.kind.prefix)
        return next_document_number(self.kind.prefix, last, DOCUMENT_NUMBER_WIDTH)

    def create(self, data: Mapping[str, Any]) -> dict:
        data = dict(data)
        if not str(data.get(self.kind.number_field) or "").strip():
            data[self.kind.number_field] = self.next_number()
        return super().create(data)

    def prepare(self, values: dict, *, item_id: Optional[int]) -> None:
        # Totals are always derived, never taken from the client
        for name in DERIVED_FIELDS:
            values.pop(name, None)

        if item_id is None:
            current: dict = {}
        elif any(name in values for name in _TOTAL_INPUTS):
            current = self.get(item_id)
        else:
            return

        tax_rate = values.get("tax_rate", current.get("tax_rate"))
        if tax_rate is None and self.kind.taxable:
            tax_rate = DEFAULT_TAX_RATE

        totals = compute_totals(
            normalize_items(values.get("items", current.get("items"))),
            tax_rate=tax_rate,
            discount=values.get("discount", current.get("discount")),
            taxable=self.kind.taxable,
        )
        values.update(totals.as_values())

    def list_extras(self) -> dict:
        return {"counts": self._repo.count_by("status")}
