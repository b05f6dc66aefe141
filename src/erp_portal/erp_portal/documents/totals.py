"""Line items, tax totals and amounts in words for commercial documents."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable, Optional

from ..common.validators import to_decimal
from ..core.exceptions import ValidationError

CENT = Decimal("0.01")
DEFAULT_TAX_RATE = Decimal("18")

_ONES = (
    "", "One", "Two", "Three", "Four", "Five", "Six", "Seven", "Eight", "Nine", "Ten",
    "Eleven", "Twelve", "Thirteen", "Fourteen", "Fifteen", "Sixteen", "Seventeen", "Eighteen", "Nineteen",
)
_TENS = ("", "", "Twenty", "Thirty", "Forty", "Fifty", "Sixty", "Seventy", "Eighty", "Ninety")

# Indian grouping: crore (10^7), lakh (10^5), thousand, hundred
_SCALES = ((10_000_000, "Crore"), (100_000, "Lakh"), (1_000, "Thousand"), (100, "Hundred"))


def money(value: Any) -> Decimal:
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def _below_hundred(n: int) -> str:
    if n < 20:
        return _ONES[n]
    return _TENS[n // 10] + (f" {_ONES[n % 10]}" if n % 10 else "")


def _integer_words(n: int) -> str:
    if n == 0:
        return "Zero"
    parts = []
    for size, name in _SCALES:
        if n >= size:
            count, n = divmod(n, size)
            # Crores can exceed 99 ("One Hundred Crore")
            parts.append(f"{_integer_words(count) if count >= 100 else _below_hundred(count)} {name}")
    if n:
        parts.append(_below_hundred(n))
    return " ".join(parts)


def amount_in_words(amount: Any) -> str:
    """`1234.50` -> 'Rupees One Thousand Two Hundred Thirty Four and Fifty Paise Only'."""

    value = money(amount)
    if value < 0:
        raise ValidationError("Amount cannot be negative")
    rupees = int(value)
    paise = int((value - rupees) * 100)

    words = f"Rupees {_integer_words(rupees)}"
    if paise:
        words += f" and {_below_hundred(paise)} Paise"
    return words + " Only"


@dataclass(frozen=True)
class DocumentTotals:
    items: list[dict]
    subtotal: Decimal
    tax_rate: Decimal
    tax_amount: Decimal
    discount: Decimal
    total: Decimal
    amount_in_words: str

    def as_values(self) -> dict:
        return {
            "items": self.items,
            "subtotal": self.subtotal,
            "tax_rate": self.tax_rate,
            "tax_amount": self.tax_amount,
            "discount": self.discount,
            "total": self.total,
            "amount_in_words": self.amount_in_words,
        }


def normalize_items(items: Any) -> list[dict]:
    if items is None:
        return []
    if not isinstance(items, list):
        raise ValidationError("items must be a list")

    out = []
    for idx, raw in enumerate(items):
        if not isinstance(raw, dict):
            raise ValidationError(f"items[{idx}] must be an object")
        quantity = to_decimal(raw.get("quantity", 1), f"items[{idx}].quantity")
        rate = to_decimal(raw.get("rate", 0), f"items[{idx}].rate")
        quantity = quantity if quantity is not None else Decimal("1")
        rate = rate if rate is not None else Decimal("0")
        if quantity < 0 or rate < 0:
            raise ValidationError(f"items[{idx}] quantity and rate must be >= 0")

        item = dict(raw)
        item["description"] = str(raw.get("description") or "").strip()
        item["quantity"] = quantity
        item["rate"] = rate
        item["amount"] = money(quantity * rate)
        out.append(item)
    return out


def compute_totals(
    items: Iterable[dict],
    *,
    tax_rate: Optional[Decimal] = DEFAULT_TAX_RATE,
    discount: Optional[Decimal] = None,
    taxable: bool = True,
) -> DocumentTotals:
    items = list(items)
    subtotal = money(sum((Decimal(str(i["amount"])) for i in items), Decimal("0")))
    rate = Decimal(str(tax_rate)) if (taxable and tax_rate is not None) else Decimal("0")
    if rate < 0:
        raise ValidationError("tax_rate must be >= 0")
    discount = money(discount or 0)
    if discount < 0:
        raise ValidationError("discount must be >= 0")

    tax_amount = money(subtotal * rate / Decimal("100"))
    total = money(subtotal + tax_amount - discount)
    if total < 0:
        raise ValidationError("Total cannot be negative (discount exceeds subtotal and tax)")

    return DocumentTotals(
        items=items,
        subtotal=subtotal,
        tax_rate=rate,
        tax_amount=tax_amount,
        discount=discount,
        total=total,
        amount_in_words=amount_in_words(total),
    )


def next_document_number(prefix: str, last_number: Optional[str], width: int) -> str:
    """PO-0001 style numbering: last + 1, zero-padded."""

    seq = 0
    if last_number and last_number.startswith(prefix):
        digits = "".join(ch for ch in last_number[len(prefix):] if ch.isdigit())
        seq = int(digits) if digits else 0
    return f"{prefix}{seq + 1:0{width}d}"
