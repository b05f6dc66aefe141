from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from ..resources.model import FieldSpec as F
from ..resources.model import ResourceDefinition
from .totals import DEFAULT_TAX_RATE

DERIVED_FIELDS = ("subtotal", "tax_amount", "total", "amount_in_words")


@dataclass(frozen=True)
class DocumentKind:
    definition: ResourceDefinition
    prefix: str
    number_field: str
    party_field: str
    taxable: bool = True


def _totals_fields(*, taxable: bool) -> tuple[F, ...]:
    return (
        F("items", "json"),
        F("subtotal", "decimal"),
        F("tax_rate", "decimal", min_value=Decimal("0"), default=DEFAULT_TAX_RATE if taxable else None),
        F("tax_amount", "decimal"),
        F("discount", "decimal", min_value=Decimal("0")),
        F("total", "decimal"),
        F("amount_in_words", max_length=500),
    )


PURCHASE_ORDERS = DocumentKind(
    definition=ResourceDefinition(
        name="purchase-orders",
        table="purchase_orders",
        label="Purchase order",
        fields=(
            F("po_number", max_length=50),
            F("vendor_id", "int"),
            F("vendor_name", required=True, max_length=255),
            F("project_id", "int"),
            F("po_date", "date"),
            F("delivery_date", "date"),
            F("status", choices=("draft", "sent", "approved", "received", "cancelled"), default="draft"),
            F("terms"),
            F("notes"),
        )
        + _totals_fields(taxable=True),
        search_fields=("po_number", "vendor_name", "notes"),
        filter_fields=("status", "vendor_id", "project_id"),
        sort_fields=("created_at", "po_number", "po_date", "total"),
        unique_fields=("po_number",),
    ),
    prefix="PO-",
    number_field="po_number",
    party_field="vendor_name",
)

QUOTATIONS = DocumentKind(
    definition=ResourceDefinition(
        name="quotations",
        table="quotations",
        label="Quotation",
        fields=(
            F("quotation_number", max_length=50),
            F("client_name", required=True, max_length=255),
            F("lead_id", "int"),
            F("quotation_date", "date"),
            F("valid_until", "date"),
            F("status", choices=("draft", "sent", "accepted", "rejected", "expired"), default="draft"),
            F("terms"),
            F("notes"),
        )
        + _totals_fields(taxable=True),
        search_fields=("quotation_number", "client_name", "notes"),
        filter_fields=("status", "lead_id"),
        sort_fields=("created_at", "quotation_number", "quotation_date", "total"),
        unique_fields=("quotation_number",),
    ),
    prefix="QT-",
    number_field="quotation_number",
    party_field="client_name",
)

INVOICES = DocumentKind(
    definition=ResourceDefinition(
        name="invoices",
        table="invoices",
        label="Invoice",
        fields=(
            F("invoice_number", max_length=50),
            F("client_name", required=True, max_length=255),
            F("project_id", "int"),
            F("invoice_date", "date"),
            F("due_date", "date"),
            F("status", choices=("draft", "sent", "paid", "partially_paid", "overdue", "cancelled"), default="draft"),
            F("amount_paid", "decimal", min_value=Decimal("0")),
            F("notes"),
        )
        + _totals_fields(taxable=True),
        search_fields=("invoice_number", "client_name", "notes"),
        filter_fields=("status", "project_id"),
        sort_fields=("created_at", "invoice_number", "invoice_date", "due_date", "total"),
        unique_fields=("invoice_number",),
    ),
    prefix="INV-",
    number_field="invoice_number",
    party_field="client_name",
)

CASH_VOUCHERS = DocumentKind(
    definition=ResourceDefinition(
        name="cash-vouchers",
        table="cash_vouchers",
        label="Cash voucher",
        fields=(
            F("voucher_number", max_length=50),
            F("paid_to", required=True, max_length=255),
            F("voucher_date", "date"),
            F("project_id", "int"),
            F("purpose"),
            F("payment_mode", choices=("cash", "cheque", "bank_transfer", "upi"), default="cash"),
            F("status", choices=("draft", "approved", "paid", "cancelled"), default="draft"),
            F("approved_by", max_length=150),
            F("notes"),
        )
        + _totals_fields(taxable=False),
        search_fields=("voucher_number", "paid_to", "purpose"),
        filter_fields=("status", "payment_mode", "project_id"),
        sort_fields=("created_at", "voucher_number", "voucher_date", "total"),
        unique_fields=("voucher_number",),
    ),
    prefix="CV-",
    number_field="voucher_number",
    party_field="paid_to",
    taxable=False,
)

ALL = (PURCHASE_ORDERS, QUOTATIONS, INVOICES, CASH_VOUCHERS)
