"""Sales pipeline tables: companies, proposals and their follow-ups."""

from __future__ import annotations

from decimal import Decimal

from ..resources.model import FieldSpec as F
from ..resources.model import ResourceDefinition

FOLLOW_UP_TYPES = ("Call", "Email", "Meeting", "Visit", "Other")
FOLLOW_UP_STATUSES = ("Scheduled", "Completed", "Cancelled", "Rescheduled")

COMPANIES = ResourceDefinition(
    name="companies",
    table="companies",
    label="Company",
    fields=(
        F("company_id", max_length=50),
        F("company_name", required=True, max_length=255),
        F("industry", max_length=100),
        F("company_size", max_length=50),
        F("website", max_length=255),
        F("phone", max_length=30),
        F("email", max_length=255),
        F("address"),
        F("city", max_length=100),
        F("state", max_length=100),
        F("country", max_length=100),
        F("postal_code", max_length=20),
        F("description"),
        F("founded_year", "int", min_value=Decimal("1800"), max_value=Decimal("2100")),
        F("revenue", max_length=100),
        F("notes"),
    ),
    search_fields=("company_id", "company_name", "industry", "city", "email"),
    filter_fields=("industry", "city", "country"),
    sort_fields=("company_name", "created_at", "city", "industry"),
    default_sort="company_name",
    default_order="asc",
    unique_fields=("company_id",),
)

PROPOSALS = ResourceDefinition(
    name="proposals",
    table="proposals",
    label="Proposal",
    fields=(
        F("proposal_id", max_length=100),
        F("proposal_title", required=True, max_length=255),
        F("description"),
        F("company_id", "int"),
        F("client_name", max_length=255),
        F("industry", max_length=100),
        F("contract_type", max_length=100),
        F("proposal_value", "decimal", min_value=Decimal("0")),
        F("currency", max_length=10, default="INR"),
        F("payment_terms"),
        F("planned_start_date", "date"),
        F("planned_end_date", "date"),
        F("target_date", "date"),
        F("budget", "decimal", min_value=Decimal("0")),
        F("status", max_length=50, default="DRAFT"),
        F("priority", max_length=20, default="MEDIUM"),
        F("progress", "int", min_value=Decimal("0"), max_value=Decimal("100"), default=0),
        F("notes"),
        F("lead_id", max_length=50),
        F("enquiry_no", max_length=50),
        F("project_id", max_length=50),
        F("input_document"),
        F("list_of_deliverables"),
        F("disciplines", "json"),
        F("activities", "json"),
        F("converted_at", "datetime"),
    ),
    search_fields=("proposal_id", "proposal_title", "client_name", "description", "lead_id"),
    filter_fields=("status", "priority", "company_id", "lead_id"),
    sort_fields=("created_at", "proposal_title", "proposal_id", "target_date", "proposal_value"),
    unique_fields=("proposal_id",),
)

# Follow-ups logged against a lead
FOLLOW_UPS = ResourceDefinition(
    name="followups",
    table="follow_ups",
    label="Follow-up",
    fields=(
        F("lead_id", "int", required=True),
        F("follow_up_date", "date", required=True),
        F("follow_up_type", required=True, choices=FOLLOW_UP_TYPES),
        F("description", required=True),
        F("status", choices=FOLLOW_UP_STATUSES, default="Scheduled"),
        F("next_action", max_length=255),
        F("next_follow_up_date", "date", required=True),
        F("notes"),
    ),
    search_fields=("description", "next_action", "notes"),
    filter_fields=("lead_id", "status", "follow_up_type"),
    sort_fields=("follow_up_date", "created_at", "next_follow_up_date"),
    default_sort="follow_up_date",
)

PROPOSAL_FOLLOWUPS = ResourceDefinition(
    name="proposal-followups",
    table="proposal_followups",
    label="Proposal follow-up",
    fields=(
        F("proposal_id", "int", required=True),
        F("follow_up_date", "date", required=True),
        F("follow_up_type", choices=FOLLOW_UP_TYPES, default="Call"),
        F("description", required=True),
        F("status", choices=FOLLOW_UP_STATUSES, default="Scheduled"),
        F("outcome"),
        F("next_action", max_length=255),
        F("next_follow_up_date", "date"),
        F("contacted_person", max_length=150),
        F("notes"),
        F("created_by", max_length=150),
    ),
    filter_fields=("proposal_id",),
    sort_fields=("follow_up_date", "created_at"),
    default_sort="follow_up_date",
)

PROPOSAL_VERSIONS = ResourceDefinition(
    name="proposal-versions",
    table="proposal_versions",
    label="Proposal version",
    fields=(
        F("proposal_id", "int", required=True),
        F("version_label", required=True, max_length=100),
        F("file_url", max_length=500),
        F("original_name", max_length=255),
        F("uploaded_by", max_length=150),
        F("notes"),
    ),
    filter_fields=("proposal_id",),
)

PROPOSAL_APPROVALS = ResourceDefinition(
    name="proposal-approvals",
    table="proposal_approvals",
    label="Proposal approval",
    fields=(
        F("proposal_id", "int", required=True),
        F("approver", required=True, max_length=150),
        F("comment"),
        F("status", choices=("Pending", "Approved", "Rejected"), default="Pending"),
    ),
    filter_fields=("proposal_id", "status"),
)

# Mounted at /api/<name> by the generic resource controller
TOP_LEVEL = (COMPANIES, PROPOSALS, FOLLOW_UPS)

# Mounted at /api/proposals/<id>/<segment>
PROPOSAL_CHILDREN = {
    "followups": PROPOSAL_FOLLOWUPS,
    "versions": PROPOSAL_VERSIONS,
    "approvals": PROPOSAL_APPROVALS,
}
