"""Tables exposed through the generic CRUD layer."""

from __future__ import annotations

from decimal import Decimal

from .model import FieldSpec as F
from .model import ResourceDefinition

ACTIVE_STATUSES = ("Active", "Inactive")

EMPLOYEES = ResourceDefinition(
    name="employees",
    table="employees",
    label="Employee",
    fields=(
        F("employee_code", max_length=50),
        F("first_name", required=True, max_length=100),
        F("last_name", max_length=100),
        F("email", max_length=255),
        F("phone", max_length=30),
        F("department", max_length=100),
        F("designation", max_length=100),
        F("manager_id", "int"),
        F("biometric_code", max_length=50),
        F("date_of_joining", "date"),
        F("status", choices=ACTIVE_STATUSES, default="Active"),
    ),
    search_fields=("employee_code", "first_name", "last_name", "email", "department", "designation"),
    filter_fields=("department", "status", "manager_id"),
    sort_fields=("created_at", "first_name", "last_name", "employee_code", "department", "date_of_joining"),
    unique_fields=("email", "biometric_code", "employee_code"),
    soft_delete=("status", "Inactive"),
)

USERS = ResourceDefinition(
    name="users",
    table="users",
    label="User",
    fields=(
        F("full_name", required=True, max_length=150),
        F("username", required=True, max_length=100),
        F("email", max_length=255),
        F("role", choices=("super_admin", "admin", "hr", "manager", "employee"), default="employee"),
        F("employee_id", "int"),
        F("status", choices=ACTIVE_STATUSES, default="Active"),
    ),
    search_fields=("full_name", "username", "email"),
    filter_fields=("role", "status"),
    sort_fields=("created_at", "full_name", "username"),
    unique_fields=("username",),
)

LEADS = ResourceDefinition(
    name="leads",
    table="leads",
    label="Lead",
    fields=(
        F("lead_id", max_length=50),
        F("company_name", required=True, max_length=255),
        F("contact_name", max_length=150),
        F("contact_email", max_length=255),
        F("phone", max_length=30),
        F("city", max_length=100),
        F("project_description"),
        F("enquiry_type", max_length=50),
        F("enquiry_status", max_length=50, default="New"),
        F("enquiry_date", "date"),
        F("notes"),
    ),
    search_fields=("lead_id", "company_name", "contact_name", "contact_email", "project_description"),
    filter_fields=("enquiry_status", "enquiry_type", "city"),
    sort_fields=("created_at", "enquiry_date", "company_name", "lead_id"),
    unique_fields=("lead_id",),
)

VENDORS = ResourceDefinition(
    name="vendors",
    table="vendors",
    label="Vendor",
    fields=(
        F("vendor_id", max_length=50),
        F("vendor_name", required=True, max_length=255),
        F("vendor_type", max_length=50),
        F("category", max_length=100),
        F("contact_person", max_length=150),
        F("email", max_length=255),
        F("phone", max_length=30),
        F("address"),
        F("city", max_length=100),
        F("state", max_length=100),
        F("pincode", max_length=10),
        F("gst_number", max_length=20),
        F("pan_number", max_length=20),
        F("msme_registered", "bool"),
        F("bank_name", max_length=150),
        F("account_number", max_length=50),
        F("ifsc_code", max_length=20),
        F("credit_limit", "decimal", min_value=Decimal("0")),
        F("payment_terms", max_length=100),
        F("quality_rating", "int", min_value=Decimal("0"), max_value=Decimal("5")),
        F("delivery_rating", "int", min_value=Decimal("0"), max_value=Decimal("5")),
        F("status", choices=("Active", "Inactive", "Blacklisted"), default="Active"),
        F("notes"),
    ),
    search_fields=("vendor_id", "vendor_name", "contact_person", "email", "category", "city"),
    filter_fields=("vendor_type", "category", "status"),
    sort_fields=("created_at", "vendor_name", "vendor_id", "city"),
    unique_fields=("vendor_id",),
    soft_delete=("status", "Inactive"),
)

PROJECTS = ResourceDefinition(
    name="projects",
    table="projects",
    label="Project",
    fields=(
        F("project_id", max_length=50),
        F("project_code", max_length=50),
        F("name", required=True, max_length=255),
        F("description"),
        F("notes"),
        F("company_id", "int"),
        F("client_name", max_length=255),
        F("project_manager", max_length=150),
        F("assigned_to", max_length=150),
        F("start_date", "date"),
        F("end_date", "date"),
        F("target_date", "date"),
        F("status", max_length=50, default="NEW"),
        F("type", max_length=50),
        F("priority", max_length=20, default="MEDIUM"),
        F("progress", "int", min_value=Decimal("0"), max_value=Decimal("100")),
        F("budget", "decimal", min_value=Decimal("0")),
        F("proposal_id", "int"),
        F("disciplines", "json"),
        F("activities", "json"),
        F("assignments", "json"),
    ),
    search_fields=("project_id", "name", "client_name", "project_manager", "description"),
    filter_fields=("status", "type", "priority", "company_id"),
    sort_fields=("created_at", "name", "project_id", "start_date", "target_date", "progress"),
    unique_fields=("project_id",),
)

ACTIVITY_ASSIGNMENTS = ResourceDefinition(
    name="activity-assignments",
    table="activity_assignments",
    label="Activity assignment",
    fields=(
        F("user_id", "int", required=True),
        F("project_id", "int"),
        F("activity_name", required=True, max_length=255),
        F("sub_activity", max_length=255),
        F("status", choices=("Not Started", "In Progress", "Completed", "On Hold"), default="Not Started"),
        F("due_date", "date"),
        F("estimated_hours", "decimal", min_value=Decimal("0")),
        F("notes"),
    ),
    search_fields=("activity_name", "sub_activity", "notes"),
    filter_fields=("user_id", "project_id", "status"),
    sort_fields=("created_at", "due_date", "activity_name", "status"),
)

ALL = (EMPLOYEES, USERS, LEADS, VENDORS, PROJECTS, ACTIVITY_ASSIGNMENTS)
