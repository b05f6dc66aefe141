from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from src.erp_portal.erp_portal.common.pagination import PageRequest, parse_page_request
from src.erp_portal.erp_portal.core.exceptions import ConflictError, NotFoundError, ValidationError
from src.erp_portal.erp_portal.resources import definitions
from src.erp_portal.erp_portal.resources.model import FieldSpec
from src.erp_portal.erp_portal.resources.service import ResourceService, coerce_value


def _leads(resource_repo, rows=None):
    return ResourceService(resource_repo(definitions.LEADS, rows))


def test_create_then_get_returns_same_values(resource_repo):
    service = _leads(resource_repo)

    created = service.create(
        {
            "lead_id": "L-001",
            "company_name": "  Acme Infra  ",
            "contact_email": "ops@acme.test",
            "enquiry_date": "2026-03-02",
            "id": 999,
        }
    )

    fetched = service.get(created["id"])
    assert fetched == created
    assert fetched["company_name"] == "Acme Infra"
    assert fetched["enquiry_date"] == date(2026, 3, 2)
    assert fetched["enquiry_status"] == "New"
    assert fetched["id"] != 999


def test_required_field_missing_is_rejected(resource_repo):
    service = _leads(resource_repo)

    with pytest.raises(ValidationError):
        service.create({"contact_name": "Nobody"})
    with pytest.raises(ValidationError):
        service.create({"company_name": "   "})


def test_duplicate_unique_field_is_conflict(resource_repo):
    service = _leads(resource_repo)
    service.create({"lead_id": "L-001", "company_name": "Acme"})

    with pytest.raises(ConflictError):
        service.create({"lead_id": "L-001", "company_name": "Other"})


def test_update_keeps_own_unique_value_and_ignores_unknown_keys(resource_repo):
    service = _leads(resource_repo)
    lead = service.create({"lead_id": "L-001", "company_name": "Acme"})

    updated = service.update(lead["id"], {"lead_id": "L-001", "city": "Pune", "favourite_colour": "blue"})

    assert updated["city"] == "Pune"
    assert "favourite_colour" not in updated


def test_partial_update_cannot_blank_required_field(resource_repo):
    service = _leads(resource_repo)
    lead = service.create({"company_name": "Acme"})

    with pytest.raises(ValidationError):
        service.update(lead["id"], {"company_name": ""})


def test_missing_rows_are_404(resource_repo):
    service = _leads(resource_repo)

    with pytest.raises(NotFoundError):
        service.get(42)
    with pytest.raises(NotFoundError):
        service.update(42, {"city": "Pune"})
    with pytest.raises(NotFoundError):
        service.delete(42)


def test_vendor_delete_is_soft(resource_repo):
    repo = resource_repo(definitions.VENDORS)
    service = ResourceService(repo)
    vendor = service.create({"vendor_name": "Steel Co"})

    service.delete(vendor["id"])

    assert service.get(vendor["id"])["status"] == "Inactive"


def test_list_search_filters_and_sort(resource_repo):
    service = _leads(
        resource_repo,
        [
            {"company_name": "Acme", "city": "Pune", "enquiry_status": "New"},
            {"company_name": "Borealis", "city": "Mumbai", "enquiry_status": "Won"},
            {"company_name": "Acme Labs", "city": "Mumbai", "enquiry_status": "New"},
        ],
    )

    query = service.build_query({"search": "ACME", "city": "Mumbai", "sortBy": "company_name", "sortOrder": "asc"})
    page = service.list(query, PageRequest(page=1, limit=10))

    assert [r["company_name"] for r in page.items] == ["Acme Labs"]
    assert query.filters == (("city", "Mumbai"),)


def test_unknown_sort_column_falls_back_to_newest_first(resource_repo):
    service = _leads(resource_repo, [{"company_name": "First"}, {"company_name": "Second"}])

    query = service.build_query({"sortBy": "password", "enquiry_type": ""})
    page = service.list(query, PageRequest(page=1, limit=10))

    assert query.filters == ()
    assert [r["company_name"] for r in page.items] == ["Second", "First"]


def test_pages_are_contiguous_and_cover_total(resource_repo):
    service = _leads(resource_repo, [{"company_name": f"Company {i:02d}"} for i in range(7)])
    query = service.build_query({"sortBy": "company_name", "sortOrder": "asc"})

    seen = []
    for n in (1, 2, 3):
        page = service.list(query, PageRequest(page=n, limit=3))
        assert page.total == 7
        assert page.total_pages == 3
        seen.extend(r["company_name"] for r in page.items)

    assert seen == [f"Company {i:02d}" for i in range(7)]


def test_parse_page_request_bounds():
    assert parse_page_request({}) == PageRequest(page=1, limit=20)
    assert parse_page_request({"page": "2", "limit": "5"}, max_limit=10) == PageRequest(page=2, limit=5)
    for bad in ({"page": "0"}, {"limit": "101"}, {"page": "x"}):
        with pytest.raises(ValidationError):
            parse_page_request(bad)


def test_coerce_value_kinds():
    assert coerce_value(FieldSpec("n", "int"), "12") == 12
    assert coerce_value(FieldSpec("d", "decimal"), "10.50") == Decimal("10.50")
    assert coerce_value(FieldSpec("b", "bool"), "true") is True
    assert coerce_value(FieldSpec("j", "json"), ["a"]) == ["a"]
    assert coerce_value(FieldSpec("s"), "  ") is None
    assert coerce_value(FieldSpec("n", "int"), "") is None

    with pytest.raises(ValidationError):
        coerce_value(FieldSpec("j", "json"), "not json")
    with pytest.raises(ValidationError):
        coerce_value(FieldSpec("p", "int", max_value=Decimal("100")), 101)
    with pytest.raises(ValidationError):
        coerce_value(FieldSpec("s", choices=("a", "b")), "c")
    with pytest.raises(ValidationError):
        coerce_value(FieldSpec("s", max_length=3), "abcd")
    with pytest.raises(ValidationError):
        coerce_value(FieldSpec("d", "date"), "02/03/2026")
