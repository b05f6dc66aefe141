from __future__ import annotations

import io
import json
from types import SimpleNamespace

import pytest

from src.erp_portal.erp_portal.container import Container
from src.erp_portal.erp_portal.crm import definitions as crm_definitions
from src.erp_portal.erp_portal.crm.service import CompanyService, FollowUpService, ProposalChildService, ProposalService
from src.erp_portal.erp_portal.main import create_app
from src.erp_portal.erp_portal.resources import definitions
from src.erp_portal.erp_portal.resources.service import ResourceService


class FakeConn:
    def __init__(self, up=True):
        self.up = up

    def ping(self):
        return self.up


class RecordingActivity:
    def __init__(self):
        self.ended = []

    def end_session(self, data):
        self.ended.append(data)
        return {"session_duration_seconds": 42}


@pytest.fixture
def build(monkeypatch, resource_repo, clock):
    monkeypatch.setenv("APP_ENV", "testing")

    def make(*, up=True, leads=()):
        activity = RecordingActivity()
        leads_repo = resource_repo(definitions.LEADS, list(leads))
        proposals_repo = resource_repo(crm_definitions.PROPOSALS)
        container = Container(
            conn=FakeConn(up),
            attendance_service=SimpleNamespace(),
            resources={"leads": ResourceService(leads_repo)},
            employee_service=SimpleNamespace(),
            salary_structure_service=SimpleNamespace(),
            payroll_service=SimpleNamespace(),
            ticket_service=SimpleNamespace(),
            todo_service=SimpleNamespace(),
            documents={},
            activity_service=activity,
            company_service=CompanyService(resource_repo(crm_definitions.COMPANIES)),
            proposal_service=ProposalService(proposals_repo, resource_repo(definitions.PROJECTS), clock=clock),
            followup_service=FollowUpService(resource_repo(crm_definitions.FOLLOW_UPS), leads_repo),
            proposal_children={
                segment: ProposalChildService(resource_repo(definition), proposals_repo)
                for segment, definition in crm_definitions.PROPOSAL_CHILDREN.items()
            },
        )
        app = create_app(container=container)
        return app.test_client(), activity

    return make


def test_health_reports_database_state(build):
    client, _ = build()
    assert client.get("/api/health").get_json() == {"success": True, "database": "connected"}

    client, _ = build(up=False)
    resp = client.get("/api/health")
    assert resp.status_code == 503
    assert resp.get_json()["success"] is False


def test_unknown_route_is_json_404(build):
    client, _ = build()

    resp = client.get("/api/nope")

    assert resp.status_code == 404
    assert resp.get_json()["success"] is False


def test_create_then_get_lead(build):
    client, _ = build()

    resp = client.post("/api/leads", json={"company_name": "Acme Infra", "lead_id": "L-001", "unknown": 1})
    assert resp.status_code == 201
    lead = resp.get_json()["data"]
    assert lead["enquiry_status"] == "New"
    assert "unknown" not in lead

    resp = client.get(f"/api/leads/{lead['id']}")
    assert resp.get_json()["data"]["company_name"] == "Acme Infra"


def test_create_requires_fields_and_unique_ids(build):
    client, _ = build(leads=[{"company_name": "Acme", "lead_id": "L-001"}])

    assert client.post("/api/leads", json={"lead_id": "L-002"}).status_code == 400
    resp = client.post("/api/leads", json={"company_name": "Other", "lead_id": "L-001"})
    assert resp.status_code == 409


def test_delete_missing_lead_is_404(build):
    client, _ = build()

    resp = client.delete("/api/leads/99")

    assert resp.status_code == 404
    assert resp.get_json() == {"success": False, "error": "Lead not found"}


def test_list_is_paginated(build):
    client, _ = build(leads=[{"company_name": f"Company {i}"} for i in range(5)])

    body = client.get("/api/leads?page=2&limit=2").get_json()

    assert len(body["data"]) == 2
    assert body["pagination"] == {"page": 2, "limit": 2, "total": 5, "total_pages": 3}


def test_list_rejects_oversized_limit(build):
    client, _ = build()

    assert client.get("/api/leads?limit=1000").status_code == 400


def test_end_session_accepts_text_plain_beacon(build):
    client, activity = build()

    resp = client.post(
        "/api/user-status/end",
        data=json.dumps({"userId": 5, "activeTime": 1000}),
        content_type="text/plain",
    )

    assert resp.status_code == 200
    assert resp.get_json()["session_duration_seconds"] == 42
    assert activity.ended == [{"userId": 5, "activeTime": 1000}]


def test_company_csv_import(build):
    client, _ = build()
    upload = io.BytesIO("Company Name,City\nAcme Infra,Pune\n,Mumbai\n".encode("utf-8-sig"))

    resp = client.post(
        "/api/companies/import",
        data={"file": (upload, "companies.csv")},
        content_type="multipart/form-data",
    )

    body = resp.get_json()
    assert resp.status_code == 201
    assert body["imported"] == 1
    assert body["errors"] == ["Row 2: company_name is required"]
    assert client.get("/api/companies").get_json()["data"][0]["city"] == "Pune"


def test_company_import_with_nothing_valid_is_400(build):
    client, _ = build()

    resp = client.post("/api/companies/import", json={"companies": [{"industry": "Steel"}]})

    assert resp.status_code == 400
    assert resp.get_json()["imported"] == 0
    assert resp.get_json()["success"] is False


def test_convert_proposal_to_project(build):
    client, _ = build()
    proposal = client.post("/api/proposals", json={"proposal_title": "Plant layout", "budget": 1200}).get_json()["data"]

    resp = client.post("/api/proposals/convert", json={"proposalId": proposal["proposal_id"]})

    body = resp.get_json()
    assert resp.status_code == 201
    assert body["project_id"] == "001-03-2026"
    assert body["data"]["name"] == "Plant layout"
    assert body["proposal"]["status"] == "CONVERTED"
    assert client.post("/api/proposals/convert", json={}).status_code == 400
    assert client.post("/api/proposals/convert", json={"id": 99}).status_code == 404


def test_proposal_versions_route(build):
    client, _ = build()
    proposal = client.post("/api/proposals", json={"proposal_title": "Piping"}).get_json()["data"]

    resp = client.post(f"/api/proposals/{proposal['id']}/versions", json={"version_label": "Rev A"})
    listed = client.get(f"/api/proposals/{proposal['id']}/versions").get_json()

    assert resp.status_code == 201
    assert [v["version_label"] for v in listed["data"]] == ["Rev A"]
    assert client.get("/api/proposals/99/versions").status_code == 404
