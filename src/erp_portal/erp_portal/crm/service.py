from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Mapping, Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.pagination import Page, PageRequest
from ..core.exceptions import ConflictError, DomainError, NotFoundError, ValidationError
from ..resources.model import ListQuery
from ..resources.repository import ResourceRepository
from ..resources.service import ResourceService
from .numbering import next_project_id, next_proposal_id, proposal_prefix, project_suffix

logger = logging.getLogger(__name__)

CONVERTED = "CONVERTED"

# Short names the lead-to-proposal form still sends
_PROPOSAL_ALIASES = {
    "title": "proposal_title",
    "client": "client_name",
    "value": "proposal_value",
}


def normalize_import_row(row: Mapping[str, Any]) -> dict:
    """Spreadsheet headers ("Company Name") to column names ("company_name")."""

    out: dict = {}
    for key, value in row.items():
        if key is None:
            continue
        name = "_".join(str(key).strip().lower().replace("-", " ").split())
        if isinstance(value, str):
            value = value.strip()
        out[name] = value
    return out


class CompanyService(ResourceService):
    """Client companies; adds bulk import."""

    def import_rows(self, rows: Sequence[Any]) -> dict:
        if not isinstance(rows, (list, tuple)) or not rows:
            raise ValidationError("No companies to import")

        imported = 0
        errors: list[str] = []
        for index, row in enumerate(rows, start=1):
            if not isinstance(row, Mapping):
                errors.append(f"Row {index}: expected an object")
                continue
            try:
                self.create(normalize_import_row(row))
            except DomainError as e:
                errors.append(f"Row {index}: {e}")
                continue
            imported += 1

        logger.info("Company import: %d imported, %d rejected", imported, len(errors))
        return {
            "imported": imported,
            "errors": errors or None,
            "message": f"Successfully imported {imported} companies",
        }


class ProposalService(ResourceService):
    """Proposals with month-sequenced ids and conversion into projects."""

    def __init__(
        self,
        repo: ResourceRepository,
        projects: ResourceRepository,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        super().__init__(repo)
        self._projects_repo = projects
        self._projects = ResourceService(projects)
        self._clock = clock

    def next_proposal_id(self) -> str:
        today = self._clock().date()
        return next_proposal_id(today, self._repo.last_value("proposal_id", proposal_prefix(today)))

    def create(self, data: Mapping[str, Any]) -> dict:
        data = dict(data)
        for alias, column in _PROPOSAL_ALIASES.items():
            if alias in data and data.get(column) in (None, ""):
                data[column] = data.pop(alias)
        if not str(data.get("proposal_id") or "").strip():
            data["proposal_id"] = self.next_proposal_id()
        if data.get("lead_id") and not data.get("enquiry_no"):
            data["enquiry_no"] = data["lead_id"]
        return super().create(data)

    def prepare(self, values: dict, *, item_id: Optional[int]) -> None:
        # Only conversion stamps this
        values.pop("converted_at", None)
        if values.get("status"):
            status = values["status"].upper()
            values["status"] = "DRAFT" if status == "PENDING" else status
        if values.get("priority"):
            values["priority"] = values["priority"].upper()

    def find(self, ref: Any) -> dict:
        """Look a proposal up by numeric id or by its ATSPL/Q/... number."""

        text = str(ref if ref is not None else "").strip()
        if not text:
            raise ValidationError("proposalId is required")
        row = self._repo.get(int(text)) if text.isdigit() else None
        if row is None:
            row = self._repo.find_by("proposal_id", text)
        if not row:
            raise NotFoundError("Proposal not found")
        return row

    def next_project_id(self) -> str:
        today = self._clock().date()
        return next_project_id(today, self._projects_repo.values_ending_with("project_id", project_suffix(today)))

    def convert(self, ref: Any) -> dict:
        proposal = self.find(ref)
        if proposal.get("status") == CONVERTED and proposal.get("project_id"):
            raise ConflictError(f"Proposal already converted to project {proposal['project_id']}")

        project_id = self.next_project_id()
        budget = proposal.get("budget")
        if budget is None:
            budget = proposal.get("proposal_value")
        project = self._projects.create(
            {
                "project_id": project_id,
                "name": proposal.get("proposal_title") or f"Project from {proposal.get('proposal_id')}",
                "description": proposal.get("description"),
                "company_id": proposal.get("company_id"),
                "client_name": proposal.get("client_name"),
                "start_date": proposal.get("planned_start_date"),
                "end_date": proposal.get("planned_end_date"),
                "target_date": proposal.get("target_date"),
                "budget": budget,
                "status": "NEW",
                "type": "ONGOING",
                "priority": proposal.get("priority") or "MEDIUM",
                "progress": 0,
                "proposal_id": proposal["id"],
                "notes": proposal.get("notes"),
                "disciplines": proposal.get("disciplines"),
                "activities": proposal.get("activities"),
            }
        )

        self._repo.update(
            proposal["id"],
            {"status": CONVERTED, "project_id": project_id, "converted_at": self._clock()},
        )
        logger.info("Converted proposal #%s into project %s", proposal["id"], project_id)
        return {"project": project, "project_id": project_id, "proposal": self.get(proposal["id"])}

    def list_extras(self) -> dict:
        return {"counts": self._repo.count_by("status")}


class ProposalChildService(ResourceService):
    """Rows that only exist under one proposal (follow-ups, versions, approvals)."""

    def __init__(self, repo: ResourceRepository, proposals: ResourceRepository):
        super().__init__(repo)
        self._proposals = proposals

    def _require_proposal(self, proposal_id: int) -> None:
        if not self._proposals.get(int(proposal_id)):
            raise NotFoundError("Proposal not found")

    def _owned(self, proposal_id: int, item_id: int) -> dict:
        row = self.get(item_id)
        if int(row.get("proposal_id") or 0) != int(proposal_id):
            raise NotFoundError(f"{self.definition.label} not found")
        return row

    def list_for(self, proposal_id: int, page: PageRequest) -> Page[dict]:
        self._require_proposal(proposal_id)
        query = ListQuery(filters=(("proposal_id", int(proposal_id)),), sort_order=self.definition.default_order)
        return self.list(query, page)

    def add(self, proposal_id: int, data: Mapping[str, Any]) -> dict:
        self._require_proposal(proposal_id)
        return self.create(dict(data, proposal_id=int(proposal_id)))

    def edit(self, proposal_id: int, item_id: int, data: Mapping[str, Any]) -> dict:
        self._owned(proposal_id, item_id)
        data = {k: v for k, v in data.items() if k != "proposal_id"}
        return self.update(item_id, data)

    def remove(self, proposal_id: int, item_id: int) -> None:
        self._owned(proposal_id, item_id)
        self.delete(item_id)


class FollowUpService(ResourceService):
    """Lead follow-ups; rows carry the lead's company and contact name."""

    def __init__(self, repo: ResourceRepository, leads: ResourceRepository):
        super().__init__(repo)
        self._leads = leads

    def prepare(self, values: dict, *, item_id: Optional[int]) -> None:
        lead_id = values.get("lead_id")
        if lead_id is not None and not self._leads.get(int(lead_id)):
            raise ValidationError(f"Lead #{lead_id} does not exist")

    def _with_lead(self, row: dict, cache: dict) -> dict:
        lead_id = row.get("lead_id")
        if lead_id not in cache:
            cache[lead_id] = self._leads.get(int(lead_id)) if lead_id is not None else None
        lead = cache[lead_id] or {}
        return dict(row, company_name=lead.get("company_name"), contact_name=lead.get("contact_name"))

    def get(self, item_id: int) -> dict:
        return self._with_lead(super().get(item_id), {})

    def list(self, query: ListQuery, page: PageRequest) -> Page[dict]:
        result = super().list(query, page)
        cache: dict = {}
        return Page(
            items=[self._with_lead(row, cache) for row in result.items],
            page=result.page,
            limit=result.limit,
            total=result.total,
        )
