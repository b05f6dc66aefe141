from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime

import pytest

from src.erp_portal.erp_portal.common.pagination import Page, PageRequest
from src.erp_portal.erp_portal.core.enums import TicketCategory, TicketPriority, TicketQueue, TicketStatus
from src.erp_portal.erp_portal.core.exceptions import NotFoundError, ValidationError
from src.erp_portal.erp_portal.tickets.model import Ticket, TicketComment, next_ticket_number, route_category, ticket_prefix
from src.erp_portal.erp_portal.tickets.service import TicketService


class FakeTicketRepo:
    def __init__(self):
        self.tickets: dict[int, Ticket] = {}
        self.comments: list[TicketComment] = []
        self.list_calls: list[dict] = []

    def create(self, *, values, number_prefix):
        last = max((t.ticket_number for t in self.tickets.values() if t.ticket_number.startswith(number_prefix)), default=None)
        number = next_ticket_number(number_prefix, last)
        ticket_id = len(self.tickets) + 1
        self.tickets[ticket_id] = Ticket(
            id=ticket_id,
            ticket_number=number,
            user_id=values["user_id"],
            subject=values["subject"],
            description=values["description"],
            category=TicketCategory(values["category"]),
            priority=TicketPriority(values["priority"]),
            status=TicketStatus(values["status"]),
            routed_to=TicketQueue(values["routed_to"]),
        )
        return ticket_id, number

    def get(self, ticket_id):
        return self.tickets.get(int(ticket_id))

    def list(self, *, filters, page):
        self.list_calls.append(filters)
        items = list(self.tickets.values())
        return Page(items=items, page=page.page, limit=page.limit, total=len(items))

    def update(self, ticket_id, *, values):
        t = self.tickets[int(ticket_id)]
        changes = dict(values)
        for name, enum in (("status", TicketStatus), ("priority", TicketPriority)):
            if name in changes:
                changes[name] = enum(changes[name])
        self.tickets[int(ticket_id)] = replace(t, **changes)
        return True

    def add_comment(self, *, ticket_id, user_id, comment, is_internal):
        comment_id = len(self.comments) + 1
        self.comments.append(TicketComment(comment_id, ticket_id, user_id, comment, is_internal))
        return comment_id

    def list_comments(self, ticket_id):
        return [c for c in self.comments if c.ticket_id == int(ticket_id)]


@pytest.fixture
def repo():
    return FakeTicketRepo()


@pytest.fixture
def service(repo, clock):
    return TicketService(repo, clock=clock)


def _open(service, **overrides):
    data = {"user_id": 3, "subject": "Payslip missing", "description": "February payslip not received", "category": "payroll"}
    data.update(overrides)
    return service.create(data)


def test_ticket_numbers_restart_each_month():
    assert ticket_prefix(date(2026, 3, 10)) == "TKT-202603-"
    assert next_ticket_number("TKT-202603-", None) == "TKT-202603-0001"
    assert next_ticket_number("TKT-202603-", "TKT-202603-0041") == "TKT-202603-0042"
    assert next_ticket_number("TKT-202604-", "TKT-202603-0041") == "TKT-202604-0001"


def test_routing_by_category():
    hr = {TicketCategory.PAYROLL, TicketCategory.LEAVE, TicketCategory.POLICY, TicketCategory.CONFIDENTIAL}
    for category in TicketCategory:
        expected = TicketQueue.HR if category in hr else TicketQueue.ADMIN
        assert route_category(category) == expected


def test_create_numbers_and_routes(service):
    first = _open(service)
    second = _open(service, category="seating")

    assert first == {"id": 1, "ticket_number": "TKT-202603-0001", "routed_to": "hr"}
    assert second["ticket_number"] == "TKT-202603-0002"
    assert second["routed_to"] == "admin"


@pytest.mark.parametrize(
    "overrides",
    [{"user_id": None}, {"subject": "  "}, {"description": ""}, {"category": "travel"}, {"priority": "p0"}],
)
def test_create_validation(service, overrides):
    with pytest.raises(ValidationError):
        _open(service, **overrides)


def test_resolving_stamps_resolver_once(service, repo, fixed_now):
    ticket = _open(service)

    resolved = service.update(ticket["id"], {"status": "resolved", "updated_by": 9, "resolution_notes": " Re-sent "})
    closed = service.update(ticket["id"], {"status": "closed", "updated_by": 11})

    assert resolved["status"] == "resolved"
    assert resolved["resolved_at"] == fixed_now
    assert resolved["resolved_by"] == 9
    assert resolved["resolution_notes"] == "Re-sent"
    assert closed["resolved_by"] == 9


def test_comments_are_returned_with_ticket(service):
    ticket = _open(service)

    service.add_comment(ticket["id"], {"user_id": 9, "comment": "Looking into it", "is_internal": "true"})
    data = service.get_with_comments(ticket["id"])

    assert [c["comment"] for c in data["comments"]] == ["Looking into it"]
    assert data["comments"][0]["is_internal"] is True


def test_missing_ticket_is_404(service):
    with pytest.raises(NotFoundError):
        service.update(99, {"status": "closed"})
    with pytest.raises(NotFoundError):
        service.add_comment(99, {"user_id": 1, "comment": "hi"})


def test_list_validates_filters(service, repo):
    service.list({"status": "new", "routed_to": "hr", "user_id": "3"}, PageRequest())

    assert repo.list_calls[-1] == {"status": "new", "routed_to": "hr", "user_id": 3}
    with pytest.raises(ValidationError):
        service.list({"status": "lost"}, PageRequest())
