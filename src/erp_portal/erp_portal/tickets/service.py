from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Mapping, Optional

from ..common.datetime_utils import now_local
from ..common.pagination import Page, PageRequest
from ..common.validators import require_choice, require_max_length, require_non_empty, require_positive_id, to_bool, to_int
from ..core.enums import TicketCategory, TicketPriority, TicketStatus
from ..core.exceptions import NotFoundError
from .model import CLOSING_STATUSES, Ticket, route_category, ticket_prefix
from .repository import TicketRepository

logger = logging.getLogger(__name__)

CATEGORIES = [c.value for c in TicketCategory]
PRIORITIES = [p.value for p in TicketPriority]
STATUSES = [s.value for s in TicketStatus]


class TicketService:
    def __init__(self, tickets: TicketRepository, *, clock: Callable[[], datetime] = now_local):
        self._tickets = tickets
        self._clock = clock

    def create(self, data: Mapping[str, Any]) -> dict:
        user_id = require_positive_id(data.get("user_id"), "user_id")
        subject = require_max_length(require_non_empty(data.get("subject"), "subject"), "subject", 255)
        description = require_non_empty(data.get("description"), "description")
        category = TicketCategory(
            require_choice(str(data.get("category") or "general_request"), "category", CATEGORIES)
        )
        priority = TicketPriority(require_choice(str(data.get("priority") or "medium"), "priority", PRIORITIES))
        routed_to = route_category(category)

        ticket_id, number = self._tickets.create(
            values={
                "user_id": user_id,
                "subject": subject,
                "description": description,
                "category": category.value,
                "priority": priority.value,
                "status": TicketStatus.NEW.value,
                "routed_to": routed_to.value,
            },
            number_prefix=ticket_prefix(self._clock().date()),
        )
        logger.info("Ticket %s opened by user %d, routed to %s", number, user_id, routed_to.value)
        return {"id": ticket_id, "ticket_number": number, "routed_to": routed_to.value}

    def get(self, ticket_id: int) -> Ticket:
        ticket = self._tickets.get(ticket_id)
        if not ticket:
            raise NotFoundError("Ticket not found")
        return ticket

    def get_with_comments(self, ticket_id: int) -> dict:
        ticket = self.get(ticket_id)
        data = ticket.to_dict()
        data["comments"] = [c.to_dict() for c in self._tickets.list_comments(ticket_id)]
        return data

    def list(self, args: Mapping[str, Any], page: PageRequest) -> Page[Ticket]:
        filters: dict = {}
        if args.get("status"):
            filters["status"] = require_choice(args["status"], "status", STATUSES)
        if args.get("priority"):
            filters["priority"] = require_choice(args["priority"], "priority", PRIORITIES)
        if args.get("category"):
            filters["category"] = require_choice(args["category"], "category", CATEGORIES)
        if args.get("routed_to"):
            filters["routed_to"] = require_choice(args["routed_to"], "routed_to", ["hr", "admin"])
        if args.get("user_id"):
            filters["user_id"] = to_int(args["user_id"], "user_id")
        return self._tickets.list(filters=filters, page=page)

    def update(self, ticket_id: int, data: Mapping[str, Any]) -> dict:
        current = self.get(ticket_id)
        values: dict = {}

        if data.get("priority"):
            values["priority"] = require_choice(data["priority"], "priority", PRIORITIES)
        if "assigned_to" in data:
            values["assigned_to"] = to_int(data.get("assigned_to"), "assigned_to")
        if "resolution_notes" in data:
            values["resolution_notes"] = (str(data.get("resolution_notes") or "").strip() or None)
        if data.get("status"):
            status = TicketStatus(require_choice(data["status"], "status", STATUSES))
            values["status"] = status.value
            if status in CLOSING_STATUSES and current.status not in CLOSING_STATUSES:
                values["resolved_at"] = self._clock()
                values["resolved_by"] = to_int(data.get("updated_by") or data.get("resolved_by"), "resolved_by")

        self._tickets.update(ticket_id, values=values)
        if values.get("status") and values["status"] != current.status.value:
            logger.info("Ticket %s: %s -> %s", current.ticket_number, current.status.value, values["status"])
        return self.get(ticket_id).to_dict()

    def add_comment(self, ticket_id: int, data: Mapping[str, Any]) -> int:
        self.get(ticket_id)
        return self._tickets.add_comment(
            ticket_id=ticket_id,
            user_id=require_positive_id(data.get("user_id"), "user_id"),
            comment=require_non_empty(data.get("comment"), "comment"),
            is_internal=to_bool(data.get("is_internal", False)),
        )
