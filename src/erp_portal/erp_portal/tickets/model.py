from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.constants import TICKET_NUMBER_WIDTH
from ..core.enums import TicketCategory, TicketPriority, TicketQueue, TicketStatus

HR_CATEGORIES = frozenset(
    {TicketCategory.PAYROLL, TicketCategory.LEAVE, TicketCategory.POLICY, TicketCategory.CONFIDENTIAL}
)

CLOSING_STATUSES = frozenset({TicketStatus.RESOLVED, TicketStatus.CLOSED})


def route_category(category: TicketCategory) -> TicketQueue:
    return TicketQueue.HR if category in HR_CATEGORIES else TicketQueue.ADMIN


def ticket_prefix(on: date) -> str:
    return f"TKT-{on.strftime('%Y%m')}-"


def next_ticket_number(prefix: str, last_number: Optional[str]) -> str:
    """TKT-YYYYMM-NNNN; the sequence restarts with every month prefix."""

    seq = 0
    if last_number and last_number.startswith(prefix):
        tail = last_number[len(prefix):]
        seq = int(tail) if tail.isdigit() else 0
    return f"{prefix}{seq + 1:0{TICKET_NUMBER_WIDTH}d}"


@dataclass(frozen=True)
class TicketComment:
    id: int
    ticket_id: int
    user_id: int
    comment: str
    is_internal: bool = False
    created_at: Optional[datetime] = None
    user_name: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "ticket_id": self.ticket_id,
            "user_id": self.user_id,
            "user_name": self.user_name,
            "comment": self.comment,
            "is_internal": self.is_internal,
            "created_at": self.created_at,
        }


@dataclass(frozen=True)
class Ticket:
    id: int
    ticket_number: str
    user_id: int
    subject: str
    description: str
    category: TicketCategory
    priority: TicketPriority
    status: TicketStatus
    routed_to: TicketQueue
    assigned_to: Optional[int] = None
    resolution_notes: Optional[str] = None
    resolved_at: Optional[datetime] = None
    resolved_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    requester_name: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "ticket_number": self.ticket_number,
            "user_id": self.user_id,
            "requester_name": self.requester_name,
            "subject": self.subject,
            "description": self.description,
            "category": self.category.value,
            "priority": self.priority.value,
            "status": self.status.value,
            "routed_to": self.routed_to.value,
            "assigned_to": self.assigned_to,
            "resolution_notes": self.resolution_notes,
            "resolved_at": self.resolved_at,
            "resolved_by": self.resolved_by,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
