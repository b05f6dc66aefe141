from __future__ import annotations

from enum import Enum


class AttendanceStatus(str, Enum):
    """Daily status derived from biometric punches (stored as-is in MySQL)."""

    PRESENT = "Present"
    ABSENT = "Absent"
    HALF_DAY = "Half Day"
    LATE = "Late"
    EARLY_OUT = "Early Out"
    LATE_AND_EARLY_OUT = "Late & Early Out"


class TicketCategory(str, Enum):
    PAYROLL = "payroll"
    LEAVE = "leave"
    POLICY = "policy"
    ACCESS_CARDS = "access_cards"
    SEATING = "seating"
    MAINTENANCE = "maintenance"
    GENERAL_REQUEST = "general_request"
    CONFIDENTIAL = "confidential"


class TicketPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class TicketStatus(str, Enum):
    NEW = "new"
    UNDER_REVIEW = "under_review"
    IN_PROGRESS = "in_progress"
    WAITING_FOR_EMPLOYEE = "waiting_for_employee"
    RESOLVED = "resolved"
    CLOSED = "closed"


class TicketQueue(str, Enum):
    HR = "hr"
    ADMIN = "admin"


class TodoPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TodoStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class ComponentType(str, Enum):
    EARNING = "earning"
    DEDUCTION = "deduction"


class CalculationType(str, Enum):
    FIXED = "fixed"
    PERCENTAGE = "percentage"


class Presence(str, Enum):
    """Live presence shown on the active-users monitor."""

    ACTIVE = "active"
    IDLE = "idle"
    OFFLINE = "offline"
