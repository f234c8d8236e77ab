from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Roles a portal user can hold."""

    ADMIN = "admin"
    SUPPORT_LEAD = "support-lead"
    SUPPORT_STAFF = "support-staff"
    CLIENT = "client"

    @property
    def is_internal(self) -> bool:
        return self is not Role.CLIENT


class Plan(str, Enum):
    STARTER = "starter"
    PROFESSIONAL = "professional"
    ENTERPRISE = "enterprise"


class TicketStatus(str, Enum):
    """States of a ticket's lifecycle; any state may follow any other."""

    OPEN = "open"
    IN_PROGRESS = "in-progress"
    AWAITING_CLIENT = "awaiting-client"
    RESOLVED = "resolved"
    CLOSED = "closed"

    @property
    def is_billable(self) -> bool:
        return self in (TicketStatus.RESOLVED, TicketStatus.CLOSED)


class TicketPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class TicketCategory(str, Enum):
    BUG = "bug"
    SUPPORT = "support"
    QUESTION = "question"
    FEATURE = "feature"
    ENHANCEMENT = "enhancement"


class ProposedType(str, Enum):
    """Development item kinds a support ticket may be converted into."""

    FEATURE = "feature"
    ENHANCEMENT = "enhancement"


class ApprovalState(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        return self is not ApprovalState.PENDING


class ApprovalTrack(str, Enum):
    """The two independent sign-off tracks of a conversion request."""

    INTERNAL = "internal"
    CLIENT = "client"


class InvoiceStatus(str, Enum):
    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"


class ActivityType(str, Enum):
    TICKET_CREATED = "ticket-created"
    TICKET_UPDATED = "ticket-updated"
    MESSAGE_ADDED = "message-added"
    TICKET_RESOLVED = "ticket-resolved"
    CONVERSION_REQUESTED = "conversion-requested"
    CONVERSION_APPROVED = "conversion-approved"
