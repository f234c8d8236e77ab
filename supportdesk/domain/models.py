from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime

from .enums import (
    ActivityType,
    ApprovalState,
    ApprovalTrack,
    InvoiceStatus,
    Plan,
    ProposedType,
    Role,
    TicketCategory,
    TicketPriority,
    TicketStatus,
)


@dataclass(slots=True)
class Organization:
    """Client organization owning users and tickets by reference."""

    id: str
    name: str
    plan: Plan
    contact_email: str
    created_at: datetime


@dataclass(slots=True)
class User:
    """Portal user; ``organization_id`` is set only for the client role."""

    id: str
    name: str
    email: str
    role: Role
    organization_id: str | None
    avatar: str
    password: str | None = field(default=None, repr=False)

    @property
    def is_internal(self) -> bool:
        return self.role.is_internal


@dataclass(slots=True)
class Message:
    id: str
    ticket_id: str
    user_id: str
    content: str
    is_internal: bool
    created_at: datetime


@dataclass(slots=True)
class TimeEntry:
    id: str
    ticket_id: str
    user_id: str
    hours: float
    description: str
    date: date


@dataclass(slots=True)
class ConversionRequest:
    """Proposal to turn a support ticket into a development item."""

    id: str
    ticket_id: str
    proposed_type: ProposedType
    reason: str
    proposed_by: str
    created_at: datetime
    internal_approval: ApprovalState = ApprovalState.PENDING
    client_approval: ApprovalState = ApprovalState.PENDING

    def state_of(self, track: ApprovalTrack) -> ApprovalState:
        if track is ApprovalTrack.INTERNAL:
            return self.internal_approval
        return self.client_approval

    @property
    def is_approved(self) -> bool:
        return (
            self.internal_approval is ApprovalState.APPROVED
            and self.client_approval is ApprovalState.APPROVED
        )

    @property
    def is_pending(self) -> bool:
        return (
            self.internal_approval is ApprovalState.PENDING
            or self.client_approval is ApprovalState.PENDING
        )


@dataclass(slots=True)
class Ticket:
    """Aggregate representing a support ticket and its embedded records."""

    id: str
    organization_id: str
    title: str
    description: str
    status: TicketStatus
    priority: TicketPriority
    category: TicketCategory
    created_by: str
    assigned_to: str | None
    created_at: datetime
    updated_at: datetime
    hours_worked: float = 0.0
    messages: list[Message] = field(default_factory=list)
    time_entries: list[TimeEntry] = field(default_factory=list)
    conversion_request: ConversionRequest | None = None

    def recompute_hours(self) -> float:
        self.hours_worked = sum(entry.hours for entry in self.time_entries)
        return self.hours_worked


@dataclass(slots=True)
class InvoicePreview:
    """Unsaved invoice figures for an organization and billing period."""

    organization_id: str
    month: int
    year: int
    tickets_closed: int
    total_hours: float
    rate_per_hour: float
    total_amount: float


@dataclass(slots=True)
class Invoice:
    """Billing record; all figures are a snapshot taken at generation time."""

    id: str
    organization_id: str
    month: int
    year: int
    tickets_closed: int
    total_hours: float
    rate_per_hour: float
    total_amount: float
    status: InvoiceStatus
    created_at: datetime


@dataclass(slots=True, frozen=True)
class Activity:
    """Append-only audit entry shown in the dashboard feed."""

    id: str
    type: ActivityType
    description: str
    user_id: str
    created_at: datetime
    ticket_id: str | None = None


@dataclass(slots=True)
class DashboardStats:
    total_tickets: int = 0
    open_tickets: int = 0
    in_progress: int = 0
    resolved: int = 0
    closed: int = 0
    total_hours: float = 0.0
    pending_approvals: int = 0


@dataclass(slots=True)
class InvoiceSummary:
    paid: float = 0.0
    outstanding: float = 0.0
    draft: float = 0.0
