from datetime import date, datetime

from pydantic import BaseModel, ConfigDict

from supportdesk.domain import (
    ActivityType,
    ApprovalState,
    InvoiceStatus,
    Plan,
    ProposedType,
    Role,
    TicketCategory,
    TicketPriority,
    TicketStatus,
)


class _FromDomain(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class OrganizationResponse(_FromDomain):
    id: str
    name: str
    plan: Plan
    contact_email: str
    created_at: datetime


class UserResponse(_FromDomain):
    id: str
    name: str
    email: str
    role: Role
    organization_id: str | None
    avatar: str


class MessageResponse(_FromDomain):
    id: str
    ticket_id: str
    user_id: str
    content: str
    is_internal: bool
    created_at: datetime


class TimeEntryResponse(_FromDomain):
    id: str
    ticket_id: str
    user_id: str
    hours: float
    description: str
    date: date


class ConversionRequestResponse(_FromDomain):
    id: str
    ticket_id: str
    proposed_type: ProposedType
    reason: str
    proposed_by: str
    created_at: datetime
    internal_approval: ApprovalState
    client_approval: ApprovalState


class TicketResponse(_FromDomain):
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
    hours_worked: float
    messages: list[MessageResponse]
    time_entries: list[TimeEntryResponse]
    conversion_request: ConversionRequestResponse | None


class InvoicePreviewResponse(_FromDomain):
    organization_id: str
    month: int
    year: int
    tickets_closed: int
    total_hours: float
    rate_per_hour: float
    total_amount: float


class InvoiceResponse(InvoicePreviewResponse):
    id: str
    status: InvoiceStatus
    created_at: datetime


class InvoiceSummaryResponse(_FromDomain):
    paid: float
    outstanding: float
    draft: float


class ActivityResponse(_FromDomain):
    id: str
    type: ActivityType
    description: str
    user_id: str
    ticket_id: str | None
    created_at: datetime


class DashboardStatsResponse(_FromDomain):
    total_tickets: int
    open_tickets: int
    in_progress: int
    resolved: int
    closed: int
    total_hours: float
    pending_approvals: int
