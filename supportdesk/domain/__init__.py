"""Records and enumerations of the support portal."""

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
from .models import (
    Activity,
    ConversionRequest,
    DashboardStats,
    Invoice,
    InvoicePreview,
    InvoiceSummary,
    Message,
    Organization,
    Ticket,
    TimeEntry,
    User,
)

__all__ = [
    "Activity",
    "ActivityType",
    "ApprovalState",
    "ApprovalTrack",
    "ConversionRequest",
    "DashboardStats",
    "Invoice",
    "InvoicePreview",
    "InvoiceStatus",
    "InvoiceSummary",
    "Message",
    "Organization",
    "Plan",
    "ProposedType",
    "Role",
    "Ticket",
    "TicketCategory",
    "TicketPriority",
    "TicketStatus",
    "TimeEntry",
    "User",
]
