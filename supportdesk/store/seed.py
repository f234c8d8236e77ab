"""Demo dataset used to initialise a store for local runs."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

from supportdesk.domain import (
    ActivityType,
    ApprovalState,
    ConversionRequest,
    Invoice,
    InvoiceStatus,
    Message,
    Organization,
    Plan,
    ProposedType,
    Role,
    Ticket,
    TicketCategory,
    TicketPriority,
    TicketStatus,
    TimeEntry,
    User,
)

from .activity import ActivityRecorder
from .directory import avatar_label
from .tables import EntityTables

_EPOCH = datetime(2025, 1, 6, 9, 0, tzinfo=timezone.utc)

ORGANIZATIONS = (
    ("org-acme", "Acme Corp", Plan.ENTERPRISE, "it@acme.example"),
    ("org-globex", "Globex", Plan.PROFESSIONAL, "support@globex.example"),
    ("org-initech", "Initech", Plan.STARTER, "ops@initech.example"),
)

USERS = (
    ("user-admin", "Alex Morgan", "admin@supportdesk.example", Role.ADMIN, None),
    ("user-lead", "Sam Rivera", "sam@supportdesk.example", Role.SUPPORT_LEAD, None),
    ("user-staff", "Jordan Lee", "jordan@supportdesk.example", Role.SUPPORT_STAFF, None),
    ("user-acme", "Casey Brooks", "casey@acme.example", Role.CLIENT, "org-acme"),
    ("user-globex", "Riley Chen", "riley@globex.example", Role.CLIENT, "org-globex"),
)


def _at(days: int, hours: int = 0) -> datetime:
    return _EPOCH + timedelta(days=days, hours=hours)


def seed_tables(tables: EntityTables) -> EntityTables:
    """Populate ``tables`` with a small, consistent demo dataset."""

    for index, (org_id, name, plan, email) in enumerate(ORGANIZATIONS):
        tables.organizations[org_id] = Organization(
            id=org_id, name=name, plan=plan, contact_email=email, created_at=_at(-30 + index)
        )
    for user_id, name, email, role, org_id in USERS:
        tables.users[user_id] = User(
            id=user_id,
            name=name,
            email=email,
            role=role,
            organization_id=org_id,
            avatar=avatar_label(name),
        )

    login_id, export_id, dashboard_id = (tables.next_ticket_id() for _ in range(3))
    login_bug = Ticket(
        id=login_id,
        organization_id="org-acme",
        title="SSO login fails for new hires",
        description="Accounts created this week cannot sign in through SSO.",
        status=TicketStatus.RESOLVED,
        priority=TicketPriority.HIGH,
        category=TicketCategory.BUG,
        created_by="user-acme",
        assigned_to="user-staff",
        created_at=_at(0),
        updated_at=_at(2),
        messages=[
            Message("msg-seed0001", login_id, "user-acme", "New hires get an error page after SSO.", False, _at(0, 1)),
            Message("msg-seed0002", login_id, "user-staff", "IdP group mapping is missing.", True, _at(1)),
            Message("msg-seed0003", login_id, "user-staff", "Fixed, please retry.", False, _at(2)),
        ],
        time_entries=[
            TimeEntry("te-seed0001", login_id, "user-staff", 2.0, "Investigated IdP logs", date(2025, 1, 7)),
            TimeEntry("te-seed0002", login_id, "user-staff", 1.5, "Fixed group mapping", date(2025, 1, 8)),
        ],
    )
    export_request = Ticket(
        id=export_id,
        organization_id="org-acme",
        title="Export reports as CSV",
        description="Finance needs monthly reports exported as CSV.",
        status=TicketStatus.IN_PROGRESS,
        priority=TicketPriority.MEDIUM,
        category=TicketCategory.QUESTION,
        created_by="user-acme",
        assigned_to="user-lead",
        created_at=_at(3),
        updated_at=_at(4),
        time_entries=[
            TimeEntry("te-seed0003", export_id, "user-lead", 1.0, "Scoped export format", date(2025, 1, 10)),
        ],
    )
    export_request.conversion_request = ConversionRequest(
        id="cr-seed0001",
        ticket_id=export_request.id,
        proposed_type=ProposedType.FEATURE,
        reason="CSV export is new functionality, not a support fix.",
        proposed_by="user-lead",
        created_at=_at(4),
        internal_approval=ApprovalState.APPROVED,
        client_approval=ApprovalState.PENDING,
    )
    slow_dashboard = Ticket(
        id=dashboard_id,
        organization_id="org-globex",
        title="Dashboard loads slowly",
        description="The analytics dashboard takes over 20 seconds to load.",
        status=TicketStatus.OPEN,
        priority=TicketPriority.CRITICAL,
        category=TicketCategory.SUPPORT,
        created_by="user-globex",
        assigned_to=None,
        created_at=_at(5),
        updated_at=_at(5),
    )
    for ticket in (login_bug, export_request, slow_dashboard):
        ticket.recompute_hours()
        tables.tickets[ticket.id] = ticket

    invoice_id = tables.next_invoice_id(2024)
    tables.invoices[invoice_id] = Invoice(
        id=invoice_id,
        organization_id="org-globex",
        month=12,
        year=2024,
        tickets_closed=4,
        total_hours=10.0,
        rate_per_hour=70.0,
        total_amount=700.0,
        status=InvoiceStatus.PAID,
        created_at=_at(-5),
    )

    recorder = ActivityRecorder(tables)
    recorder.record(ActivityType.TICKET_CREATED, f"New ticket: {login_bug.title}", "user-acme", login_bug.id)
    recorder.record(ActivityType.TICKET_RESOLVED, f"Ticket {login_bug.id} resolved", "user-staff", login_bug.id)
    recorder.record(ActivityType.TICKET_CREATED, f"New ticket: {export_request.title}", "user-acme", export_request.id)
    recorder.record(
        ActivityType.CONVERSION_REQUESTED,
        f"Conversion requested: {export_request.id} to feature",
        "user-lead",
        export_request.id,
    )
    recorder.record(
        ActivityType.TICKET_CREATED, f"New ticket: {slow_dashboard.title}", "user-globex", slow_dashboard.id
    )
    return tables
