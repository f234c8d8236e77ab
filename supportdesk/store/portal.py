from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import replace
from datetime import date
from typing import Iterator

from opentelemetry import trace

from supportdesk.core.config import Settings
from supportdesk.domain import (
    Activity,
    ApprovalState,
    ApprovalTrack,
    ConversionRequest,
    DashboardStats,
    Invoice,
    InvoicePreview,
    InvoiceStatus,
    InvoiceSummary,
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
from supportdesk.errors import StoreError, ValidationError

from . import authorization
from .activity import ActivityRecorder
from .billing import BillingAggregator
from .conversions import ConversionWorkflow
from .directory import Directory
from .seed import seed_tables
from .tables import EntityTables
from .tickets import TicketLifecycleEngine

logger = logging.getLogger(__name__)
_tracer = trace.get_tracer(__name__)


class PortalStore:
    """Single source of truth for one portal session.

    Holds the entity tables, the authenticated user and the global billing
    rate. Every query is filtered for the current user and every mutation
    acts as the current user.
    """

    def __init__(
        self,
        tables: EntityTables | None = None,
        *,
        rate_per_hour: float = 75.0,
        activity_feed_limit: int = 50,
    ) -> None:
        self.tables = tables if tables is not None else EntityTables()
        self.activity = ActivityRecorder(self.tables)
        self.tickets = TicketLifecycleEngine(self.tables, self.activity)
        self.conversions = ConversionWorkflow(self.tables, self.activity)
        self.billing = BillingAggregator(self.tables)
        self.directory = Directory(self.tables)
        self.activity_feed_limit = activity_feed_limit
        self._rate_per_hour = float(rate_per_hour)
        self._current_user_id: str | None = None

    # session state

    @property
    def current_user(self) -> User | None:
        if self._current_user_id is None:
            return None
        return self.tables.users.get(self._current_user_id)

    def set_current_user(self, user_id: str | None) -> User | None:
        """Switch the acting identity; authentication happens upstream."""

        if user_id is None:
            self._current_user_id = None
            return None
        user = self.tables.get_user(user_id)
        self._current_user_id = user.id
        logger.debug("Current user set to %s (%s)", user.id, user.role.value)
        return replace(user)

    @property
    def rate_per_hour(self) -> float:
        return self._rate_per_hour

    def set_rate_per_hour(self, rate: float) -> float:
        with self._mutation("set_rate_per_hour"):
            authorization.require_admin(self.current_user)
            if isinstance(rate, bool) or not isinstance(rate, (int, float)) or rate <= 0:
                raise ValidationError("rate_per_hour must be positive", details={"field": "rate_per_hour"})
            self._rate_per_hour = float(rate)
        return self._rate_per_hour

    # queries

    def get_user_by_id(self, user_id: str) -> User | None:
        reader = authorization.require_user(self.current_user)
        user = self.tables.users.get(user_id)
        if user is None or not authorization.visible_users(reader, [user]):
            return None
        return replace(user)

    def get_org_by_id(self, org_id: str) -> Organization | None:
        reader = authorization.require_user(self.current_user)
        org = self.tables.organizations.get(org_id)
        if org is None or not authorization.visible_organizations(reader, [org]):
            return None
        return replace(org)

    def visible_tickets(self) -> list[Ticket]:
        reader = authorization.require_user(self.current_user)
        return authorization.visible_tickets(reader, self.tables.tickets.values())

    def visible_invoices(self) -> list[Invoice]:
        return self.billing.list_invoices(actor=self.current_user)

    def visible_activities(self, limit: int | None = None) -> list[Activity]:
        """Dashboard feed, most recent first."""

        reader = authorization.require_user(self.current_user)
        visible = authorization.visible_activities(reader, self.activity.recent(), self.tables.tickets)
        return visible[: self.activity_feed_limit if limit is None else limit]

    def list_organizations(self) -> list[Organization]:
        reader = authorization.require_user(self.current_user)
        orgs = authorization.visible_organizations(reader, self.tables.organizations.values())
        return [replace(org) for org in sorted(orgs, key=lambda org: org.name.lower())]

    def list_users(self) -> list[User]:
        reader = authorization.require_user(self.current_user)
        users = authorization.visible_users(reader, self.tables.users.values())
        return [replace(user) for user in sorted(users, key=lambda user: user.name.lower())]

    def list_conversion_requests(self) -> list[ConversionRequest]:
        reader = authorization.require_user(self.current_user)
        requests = authorization.visible_conversion_requests(reader, self.tables.tickets.values())
        return sorted(requests, key=lambda request: request.created_at, reverse=True)

    def list_tickets(
        self,
        *,
        status: TicketStatus | str | None = None,
        priority: TicketPriority | str | None = None,
        category: TicketCategory | str | None = None,
        organization_id: str | None = None,
        assigned_to: str | None = None,
        search: str | None = None,
    ) -> list[Ticket]:
        return self.tickets.list_tickets(
            actor=self.current_user,
            status=status,
            priority=priority,
            category=category,
            organization_id=organization_id,
            assigned_to=assigned_to,
            search=search,
        )

    def get_ticket(self, ticket_id: str) -> Ticket:
        return self.tickets.get_ticket(ticket_id, actor=self.current_user)

    def dashboard_stats(self) -> DashboardStats:
        reader = authorization.require_user(self.current_user)
        stats = DashboardStats()
        for ticket in authorization.visible_tickets(reader, self.tables.tickets.values()):
            stats.total_tickets += 1
            stats.total_hours += ticket.hours_worked
            if ticket.status is TicketStatus.OPEN:
                stats.open_tickets += 1
            elif ticket.status is TicketStatus.IN_PROGRESS:
                stats.in_progress += 1
            elif ticket.status is TicketStatus.RESOLVED:
                stats.resolved += 1
            elif ticket.status is TicketStatus.CLOSED:
                stats.closed += 1

            request = ticket.conversion_request
            if request is None:
                continue
            if reader.is_internal and request.is_pending:
                stats.pending_approvals += 1
            elif not reader.is_internal and request.client_approval is ApprovalState.PENDING:
                stats.pending_approvals += 1
        return stats

    def invoice_summary(self) -> InvoiceSummary:
        return self.billing.invoice_summary(actor=self.current_user)

    # ticket lifecycle

    def create_ticket(
        self,
        title: str,
        description: str,
        priority: TicketPriority | str = TicketPriority.MEDIUM,
        category: TicketCategory | str = TicketCategory.SUPPORT,
        organization_id: str | None = None,
    ) -> Ticket:
        with self._mutation("create_ticket"):
            return self.tickets.create_ticket(
                title, description, priority, category, organization_id, actor=self.current_user
            )

    def update_status(self, ticket_id: str, new_status: TicketStatus | str) -> Ticket:
        with self._mutation("update_status"):
            return self.tickets.update_status(ticket_id, new_status, actor=self.current_user)

    def update_priority(self, ticket_id: str, priority: TicketPriority | str) -> Ticket:
        with self._mutation("update_priority"):
            return self.tickets.update_priority(ticket_id, priority, actor=self.current_user)

    def assign_ticket(self, ticket_id: str, user_id: str | None) -> Ticket:
        with self._mutation("assign_ticket"):
            return self.tickets.assign_ticket(ticket_id, user_id, actor=self.current_user)

    def add_message(self, ticket_id: str, content: str, is_internal: bool = False) -> Message:
        with self._mutation("add_message"):
            return self.tickets.add_message(ticket_id, content, is_internal, actor=self.current_user)

    def add_time_entry(
        self, ticket_id: str, hours: float, description: str, entry_date: date | None = None
    ) -> TimeEntry:
        with self._mutation("add_time_entry"):
            return self.tickets.add_time_entry(ticket_id, hours, description, entry_date, actor=self.current_user)

    # conversion approvals

    def request_conversion(self, ticket_id: str, proposed_type: ProposedType | str, reason: str) -> ConversionRequest:
        with self._mutation("request_conversion"):
            return self.conversions.request_conversion(ticket_id, proposed_type, reason, actor=self.current_user)

    def update_approval(
        self, ticket_id: str, track: ApprovalTrack | str, decision: ApprovalState | str
    ) -> ConversionRequest:
        with self._mutation("update_approval"):
            return self.conversions.update_approval(ticket_id, track, decision, actor=self.current_user)

    # billing

    def preview_invoice(
        self, organization_id: str, month: int, year: int, rate_per_hour: float | None = None
    ) -> InvoicePreview:
        authorization.require_admin(self.current_user)
        rate = self._rate_per_hour if rate_per_hour is None else rate_per_hour
        return self.billing.preview_invoice(organization_id, month, year, rate)

    def create_invoice(self, preview: InvoicePreview) -> Invoice:
        with self._mutation("create_invoice"):
            return self.billing.create_invoice(preview, actor=self.current_user)

    def generate_invoice(self, organization_id: str, month: int, year: int) -> Invoice:
        """Preview at the current global rate and store the result as a draft."""

        return self.create_invoice(self.preview_invoice(organization_id, month, year))

    def update_invoice_status(self, invoice_id: str, new_status: InvoiceStatus | str) -> Invoice:
        with self._mutation("update_invoice_status"):
            return self.billing.update_invoice_status(invoice_id, new_status, actor=self.current_user)

    # directory

    def create_organization(self, name: str, contact_email: str, plan: Plan | str = Plan.STARTER) -> Organization:
        with self._mutation("create_organization"):
            return self.directory.create_organization(name, contact_email, plan, actor=self.current_user)

    def update_organization(
        self,
        org_id: str,
        *,
        name: str | None = None,
        plan: Plan | str | None = None,
        contact_email: str | None = None,
    ) -> Organization:
        with self._mutation("update_organization"):
            return self.directory.update_organization(
                org_id, actor=self.current_user, name=name, plan=plan, contact_email=contact_email
            )

    def delete_organization(self, org_id: str) -> None:
        with self._mutation("delete_organization"):
            self.directory.delete_organization(org_id, actor=self.current_user)

    def create_user(
        self,
        name: str,
        email: str,
        role: Role | str,
        organization_id: str | None = None,
        password: str | None = None,
    ) -> User:
        with self._mutation("create_user"):
            return self.directory.create_user(name, email, role, organization_id, password, actor=self.current_user)

    def update_user(
        self,
        user_id: str,
        *,
        name: str | None = None,
        email: str | None = None,
        role: Role | str | None = None,
        organization_id: str | None = None,
    ) -> User:
        with self._mutation("update_user"):
            return self.directory.update_user(
                user_id,
                actor=self.current_user,
                name=name,
                email=email,
                role=role,
                organization_id=organization_id,
            )

    def delete_user(self, user_id: str) -> None:
        with self._mutation("delete_user"):
            self.directory.delete_user(user_id, actor=self.current_user)

    @contextmanager
    def _mutation(self, operation: str) -> Iterator[None]:
        actor = self.current_user
        with _tracer.start_as_current_span(f"store.{operation}") as span:
            span.set_attribute("supportdesk.actor", actor.id if actor else "anonymous")
            try:
                yield
            except StoreError as exc:
                span.set_attribute("supportdesk.error_code", exc.error_code)
                logger.warning("%s rejected for %s: %s", operation, actor.id if actor else "anonymous", exc.message)
                raise


def create_store(settings: Settings | None = None, *, seed: bool | None = None) -> PortalStore:
    """Build a store from settings, optionally loaded with the demo dataset."""

    settings = settings or Settings()
    tables = EntityTables()
    if seed if seed is not None else settings.seed_demo_data:
        seed_tables(tables)
    return PortalStore(
        tables,
        rate_per_hour=settings.default_rate_per_hour,
        activity_feed_limit=settings.activity_feed_limit,
    )
