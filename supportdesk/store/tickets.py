from __future__ import annotations

import logging
import math
from datetime import date

from supportdesk.domain import (
    ActivityType,
    Message,
    Ticket,
    TicketCategory,
    TicketPriority,
    TicketStatus,
    TimeEntry,
    User,
)
from supportdesk.errors import AuthorizationError, ValidationError

from . import authorization
from .activity import ActivityRecorder
from .tables import EntityTables, short_id
from .validation import coerce_enum, require_text

logger = logging.getLogger(__name__)


class TicketLifecycleEngine:
    """Ticket mutations and the read paths that serve them back to callers.

    Every mutation resolves and checks everything it needs before it writes,
    so a rejected call leaves the tables exactly as they were.
    """

    def __init__(self, tables: EntityTables, recorder: ActivityRecorder) -> None:
        self._tables = tables
        self._recorder = recorder

    def create_ticket(
        self,
        title: str,
        description: str,
        priority: TicketPriority | str = TicketPriority.MEDIUM,
        category: TicketCategory | str = TicketCategory.SUPPORT,
        organization_id: str | None = None,
        *,
        actor: User | None,
    ) -> Ticket:
        creator = authorization.require_user(actor)
        title = require_text(title, "title")
        description = require_text(description, "description")
        priority = coerce_enum(TicketPriority, priority, "priority")
        category = coerce_enum(TicketCategory, category, "category")

        if not creator.is_internal:
            if organization_id is not None and organization_id != creator.organization_id:
                raise AuthorizationError("Clients may only file tickets for their own organization")
            organization_id = creator.organization_id
        if not organization_id:
            raise ValidationError("organization_id is required", details={"field": "organization_id"})
        self._tables.get_organization(organization_id)

        now = self._tables.now()
        ticket = Ticket(
            id=self._tables.next_ticket_id(),
            organization_id=organization_id,
            title=title,
            description=description,
            status=TicketStatus.OPEN,
            priority=priority,
            category=category,
            created_by=creator.id,
            assigned_to=None,
            created_at=now,
            updated_at=now,
        )
        self._tables.tickets[ticket.id] = ticket
        self._recorder.record(ActivityType.TICKET_CREATED, f"New ticket: {title}", creator.id, ticket.id)
        logger.info("Ticket %s created for %s by %s", ticket.id, organization_id, creator.id)
        return authorization.ticket_view(creator, ticket)

    def update_status(self, ticket_id: str, new_status: TicketStatus | str, *, actor: User | None) -> Ticket:
        staff = authorization.require_internal(actor)
        ticket = self._tables.get_ticket(ticket_id)
        new_status = coerce_enum(TicketStatus, new_status, "status")

        previous = ticket.status
        ticket.status = new_status
        ticket.updated_at = self._tables.now()
        self._recorder.record(
            ActivityType.TICKET_UPDATED,
            f"Ticket {ticket.id} status changed to {new_status.value}",
            staff.id,
            ticket.id,
        )
        if new_status is TicketStatus.RESOLVED:
            self._recorder.record(ActivityType.TICKET_RESOLVED, f"Ticket {ticket.id} resolved", staff.id, ticket.id)
        logger.info("Ticket %s status %s -> %s", ticket.id, previous.value, new_status.value)
        return authorization.ticket_view(staff, ticket)

    def update_priority(self, ticket_id: str, priority: TicketPriority | str, *, actor: User | None) -> Ticket:
        staff = authorization.require_internal(actor)
        ticket = self._tables.get_ticket(ticket_id)
        priority = coerce_enum(TicketPriority, priority, "priority")

        ticket.priority = priority
        ticket.updated_at = self._tables.now()
        self._recorder.record(
            ActivityType.TICKET_UPDATED,
            f"Ticket {ticket.id} priority changed to {priority.value}",
            staff.id,
            ticket.id,
        )
        return authorization.ticket_view(staff, ticket)

    def assign_ticket(self, ticket_id: str, user_id: str | None, *, actor: User | None) -> Ticket:
        staff = authorization.require_internal(actor)
        ticket = self._tables.get_ticket(ticket_id)
        if user_id is not None:
            assignee = self._tables.get_user(user_id)
            if not assignee.is_internal:
                raise ValidationError("Tickets can only be assigned to internal staff", details={"user_id": user_id})

        ticket.assigned_to = user_id
        ticket.updated_at = self._tables.now()
        description = f"Ticket {ticket.id} assigned to {user_id}" if user_id else f"Ticket {ticket.id} unassigned"
        self._recorder.record(ActivityType.TICKET_UPDATED, description, staff.id, ticket.id)
        return authorization.ticket_view(staff, ticket)

    def add_message(
        self,
        ticket_id: str,
        content: str,
        is_internal: bool = False,
        *,
        actor: User | None,
    ) -> Message:
        ticket = self._tables.get_ticket(ticket_id)
        author = authorization.require_ticket_access(actor, ticket)
        if is_internal and not author.is_internal:
            raise AuthorizationError("Clients cannot post internal notes")
        content = require_text(content, "content")

        now = self._tables.now()
        message = Message(
            id=short_id("msg"),
            ticket_id=ticket.id,
            user_id=author.id,
            content=content,
            is_internal=bool(is_internal),
            created_at=now,
        )
        ticket.messages.append(message)
        ticket.updated_at = now
        self._recorder.record(ActivityType.MESSAGE_ADDED, f"New message on {ticket.id}", author.id, ticket.id)
        return message

    def add_time_entry(
        self,
        ticket_id: str,
        hours: float,
        description: str,
        entry_date: date | None = None,
        *,
        actor: User | None,
    ) -> TimeEntry:
        staff = authorization.require_internal(actor)
        ticket = self._tables.get_ticket(ticket_id)
        if isinstance(hours, bool) or not isinstance(hours, (int, float)) or not math.isfinite(hours) or hours <= 0:
            raise ValidationError("hours must be positive", details={"field": "hours", "value": str(hours)})
        description = require_text(description, "description")

        now = self._tables.now()
        entry = TimeEntry(
            id=short_id("te"),
            ticket_id=ticket.id,
            user_id=staff.id,
            hours=float(hours),
            description=description,
            date=entry_date or now.date(),
        )
        ticket.time_entries.append(entry)
        ticket.recompute_hours()
        ticket.updated_at = now
        logger.info("Logged %.2fh on %s, total %.2fh", entry.hours, ticket.id, ticket.hours_worked)
        return entry

    def get_ticket(self, ticket_id: str, *, actor: User | None) -> Ticket:
        ticket = self._tables.get_ticket(ticket_id)
        reader = authorization.require_ticket_access(actor, ticket)
        return authorization.ticket_view(reader, ticket)

    def list_tickets(
        self,
        *,
        actor: User | None,
        status: TicketStatus | str | None = None,
        priority: TicketPriority | str | None = None,
        category: TicketCategory | str | None = None,
        organization_id: str | None = None,
        assigned_to: str | None = None,
        search: str | None = None,
    ) -> list[Ticket]:
        """Visible tickets matching every given filter, newest first."""

        reader = authorization.require_user(actor)
        tickets = authorization.visible_tickets(reader, self._tables.tickets.values())

        if status is not None:
            status = coerce_enum(TicketStatus, status, "status")
            tickets = [ticket for ticket in tickets if ticket.status is status]
        if priority is not None:
            priority = coerce_enum(TicketPriority, priority, "priority")
            tickets = [ticket for ticket in tickets if ticket.priority is priority]
        if category is not None:
            category = coerce_enum(TicketCategory, category, "category")
            tickets = [ticket for ticket in tickets if ticket.category is category]
        if organization_id and reader.is_internal:
            tickets = [ticket for ticket in tickets if ticket.organization_id == organization_id]
        if assigned_to:
            tickets = [ticket for ticket in tickets if ticket.assigned_to == assigned_to]
        if search and search.strip():
            needle = search.strip().lower()
            tickets = [
                ticket
                for ticket in tickets
                if needle in ticket.title.lower()
                or needle in ticket.description.lower()
                or needle in ticket.id.lower()
            ]

        # later inserts win ties on equal timestamps
        ordered = sorted(enumerate(tickets), key=lambda pair: (pair[1].created_at, pair[0]), reverse=True)
        return [ticket for _, ticket in ordered]
