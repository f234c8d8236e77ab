from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable

from supportdesk.domain import Activity, Invoice, Organization, Ticket, User
from supportdesk.errors import NotFoundError

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    """Return a timezone aware UTC timestamp."""

    return datetime.now(timezone.utc)


def short_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:8]}"


@dataclass(slots=True)
class EntityTables:
    """Id to record mappings holding every record of a store instance."""

    organizations: dict[str, Organization] = field(default_factory=dict)
    users: dict[str, User] = field(default_factory=dict)
    tickets: dict[str, Ticket] = field(default_factory=dict)
    invoices: dict[str, Invoice] = field(default_factory=dict)
    activities: dict[str, Activity] = field(default_factory=dict)
    clock: Clock = utcnow
    _ticket_seq: int = field(default=0, init=False, repr=False)
    _invoice_seq: int = field(default=0, init=False, repr=False)

    def now(self) -> datetime:
        return self.clock()

    def next_ticket_id(self) -> str:
        while True:
            self._ticket_seq += 1
            candidate = f"TKT-{self._ticket_seq:03d}"
            if candidate not in self.tickets:
                return candidate

    def next_invoice_id(self, year: int) -> str:
        while True:
            self._invoice_seq += 1
            candidate = f"INV-{year}-{self._invoice_seq:03d}"
            if candidate not in self.invoices:
                return candidate

    def get_organization(self, org_id: str) -> Organization:
        org = self.organizations.get(org_id)
        if org is None:
            raise NotFoundError(f"Organization {org_id} not found", details={"organization_id": org_id})
        return org

    def get_user(self, user_id: str) -> User:
        user = self.users.get(user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found", details={"user_id": user_id})
        return user

    def get_ticket(self, ticket_id: str) -> Ticket:
        ticket = self.tickets.get(ticket_id)
        if ticket is None:
            raise NotFoundError(f"Ticket {ticket_id} not found", details={"ticket_id": ticket_id})
        return ticket

    def get_invoice(self, invoice_id: str) -> Invoice:
        invoice = self.invoices.get(invoice_id)
        if invoice is None:
            raise NotFoundError(f"Invoice {invoice_id} not found", details={"invoice_id": invoice_id})
        return invoice

    def tickets_of(self, org_id: str) -> list[Ticket]:
        return [ticket for ticket in self.tickets.values() if ticket.organization_id == org_id]
