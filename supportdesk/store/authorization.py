"""Role based visibility rules and permission guards.

This module is the single place where a role is mapped to what it may see and
change. Read paths call the ``visible_*`` filters; mutations call the
``require_*`` guards before touching any table.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable, Mapping

from supportdesk.domain import (
    Activity,
    ApprovalTrack,
    ConversionRequest,
    Invoice,
    Message,
    Organization,
    Role,
    Ticket,
    User,
)
from supportdesk.errors import AuthorizationError


def _owns(user: User, organization_id: str | None) -> bool:
    return user.organization_id is not None and user.organization_id == organization_id


def can_view_ticket(user: User, ticket: Ticket) -> bool:
    return user.is_internal or _owns(user, ticket.organization_id)


def visible_messages(user: User, messages: Iterable[Message]) -> list[Message]:
    """Internal notes are dropped for client readers."""

    if user.is_internal:
        return list(messages)
    return [message for message in messages if not message.is_internal]


def ticket_view(user: User, ticket: Ticket) -> Ticket:
    """Return a detached copy of ``ticket`` as ``user`` is allowed to read it."""

    return replace(
        ticket,
        messages=[replace(message) for message in visible_messages(user, ticket.messages)],
        time_entries=[replace(entry) for entry in ticket.time_entries],
        conversion_request=replace(ticket.conversion_request) if ticket.conversion_request else None,
    )


def visible_tickets(user: User, tickets: Iterable[Ticket]) -> list[Ticket]:
    return [ticket_view(user, ticket) for ticket in tickets if can_view_ticket(user, ticket)]


def visible_invoices(user: User, invoices: Iterable[Invoice]) -> list[Invoice]:
    if user.is_internal:
        return list(invoices)
    return [invoice for invoice in invoices if _owns(user, invoice.organization_id)]


def visible_activities(
    user: User, activities: Iterable[Activity], tickets: Mapping[str, Ticket]
) -> list[Activity]:
    """Clients only see activities tied to a ticket of their organization."""

    if user.is_internal:
        return list(activities)
    visible: list[Activity] = []
    for activity in activities:
        if activity.ticket_id is None:
            continue
        ticket = tickets.get(activity.ticket_id)
        if ticket is not None and _owns(user, ticket.organization_id):
            visible.append(activity)
    return visible


def visible_organizations(user: User, organizations: Iterable[Organization]) -> list[Organization]:
    if user.is_internal:
        return list(organizations)
    return [org for org in organizations if _owns(user, org.id)]


def visible_users(user: User, users: Iterable[User]) -> list[User]:
    """Clients see their colleagues and internal staff, never other clients."""

    if user.is_internal:
        return list(users)
    return [other for other in users if other.is_internal or _owns(user, other.organization_id)]


def visible_conversion_requests(user: User, tickets: Iterable[Ticket]) -> list[ConversionRequest]:
    return [
        replace(ticket.conversion_request)
        for ticket in tickets
        if ticket.conversion_request is not None and can_view_ticket(user, ticket)
    ]


def require_user(user: User | None) -> User:
    if user is None:
        raise AuthorizationError("No authenticated user")
    return user


def require_internal(user: User | None) -> User:
    actor = require_user(user)
    if not actor.is_internal:
        raise AuthorizationError("Only internal staff may perform this action", details={"role": actor.role.value})
    return actor


def require_admin(user: User | None) -> User:
    actor = require_user(user)
    if actor.role is not Role.ADMIN:
        raise AuthorizationError("Admin access required", details={"role": actor.role.value})
    return actor


def require_ticket_access(user: User | None, ticket: Ticket) -> User:
    actor = require_user(user)
    if not can_view_ticket(actor, ticket):
        raise AuthorizationError("Access denied", details={"ticket_id": ticket.id})
    return actor


def require_approval_track(user: User | None, ticket: Ticket, track: ApprovalTrack) -> User:
    """Staff decide the internal track; clients decide the client track of their own tickets."""

    actor = require_user(user)
    if actor.is_internal:
        if track is not ApprovalTrack.INTERNAL:
            raise AuthorizationError("Internal staff may only decide the internal track")
        return actor
    if track is not ApprovalTrack.CLIENT:
        raise AuthorizationError("Clients may only decide the client track")
    return require_ticket_access(actor, ticket)
