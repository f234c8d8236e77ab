from __future__ import annotations

import logging
from dataclasses import replace

from supportdesk.domain import Organization, Plan, Role, User
from supportdesk.errors import ConflictError, ValidationError

from . import authorization
from .tables import EntityTables, short_id
from .validation import coerce_enum, require_text

logger = logging.getLogger(__name__)


def avatar_label(name: str) -> str:
    """Upper-cased initials of the first two words of ``name``."""

    initials = "".join(word[0] for word in name.split()[:2])
    return initials.upper()


class Directory:
    """Admin management of organizations and users."""

    def __init__(self, tables: EntityTables) -> None:
        self._tables = tables

    def create_organization(
        self,
        name: str,
        contact_email: str,
        plan: Plan | str = Plan.STARTER,
        *,
        actor: User | None,
    ) -> Organization:
        authorization.require_admin(actor)
        org = Organization(
            id=short_id("org"),
            name=require_text(name, "name"),
            plan=coerce_enum(Plan, plan, "plan"),
            contact_email=require_text(contact_email, "contact_email"),
            created_at=self._tables.now(),
        )
        self._tables.organizations[org.id] = org
        logger.info("Organization %s created", org.id)
        return replace(org)

    def update_organization(
        self,
        org_id: str,
        *,
        actor: User | None,
        name: str | None = None,
        plan: Plan | str | None = None,
        contact_email: str | None = None,
    ) -> Organization:
        authorization.require_admin(actor)
        org = self._tables.get_organization(org_id)
        if name is None and plan is None and contact_email is None:
            raise ValidationError("No fields provided for update")
        new_name = require_text(name, "name") if name is not None else org.name
        new_plan = coerce_enum(Plan, plan, "plan") if plan is not None else org.plan
        new_email = require_text(contact_email, "contact_email") if contact_email is not None else org.contact_email

        org.name, org.plan, org.contact_email = new_name, new_plan, new_email
        return replace(org)

    def delete_organization(self, org_id: str, *, actor: User | None) -> None:
        """Remove the organization with its users, tickets and invoices."""

        authorization.require_admin(actor)
        self._tables.get_organization(org_id)

        tables = self._tables
        tables.tickets = {key: t for key, t in tables.tickets.items() if t.organization_id != org_id}
        tables.invoices = {key: i for key, i in tables.invoices.items() if i.organization_id != org_id}
        tables.users = {key: u for key, u in tables.users.items() if u.organization_id != org_id}
        del tables.organizations[org_id]
        logger.info("Organization %s deleted with its users, tickets and invoices", org_id)

    def create_user(
        self,
        name: str,
        email: str,
        role: Role | str,
        organization_id: str | None = None,
        password: str | None = None,
        *,
        actor: User | None,
    ) -> User:
        authorization.require_admin(actor)
        name = require_text(name, "name")
        email = require_text(email, "email")
        role = coerce_enum(Role, role, "role")
        self._ensure_unique_email(email)
        organization_id = self._organization_for(role, organization_id)

        user = User(
            id=short_id("user"),
            name=name,
            email=email,
            role=role,
            organization_id=organization_id,
            avatar=avatar_label(name),
            password=password or None,
        )
        self._tables.users[user.id] = user
        logger.info("User %s created with role %s", user.id, role.value)
        return replace(user)

    def update_user(
        self,
        user_id: str,
        *,
        actor: User | None,
        name: str | None = None,
        email: str | None = None,
        role: Role | str | None = None,
        organization_id: str | None = None,
    ) -> User:
        authorization.require_admin(actor)
        user = self._tables.get_user(user_id)
        new_name = require_text(name, "name") if name is not None else user.name
        new_email = user.email
        if email is not None:
            new_email = require_text(email, "email")
            self._ensure_unique_email(new_email, exclude=user.id)
        new_role = coerce_enum(Role, role, "role") if role is not None else user.role
        if new_role is Role.CLIENT:
            new_org = self._organization_for(new_role, organization_id or user.organization_id)
        else:
            new_org = None

        user.name = new_name
        user.avatar = avatar_label(new_name)
        user.email = new_email
        user.role = new_role
        user.organization_id = new_org
        if not new_role.is_internal:
            self._unassign(user.id)
        return replace(user)

    def delete_user(self, user_id: str, *, actor: User | None) -> None:
        admin = authorization.require_admin(actor)
        self._tables.get_user(user_id)
        if admin.id == user_id:
            raise ValidationError("You cannot delete your own account")

        del self._tables.users[user_id]
        self._unassign(user_id)
        logger.info("User %s deleted", user_id)

    def _unassign(self, user_id: str) -> None:
        """Clear ticket assignments held by a user who can no longer be an assignee."""

        for ticket in self._tables.tickets.values():
            if ticket.assigned_to == user_id:
                ticket.assigned_to = None
                ticket.updated_at = self._tables.now()

    def _ensure_unique_email(self, email: str, *, exclude: str | None = None) -> None:
        wanted = email.lower()
        for other in self._tables.users.values():
            if other.id != exclude and other.email.lower() == wanted:
                raise ConflictError(f"Email {email} is already in use", details={"email": email})

    def _organization_for(self, role: Role, organization_id: str | None) -> str | None:
        if role is not Role.CLIENT:
            return None
        if not organization_id:
            raise ValidationError("Client users need an organization", details={"field": "organization_id"})
        return self._tables.get_organization(organization_id).id
