from __future__ import annotations

import logging
from dataclasses import replace
from typing import Mapping

from supportdesk.domain import Invoice, InvoicePreview, InvoiceStatus, InvoiceSummary, User
from supportdesk.errors import InvalidTransitionError, ValidationError

from . import authorization
from .tables import EntityTables
from .validation import coerce_enum

logger = logging.getLogger(__name__)


class InvoiceStateMachine:
    """Forward-only invoice progression: draft, sent, paid."""

    _TRANSITIONS: Mapping[InvoiceStatus, frozenset[InvoiceStatus]] = {
        InvoiceStatus.DRAFT: frozenset({InvoiceStatus.SENT}),
        InvoiceStatus.SENT: frozenset({InvoiceStatus.PAID}),
        InvoiceStatus.PAID: frozenset(),
    }

    @classmethod
    def initial_state(cls) -> InvoiceStatus:
        return InvoiceStatus.DRAFT

    @classmethod
    def can_transition(cls, current: InvoiceStatus, new: InvoiceStatus) -> bool:
        return new in cls._TRANSITIONS.get(current, frozenset())

    @classmethod
    def assert_transition(cls, current: InvoiceStatus, new: InvoiceStatus) -> None:
        if not cls.can_transition(current, new):
            raise InvalidTransitionError(
                f"Invalid invoice status transition: {current.value} -> {new.value}",
                details={"from": current.value, "to": new.value},
            )


def _validate_period(month: int, year: int) -> None:
    if isinstance(month, bool) or not isinstance(month, int) or not 1 <= month <= 12:
        raise ValidationError("month must be between 1 and 12", details={"field": "month", "value": str(month)})
    if isinstance(year, bool) or not isinstance(year, int) or year < 1:
        raise ValidationError("year must be a positive integer", details={"field": "year", "value": str(year)})


def _validate_rate(rate_per_hour: float) -> float:
    if isinstance(rate_per_hour, bool) or not isinstance(rate_per_hour, (int, float)) or rate_per_hour < 0:
        raise ValidationError("rate_per_hour must be zero or positive", details={"field": "rate_per_hour"})
    return float(rate_per_hour)


class BillingAggregator:
    """Turns resolved ticket hours into invoice snapshots."""

    def __init__(self, tables: EntityTables) -> None:
        self._tables = tables

    def preview_invoice(self, organization_id: str, month: int, year: int, rate_per_hour: float) -> InvoicePreview:
        """Compute invoice figures without storing anything.

        Every resolved or closed ticket of the organization counts, whatever
        the requested month and year; the period only labels the invoice.
        """

        _validate_period(month, year)
        rate = _validate_rate(rate_per_hour)
        self._tables.get_organization(organization_id)

        billable = [ticket for ticket in self._tables.tickets_of(organization_id) if ticket.status.is_billable]
        total_hours = sum(ticket.hours_worked for ticket in billable)
        return InvoicePreview(
            organization_id=organization_id,
            month=month,
            year=year,
            tickets_closed=len(billable),
            total_hours=total_hours,
            rate_per_hour=rate,
            total_amount=total_hours * rate,
        )

    def create_invoice(self, preview: InvoicePreview, *, actor: User | None) -> Invoice:
        admin = authorization.require_admin(actor)
        _validate_period(preview.month, preview.year)
        rate = _validate_rate(preview.rate_per_hour)
        if preview.tickets_closed < 0 or preview.total_hours < 0:
            raise ValidationError("Invoice figures cannot be negative")
        self._tables.get_organization(preview.organization_id)

        invoice = Invoice(
            id=self._tables.next_invoice_id(preview.year),
            organization_id=preview.organization_id,
            month=preview.month,
            year=preview.year,
            tickets_closed=preview.tickets_closed,
            total_hours=float(preview.total_hours),
            rate_per_hour=rate,
            total_amount=float(preview.total_hours) * rate,
            status=InvoiceStateMachine.initial_state(),
            created_at=self._tables.now(),
        )
        self._tables.invoices[invoice.id] = invoice
        logger.info(
            "Invoice %s created for %s %02d/%d: %.2f by %s",
            invoice.id,
            invoice.organization_id,
            invoice.month,
            invoice.year,
            invoice.total_amount,
            admin.id,
        )
        return replace(invoice)

    def update_invoice_status(
        self, invoice_id: str, new_status: InvoiceStatus | str, *, actor: User | None
    ) -> Invoice:
        authorization.require_admin(actor)
        invoice = self._tables.get_invoice(invoice_id)
        new_status = coerce_enum(InvoiceStatus, new_status, "status")
        InvoiceStateMachine.assert_transition(invoice.status, new_status)

        invoice.status = new_status
        logger.info("Invoice %s marked %s", invoice.id, new_status.value)
        return replace(invoice)

    def list_invoices(self, *, actor: User | None) -> list[Invoice]:
        reader = authorization.require_user(actor)
        invoices = authorization.visible_invoices(reader, self._tables.invoices.values())
        ordered = sorted(invoices, key=lambda invoice: (invoice.year, invoice.month), reverse=True)
        return [replace(invoice) for invoice in ordered]

    def invoice_summary(self, *, actor: User | None) -> InvoiceSummary:
        summary = InvoiceSummary()
        for invoice in self.list_invoices(actor=actor):
            if invoice.status is InvoiceStatus.PAID:
                summary.paid += invoice.total_amount
            elif invoice.status is InvoiceStatus.SENT:
                summary.outstanding += invoice.total_amount
            else:
                summary.draft += invoice.total_amount
        return summary
