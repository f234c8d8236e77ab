import pytest

from supportdesk.domain import InvoiceStatus
from supportdesk.errors import AuthorizationError, InvalidTransitionError, NotFoundError, ValidationError
from supportdesk.store import InvoiceStateMachine


def test_invoice_state_machine_is_forward_only():
    assert InvoiceStateMachine.initial_state() is InvoiceStatus.DRAFT
    assert InvoiceStateMachine.can_transition(InvoiceStatus.DRAFT, InvoiceStatus.SENT)
    assert InvoiceStateMachine.can_transition(InvoiceStatus.SENT, InvoiceStatus.PAID)
    assert not InvoiceStateMachine.can_transition(InvoiceStatus.DRAFT, InvoiceStatus.PAID)
    assert not InvoiceStateMachine.can_transition(InvoiceStatus.PAID, InvoiceStatus.PAID)


def test_preview_counts_resolved_and_closed_tickets(admin_store):
    admin_store.add_time_entry("TKT-002", 4, "Built export")
    admin_store.update_status("TKT-002", "closed")

    preview = admin_store.preview_invoice("org-acme", 1, 2025)

    assert preview.tickets_closed == 2
    assert preview.total_hours == pytest.approx(8.5)
    assert preview.rate_per_hour == 75.0
    assert preview.total_amount == pytest.approx(637.5)
    assert admin_store.tables.invoices.keys() == {"INV-2024-001"}


def test_preview_for_organization_without_billable_work(admin_store):
    preview = admin_store.preview_invoice("org-initech", 2, 2025, rate_per_hour=90)

    assert preview.tickets_closed == 0
    assert preview.total_amount == 0.0


def test_preview_validates_period_and_organization(admin_store):
    with pytest.raises(ValidationError):
        admin_store.preview_invoice("org-acme", 13, 2025)
    with pytest.raises(NotFoundError):
        admin_store.preview_invoice("org-missing", 1, 2025)


def test_create_invoice_snapshots_rate(admin_store):
    invoice = admin_store.generate_invoice("org-acme", 1, 2025)

    assert invoice.id == "INV-2025-002"
    assert invoice.status is InvoiceStatus.DRAFT
    assert invoice.total_amount == pytest.approx(3.5 * 75)

    admin_store.set_rate_per_hour(100)

    stored = admin_store.tables.invoices[invoice.id]
    assert stored.rate_per_hour == 75.0
    assert stored.total_amount == pytest.approx(262.5)
    assert admin_store.preview_invoice("org-acme", 2, 2025).rate_per_hour == 100.0


def test_invoice_status_moves_forward_only(admin_store):
    invoice = admin_store.generate_invoice("org-acme", 1, 2025)

    with pytest.raises(InvalidTransitionError):
        admin_store.update_invoice_status(invoice.id, "paid")
    assert admin_store.update_invoice_status(invoice.id, "sent").status is InvoiceStatus.SENT
    with pytest.raises(InvalidTransitionError):
        admin_store.update_invoice_status(invoice.id, "draft")
    assert admin_store.update_invoice_status(invoice.id, InvoiceStatus.PAID).status is InvoiceStatus.PAID

    for target in ("draft", "sent"):
        with pytest.raises(InvalidTransitionError):
            admin_store.update_invoice_status(invoice.id, target)
    assert admin_store.tables.invoices[invoice.id].status is InvoiceStatus.PAID


def test_only_admins_manage_invoices(store):
    store.set_current_user("user-lead")
    with pytest.raises(AuthorizationError):
        store.generate_invoice("org-acme", 1, 2025)
    with pytest.raises(AuthorizationError):
        store.update_invoice_status("INV-2024-001", "sent")
    with pytest.raises(AuthorizationError):
        store.set_rate_per_hour(90)

    assert store.rate_per_hour == 75.0


def test_rate_must_be_positive(admin_store):
    with pytest.raises(ValidationError):
        admin_store.set_rate_per_hour(0)


def test_invoices_are_visible_to_own_organization_only(store):
    store.set_current_user("user-acme")
    assert store.visible_invoices() == []

    store.set_current_user("user-globex")
    assert [invoice.id for invoice in store.visible_invoices()] == ["INV-2024-001"]


def test_invoice_summary_groups_by_status(admin_store):
    draft = admin_store.generate_invoice("org-acme", 1, 2025)
    sent = admin_store.generate_invoice("org-acme", 2, 2025)
    admin_store.update_invoice_status(sent.id, "sent")

    summary = admin_store.invoice_summary()

    assert summary.paid == pytest.approx(700.0)
    assert summary.outstanding == pytest.approx(sent.total_amount)
    assert summary.draft == pytest.approx(draft.total_amount)
    assert [invoice.id for invoice in admin_store.visible_invoices()] == [sent.id, draft.id, "INV-2024-001"]
