import pytest

from supportdesk.domain import ActivityType, TicketCategory, TicketPriority, TicketStatus
from supportdesk.errors import AuthorizationError, NotFoundError, ValidationError


def test_create_ticket_applies_defaults_and_records_activity(staff_store):
    ticket = staff_store.create_ticket("Printer offline", "Floor 3 printer is down", organization_id="org-initech")

    assert ticket.id == "TKT-004"
    assert ticket.status is TicketStatus.OPEN
    assert ticket.priority is TicketPriority.MEDIUM
    assert ticket.category is TicketCategory.SUPPORT
    assert ticket.hours_worked == 0.0
    assert ticket.created_by == "user-staff"
    latest = staff_store.visible_activities(limit=1)[0]
    assert latest.type is ActivityType.TICKET_CREATED
    assert latest.description == "New ticket: Printer offline"


def test_client_ticket_defaults_to_own_organization(client_store):
    ticket = client_store.create_ticket("VPN drops", "Connection drops hourly", "high", "bug")

    assert ticket.organization_id == "org-acme"
    assert ticket.priority is TicketPriority.HIGH


def test_client_cannot_file_ticket_for_another_organization(client_store):
    before = dict(client_store.tables.tickets)

    with pytest.raises(AuthorizationError):
        client_store.create_ticket("Hi", "There", organization_id="org-globex")

    assert client_store.tables.tickets == before


def test_internal_ticket_requires_known_organization(staff_store):
    with pytest.raises(ValidationError):
        staff_store.create_ticket("Title", "Body")
    with pytest.raises(NotFoundError):
        staff_store.create_ticket("Title", "Body", organization_id="org-missing")


def test_create_ticket_rejects_blank_title_and_unknown_priority(staff_store):
    with pytest.raises(ValidationError):
        staff_store.create_ticket("   ", "Body", organization_id="org-acme")
    with pytest.raises(ValidationError) as exc:
        staff_store.create_ticket("Title", "Body", priority="urgent", organization_id="org-acme")

    assert exc.value.details["field"] == "priority"


def test_hours_worked_tracks_sum_of_time_entries(staff_store):
    ticket = staff_store.create_ticket("Slow queries", "Reports time out", organization_id="org-acme")

    for hours in (0.25, 2, 1.5, 0.75):
        staff_store.add_time_entry(ticket.id, hours, "Investigation")
        stored = staff_store.tables.tickets[ticket.id]
        assert stored.hours_worked == pytest.approx(sum(entry.hours for entry in stored.time_entries))

    assert staff_store.get_ticket(ticket.id).hours_worked == pytest.approx(4.5)


@pytest.mark.parametrize("hours", [0, -1, float("nan"), float("inf"), True])
def test_add_time_entry_rejects_invalid_hours(staff_store, hours):
    with pytest.raises(ValidationError):
        staff_store.add_time_entry("TKT-003", hours, "Work")

    assert staff_store.tables.tickets["TKT-003"].time_entries == []


def test_clients_cannot_log_time_or_change_status(client_store):
    with pytest.raises(AuthorizationError):
        client_store.add_time_entry("TKT-002", 1, "Work")
    with pytest.raises(AuthorizationError):
        client_store.update_status("TKT-002", "resolved")

    assert client_store.tables.tickets["TKT-002"].status is TicketStatus.IN_PROGRESS


def test_status_change_to_resolved_records_resolution(staff_store):
    staff_store.update_status("TKT-003", TicketStatus.RESOLVED)

    newest_two = staff_store.visible_activities(limit=2)
    assert [activity.type for activity in newest_two] == [
        ActivityType.TICKET_RESOLVED,
        ActivityType.TICKET_UPDATED,
    ]
    assert newest_two[1].description == "Ticket TKT-003 status changed to resolved"


def test_any_status_may_follow_any_other(staff_store):
    staff_store.update_status("TKT-001", "open")
    ticket = staff_store.update_status("TKT-001", "awaiting-client")

    assert ticket.status is TicketStatus.AWAITING_CLIENT


def test_assign_ticket_only_to_internal_users(staff_store):
    ticket = staff_store.assign_ticket("TKT-003", "user-lead")
    assert ticket.assigned_to == "user-lead"

    with pytest.raises(ValidationError):
        staff_store.assign_ticket("TKT-003", "user-globex")
    with pytest.raises(NotFoundError):
        staff_store.assign_ticket("TKT-003", "user-ghost")

    assert staff_store.assign_ticket("TKT-003", None).assigned_to is None


def test_update_priority_records_activity(staff_store):
    ticket = staff_store.update_priority("TKT-003", "low")

    assert ticket.priority is TicketPriority.LOW
    assert staff_store.visible_activities(limit=1)[0].type is ActivityType.TICKET_UPDATED


def test_client_cannot_post_internal_note(client_store):
    with pytest.raises(AuthorizationError):
        client_store.add_message("TKT-002", "Secret", is_internal=True)

    message = client_store.add_message("TKT-002", "Any update?")
    assert message.is_internal is False
    assert message.user_id == "user-acme"


def test_client_cannot_message_foreign_ticket(client_store):
    with pytest.raises(AuthorizationError):
        client_store.add_message("TKT-003", "Hello")


def test_list_tickets_filters_and_orders_newest_first(staff_store):
    first = staff_store.create_ticket("Disk full", "Server disk at 99%", organization_id="org-acme")
    second = staff_store.create_ticket("Disk alert", "Alerting noisy", organization_id="org-acme")

    assert [ticket.id for ticket in staff_store.list_tickets(search="disk")] == [second.id, first.id]
    assert [ticket.id for ticket in staff_store.list_tickets(organization_id="org-globex")] == ["TKT-003"]
    assert [ticket.id for ticket in staff_store.list_tickets(status="resolved")] == ["TKT-001"]
    assert staff_store.list_tickets(priority="critical", category="support")[0].id == "TKT-003"
    assert [ticket.id for ticket in staff_store.list_tickets(assigned_to="user-lead")] == ["TKT-002"]


def test_returned_ticket_is_detached_from_store(staff_store):
    ticket = staff_store.get_ticket("TKT-001")
    ticket.title = "Changed"
    ticket.messages[0].content = "Edited"
    ticket.time_entries[0].hours = 40
    ticket.messages.clear()

    stored = staff_store.tables.tickets["TKT-001"]
    assert stored.title == "SSO login fails for new hires"
    assert len(stored.messages) == 3
    assert stored.messages[0].content == "New hires get an error page after SSO."
    assert stored.time_entries[0].hours == 2.0
