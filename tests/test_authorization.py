import pytest

from supportdesk.domain import ActivityType, Role
from supportdesk.errors import AuthorizationError
from supportdesk.store import authorization


def test_client_sees_only_own_organization_tickets(store):
    store.set_current_user("user-staff")
    store.create_ticket("Globex outage", "Service unavailable", organization_id="org-globex")

    store.set_current_user("user-acme")
    tickets = store.visible_tickets()

    assert tickets
    assert {ticket.organization_id for ticket in tickets} == {"org-acme"}
    assert {ticket.id for ticket in store.list_tickets(organization_id="org-globex")} == {"TKT-001", "TKT-002"}


def test_client_never_reads_internal_messages(store):
    store.set_current_user("user-staff")
    store.add_message("TKT-002", "Customer is on legacy plan", is_internal=True)

    store.set_current_user("user-acme")
    for ticket in store.visible_tickets():
        assert not any(message.is_internal for message in ticket.messages)
    assert [message.id for message in store.get_ticket("TKT-001").messages] == ["msg-seed0001", "msg-seed0003"]


def test_internal_users_see_everything(staff_store):
    assert len(staff_store.visible_tickets()) == 3
    assert len(staff_store.get_ticket("TKT-001").messages) == 3
    assert len(staff_store.list_organizations()) == 3
    assert len(staff_store.list_users()) == 5


def test_client_cannot_open_foreign_ticket(client_store):
    with pytest.raises(AuthorizationError):
        client_store.get_ticket("TKT-003")


def test_client_activity_feed_limited_to_own_tickets(store):
    store.set_current_user("user-globex")
    activities = store.visible_activities()

    assert [activity.ticket_id for activity in activities] == ["TKT-003"]
    assert activities[0].type is ActivityType.TICKET_CREATED


def test_client_directory_visibility(client_store):
    assert [org.id for org in client_store.list_organizations()] == ["org-acme"]
    visible_users = {user.id for user in client_store.list_users()}
    assert visible_users == {"user-admin", "user-lead", "user-staff", "user-acme"}

    assert client_store.get_org_by_id("org-globex") is None
    assert client_store.get_user_by_id("user-globex") is None
    assert client_store.get_user_by_id("user-staff").role is Role.SUPPORT_STAFF


def test_reads_without_current_user_are_rejected(store):
    with pytest.raises(AuthorizationError):
        store.visible_tickets()
    with pytest.raises(AuthorizationError):
        store.create_ticket("Title", "Body", organization_id="org-acme")


def test_guards_reject_wrong_roles(store):
    client = store.tables.users["user-acme"]
    lead = store.tables.users["user-lead"]

    with pytest.raises(AuthorizationError):
        authorization.require_internal(client)
    with pytest.raises(AuthorizationError):
        authorization.require_admin(lead)
    assert authorization.require_internal(lead) is lead
