def _as(user_id: str) -> dict[str, str]:
    return {"X-User-Id": user_id}


def test_health_needs_no_identity(api_client):
    response = api_client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_missing_or_unknown_identity_is_unauthorized(api_client):
    missing = api_client.get("/tickets")
    assert missing.status_code == 401
    assert missing.json()["error"]["code"] == "AUTHENTICATION_ERROR"

    unknown = api_client.get("/tickets", headers=_as("user-ghost"))
    assert unknown.status_code == 401
    assert unknown.json() == {
        "error": {"code": "AUTHENTICATION_ERROR", "message": "Unknown user", "details": {"user_id": "user-ghost"}}
    }


def test_client_ticket_listing_hides_internal_notes(api_client):
    response = api_client.get("/tickets", headers=_as("user-acme"))

    assert response.status_code == 200
    body = response.json()
    assert [ticket["id"] for ticket in body] == ["TKT-002", "TKT-001"]
    login_bug = body[1]
    assert all(not message["is_internal"] for message in login_bug["messages"])
    assert login_bug["hours_worked"] == 3.5


def test_create_ticket_and_log_time(api_client):
    created = api_client.post(
        "/tickets",
        json={"title": "Mail bounce", "description": "Outbound mail bounces", "priority": "high"},
        headers=_as("user-acme"),
    )
    assert created.status_code == 201
    ticket = created.json()
    assert ticket["organization_id"] == "org-acme"
    assert ticket["status"] == "open"

    entry = api_client.post(
        f"/tickets/{ticket['id']}/time-entries",
        json={"hours": 1.25, "description": "Checked SPF", "date": "2025-02-03"},
        headers=_as("user-staff"),
    )
    assert entry.status_code == 201
    assert entry.json()["date"] == "2025-02-03"

    detail = api_client.get(f"/tickets/{ticket['id']}", headers=_as("user-acme"))
    assert detail.json()["hours_worked"] == 1.25


def test_patch_ticket_updates_fields(api_client):
    response = api_client.patch(
        "/tickets/TKT-003",
        json={"status": "in-progress", "assigned_to": "user-staff"},
        headers=_as("user-lead"),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "in-progress"
    assert body["assigned_to"] == "user-staff"

    empty = api_client.patch("/tickets/TKT-003", json={}, headers=_as("user-lead"))
    assert empty.status_code == 400


def test_error_mapping(api_client):
    forbidden = api_client.patch("/tickets/TKT-001", json={"status": "closed"}, headers=_as("user-acme"))
    assert forbidden.status_code == 403
    assert forbidden.json()["error"]["code"] == "AUTHORIZATION_ERROR"

    missing = api_client.get("/tickets/TKT-404", headers=_as("user-staff"))
    assert missing.status_code == 404
    assert missing.json()["error"]["details"] == {"ticket_id": "TKT-404"}

    conflict = api_client.post(
        "/tickets/TKT-002/conversion",
        json={"proposed_type": "feature", "reason": "Again"},
        headers=_as("user-lead"),
    )
    assert conflict.status_code == 409
    assert conflict.json()["error"]["code"] == "CONFLICT"

    invalid_body = api_client.post("/tickets", json={"title": ""}, headers=_as("user-acme"))
    assert invalid_body.status_code == 400
    assert invalid_body.json()["error"]["code"] == "VALIDATION_ERROR"


def test_approval_flow_over_http(api_client):
    listed = api_client.get("/approvals", headers=_as("user-acme"))
    assert [item["ticket_id"] for item in listed.json()] == ["TKT-002"]

    decided = api_client.put(
        "/approvals/TKT-002",
        json={"track": "client", "decision": "rejected"},
        headers=_as("user-acme"),
    )
    assert decided.status_code == 200
    assert decided.json()["client_approval"] == "rejected"

    again = api_client.put(
        "/approvals/TKT-002",
        json={"track": "client", "decision": "approved"},
        headers=_as("user-acme"),
    )
    assert again.status_code == 409
    assert again.json()["error"]["code"] == "INVALID_TRANSITION"


def test_invoice_flow_over_http(api_client):
    preview = api_client.post(
        "/invoices/preview",
        json={"organization_id": "org-acme", "month": 1, "year": 2025},
        headers=_as("user-admin"),
    )
    assert preview.status_code == 200
    assert preview.json()["total_amount"] == 262.5

    created = api_client.post("/invoices", json=preview.json(), headers=_as("user-admin"))
    assert created.status_code == 201
    invoice = created.json()
    assert invoice["status"] == "draft"

    skipped = api_client.put(
        f"/invoices/{invoice['id']}/status", json={"status": "paid"}, headers=_as("user-admin")
    )
    assert skipped.status_code == 409

    sent = api_client.put(f"/invoices/{invoice['id']}/status", json={"status": "sent"}, headers=_as("user-admin"))
    assert sent.json()["status"] == "sent"

    summary = api_client.get("/invoices/summary", headers=_as("user-admin")).json()
    assert summary == {"paid": 700.0, "outstanding": 262.5, "draft": 0.0}

    assert api_client.get("/invoices", headers=_as("user-acme")).json()[0]["id"] == invoice["id"]


def test_rate_settings_are_admin_only(api_client):
    assert api_client.get("/settings/rate", headers=_as("user-acme")).json() == {"rate_per_hour": 75.0}

    denied = api_client.put("/settings/rate", json={"rate_per_hour": 90}, headers=_as("user-lead"))
    assert denied.status_code == 403

    updated = api_client.put("/settings/rate", json={"rate_per_hour": 90}, headers=_as("user-admin"))
    assert updated.json() == {"rate_per_hour": 90.0}


def test_directory_routes(api_client):
    created = api_client.post(
        "/organizations",
        json={"name": "Hooli", "contact_email": "it@hooli.example", "plan": "enterprise"},
        headers=_as("user-admin"),
    )
    assert created.status_code == 201
    org_id = created.json()["id"]

    user = api_client.post(
        "/users",
        json={"name": "Gavin Belson", "email": "gavin@hooli.example", "role": "client", "organization_id": org_id},
        headers=_as("user-admin"),
    )
    assert user.status_code == 201
    assert user.json()["avatar"] == "GB"
    assert "password" not in user.json()

    duplicate = api_client.post(
        "/users",
        json={"name": "Gavin Two", "email": "gavin@hooli.example", "role": "client", "organization_id": org_id},
        headers=_as("user-admin"),
    )
    assert duplicate.status_code == 409

    hidden = api_client.get(f"/organizations/{org_id}", headers=_as("user-acme"))
    assert hidden.status_code == 404

    deleted = api_client.delete(f"/organizations/{org_id}", headers=_as("user-admin"))
    assert deleted.status_code == 204
    assert api_client.get(f"/users/{user.json()['id']}", headers=_as("user-admin")).status_code == 404


def test_dashboard_routes(api_client):
    stats = api_client.get("/dashboard/stats", headers=_as("user-globex")).json()
    assert stats["total_tickets"] == 1
    assert stats["open_tickets"] == 1

    activities = api_client.get("/dashboard/activities", params={"limit": 2}, headers=_as("user-staff")).json()
    assert len(activities) == 2
    assert activities[0]["type"] == "ticket-created"
